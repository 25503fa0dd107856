"""Unit tests for migrator.frontmatter module."""

import pytest
import yaml
from unittest.mock import Mock

from notion2obsidian.migrator.errors import UnsupportedPropertyError
from notion2obsidian.migrator.frontmatter import (
    FrontmatterBuilder,
    format_date,
    format_number,
    is_selected,
    yaml_scalar,
)
from notion2obsidian.migrator.models import PageNode
from tests.fixtures import nid, text


def render(properties, selected=("all",), resolver=None):
    node = PageNode(page_id=nid(1), title="Row", path="/vault/Row.md")
    FrontmatterBuilder(resolver or Mock()).render(node, properties, set(selected))
    return node.content


class TestHelpers:
    """Test cases for value formatting helpers."""

    def test_format_number(self):
        """Numbers use six decimals, null is empty."""
        assert format_number(3) == "3.000000"
        assert format_number(2.5) == "2.500000"
        assert format_number(None) == ""

    def test_format_date(self):
        """Dates keep their time of day only when they have one."""
        assert format_date("2021-05-18") == "2021-05-18"
        assert format_date("2021-05-18T10:30:00.000+00:00") == "2021-05-18T10:30:00"
        assert format_date("2021-05-18T10:30:00.000Z") == "2021-05-18T10:30:00"

    @pytest.mark.parametrize("value,expected", [
        ("Done", "Done"),
        ("a@b.c", "a@b.c"),
        ("https://example.com/x", "https://example.com/x"),
        ("Meeting: Q3", '"Meeting: Q3"'),
        ("#urgent", '"#urgent"'),
        ("[draft]", '"[draft]"'),
        ("2021", '"2021"'),
        ("", ""),
    ])
    def test_yaml_scalar(self, value, expected):
        """Strings are quoted only when plain style would change them."""
        assert yaml_scalar(value) == expected

    def test_yaml_scalar_in_flow(self):
        """Sequence items containing commas or brackets are quoted."""
        assert yaml_scalar("a b", in_flow=True) == "a b"
        assert yaml_scalar("x,y", in_flow=True) == '"x,y"'

    def test_is_selected(self):
        """Selection is case-insensitive and 'all' selects everything."""
        assert is_selected("Tags", {"tags"}) is True
        assert is_selected("Tags", {"status"}) is False
        assert is_selected("Tags", {"all"}) is True


class TestFrontmatterBuilder:
    """Test cases for FrontmatterBuilder.render."""

    def test_keys_sorted(self):
        """Properties are written in ascending key order."""
        content = render({
            "Zebra": {"type": "rich_text", "rich_text": [text("z")]},
            "Apple": {"type": "number", "number": 3},
            "Mango": {"type": "checkbox", "checkbox": True},
        })

        assert content == "---\nApple: 3.000000\nMango: true\nZebra: z\n---\n"

    def test_only_selected(self):
        """Unselected properties are left out."""
        content = render(
            {
                "Tags": {"type": "multi_select", "multi_select": [{"name": "a"}, {"name": "b"}]},
                "Status": {"type": "status", "status": {"name": "Done"}},
            },
            selected=("tags",),
        )

        assert content == "---\nTags: [a,b]\n---\n"

    def test_special_values_stay_valid_yaml(self):
        """Titles, options and tags with YAML syntax load back unchanged."""
        content = render({
            "Name": {"type": "title", "title": [text("Plan: phase #2")]},
            "Priority": {"type": "select", "select": {"name": "[P1]"}},
            "Tags": {"type": "multi_select", "multi_select": [{"name": "a,b"}, {"name": "c"}]},
            "Note": {"type": "rich_text", "rich_text": [text("# heading")]},
        })

        assert content.startswith("---\n") and content.endswith("---\n")
        loaded = yaml.safe_load(content[len("---\n"):-len("---\n")])
        assert loaded == {
            "Name": "Plan: phase #2",
            "Priority": "[P1]",
            "Tags": ["a,b", "c"],
            "Note": "# heading",
        }

    def test_scalar_types(self):
        """Scalar property types render their value."""
        content = render({
            "A": {"type": "select", "select": {"name": "High"}},
            "B": {"type": "select", "select": None},
            "C": {"type": "date", "date": {"start": "2021-05-18", "end": None}},
            "D": {"type": "date", "date": None},
            "E": {"type": "url", "url": None},
            "F": {"type": "email", "email": "a@b.c"},
            "G": {"type": "created_time", "created_time": "2021-05-18T10:30:00.000Z"},
            "H": {"type": "last_edited_by", "last_edited_by": {"object": "user", "name": "Ann"}},
            "I": {"type": "checkbox", "checkbox": False},
            "J": {"type": "number", "number": None},
        })

        assert content == (
            "---\n"
            "A: High\n"
            "C: 2021-05-18\n"
            "E: \n"
            "F: a@b.c\n"
            "G: 2021-05-18T10:30:00\n"
            "H: Ann\n"
            "I: false\n"
            "J: \n"
            "---\n"
        )

    def test_relation_resolves_pages(self):
        """Relations become a list of quoted links."""
        resolver = Mock()
        resolver.resolve.side_effect = ['"[[A]]"', '', '"[[B]]"']

        content = render(
            {"Related": {"type": "relation", "relation": [
                {"id": nid(2)}, {"id": nid(3)}, {"id": nid(4)},
            ]}},
            resolver=resolver,
        )

        assert content == '---\nRelated:\n  - "[[A]]"\n  - "[[B]]"\n---\n'
        first_call = resolver.resolve.call_args_list[0]
        assert first_call.args[1] == nid(2)
        assert first_call.kwargs == {"quotes": True}

    def test_empty_relation(self):
        """An empty relation is an empty value."""
        assert render({"Related": {"type": "relation", "relation": []}}) == "---\nRelated: \n---\n"

    def test_rollups(self):
        """Number, date and array rollups are rendered."""
        content = render({
            "Count": {"type": "rollup", "rollup": {"type": "number", "number": 7}},
            "Due": {"type": "rollup", "rollup": {"type": "date", "date": {"start": "2022-01-02"}}},
            "Scores": {"type": "rollup", "rollup": {"type": "array", "array": [
                {"type": "number", "number": 42},
                {"type": "number", "number": 10},
                {"type": "title", "title": []},
            ]}},
        })

        assert content == (
            "---\nCount: 7.000000\nDue: 2022-01-02\nScores: [42.000000,10.000000]\n---\n"
        )

    def test_skipped_types(self):
        """People, files and formulas have no frontmatter form."""
        content = render({
            "Owner": {"type": "people", "people": []},
            "Formula": {"type": "formula", "formula": {"type": "string", "string": "x"}},
        })

        assert content == "---\n---\n"

    def test_unknown_type_raises(self):
        """Unknown property types fail the page."""
        with pytest.raises(UnsupportedPropertyError) as exc_info:
            render({"Weird": {"type": "hologram", "hologram": {}}})

        assert exc_info.value.property_name == "Weird"
