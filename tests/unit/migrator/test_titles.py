"""Unit tests for migrator.titles module."""

import os

from notion2obsidian.migrator.titles import TitleResolver, parse_notion_date, title_property
from notion2obsidian.vault.models import MigrationConfig
from tests.fixtures import (
    nid,
    page,
    database,
    database_parent,
    page_parent,
)

DB = nid(500)
OTHER_DB = nid(501)


def db_config(**kwargs) -> MigrationConfig:
    return MigrationConfig(database_id=DB, vault_path="/vault", vault_destination="Notion", **kwargs)


class TestHelpers:
    """Test cases for title helpers."""

    def test_title_property(self):
        """The title-type property is found whatever its name."""
        assert title_property(page(nid(1), "Hello", title_key="Task")) == "Hello"
        assert title_property({"properties": {}}) == ""

    def test_parse_notion_date(self):
        """Dates, datetimes and Z suffixes are parsed."""
        assert parse_notion_date("2021-05-18").day == 18
        assert parse_notion_date("2021-05-18T10:30:00.000Z").hour == 10


class TestRootTitle:
    """Test cases for TitleResolver.root_title."""

    def test_plain_title_sanitized(self, fake_api):
        """Root titles are the sanitized title property."""
        titles = TitleResolver(fake_api, db_config())

        assert titles.root_title(page(nid(1), "Meeting: Q3")) == "Meeting- Q3"

    def test_path_filters_compose_title(self, fake_api):
        """Filters concatenate in property-name order with date formats."""
        titles = TitleResolver(
            fake_api, db_config(page_name_filters={"date": "%Y/%m/%d", "title": ""})
        )
        row = page(
            nid(1), "Hello", parent=database_parent(DB), title_key="Title",
            properties={"Date": {"type": "date", "date": {"start": "2021-05-18"}}},
        )

        title = titles.root_title(row)

        assert title == "2021/05/18Hello"
        assert titles.note_path(title) == os.path.join("/vault", "Notion", "2021/05/18Hello.md")

    def test_filter_types(self, fake_api):
        """Select and number properties can be part of the title."""
        titles = TitleResolver(fake_api, db_config(page_name_filters={"kind": "", "no": ""}))
        row = page(nid(1), "ignored", properties={
            "Kind": {"type": "select", "select": {"name": "Bug"}},
            "No": {"type": "number", "number": 12},
        })

        assert titles.root_title(row) == "Bug12"

    def test_filters_without_match_fall_back(self, fake_api):
        """Rows without filtered properties keep their title."""
        titles = TitleResolver(fake_api, db_config(page_name_filters={"date": "%Y"}))

        assert titles.root_title(page(nid(1), "Hello")) == "Hello"

    def test_filters_ignored_for_single_page(self, fake_api):
        """Page mode never composes titles."""
        config = MigrationConfig(page_id=nid(1), vault_path="/vault", page_name_filters={"date": "%Y"})
        row = page(nid(1), "Hello", properties={"Date": {"type": "date", "date": {"start": "2021-05-18"}}})

        assert TitleResolver(fake_api, config).root_title(row) == "Hello"


class TestReferenceTitle:
    """Test cases for TitleResolver.reference_title."""

    def test_row_of_migrated_database(self, fake_api):
        """Rows of the migrated database use their own title."""
        titles = TitleResolver(fake_api, db_config())

        title, path = titles.reference_title(page(nid(2), "Row", parent=database_parent(DB)))

        assert title == "Row"
        assert path == os.path.join("/vault", "Notion", "Row.md")
        assert fake_api.count("database", DB) == 0

    def test_row_of_other_database_nested(self, fake_api):
        """Rows of other databases go under the database's name."""
        fake_api.add_database(database(OTHER_DB, "Projects"))
        titles = TitleResolver(fake_api, db_config())

        title, _ = titles.reference_title(page(nid(2), "Apollo", parent=database_parent(OTHER_DB)))

        assert title == "Projects/Apollo"

    def test_supplied_title_wins(self, fake_api):
        """The title carried by the reference is preferred."""
        titles = TitleResolver(fake_api, db_config())

        title, _ = titles.reference_title(
            page(nid(2), "Own", parent=page_parent(nid(1))), "Mentioned: as"
        )

        assert title == "Mentioned- as"
        assert fake_api.count("page", nid(1)) == 0

    def test_subpage_without_title_uses_parent(self, fake_api):
        """Untitled references to sub-pages take the parent page's title."""
        fake_api.add_page(page(nid(1), "Parent"))
        titles = TitleResolver(fake_api, db_config())

        title, _ = titles.reference_title(page(nid(2), "Own", parent=page_parent(nid(1))))

        assert title == "Parent"

    def test_workspace_page(self, fake_api):
        """Top-level pages use their own title."""
        titles = TitleResolver(fake_api, db_config())

        assert titles.reference_title(page(nid(2), "Top"))[0] == "Top"
