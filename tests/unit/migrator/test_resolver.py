"""Unit tests for migrator.resolver module."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from notion2obsidian.migrator.cache import CrossReferenceCache
from notion2obsidian.migrator.models import PageNode
from notion2obsidian.migrator.resolver import PageResolver, link_markup
from notion2obsidian.vault.models import MigrationConfig
from tests.fixtures import (
    nid,
    text,
    page,
    page_mention,
    paragraph,
    database_parent,
    external_file,
)

ROOT, B, C = nid(1), nid(2), nid(3)


@pytest.fixture
def config():
    return MigrationConfig(page_id=ROOT, vault_path="/vault", page_properties={"all"})


@pytest.fixture
def cache():
    return CrossReferenceCache()


@pytest.fixture
def resolver(fake_api, cache, config):
    return PageResolver(fake_api, cache, config)


def mention_paragraph(block_n: int, *page_ids: str) -> dict:
    """Paragraph mentioning each page id, titled by its position letter."""
    items = []
    for page_id in page_ids:
        if items:
            items.append(text(" "))
        items.append(page_mention(page_id, TITLES[page_id]))
    return paragraph(nid(block_n), *items)


TITLES = {ROOT: "Root", B: "B", C: "C"}


def migrate_root(fake_api, resolver):
    root_page = fake_api.pages[ROOT]
    root = resolver.register_root(root_page)
    resolver.fetch_and_render(root, root_page)
    return root


class TestLinkMarkup:
    """Test cases for link_markup."""

    def test_plain_and_quoted(self):
        """Links are quoted for YAML values."""
        assert link_markup("A") == "[[A]]"
        assert link_markup("A", quotes=True) == '"[[A]]"'


class TestResolve:
    """Test cases for PageResolver.resolve."""

    def test_each_page_rendered_once(self, fake_api, resolver, cache):
        """Pages referenced many times are fetched and rendered once."""
        fake_api.add_page(page(ROOT, "Root"), [
            mention_paragraph(10, B, B),
            mention_paragraph(11, C),
        ])
        fake_api.add_page(page(B, "B"), [paragraph(nid(20), text("b"))])
        fake_api.add_page(page(C, "C"), [mention_paragraph(30, B)])

        root = migrate_root(fake_api, resolver)

        assert root.content == "[[B]] [[B]]\n[[C]]\n"
        assert cache.node(B).content == "b\n"
        assert cache.node(C).content == "[[B]]\n"
        assert fake_api.count("children", B) == 1
        assert fake_api.count("page", B) == 1
        assert root.children == [B, C]
        assert cache.node(C).children == [B]
        assert cache.node(B).parent_id == ROOT

    def test_cycle_terminates(self, fake_api, resolver, cache):
        """B → C → B renders both pages once and links back by title."""
        fake_api.add_page(page(ROOT, "Root"), [mention_paragraph(10, B)])
        fake_api.add_page(page(B, "B"), [mention_paragraph(20, C)])
        fake_api.add_page(page(C, "C"), [mention_paragraph(30, B)])

        root = migrate_root(fake_api, resolver)

        assert root.content == "[[B]]\n"
        assert cache.node(B).content == "[[C]]\n"
        assert cache.node(C).content == "[[B]]\n"
        assert fake_api.count("children", B) == 1
        assert fake_api.count("children", C) == 1

    def test_reference_back_to_root(self, fake_api, resolver, cache):
        """Roots are cache hits and are never rendered twice."""
        fake_api.add_page(page(ROOT, "Root"), [mention_paragraph(10, B)])
        fake_api.add_page(page(B, "B"), [mention_paragraph(20, ROOT)])

        migrate_root(fake_api, resolver)

        assert cache.node(B).content == "[[Root]]\n"
        assert fake_api.count("children", ROOT) == 1
        assert fake_api.count("page", ROOT) == 0

    def test_untitled_pages_are_not_migrated(self, fake_api, resolver, cache):
        """References titled Untitled render nothing and are cached as such."""
        root = PageNode(page_id=ROOT, title="Root", path="Root.md")

        assert resolver.resolve(root, B, "Untitled") == ""
        assert resolver.resolve(root, B, "B") == ""

        entry, found = cache.get(B)
        assert found is True
        assert entry.is_sentinel is True
        assert fake_api.count("page", B) == 0

    def test_missing_page_keeps_title(self, fake_api, resolver, cache):
        """Unreachable pages still produce a link from the reference title."""
        root = PageNode(page_id=ROOT, title="Root", path="Root.md")

        assert resolver.resolve(root, B, "Gone") == "[[Gone]]"
        assert resolver.resolve(root, C) == ""
        assert cache.node(B) is None
        assert root.children == []

    def test_missing_page_title_reused(self, fake_api, resolver, cache):
        """Every reference to an unreachable page links with the first reference's title."""
        root = PageNode(page_id=ROOT, title="Root", path="Root.md")

        assert resolver.resolve(root, B, "Gone") == "[[Gone]]"
        assert resolver.resolve(root, B, "Gone") == "[[Gone]]"
        assert resolver.resolve(root, B, quotes=True) == '"[[Gone]]"'
        assert fake_api.count("page", B) == 1
        assert cache.node(B) is None
        assert root.children == []

    def test_untitled_reference_leaves_running_resolution(self, fake_api, resolver, cache):
        """An Untitled reference to a page being resolved does not resolve it early."""
        root = PageNode(page_id=ROOT, title="Root", path="Root.md")
        cache.mark_in_progress(B)

        assert resolver.resolve(root, B, "Untitled") == ""

        assert cache.is_in_progress(B) is True
        assert cache.get(B) == (None, False)

    def test_render_failure_marks_node(self, fake_api, resolver, cache):
        """A referenced page that fails to render is linked but not writable."""
        fake_api.add_page(page(B, "B"), [paragraph(nid(20), text("b"))])
        fake_api.fail_children_of(B)
        root = PageNode(page_id=ROOT, title="Root", path="Root.md")

        assert resolver.resolve(root, B, "B") == "[[B]]"
        assert cache.node(B).failed is True

    def test_invalid_id(self, resolver):
        """Malformed ids fall back to the reference title."""
        root = PageNode(page_id=ROOT, title="Root", path="Root.md")

        assert resolver.resolve(root, "not-a-page", "X") == "[[X]]"
        assert resolver.resolve(root, "not-a-page") == ""

    def test_quoted_link(self, fake_api, resolver):
        """Frontmatter references are quoted."""
        fake_api.add_page(page(B, "B"))
        root = PageNode(page_id=ROOT, title="Root", path="Root.md")

        assert resolver.resolve(root, B, quotes=True) == '"[[B]]"'

    def test_concurrent_references_render_once(self, fake_api, resolver, cache):
        """Jobs racing on one page all get its link, and it renders once."""
        fake_api.add_page(page(B, "B"), [paragraph(nid(20), text("b"))])
        parents = [PageNode(page_id=nid(100 + i), title=f"P{i}", path=f"P{i}.md") for i in range(16)]

        with ThreadPoolExecutor(max_workers=8) as executor:
            links = list(executor.map(lambda parent: resolver.resolve(parent, B, "B"), parents))

        assert links == ["[[B]]"] * 16
        assert fake_api.count("children", B) == 1
        assert cache.node(B).content == "b\n"


class TestFetchAndRender:
    """Test cases for PageResolver.fetch_and_render."""

    def test_frontmatter_then_cover_then_blocks(self, fake_api, resolver):
        """Database rows get frontmatter before the cover and body."""
        row = page(
            ROOT, "Row",
            parent=database_parent(nid(500)),
            properties={"Tags": {"type": "multi_select", "multi_select": [{"name": "x"}]}},
            cover=external_file("https://img/c.png"),
        )
        fake_api.add_page(row, [paragraph(nid(10), text("body"))])
        node = resolver.register_root(row)

        resolver.fetch_and_render(node, row, {"tags"})

        assert node.content == "---\nTags: [x]\n---\n![](https://img/c.png)\nbody\n"

    def test_no_frontmatter_outside_databases(self, fake_api, resolver):
        """Pages that are not database rows have no properties to write."""
        fake_api.add_page(page(ROOT, "Root"), [paragraph(nid(10), text("body"))])

        root = migrate_root(fake_api, resolver)

        assert root.content == "body\n"

    def test_register_root(self, fake_api, resolver, cache):
        """Roots are cached as resolved with their title and path."""
        node = resolver.register_root(page(ROOT.replace("-", ""), "Root: One"))

        assert node.page_id == ROOT
        assert node.title == "Root- One"
        assert node.path.endswith("Root- One.md")
        assert cache.node(ROOT) is node
