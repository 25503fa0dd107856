"""Page resolution: from a reference to a rendered PageNode and a link.

Every reference to another Notion page (mention, inline link, link block,
child page, relation) goes through PageResolver.resolve. The first reference
to a page fetches and renders it; later references reuse the cached node.
A reference to a page whose rendering is still running on the same job is a
cycle and is answered with a title-only lookup.
"""

import logging
from typing import Any, Collection, Dict, Optional

from notion2obsidian.notion_api.api_wrapper import APIWrapper, normalize_object_id
from notion2obsidian.notion_api.errors import MigrationError
from notion2obsidian.vault.models import MigrationConfig

from .cache import CrossReferenceCache
from .frontmatter import FrontmatterBuilder
from .models import CacheEntry, PageNode
from .pagination import collect_block_children
from .renderer import BlockRenderer
from .titles import TitleResolver

logger = logging.getLogger(__name__)

# Notion answers 404 for mentions of pages that were never given a title
UNTITLED = "Untitled"


def link_markup(title: str, quotes: bool = False) -> str:
    """Obsidian wiki link, quoted for use as a YAML value."""
    link = f"[[{title}]]"
    return f'"{link}"' if quotes else link


class PageResolver:
    """Resolves page references and renders pages at most once per run.

    Example:
        >>> resolver = PageResolver(api, CrossReferenceCache(), config)
        >>> root = resolver.register_root(page)
        >>> resolver.fetch_and_render(root, page, config.page_properties)
        >>> root.content
        '---\\nTags: [a,b]\\n---\\nSee [[Other page]]\\n'
    """

    def __init__(
        self,
        api: APIWrapper,
        cache: CrossReferenceCache,
        config: MigrationConfig,
        titles: Optional[TitleResolver] = None
    ):
        self._api = api
        self._cache = cache
        self._config = config
        self.titles = titles or TitleResolver(api, config)
        self.renderer = BlockRenderer(api, self, config)
        self.frontmatter = FrontmatterBuilder(self)

    def register_root(self, page: Dict[str, Any]) -> PageNode:
        """Create and cache the node of a root page.

        Root pages are rendered by their own job; caching them up front
        makes every reference to a root a plain cache hit.
        """
        page_id = normalize_object_id(page["id"])
        title = self.titles.root_title(page)
        node = PageNode(page_id=page_id, title=title, path=self.titles.note_path(title))
        self._cache.set(page_id, node)
        return node

    def fetch_and_render(
        self,
        node: PageNode,
        page: Dict[str, Any],
        selected_properties: Collection[str] = frozenset()
    ) -> None:
        """Render a page's frontmatter, cover and block tree into its node.

        Raises:
            NotionError: If the page's blocks cannot be fetched
            RenderError: If the page holds unsupported content
        """
        parent = page.get("parent") or {}
        if selected_properties and parent.get("type") == "database_id":
            self.frontmatter.render(node, page.get("properties") or {}, selected_properties)
        self.renderer.render_cover(node, page.get("cover"))

        blocks = collect_block_children(self._api, node.page_id)
        logger.debug(f"Rendering {len(blocks)} block(s) of '{node.title}'")
        self.renderer.render_blocks(node, blocks)

    def resolve(
        self,
        parent: Optional[PageNode],
        reference_id: str,
        title: str = "",
        quotes: bool = False
    ) -> str:
        """Link text for a reference, migrating the target on first sight.

        Args:
            parent: Page containing the reference
            reference_id: Referenced page id (any Notion id format)
            title: Title carried by the reference ("" if none)
            quotes: Quote the link (frontmatter values)

        Returns:
            str: Link markup, or "" for pages that are not migrated
        """
        try:
            page_id = normalize_object_id(reference_id)
        except ValueError as e:
            logger.warning(f"Ignoring reference with invalid page id: {e}")
            return link_markup(title, quotes) if title else ""

        entry, found = self._cache.get(page_id)
        if found:
            return self._link_cached(parent, entry, quotes)

        if title == UNTITLED:
            # Only an absent id becomes the sentinel
            if self._cache.mark_in_progress(page_id):
                self._cache.set(page_id, None)
            return ""

        if self._cache.mark_in_progress(page_id):
            return self._resolve_fresh(parent, page_id, title, quotes)

        # Another resolution of this id is running
        entry = self._cache.wait_until_resolved(page_id)
        if entry is not None:
            return self._link_cached(parent, entry, quotes)
        return self._resolve_title_only(page_id, title, quotes)

    def _link_cached(self, parent: Optional[PageNode], entry: CacheEntry, quotes: bool) -> str:
        node = entry.node
        if node is None:
            if entry.fallback_title:
                return link_markup(entry.fallback_title, quotes)
            return ""
        if parent is not None and node.parent_id != parent.page_id:
            parent.add_child(node.page_id)
        return link_markup(node.title, quotes)

    def _resolve_fresh(
        self,
        parent: Optional[PageNode],
        page_id: str,
        title: str,
        quotes: bool
    ) -> str:
        node = None
        fallback_title = ""
        try:
            try:
                page = self._api.find_page_by_id(page_id)
                child_title, path = self.titles.reference_title(page, title)
            except MigrationError as e:
                logger.warning(f"Could not resolve referenced page {page_id}: {e}")
                fallback_title = title
                return link_markup(title, quotes) if title else ""

            node = PageNode(
                page_id=page_id,
                title=child_title,
                path=path,
                parent_id=parent.page_id if parent else None,
            )
            if parent is not None:
                parent.add_child(page_id)

            try:
                self.fetch_and_render(node, page)
            except MigrationError as e:
                node.failed = True
                logger.warning(f"Failed to render referenced page '{child_title}': {e}")

            return link_markup(child_title, quotes)
        finally:
            self._cache.set(page_id, node, fallback_title)

    def _resolve_title_only(self, page_id: str, title: str, quotes: bool) -> str:
        logger.debug(f"Page {page_id} is already being rendered, linking by title")
        try:
            page = self._api.find_page_by_id(page_id)
            title, _ = self.titles.reference_title(page, title)
        except MigrationError as e:
            logger.warning(f"Could not look up title of page {page_id}: {e}")
        return link_markup(title, quotes) if title else ""
