"""Notion blocks to Obsidian markdown.

The renderer appends markdown for a list of blocks to a PageNode, recursing
into children one indentation level deeper. References to other pages are
handed to the PageResolver, which returns the link text.
"""

import logging
import posixpath
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from urllib.parse import urlparse

from notion2obsidian.notion_api.api_wrapper import APIWrapper
from notion2obsidian.vault.models import IMAGES_FOLDER, MigrationConfig

from .errors import UnsupportedBlockError
from .models import ImageRef, PageNode, StyledRun
from .pagination import collect_block_children
from .rich_text import make_run, merge_runs, plain_text
from .titles import parse_notion_date

if TYPE_CHECKING:
    from .resolver import PageResolver

logger = logging.getLogger(__name__)

INDENT = "\t"

HEADINGS = {
    "heading_1": "# ",
    "heading_2": "## ",
    "heading_3": "### ",
}

# Text blocks: marker written before the rich text, children nested below
TEXT_MARKERS = {
    "bulleted_list_item": "- ",
    "numbered_list_item": "1. ",
    "toggle": "- ",
    "quote": "> ",
}

# Asset blocks and the extension of their stored copy (None: from the URL)
ASSET_EXTENSIONS = {
    "image": ".png",
    "pdf": ".pdf",
    "file": None,
    "video": None,
}

EMBED_TYPES = {"embed", "bookmark", "link_preview"}

# Rendered through their children only
CONTAINER_TYPES = {"column_list", "column", "synced_block"}

SKIPPED_TYPES = {"table_of_contents", "breadcrumb", "unsupported", "template"}


class BlockRenderer:
    """Renders Notion block trees and rich text into a PageNode.

    Example:
        >>> renderer = BlockRenderer(api, resolver, config)
        >>> renderer.render_blocks(node, blocks)
        >>> node.content
        '# Title\\n- item\\n'
    """

    def __init__(self, api: APIWrapper, resolver: "PageResolver", config: MigrationConfig):
        self._api = api
        self._resolver = resolver
        self._config = config

    def render_blocks(self, node: PageNode, blocks: List[Dict[str, Any]], depth: int = 0) -> None:
        """Append markdown for blocks, in order, at an indentation depth.

        Raises:
            UnsupportedBlockError: For a block type without a rendering rule
            NotionError: If children of a block cannot be fetched
        """
        for block in blocks:
            self._render_block(node, block, depth)

    def _render_block(self, node: PageNode, block: Dict[str, Any], depth: int) -> None:
        block_type = block.get("type", "")
        data = block.get(block_type) or {}
        prefix = INDENT * depth

        if block_type in HEADINGS:
            node.write(prefix + HEADINGS[block_type] + self._text(node, data) + "\n")
            self._render_children(node, block, depth + 1)
        elif block_type == "paragraph":
            text = self._text(node, data)
            if text:
                node.write(prefix + text)
            node.write("\n")
            self._render_children(node, block, depth + 1)
        elif block_type == "to_do":
            marker = "- [x] " if data.get("checked") else "- [ ] "
            node.write(prefix + marker + self._text(node, data) + "\n")
            self._render_children(node, block, depth + 1)
        elif block_type in TEXT_MARKERS:
            node.write(prefix + TEXT_MARKERS[block_type] + self._text(node, data) + "\n")
            self._render_children(node, block, depth + 1)
        elif block_type == "callout":
            icon = data.get("icon") or {}
            emoji = icon.get("emoji", "") if icon.get("type") == "emoji" else ""
            marker = f"> [!note] {emoji} " if emoji else "> [!note] "
            node.write(prefix + marker + self._text(node, data) + "\n")
            self._render_children(node, block, depth + 1)
        elif block_type == "code":
            language = data.get("language") or ""
            node.write(f"```{language}\n{plain_text(data.get('rich_text'))}\n```\n")
        elif block_type == "divider":
            node.write("---\n")
        elif block_type == "equation":
            node.write(f"{prefix}$${data.get('expression', '')}$$\n")
        elif block_type == "table":
            self._render_table(node, block, data.get("table_width") or 0)
        elif block_type == "child_page":
            link = self._resolver.resolve(node, block["id"], data.get("title", ""))
            node.write(prefix + link + "\n")
        elif block_type == "link_to_page":
            self._render_link_to_page(node, data, prefix)
        elif block_type == "child_database":
            title = data.get("title", "")
            logger.warning(
                f"Child database '{title}' found on page '{node.title}'. "
                f"Migrate that database separately"
            )
            node.write(prefix + title + "\n")
        elif block_type in ASSET_EXTENSIONS:
            self._render_asset(node, block, block_type, data, prefix)
        elif block_type in EMBED_TYPES:
            url = data.get("url")
            if url:
                node.write(f"{prefix}![]({url})\n")
        elif block_type in CONTAINER_TYPES:
            self._render_children(node, block, depth)
        elif block_type in SKIPPED_TYPES:
            logger.debug(f"Skipping {block_type} block {block.get('id')}")
        else:
            raise UnsupportedBlockError(block_type, block.get("id", "unknown"))

    def _text(self, node: PageNode, data: Dict[str, Any]) -> str:
        return self.render_rich_text(node, data.get("rich_text") or [])

    def _render_children(self, node: PageNode, block: Dict[str, Any], depth: int) -> None:
        if not block.get("has_children"):
            return
        children = collect_block_children(self._api, block["id"])
        self.render_blocks(node, children, depth)

    def _render_table(self, node: PageNode, block: Dict[str, Any], width: int) -> None:
        if not block.get("has_children"):
            return
        rows = collect_block_children(self._api, block["id"])
        for row_index, row in enumerate(rows):
            for cell in (row.get("table_row") or {}).get("cells", []):
                node.write(self.render_rich_text(node, cell) + "|")
            node.write("\n")
            if row_index == 0:
                node.write("--|" * width + "\n")

    def _render_link_to_page(self, node: PageNode, data: Dict[str, Any], prefix: str) -> None:
        if data.get("type") != "page_id":
            logger.warning(f"Link to {data.get('type')} on page '{node.title}' is not migrated")
            return
        node.write(prefix + self._resolver.resolve(node, data["page_id"]) + "\n")

    def _render_asset(
        self,
        node: PageNode,
        block: Dict[str, Any],
        block_type: str,
        data: Dict[str, Any],
        prefix: str
    ) -> None:
        if data.get("type") == "external":
            node.write(f"{prefix}![]({data['external']['url']})\n")
            return

        url = (data.get("file") or {}).get("url")
        if not url:
            return
        if not self._config.store_images:
            logger.debug(f"Skipping Notion-hosted {block_type} {block.get('id')} (images disabled)")
            return

        extension = ASSET_EXTENSIONS[block_type]
        if extension is None:
            extension = posixpath.splitext(urlparse(url).path)[1]
        image = ImageRef(url=url, name=posixpath.join(node.title, block["id"] + extension))
        node.images.append(image)
        node.write(f"{prefix}![[{posixpath.join(IMAGES_FOLDER, image.name)}]]\n")

    def render_cover(self, node: PageNode, cover: Optional[Dict[str, Any]]) -> None:
        """Record a page's cover and embed it as the first line of the body."""
        if not cover:
            return
        if cover.get("type") == "external":
            node.cover = ImageRef(url=cover["external"]["url"], name="")
            node.write(f"![]({node.cover.url})\n")
            return
        url = (cover.get("file") or {}).get("url")
        if not url or not self._config.store_images:
            return
        node.cover = ImageRef(url=url, name=posixpath.join(node.title, "cover.png"))
        node.images.append(node.cover)
        node.write(f"![[{posixpath.join(IMAGES_FOLDER, node.cover.name)}]]\n")

    def render_rich_text(self, node: PageNode, items: List[Dict[str, Any]]) -> str:
        """Markdown for a rich text array, resolving page mentions and links.

        Args:
            node: Page being rendered (parent of any referenced page)
            items: Notion rich text objects
        """
        runs: List[StyledRun] = []
        for item in items:
            annotations = item.get("annotations") or {}
            body = self._rich_text_body(node, item, bool(annotations.get("code")))
            runs.append(make_run(body, annotations))
        return merge_runs(runs)

    def _rich_text_body(self, node: PageNode, item: Dict[str, Any], is_code: bool) -> str:
        item_type = item.get("type")

        if item_type == "text":
            text = item.get("text") or {}
            content = text.get("content", "")
            link = text.get("link")
            if not link or is_code:
                return content
            url = link.get("url", "")
            if url.startswith("/"):
                # Notion page link: "/<page id>" with optional query or anchor
                page_id = url[1:].split("#")[0].split("?")[0]
                return self._resolver.resolve(node, page_id, item.get("plain_text", ""))
            return f"[{content}]({url})"

        if item_type == "mention":
            mention = item.get("mention") or {}
            mention_type = mention.get("type")
            if mention_type == "page":
                return self._resolver.resolve(node, mention["page"]["id"], item.get("plain_text", ""))
            if mention_type == "database":
                return f"[[{item.get('plain_text', '')}]]"
            if mention_type == "date":
                start = (mention.get("date") or {}).get("start")
                if not start:
                    return ""
                return f"[[{parse_notion_date(start).strftime('%Y-%m-%d')}]]"
            if mention_type == "link_preview":
                return (mention.get("link_preview") or {}).get("url", "")
            return ""

        if item_type == "equation":
            return f"$${(item.get('equation') or {}).get('expression', '')}$$"

        return item.get("plain_text", "")
