"""Note titles and destination paths for Notion pages.

A page's title depends on where it lives: database rows can compose their
filename from several properties, rows of a foreign database are nested
under that database's name, and untitled sub-pages inherit their parent's
title.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from notion2obsidian.notion_api.api_wrapper import APIWrapper, normalize_object_id
from notion2obsidian.vault.filesafe_converter import FilesafeConverter
from notion2obsidian.vault.models import MigrationConfig

from .rich_text import plain_text

logger = logging.getLogger(__name__)


def title_property(page: Dict[str, Any]) -> str:
    """Plain text of the page's title-type property ("" when missing)."""
    for value in (page.get("properties") or {}).values():
        if value.get("type") == "title":
            return plain_text(value.get("title"))
    return ""


def parse_notion_date(value: str) -> datetime:
    """Parse a Notion ISO-8601 date or datetime string."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TitleResolver:
    """Computes titles and paths of root and referenced pages.

    Example:
        >>> titles = TitleResolver(api, config)
        >>> titles.root_title(page)
        '2021/05/18Hello'
        >>> titles.note_path('2021/05/18Hello')
        'vault/Notion/2021/05/18Hello.md'
    """

    def __init__(self, api: APIWrapper, config: MigrationConfig):
        self._api = api
        self._config = config

    def note_path(self, title: str) -> str:
        """Destination path of a note with the given (sanitized) title."""
        return os.path.join(self._config.vault_filepath(), f"{title}.md")

    def root_title(self, page: Dict[str, Any]) -> str:
        """Title of a root page.

        Rows of the migrated database concatenate the configured page name
        filters in ascending property-name order; without a match (or for a
        single root page) the title property is used.
        """
        title = ""
        if self._config.database_id and self._config.page_name_filters:
            title = self._filtered_title(page)
        if not title:
            title = title_property(page)
        return FilesafeConverter.sanitize_title(title)

    def _filtered_title(self, page: Dict[str, Any]) -> str:
        properties = page.get("properties") or {}
        filters = self._config.page_name_filters
        title = ""
        for key in sorted(properties):
            fmt = filters.get(key.lower())
            if fmt is None:
                continue
            value = properties[key]
            prop_type = value.get("type")
            if prop_type in ("title", "rich_text"):
                title += plain_text(value.get(prop_type))
            elif prop_type == "date":
                date = value.get("date")
                if date and date.get("start"):
                    start = date["start"]
                    title += parse_notion_date(start).strftime(fmt) if fmt else start
            elif prop_type in ("select", "status"):
                option = value.get(prop_type)
                if option:
                    title += option.get("name", "")
            elif prop_type == "number":
                if value.get("number") is not None:
                    title += str(value["number"])
            else:
                logger.warning(
                    f"Property type '{prop_type}' of '{key}' cannot be used in a page title"
                )
        return title

    def reference_title(
        self,
        page: Dict[str, Any],
        supplied_title: str = ""
    ) -> Tuple[str, str]:
        """Title and path of a page reached through a reference.

        Args:
            page: The referenced page object
            supplied_title: Title carried by the reference ("" if none)

        Returns:
            (title, path) where title is the link target

        Raises:
            NotionError: If the parent database or page cannot be fetched
        """
        parent = page.get("parent") or {}
        parent_type = parent.get("type")
        title = supplied_title

        if parent_type == "database_id":
            if not title:
                title = title_property(page)
            title = FilesafeConverter.sanitize_title(title)
            database_id = normalize_object_id(parent["database_id"])
            if database_id != self._configured_database_id():
                database = self._api.find_database_by_id(database_id)
                db_title = FilesafeConverter.sanitize_title(plain_text(database.get("title")))
                if db_title:
                    title = f"{db_title}/{title}"
            return title, self.note_path(title)

        if parent_type in ("page_id", "block_id"):
            if not title:
                title = self._parent_title(parent[parent_type])
        elif not title:
            title = title_property(page)

        title = FilesafeConverter.sanitize_title(title)
        return title, self.note_path(title)

    def _parent_title(self, parent_id: str) -> str:
        parent_page = self._api.find_page_by_id(parent_id)
        return title_property(parent_page)

    def _configured_database_id(self) -> Optional[str]:
        if not self._config.database_id:
            return None
        return normalize_object_id(self._config.database_id)
