"""Test fixtures for notion2obsidian tests.

This module provides builders for Notion API objects (pages, databases,
blocks, rich text) shared by unit and integration tests.
"""

from .notion_objects import (
    nid,
    compact_id,
    text,
    page_mention,
    date_mention,
    database_parent,
    page_parent,
    workspace_parent,
    title_prop,
    page,
    database,
    block,
    paragraph,
    heading,
    bullet,
    child_page,
    table,
    table_row,
    external_file,
    hosted_file,
)

__all__ = [
    "nid",
    "compact_id",
    "text",
    "page_mention",
    "date_mention",
    "database_parent",
    "page_parent",
    "workspace_parent",
    "title_prop",
    "page",
    "database",
    "block",
    "paragraph",
    "heading",
    "bullet",
    "child_page",
    "table",
    "table_row",
    "external_file",
    "hosted_file",
]
