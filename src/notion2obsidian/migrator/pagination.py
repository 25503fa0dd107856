"""Cursor loops over paginated Notion listings."""

from typing import Any, Callable, Dict, List, Optional

from notion2obsidian.notion_api.api_wrapper import APIWrapper, PaginatedResult


def _collect(fetch: Callable[[Optional[str]], PaginatedResult]) -> List[Dict[str, Any]]:
    results: List[Dict[str, Any]] = []
    cursor = None
    while True:
        batch = fetch(cursor)
        results.extend(batch.results)
        if not batch.has_more or not batch.next_cursor:
            return results
        cursor = batch.next_cursor


def collect_database_pages(api: APIWrapper, database_id: str) -> List[Dict[str, Any]]:
    """All rows of a database, following cursors until has_more is false."""
    return _collect(lambda cursor: api.query_database(database_id, cursor))


def collect_block_children(api: APIWrapper, block_id: str) -> List[Dict[str, Any]]:
    """All child blocks of a block or page, following cursors until has_more is false."""
    return _collect(lambda cursor: api.find_block_children(block_id, cursor))
