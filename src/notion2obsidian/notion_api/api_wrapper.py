"""API wrapper for the Notion REST API.

This module wraps the notion-client SDK and provides error translation from
SDK and HTTP exceptions to our typed exception hierarchy. It integrates with
the retry logic for handling rate limits.
"""

import logging
import re
from typing import Any, Dict, List, NamedTuple, Optional

import httpx
from notion_client import Client
from notion_client.errors import APIResponseError, HTTPResponseError, RequestTimeoutError

from .auth import Authenticator
from .errors import (
    InvalidTokenError,
    ObjectNotFoundError,
    APIUnreachableError,
    APIAccessError,
    RateLimitedError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)

NOTION_ENDPOINT = "https://api.notion.com"

# Page parents and databases.query follow this API version's object shapes
NOTION_VERSION = "2022-06-28"

_OBJECT_ID_PATTERN = re.compile(r'^[0-9a-f]{32}$')


class PaginatedResult(NamedTuple):
    """One page of a cursor-paginated Notion listing."""
    results: List[Dict[str, Any]]
    has_more: bool
    next_cursor: Optional[str]


def normalize_object_id(object_id: str) -> str:
    """Normalize a Notion object id to its dashed 8-4-4-4-12 form.

    Notion accepts ids with or without dashes and both forms show up in
    API payloads and page URLs, so every id is normalized before it is used
    as a key.

    Args:
        object_id: Page, database or block id, dashed or compact

    Returns:
        str: Lowercase dashed id

    Raises:
        ValueError: If object_id is not 32 hex digits

    Example:
        >>> normalize_object_id("8A4F1C2E9B7D4E3F8A1B2C3D4E5F6A7B")
        '8a4f1c2e-9b7d-4e3f-8a1b-2c3d4e5f6a7b'
    """
    if not object_id or not str(object_id).strip():
        raise ValueError("object id cannot be empty")

    compact = str(object_id).strip().replace('-', '').lower()
    if not _OBJECT_ID_PATTERN.match(compact):
        raise ValueError(
            f"Invalid object id format: '{object_id}'. "
            f"Notion ids are 32 hexadecimal digits."
        )
    return (
        f"{compact[:8]}-{compact[8:12]}-{compact[12:16]}-"
        f"{compact[16:20]}-{compact[20:]}"
    )


class APIWrapper:
    """Wrapper around the notion-client SDK with error translation.

    This class provides a thin wrapper over the Notion client that:
    1. Handles authentication using the Authenticator
    2. Translates SDK errors to typed exceptions
    3. Integrates retry logic for 429 rate limits

    Example:
        >>> api = APIWrapper(Authenticator())
        >>> page = api.find_page_by_id("8a4f1c2e9b7d4e3f8a1b2c3d4e5f6a7b")
    """

    def __init__(self, authenticator: Authenticator, timeout_ms: int = 30000):
        """Initialize the API wrapper.

        Args:
            authenticator: Authenticator instance for loading credentials
            timeout_ms: Per-request timeout passed to the SDK
        """
        self._authenticator = authenticator
        self._timeout_ms = timeout_ms
        self._client: Optional[Client] = None

    def _get_client(self) -> Client:
        """Get or create the Notion SDK client.

        Returns:
            Client: Initialized notion-client Client

        Raises:
            InvalidTokenError: If the token is missing
        """
        if self._client is None:
            creds = self._authenticator.get_credentials()
            self._client = Client(
                auth=creds.token,
                timeout_ms=self._timeout_ms,
                notion_version=NOTION_VERSION,
            )
        return self._client

    def _sanitize_credentials(self, text: str) -> str:
        """Mask integration tokens in error messages and log lines.

        Args:
            text: The error message or log text to sanitize

        Returns:
            str: Sanitized text

        Example:
            >>> api._sanitize_credentials("Bearer secret_abc123 rejected")
            'Bearer ***REDACTED*** rejected'
        """
        if not text:
            return text

        sanitized = re.sub(
            r'Authorization:\s*[^\n\r]+',
            'Authorization: ***REDACTED***',
            text,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r]+',
            'Bearer ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        # Internal integration secrets: secret_* (legacy) and ntn_* (current)
        sanitized = re.sub(
            r'\b(secret|ntn)_[A-Za-z0-9]{8,}\b',
            '***REDACTED***',
            sanitized
        )
        return sanitized

    def _translate_error(
        self,
        exception: Exception,
        operation: str,
        object_id: str,
        object_type: str
    ) -> Exception:
        """Translate SDK exceptions to typed Notion exceptions.

        Args:
            exception: The original exception from the SDK
            operation: Description of the operation that failed (for logging)
            object_id: Id of the object the operation targeted
            object_type: Kind of object ("page", "database", "block")

        Returns:
            Exception: Translated exception (one of our typed exceptions)
        """
        if isinstance(exception, (RequestTimeoutError, httpx.TransportError)):
            return APIUnreachableError(endpoint=NOTION_ENDPOINT)

        if isinstance(exception, APIResponseError):
            code = exception.code
            if code == 'rate_limited':
                return RateLimitedError(operation)
            if code == 'unauthorized':
                return InvalidTokenError()
            if code in ('object_not_found', 'restricted_resource'):
                return ObjectNotFoundError(object_id, object_type)

        if isinstance(exception, HTTPResponseError):
            if exception.status == 429:
                return RateLimitedError(operation)
            if exception.status == 401:
                return InvalidTokenError()
            if exception.status == 404:
                return ObjectNotFoundError(object_id, object_type)

        safe_error_msg = self._sanitize_credentials(str(exception))
        logger.error(f"API operation failed: {operation} - {safe_error_msg}")
        return APIAccessError(f"Notion API failure during {operation}: {safe_error_msg}")

    def find_page_by_id(self, page_id: str) -> Dict[str, Any]:
        """Fetch a page object (properties, parent, cover) by its id.

        Args:
            page_id: The Notion page id

        Returns:
            Dict containing the page object

        Raises:
            ValueError: If page_id is malformed
            InvalidTokenError: If the token is rejected
            ObjectNotFoundError: If the page doesn't exist or isn't shared
            APIUnreachableError: If API is unreachable
            APIAccessError: If API access fails after retries
        """
        page_id = normalize_object_id(page_id)

        def _fetch():
            client = self._get_client()
            try:
                logger.debug(f"Retrieving page {page_id}")
                return client.pages.retrieve(page_id=page_id)
            except Exception as e:
                raise self._translate_error(
                    e, f"find_page_by_id({page_id})", page_id, "page"
                ) from e

        return retry_on_rate_limit(_fetch)

    def find_database_by_id(self, database_id: str) -> Dict[str, Any]:
        """Fetch a database object (title, properties) by its id.

        Args:
            database_id: The Notion database id

        Returns:
            Dict containing the database object

        Raises:
            ValueError: If database_id is malformed
            InvalidTokenError: If the token is rejected
            ObjectNotFoundError: If the database doesn't exist or isn't shared
            APIUnreachableError: If API is unreachable
            APIAccessError: If API access fails after retries
        """
        database_id = normalize_object_id(database_id)

        def _fetch():
            client = self._get_client()
            try:
                logger.debug(f"Retrieving database {database_id}")
                return client.databases.retrieve(database_id=database_id)
            except Exception as e:
                raise self._translate_error(
                    e, f"find_database_by_id({database_id})", database_id, "database"
                ) from e

        return retry_on_rate_limit(_fetch)

    def query_database(
        self,
        database_id: str,
        cursor: Optional[str] = None
    ) -> PaginatedResult:
        """Fetch one page of a database's rows.

        Args:
            database_id: The Notion database id
            cursor: Cursor returned by the previous call, None for the first page

        Returns:
            PaginatedResult with the page objects of this batch

        Raises:
            ValueError: If database_id is malformed
            InvalidTokenError: If the token is rejected
            ObjectNotFoundError: If the database doesn't exist or isn't shared
            APIUnreachableError: If API is unreachable
            APIAccessError: If API access fails after retries
        """
        database_id = normalize_object_id(database_id)
        params: Dict[str, Any] = {"database_id": database_id}
        if cursor:
            params["start_cursor"] = cursor

        def _fetch():
            client = self._get_client()
            try:
                logger.debug(f"Querying database {database_id} (cursor={cursor})")
                return client.databases.query(**params)
            except Exception as e:
                raise self._translate_error(
                    e, f"query_database({database_id})", database_id, "database"
                ) from e

        return self._to_paginated(retry_on_rate_limit(_fetch))

    def find_block_children(
        self,
        block_id: str,
        cursor: Optional[str] = None
    ) -> PaginatedResult:
        """Fetch one page of a block's (or page's) child blocks.

        Args:
            block_id: The Notion block or page id
            cursor: Cursor returned by the previous call, None for the first page

        Returns:
            PaginatedResult with the block objects of this batch

        Raises:
            ValueError: If block_id is malformed
            InvalidTokenError: If the token is rejected
            ObjectNotFoundError: If the block doesn't exist or isn't shared
            APIUnreachableError: If API is unreachable
            APIAccessError: If API access fails after retries
        """
        block_id = normalize_object_id(block_id)
        params: Dict[str, Any] = {"block_id": block_id, "page_size": 100}
        if cursor:
            params["start_cursor"] = cursor

        def _fetch():
            client = self._get_client()
            try:
                logger.debug(f"Listing children of block {block_id} (cursor={cursor})")
                return client.blocks.children.list(**params)
            except Exception as e:
                raise self._translate_error(
                    e, f"find_block_children({block_id})", block_id, "block"
                ) from e

        return self._to_paginated(retry_on_rate_limit(_fetch))

    @staticmethod
    def _to_paginated(response: Dict[str, Any]) -> PaginatedResult:
        return PaginatedResult(
            results=list(response.get("results", [])),
            has_more=bool(response.get("has_more", False)),
            next_cursor=response.get("next_cursor"),
        )
