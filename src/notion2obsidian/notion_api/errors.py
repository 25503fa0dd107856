"""Typed exception hierarchy for Notion-related errors.

This module defines the root exception of the migrator and the errors raised
by the Notion client layer. Every exception carries enough context in its
message to be shown to the user as-is.
"""

from typing import Optional


class MigrationError(Exception):
    """Base exception for all notion2obsidian errors.

    Use this to catch any application-level error from the migrator.
    """
    pass


class NotionError(MigrationError):
    """Base exception for all Notion API errors."""
    pass


class InvalidTokenError(NotionError):
    """Raised when the integration token is missing or rejected by Notion."""

    def __init__(self, reason: str = "token rejected by the Notion API"):
        super().__init__(f"Notion integration token is invalid ({reason})")
        self.reason = reason


class ObjectNotFoundError(NotionError):
    """Raised when a page, database or block does not exist or is not shared."""

    def __init__(self, object_id: str, object_type: str = "object"):
        super().__init__(
            f"Notion {object_type} {object_id} not found "
            f"(is it shared with the integration?)"
        )
        self.object_id = object_id
        self.object_type = object_type


class APIUnreachableError(NotionError):
    """Raised when the Notion API cannot be reached."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(NotionError):
    """Raised when API access fails after retries or due to access restrictions."""

    def __init__(self, message: str = "Notion API failure (after 3 retries)"):
        super().__init__(message)


class RateLimitedError(APIAccessError):
    """Raised when Notion answers a request with HTTP 429."""

    status_code = 429

    def __init__(self, operation: Optional[str] = None):
        if operation:
            message = f"Notion API rate limited during {operation}"
        else:
            message = "Notion API rate limited"
        super().__init__(message)
        self.operation = operation
