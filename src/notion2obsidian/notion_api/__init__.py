"""Notion client layer.

This package wraps the notion-client SDK behind a small, typed interface:
page, database and block-children lookups with rate-limit retries and
translated errors.
"""

from .errors import (
    MigrationError,
    NotionError,
    InvalidTokenError,
    ObjectNotFoundError,
    APIUnreachableError,
    APIAccessError,
    RateLimitedError,
)

__all__ = [
    "MigrationError",
    "NotionError",
    "InvalidTokenError",
    "ObjectNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
    "RateLimitedError",
]
