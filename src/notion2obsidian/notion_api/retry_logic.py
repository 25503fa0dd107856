"""Retry logic with exponential backoff for Notion API rate limits.

Notion answers bursts of requests with HTTP 429 (code ``rate_limited``).
Calls are retried with exponential backoff (1s, 2s, 4s); every other error
fails fast.
"""

import time
import logging
from typing import Callable, TypeVar

from .errors import APIAccessError, NotionError, RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3


def retry_on_rate_limit(func: Callable[..., T], *args, **kwargs) -> T:
    """Retry function on 429 rate limit with exponential backoff.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        APIAccessError: If rate limit persists after 3 retries
        Other exceptions: Passed through immediately without retry

    Example:
        >>> page = retry_on_rate_limit(client.pages.retrieve, page_id=page_id)
    """
    for retry_num in range(MAX_RETRIES + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise

            if retry_num >= MAX_RETRIES:
                logger.error(
                    f"Rate limit persisted after {MAX_RETRIES} retries, giving up"
                )
                raise APIAccessError("Notion API failure (after 3 retries)") from e

            wait_time = 2 ** retry_num
            logger.info(
                f"Rate limit hit, retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{MAX_RETRIES})"
            )
            time.sleep(wait_time)

    raise APIAccessError("Notion API failure (after 3 retries)")


def _is_rate_limit_error(exception: Exception) -> bool:
    """Check if an exception represents a rate limit (429) error.

    Recognizes notion-client's ``APIResponseError`` (``code``/``status``),
    our own ``RateLimitedError`` (``status_code``) and generic messages.

    Args:
        exception: The exception to check

    Returns:
        True if this appears to be a rate limit error, False otherwise
    """
    if isinstance(exception, RateLimitedError):
        return True
    # Typed errors carry ids in their messages; only the type counts
    if isinstance(exception, NotionError):
        return False

    if getattr(exception, 'code', None) == 'rate_limited':
        return True

    for attribute in ('status', 'status_code'):
        if getattr(exception, attribute, None) == 429:
            return True

    error_msg = str(exception).lower()
    rate_limit_patterns = [
        '429',
        'too many requests',
        'rate limited',
        'rate limit exceeded',
    ]
    return any(pattern in error_msg for pattern in rate_limit_patterns)
