"""Concurrency-safe cross-reference cache.

Maps a Notion page id to the state of its migration (absent, in progress,
resolved). It is the only structure shared between jobs and it owns every
PageNode of the run.
"""

import logging
import threading
from typing import Dict, Iterator, Optional, Tuple

from .models import CacheEntry, EntryState, PageNode

logger = logging.getLogger(__name__)


class CrossReferenceCache:
    """Per-id state machine guarding against duplicate and cyclic rendering.

    Each page id goes absent → in progress → resolved exactly once. The
    transition out of "absent" is a compare-and-set, so among all jobs
    racing on the same id exactly one renders it. Jobs that lose the race
    wait for the winner unless waiting could never end: the winner is the
    waiting job itself (a reference cycle inside one job) or, transitively,
    is waiting on an id the requester holds (a cycle across jobs).

    Example:
        >>> cache = CrossReferenceCache()
        >>> cache.mark_in_progress(page_id)
        True
        >>> cache.set(page_id, node)
        >>> cache.get(page_id)
        (CacheEntry(state=<EntryState.RESOLVED...>, ...), True)
    """

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}
        # thread id -> page id that thread is blocked on
        self._waiting: Dict[int, str] = {}
        self._condition = threading.Condition()

    def get(self, page_id: str) -> Tuple[Optional[CacheEntry], bool]:
        """Look up a resolved entry.

        Returns:
            (entry, True) when the id is resolved, (None, False) otherwise
        """
        with self._condition:
            entry = self._entries.get(page_id)
            if entry is None or entry.state is not EntryState.RESOLVED:
                return None, False
            return entry, True

    def state(self, page_id: str) -> EntryState:
        """Current state of an id."""
        with self._condition:
            entry = self._entries.get(page_id)
            return entry.state if entry else EntryState.ABSENT

    def mark_in_progress(self, page_id: str) -> bool:
        """Atomically move an id from absent to in progress.

        Returns:
            True if the calling job now owns the id's resolution, False if
            the id was already in progress or resolved
        """
        with self._condition:
            if page_id in self._entries:
                return False
            self._entries[page_id] = CacheEntry(
                state=EntryState.IN_PROGRESS,
                owner=threading.get_ident(),
            )
            return True

    def is_in_progress(self, page_id: str) -> bool:
        with self._condition:
            entry = self._entries.get(page_id)
            return entry is not None and entry.state is EntryState.IN_PROGRESS

    def set(self, page_id: str, node: Optional[PageNode], fallback_title: str = "") -> None:
        """Resolve an id, clearing its in-progress state, and wake waiters.

        Args:
            page_id: Page id
            node: The page's node, or None for the Untitled sentinel
            fallback_title: Title later references link to when node is None
        """
        with self._condition:
            self._entries[page_id] = CacheEntry(
                state=EntryState.RESOLVED,
                node=node,
                fallback_title=fallback_title if node is None else "",
            )
            self._condition.notify_all()

    def wait_until_resolved(self, page_id: str) -> Optional[CacheEntry]:
        """Block until another job finishes resolving an id.

        Returns:
            The resolved entry, or None when the id is absent, owned by the
            calling thread, or waiting would deadlock
        """
        me = threading.get_ident()
        with self._condition:
            while True:
                entry = self._entries.get(page_id)
                if entry is None:
                    return None
                if entry.state is EntryState.RESOLVED:
                    return entry
                if entry.owner == me or self._would_deadlock(page_id, me):
                    return None

                logger.debug(f"Waiting for page {page_id} resolved by another job")
                self._waiting[me] = page_id
                try:
                    self._condition.wait()
                finally:
                    del self._waiting[me]

    def _would_deadlock(self, page_id: str, me: int) -> bool:
        """Follow the wait-for chain starting at page_id's owner.

        Must be called with the condition held.
        """
        seen = set()
        entry = self._entries.get(page_id)
        while entry is not None and entry.state is EntryState.IN_PROGRESS:
            owner = entry.owner
            if owner == me:
                return True
            if owner is None or owner in seen:
                return False
            seen.add(owner)
            blocked_on = self._waiting.get(owner)
            if blocked_on is None:
                return False
            entry = self._entries.get(blocked_on)
        return False

    def node(self, page_id: str) -> Optional[PageNode]:
        """Resolved node for an id, None for unknown ids and sentinels."""
        entry, found = self.get(page_id)
        return entry.node if found and entry is not None else None

    def nodes(self) -> Iterator[PageNode]:
        """Resolved nodes in the order their ids were first cached."""
        with self._condition:
            entries = list(self._entries.values())
        for entry in entries:
            if entry.state is EntryState.RESOLVED and entry.node is not None:
                yield entry.node

    def __len__(self) -> int:
        with self._condition:
            return len(self._entries)
