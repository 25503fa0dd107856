"""Page graph resolution and rendering: Notion pages to Obsidian notes."""

from .cache import CrossReferenceCache
from .migrator import FlushResult, Migrator
from .models import CacheEntry, EntryState, ImageRef, PageNode, StyledRun
from .resolver import PageResolver
from .worker_pool import FailedJob, Job, WorkerPool

__all__ = [
    "CrossReferenceCache",
    "FlushResult",
    "Migrator",
    "CacheEntry",
    "EntryState",
    "ImageRef",
    "PageNode",
    "StyledRun",
    "PageResolver",
    "FailedJob",
    "Job",
    "WorkerPool",
]
