"""Job queue and bounded worker pool for root-page migration.

One Job per root page. Jobs run concurrently on at most ``size`` threads;
a failing job is recorded and never stops its siblings.
"""

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Deque, Iterable, List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 10


@dataclass(frozen=True)
class Job:
    """Migration of one root page.

    Attributes:
        path: Destination path of the page, used as the job's label
        page_id: Root page id, passed to the pool's handler
    """
    path: str
    page_id: str


@dataclass(frozen=True)
class FailedJob:
    """A job whose handler raised."""
    job: Job
    error: Exception


class ProgressListener(Protocol):
    """Receives progress signals from a WorkerPool."""

    def on_create(self, description: str) -> None: ...

    def on_add(self, count: int) -> None: ...

    def on_done(self) -> None: ...


class JobQueue:
    """Thread-safe FIFO of jobs waiting to run."""

    def __init__(self):
        self._jobs: Deque[Job] = deque()
        self._lock = threading.Lock()

    def enqueue(self, jobs: Iterable[Job]) -> int:
        """Append jobs; returns how many were added."""
        jobs = list(jobs)
        with self._lock:
            self._jobs.extend(jobs)
        return len(jobs)

    def drain(self) -> List[Job]:
        """Remove and return every queued job, oldest first."""
        with self._lock:
            jobs = list(self._jobs)
            self._jobs.clear()
        return jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


class WorkerPool:
    """Runs queued jobs with bounded parallelism.

    The handler is called once per job on a worker thread; raising marks the
    job as failed. A pool of size 1 runs jobs serially in enqueue order.

    Example:
        >>> pool = WorkerPool(migrate_page, size=4, description="Migrating")
        >>> pool.enqueue([Job(path="vault/A.md", page_id=a_id)])
        >>> failures = pool.run()
    """

    def __init__(
        self,
        handler: Callable[[Job], None],
        size: int = DEFAULT_POOL_SIZE,
        description: str = "",
        listeners: Optional[Sequence[ProgressListener]] = None
    ):
        if size < 1:
            raise ValueError(f"Worker pool size must be at least 1, got {size}")
        self._handler = handler
        self._size = size
        self._queue = JobQueue()
        self._listeners = list(listeners or [])
        for listener in self._listeners:
            listener.on_create(description)

    @property
    def size(self) -> int:
        return self._size

    def enqueue(self, jobs: Iterable[Job]) -> None:
        """Queue jobs for the next run()."""
        count = self._queue.enqueue(jobs)
        for listener in self._listeners:
            listener.on_add(count)

    def run(self) -> List[FailedJob]:
        """Run every queued job and wait for all of them.

        Returns:
            Failed jobs with their errors, in enqueue order
        """
        jobs = self._queue.drain()
        if not jobs:
            return []

        logger.info(f"Running {len(jobs)} job(s) on {self._size} worker(s)")
        errors = {}

        with ThreadPoolExecutor(max_workers=self._size) as executor:
            futures = {executor.submit(self._handler, job): job for job in jobs}

            for future in as_completed(futures):
                job = futures[future]
                try:
                    future.result()
                    logger.debug(f"  ✓ {job.path}")
                except Exception as e:
                    errors[job] = e
                    logger.error(f"  ✗ {job.path}: {e}")
                finally:
                    for listener in self._listeners:
                        listener.on_done()

        failures = [FailedJob(job=job, error=errors[job]) for job in jobs if job in errors]
        logger.info(
            f"Jobs complete: {len(jobs) - len(failures)} succeeded, {len(failures)} failed"
        )
        return failures
