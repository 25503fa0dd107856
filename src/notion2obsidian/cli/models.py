"""Data models for CLI operations."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

from notion2obsidian.migrator.worker_pool import FailedJob


class ExitCode(IntEnum):
    """Exit codes of the notion2obsidian command.

    - SUCCESS (0): Migration ran (per-page failures are reported, not fatal)
    - GENERAL_ERROR (1): Configuration, filesystem or unexpected error
    - PAGE_FAILURES (2): Some pages failed and --strict was given
    - AUTH_ERROR (3): Missing or rejected Notion token
    - NETWORK_ERROR (4): Notion API unreachable or failing

    Example:
        >>> raise typer.Exit(ExitCode.SUCCESS)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    PAGE_FAILURES = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


@dataclass
class MigrationSummary:
    """Counts reported at the end of a run.

    Attributes:
        root_pages: Root pages listed from Notion
        pages_rendered: Pages rendered, referenced pages included
        pages_written: Notes written to the vault (0 on dry runs)
        images_written: Images written to the vault
        failed_jobs: Root pages whose migration failed
        write_failures: (path, error) of notes that could not be written
        dry_run: Nothing was written
    """
    root_pages: int = 0
    pages_rendered: int = 0
    pages_written: int = 0
    images_written: int = 0
    failed_jobs: List[FailedJob] = field(default_factory=list)
    write_failures: List[Tuple[str, Exception]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_jobs or self.write_failures)
