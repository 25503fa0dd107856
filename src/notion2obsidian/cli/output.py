"""Terminal output handling using Rich library.

Progress bars, spinners, colored messages, the failure summary and the
dry-run page tree. Supports verbosity levels and --no-color.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Set

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    MofNCompleteColumn,
    TimeElapsedColumn,
)
from rich.spinner import Spinner
from rich.table import Table
from rich.tree import Tree

from notion2obsidian.cli.models import MigrationSummary
from notion2obsidian.migrator.models import PageNode


class RichProgressListener:
    """Drives a Rich progress task from WorkerPool progress signals."""

    def __init__(self, progress: Progress):
        self._progress = progress
        self._task = None
        self._total = 0

    def on_create(self, description: str) -> None:
        self._task = self._progress.add_task(description, total=0)

    def on_add(self, count: int) -> None:
        self._total += count
        self._progress.update(self._task, total=self._total)

    def on_done(self) -> None:
        self._progress.advance(self._task)


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> with handler.spinner("Fetching pages from Notion..."):
        ...     pages = migrator.fetch_pages()
        >>> handler.success("Migration complete")
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def print(self, message: str) -> None:
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Example:
            >>> with handler.spinner("Fetching pages..."):
            ...     pass
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    @contextmanager
    def progress_listener(self) -> Iterator[RichProgressListener]:
        """Display a progress bar fed by a WorkerPool.

        Yields:
            RichProgressListener to pass to the pool

        Example:
            >>> with handler.progress_listener() as listener:
            ...     failures = migrator.render_all([listener])
        """
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
        )
        with progress:
            yield RichProgressListener(progress)

    def print_failure_summary(self, summary: MigrationSummary) -> None:
        """List failed pages with their path and cause."""
        if not summary.has_failures:
            return

        table = Table(title="Failed pages", title_style="bold red", show_lines=False)
        table.add_column("Path", overflow="fold")
        table.add_column("Error", overflow="fold")
        for failed in summary.failed_jobs:
            table.add_row(escape(failed.job.path), escape(str(failed.error)))
        for path, error in summary.write_failures:
            table.add_row(escape(path), escape(str(error)))
        self.console.print(table)

    def print_page_tree(
        self,
        roots: List[PageNode],
        lookup: Callable[[str], Optional[PageNode]],
        relative_path: Callable[[PageNode], str],
    ) -> None:
        """Display the page graph of a dry run.

        Each root is a branch; pages reached through references hang below
        the page that referenced them. A page reached again is shown once
        more, marked, without its subtree.

        Args:
            roots: Root nodes, in listing order
            lookup: Resolves a child id to its node
            relative_path: Display path of a node
        """
        tree = Tree("[bold]Dry Run - Notes that would be written:[/bold]")
        seen: Set[str] = set()
        for root in roots:
            self._add_branch(tree, root, lookup, relative_path, seen)
        self.console.print(tree)

    def _add_branch(
        self,
        branch: Tree,
        node: PageNode,
        lookup: Callable[[str], Optional[PageNode]],
        relative_path: Callable[[PageNode], str],
        seen: Set[str],
    ) -> None:
        if node.page_id in seen:
            branch.add(f"[dim]↺ {escape(node.title)}[/dim]")
            return
        seen.add(node.page_id)

        label = f"{escape(node.title)} [dim]({escape(relative_path(node))})[/dim]"
        if node.failed:
            label += " [red](failed)[/red]"
        if node.images:
            label += f" [blue]{len(node.images)} image(s)[/blue]"
        child_branch = branch.add(label)

        for child_id in node.children:
            child = lookup(child_id)
            if child is not None:
                self._add_branch(child_branch, child, lookup, relative_path, seen)

    def print_summary(self, summary: MigrationSummary) -> None:
        """Display migration summary with color coding."""
        self.console.print("\n[bold]Migration Summary:[/bold]")
        self.console.print(f"  Root pages: {summary.root_pages}")
        self.console.print(f"  Pages rendered: {summary.pages_rendered}")
        if not summary.dry_run:
            self.console.print(f"  [green]✓[/green] Notes written: {summary.pages_written}")
            if summary.images_written:
                self.console.print(f"  [blue]▣[/blue] Images written: {summary.images_written}")

        failed = len(summary.failed_jobs) + len(summary.write_failures)
        if failed:
            self.console.print(f"  [red]✗[/red] Failed: {failed} page(s)")
            self.console.print("\n[yellow]Migration completed with failures[/yellow]")
        elif summary.dry_run:
            self.console.print("\n[green]Dry run complete. Nothing was written.[/green]")
        else:
            self.console.print("\n[green]Migration completed successfully[/green]")
