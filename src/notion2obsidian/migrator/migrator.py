"""Migration orchestrator.

Lists the root pages, renders them through the worker pool, then writes the
vault (or hands the page tree to the caller for a dry run).
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from notion2obsidian.notion_api.api_wrapper import APIWrapper, normalize_object_id
from notion2obsidian.vault.asset_fetcher import AssetFetcher
from notion2obsidian.vault.errors import AssetDownloadError, FilesystemError
from notion2obsidian.vault.models import MigrationConfig
from notion2obsidian.vault.vault_writer import VaultWriter

from .cache import CrossReferenceCache
from .models import PageNode
from .pagination import collect_database_pages
from .resolver import PageResolver
from .worker_pool import FailedJob, Job, ProgressListener, WorkerPool

logger = logging.getLogger(__name__)


@dataclass
class FlushResult:
    """Outcome of writing the vault.

    Attributes:
        pages_written: Notes written
        images_written: Assets downloaded and written
        failures: (path, error) of notes that could not be written
    """
    pages_written: int = 0
    images_written: int = 0
    failures: List[Tuple[str, Exception]] = field(default_factory=list)


class Migrator:
    """Drives one migration run.

    Example:
        >>> migrator = Migrator(api, config)
        >>> migrator.setup()
        >>> migrator.fetch_pages()
        >>> failures = migrator.render_all()
        >>> result = migrator.flush()
    """

    def __init__(
        self,
        api: APIWrapper,
        config: MigrationConfig,
        cache: Optional[CrossReferenceCache] = None,
        writer: Optional[VaultWriter] = None,
        fetcher: Optional[AssetFetcher] = None
    ):
        self._api = api
        self._config = config
        self.cache = cache or CrossReferenceCache()
        self.resolver = PageResolver(api, self.cache, config)
        self._writer = writer or VaultWriter(config)
        self._fetcher = fetcher
        self._root_pages: Dict[str, Dict[str, Any]] = {}
        self.roots: List[PageNode] = []

    def setup(self) -> None:
        """Create the vault folders the run writes into.

        Raises:
            FilesystemError: If a folder cannot be created
        """
        if not self._config.save_to_disk:
            return
        self._writer.ensure_directory(self._config.vault_filepath())
        if self._config.store_images:
            self._writer.ensure_directory(self._config.vault_image_path())

    def fetch_pages(self) -> List[PageNode]:
        """List the root pages and register their nodes.

        Returns:
            Root nodes, in listing order

        Raises:
            NotionError: If the database or page cannot be fetched
        """
        if self._config.database_id:
            pages = collect_database_pages(self._api, self._config.database_id)
        else:
            pages = [self._api.find_page_by_id(self._config.page_id)]

        for page in pages:
            page_id = normalize_object_id(page["id"])
            if page_id in self._root_pages:
                continue
            self._root_pages[page_id] = page
            self.roots.append(self.resolver.register_root(page))

        logger.info(f"Found {len(self.roots)} root page(s)")
        return self.roots

    def render_all(self, listeners: Sequence[ProgressListener] = ()) -> List[FailedJob]:
        """Render every root page, one job per page.

        Returns:
            Jobs that failed, with their errors
        """
        pool = WorkerPool(
            self._run_job,
            size=self._config.workers,
            description="Migrating Notion pages",
            listeners=listeners,
        )
        pool.enqueue(Job(path=node.path, page_id=node.page_id) for node in self.roots)
        return pool.run()

    def _run_job(self, job: Job) -> None:
        node = self.cache.node(job.page_id)
        if node is None:
            raise KeyError(f"Root page {job.page_id} is not registered")
        try:
            self.resolver.fetch_and_render(
                node,
                self._root_pages[job.page_id],
                self._config.page_properties,
            )
        except Exception:
            node.failed = True
            raise

    def flush(self) -> FlushResult:
        """Write every rendered note (and its images) to the vault, once."""
        result = FlushResult()
        for node in self.cache.nodes():
            if node.failed or node.flushed:
                continue
            try:
                self._writer.write_page(node.path, node.content)
            except FilesystemError as e:
                logger.error(f"Failed to write {node.path}: {e}")
                result.failures.append((node.path, e))
                continue
            node.flushed = True
            result.pages_written += 1

            if self._config.store_images:
                result.images_written += self._flush_images(node)

        logger.info(
            f"Wrote {result.pages_written} note(s) and {result.images_written} image(s)"
        )
        return result

    def _flush_images(self, node: PageNode) -> int:
        if self._fetcher is None:
            self._fetcher = AssetFetcher()
        written = 0
        for image in node.images:
            try:
                self._writer.write_asset(image.name, self._fetcher.download(image.url))
                written += 1
            except (AssetDownloadError, FilesystemError) as e:
                logger.warning(f"Image {image.name} of '{node.title}' not saved: {e}")
        return written

    def node(self, page_id: str) -> Optional[PageNode]:
        """Look up any migrated page by id."""
        return self.cache.node(page_id)

    def relative_path(self, node: PageNode) -> str:
        """Path of a note relative to the vault, for display."""
        return os.path.relpath(node.path, self._config.vault_path or os.curdir)
