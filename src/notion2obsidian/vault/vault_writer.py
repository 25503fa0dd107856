"""Filesystem writer for the Obsidian vault.

Notes and assets are written through a temporary file in the destination
directory and moved into place, so an interrupted run never leaves a
half-written note behind.
"""

import logging
import os
import tempfile

from .errors import FilesystemError
from .models import MigrationConfig

logger = logging.getLogger(__name__)


class VaultWriter:
    """Writes migrated notes and downloaded assets into the vault.

    Example:
        >>> writer = VaultWriter(config)
        >>> writer.write_page("vault/Notion/Hello.md", "# Hello\\n")
    """

    def __init__(self, config: MigrationConfig):
        self._base_path = config.vault_path
        self._image_path = config.vault_image_path()

    def ensure_directory(self, path: str) -> None:
        """Create a directory (and its parents) if it does not exist.

        Raises:
            FilesystemError: If the directory cannot be created
        """
        if not path:
            return
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise FilesystemError(path, 'create_directory', str(e))

    def write_page(self, file_path: str, content: str) -> None:
        """Write a rendered note.

        Args:
            file_path: Destination path (inside the vault)
            content: Markdown content

        Raises:
            FilesystemError: If the path escapes the vault or the write fails
        """
        self._write_atomic(file_path, content.encode('utf-8'))
        logger.debug(f"Wrote note {file_path}")

    def write_asset(self, name: str, data: bytes) -> str:
        """Write a downloaded asset under the vault's Images folder.

        Args:
            name: Asset name relative to the Images folder ("Page/blockid.png")
            data: Raw bytes

        Returns:
            str: Path the asset was written to

        Raises:
            FilesystemError: If the path escapes the vault or the write fails
        """
        file_path = os.path.join(self._image_path, name)
        self._write_atomic(file_path, data)
        logger.debug(f"Wrote asset {file_path}")
        return file_path

    def _validate_path_safety(self, file_path: str) -> None:
        """Reject paths that resolve outside the vault (titles may contain '..').

        Raises:
            FilesystemError: If path is outside the vault
        """
        real_base = os.path.realpath(self._base_path)
        real_path = os.path.realpath(file_path)
        if not real_path.startswith(real_base + os.sep) and real_path != real_base:
            raise FilesystemError(
                file_path,
                'validate',
                f'Path traversal detected: {file_path} is outside vault {self._base_path}'
            )

    def _write_atomic(self, file_path: str, data: bytes) -> None:
        self._validate_path_safety(file_path)
        directory = os.path.dirname(file_path)
        self.ensure_directory(directory)

        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(dir=directory or None, suffix='.tmp')
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(temp_path, file_path)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as cleanup_error:
                    logger.warning(f"Failed to remove temp file {temp_path}: {cleanup_error}")
            raise FilesystemError(file_path, 'write', str(e))
