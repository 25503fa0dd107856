"""Typed exception hierarchy for vault (local side) errors.

All exceptions inherit from VaultError and carry the path, field or URL
they relate to.
"""

from typing import Optional

from notion2obsidian.notion_api.errors import MigrationError


class VaultError(MigrationError):
    """Base exception for all vault errors."""
    pass


class FilesystemError(VaultError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ConfigError(VaultError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class AssetDownloadError(VaultError):
    """Raised when an image or file attached to a page cannot be downloaded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to download asset {url}: {reason}")
        self.url = url
        self.reason = reason
