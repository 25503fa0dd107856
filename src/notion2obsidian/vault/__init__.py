"""Local side of the migration: configuration, note and asset writing."""

from .errors import VaultError, FilesystemError, ConfigError, AssetDownloadError
from .models import MigrationConfig

__all__ = [
    "VaultError",
    "FilesystemError",
    "ConfigError",
    "AssetDownloadError",
    "MigrationConfig",
]
