"""Migration configuration loading and validation.

A MigrationConfig is assembled from, in decreasing precedence: command-line
options, an optional YAML configuration file, environment variables (a .env
file is honoured) and defaults.

Configuration file structure (every key optional):
    database_id: "8a4f1c2e9b7d4e3f8a1b2c3d4e5f6a7b"
    vault_path: "~/Obsidian/Main"
    vault_destination: "Notion"
    page_properties: ["Tags", "Status"]
    page_name_filters:
      date: "%Y/%m/%d"
      title: ""
    store_images: true
    workers: 4
"""

import logging
import os
from collections.abc import Iterable
from typing import Any, Dict, Optional, Set

import yaml
from dotenv import load_dotenv

from .errors import ConfigError, FilesystemError
from .models import DEFAULT_WORKERS, MigrationConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Builds and validates a MigrationConfig from all configuration sources."""

    # Config field -> environment variable used as fallback
    ENV_VARS = {
        'database_id': 'NOTION_DATABASE_ID',
        'page_id': 'NOTION_PAGE_ID',
        'vault_path': 'OBSIDIAN_VAULT_PATH',
    }

    ALLOWED_FIELDS = {
        'database_id',
        'page_id',
        'vault_path',
        'vault_destination',
        'page_properties',
        'page_name_filters',
        'store_images',
        'save_to_disk',
        'workers',
        'strict',
    }

    DEFAULTS: Dict[str, Any] = {
        'vault_destination': '',
        'store_images': False,
        'save_to_disk': True,
        'workers': DEFAULT_WORKERS,
        'strict': False,
    }

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """Load configuration values from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Dict of config field -> normalized value

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(config_path, 'read', 'Configuration file not found')
        except PermissionError:
            raise FilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(config_path, 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return {}

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        unknown = set(config_dict.keys()) - cls.ALLOWED_FIELDS
        if unknown:
            raise ConfigError(f"Unknown fields: {', '.join(sorted(unknown))}")

        values = dict(config_dict)
        if 'page_properties' in values:
            values['page_properties'] = cls._normalize_properties(values['page_properties'])
        if 'page_name_filters' in values:
            values['page_name_filters'] = cls._normalize_filters(values['page_name_filters'])
        return values

    @classmethod
    def build(
        cls,
        overrides: Dict[str, Any],
        config_path: Optional[str] = None
    ) -> MigrationConfig:
        """Merge all sources into a validated MigrationConfig.

        Args:
            overrides: Values given on the command line; None means "not given"
            config_path: Optional YAML configuration file

        Returns:
            Validated MigrationConfig

        Raises:
            FilesystemError: If the configuration file cannot be read
            ConfigError: If the merged configuration is invalid
        """
        load_dotenv()

        values: Dict[str, Any] = dict(cls.DEFAULTS)
        for field_name, env_var in cls.ENV_VARS.items():
            env_value = os.getenv(env_var)
            if env_value:
                values[field_name] = env_value

        if config_path:
            logger.info(f"Loading configuration from {config_path}")
            values.update(cls.load(config_path))

        values.update({k: v for k, v in overrides.items() if v is not None})

        cls._validate(values)
        return MigrationConfig(
            token=values.get('token') or '',
            database_id=values.get('database_id') or '',
            page_id=values.get('page_id') or '',
            page_properties=set(values.get('page_properties') or set()),
            vault_path=os.path.expanduser(values['vault_path']),
            vault_destination=values.get('vault_destination') or '',
            store_images=bool(values['store_images']),
            page_name_filters=dict(values.get('page_name_filters') or {}),
            save_to_disk=bool(values['save_to_disk']),
            workers=int(values['workers']),
            strict=bool(values['strict']),
        )

    @classmethod
    def _validate(cls, values: Dict[str, Any]) -> None:
        """Validate merged configuration values.

        Raises:
            ConfigError: If configuration is invalid
        """
        database_id = values.get('database_id')
        page_id = values.get('page_id')
        if database_id and page_id:
            raise ConfigError(
                "Give either a database id or a page id, not both",
                'database_id'
            )
        if not database_id and not page_id:
            raise ConfigError(
                "A database id or a page id is required",
                'database_id'
            )

        if not values.get('vault_path'):
            raise ConfigError("Obsidian vault path is required", 'vault_path')

        workers = values.get('workers')
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ConfigError(
                f"workers must be a positive integer, got {workers!r}",
                'workers'
            )

    @staticmethod
    def parse_page_properties(raw: Optional[str]) -> Optional[Set[str]]:
        """Parse a comma-separated property list ("Tags,Status").

        Returns:
            Set of lowercased names, or None when nothing was given
        """
        if raw is None:
            return None
        return ConfigLoader._normalize_properties(raw.split(','))

    @staticmethod
    def parse_path_filters(raw: Optional[str]) -> Optional[Dict[str, str]]:
        """Parse page name filters ("title,date:%Y/%m/%d").

        Each entry is a property name optionally followed by ':' and a
        strftime format. Only the first ':' separates, so formats such as
        "%H:%M" survive.

        Returns:
            Dict of lowercased property name -> format, or None when nothing was given
        """
        if raw is None:
            return None
        filters: Dict[str, str] = {}
        for entry in raw.split(','):
            name, _, fmt = entry.partition(':')
            name = name.strip().lower()
            if name:
                filters[name] = fmt
        return filters

    @staticmethod
    def _normalize_properties(raw: Any) -> Set[str]:
        if isinstance(raw, str):
            raw = raw.split(',')
        if not isinstance(raw, Iterable):
            raise ConfigError("Must be a list of property names", 'page_properties')
        return {str(name).strip().lower() for name in raw if str(name).strip()}

    @staticmethod
    def _normalize_filters(raw: Any) -> Dict[str, str]:
        if isinstance(raw, str):
            return ConfigLoader.parse_path_filters(raw) or {}
        if isinstance(raw, list):
            return ConfigLoader.parse_path_filters(','.join(str(item) for item in raw)) or {}
        if isinstance(raw, dict):
            return {
                str(name).strip().lower(): '' if fmt is None else str(fmt)
                for name, fmt in raw.items()
            }
        raise ConfigError(
            "Must be a mapping of property name to date format",
            'page_name_filters'
        )
