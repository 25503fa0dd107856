"""Migrate command orchestration for CLI.

Wires configuration, the Notion client and the Migrator together, shows
progress and translates errors into exit codes.
"""

import logging
from typing import Any, Callable, Dict, Optional

from notion2obsidian.cli.models import ExitCode, MigrationSummary
from notion2obsidian.cli.output import OutputHandler
from notion2obsidian.migrator.migrator import Migrator
from notion2obsidian.notion_api.api_wrapper import APIWrapper
from notion2obsidian.notion_api.auth import Authenticator
from notion2obsidian.notion_api.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidTokenError,
    MigrationError,
    ObjectNotFoundError,
)
from notion2obsidian.vault.config_loader import ConfigLoader
from notion2obsidian.vault.errors import ConfigError, FilesystemError
from notion2obsidian.vault.models import MigrationConfig

logger = logging.getLogger(__name__)

MigratorFactory = Callable[[APIWrapper, MigrationConfig], Migrator]


class MigrateCommand:
    """Runs one migration from the command line.

    The workflow:
        1. Build the configuration (CLI options, YAML file, environment)
        2. List the root pages (database rows or a single page)
        3. Render every root page through the worker pool
        4. Write the vault, or display the page tree on a dry run
        5. Report failures and return an exit code

    Example:
        >>> cmd = MigrateCommand(output_handler=OutputHandler(verbosity=1))
        >>> exit_code = cmd.run({"database_id": db_id, "vault_path": "~/Vault"})
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        authenticator: Optional[Authenticator] = None,
        api: Optional[APIWrapper] = None,
        migrator_factory: Optional[MigratorFactory] = None,
    ):
        """Initialize migrate command with dependencies.

        Args:
            output_handler: OutputHandler for terminal output (optional)
            authenticator: Authenticator for the Notion API (optional)
            api: APIWrapper to use instead of building one (optional)
            migrator_factory: Builds the Migrator from api and config (optional)
        """
        self.output_handler = output_handler or OutputHandler()
        self.authenticator = authenticator
        self.api = api
        self.migrator_factory = migrator_factory or Migrator

    def run(self, overrides: Dict[str, Any], config_path: Optional[str] = None) -> ExitCode:
        """Execute the migration.

        Args:
            overrides: Configuration values given on the command line
            config_path: Optional YAML configuration file

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            config = ConfigLoader.build(overrides, config_path)

            if not self.authenticator:
                self.authenticator = Authenticator(token=config.token or None)
            if not self.api:
                self.api = APIWrapper(self.authenticator)

            migrator = self.migrator_factory(self.api, config)
            migrator.setup()

            source = (
                f"database {config.database_id}" if config.database_id
                else f"page {config.page_id}"
            )
            with self.output_handler.spinner(f"Fetching pages from Notion {source}..."):
                roots = migrator.fetch_pages()

            if not roots:
                self.output_handler.warning(f"No pages found in {source}")
                return ExitCode.SUCCESS
            self.output_handler.info(f"Found {len(roots)} page(s) in {source}")

            with self.output_handler.progress_listener() as listener:
                failures = migrator.render_all([listener])

            summary = MigrationSummary(
                root_pages=len(roots),
                pages_rendered=sum(1 for _ in migrator.cache.nodes()),
                failed_jobs=failures,
                dry_run=not config.save_to_disk,
            )

            if config.save_to_disk:
                result = migrator.flush()
                summary.pages_written = result.pages_written
                summary.images_written = result.images_written
                summary.write_failures = result.failures
            else:
                self.output_handler.print_page_tree(
                    migrator.roots, migrator.node, migrator.relative_path
                )

            self.output_handler.print_failure_summary(summary)
            self.output_handler.print_summary(summary)

            if summary.has_failures and config.strict:
                return ExitCode.PAGE_FAILURES
            return ExitCode.SUCCESS

        except InvalidTokenError as e:
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            self.output_handler.info(
                "Pass --token or set NOTION_TOKEN to your integration secret"
            )
            return ExitCode.AUTH_ERROR

        except ObjectNotFoundError as e:
            logger.error(f"Not found: {e}")
            self.output_handler.error(str(e))
            self.output_handler.info(
                "Share the page or database with your integration (Connections menu)"
            )
            return ExitCode.GENERAL_ERROR

        except (APIUnreachableError, APIAccessError) as e:
            logger.error(f"API error: {e}")
            self.output_handler.error(f"API error: {e}")
            self.output_handler.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        except (ConfigError, FilesystemError) as e:
            logger.error(f"Vault error: {e}")
            self.output_handler.error(str(e))
            return ExitCode.GENERAL_ERROR

        except (MigrationError, ValueError) as e:
            logger.error(f"Migration failed: {e}")
            self.output_handler.error(f"Migration failed: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during migration")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR
