"""Main CLI entry point for the notion2obsidian command.

This module provides the Typer application. Everything is an option on the
main command; there are no subcommands.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from notion2obsidian import __version__
from notion2obsidian.cli.migrate_command import MigrateCommand
from notion2obsidian.cli.models import ExitCode
from notion2obsidian.cli.output import OutputHandler
from notion2obsidian.vault.config_loader import ConfigLoader

app = typer.Typer(
    name="notion2obsidian",
    help="""Migrate a Notion database or page tree into an Obsidian vault.

QUICK START:
  notion2obsidian --db <database_id> --vault ~/Obsidian/Main -d Notion
  notion2obsidian --page-id <page_id> --vault ~/Obsidian/Main --images
  notion2obsidian --db <database_id> --vault ~/Obsidian/Main --dry-run

The integration token is read from --token or NOTION_TOKEN (.env supported).""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)

APP_LOGGER = "notion2obsidian"


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'notion2obsidian' namespace logger to avoid
    affecting third-party libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"notion2obsidian_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s",
            datefmt=date_format,
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


@app.command()
def main_command(
    token: Optional[str] = typer.Option(
        None,
        "--token",
        help="Notion integration token (default: NOTION_TOKEN)",
        metavar="TOKEN",
    ),
    database_id: Optional[str] = typer.Option(
        None,
        "--db",
        "--database-id",
        help="Notion database to migrate (default: NOTION_DATABASE_ID)",
        metavar="ID",
    ),
    page_id: Optional[str] = typer.Option(
        None,
        "--page-id",
        help="Single Notion page to migrate (default: NOTION_PAGE_ID)",
        metavar="ID",
    ),
    vault: Optional[str] = typer.Option(
        None,
        "--vault",
        help="Obsidian vault path (default: OBSIDIAN_VAULT_PATH)",
        metavar="PATH",
    ),
    destination: Optional[str] = typer.Option(
        None,
        "--destination",
        "-d",
        help="Folder inside the vault receiving the notes",
        metavar="FOLDER",
    ),
    page_properties: Optional[str] = typer.Option(
        None,
        "--page-properties",
        help="Comma-separated properties written as frontmatter ('all' for every property)",
        metavar="NAMES",
    ),
    path_filters: Optional[str] = typer.Option(
        None,
        "--path",
        help="Comma-separated properties composing note names, e.g. 'date:%Y/%m/%d,title'",
        metavar="FILTERS",
    ),
    images: Optional[bool] = typer.Option(
        None,
        "--images/--no-images",
        "-i",
        help="Download Notion-hosted images and files into the vault",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Render everything and show the page tree without writing",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        help="Root pages migrated concurrently (default: 10, 1 = serial)",
        metavar="N",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        help="YAML configuration file",
        metavar="FILE",
    ),
    strict: Optional[bool] = typer.Option(
        None,
        "--strict/--no-strict",
        help="Exit with code 2 when any page fails",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Migrate a Notion database or page tree into an Obsidian vault.

    \b
    EXAMPLES:
      notion2obsidian --db <id> --vault ~/Vault -d Notion --page-properties tags,status
      notion2obsidian --db <id> --vault ~/Vault --path 'date:%Y/%m/%d,title'
      notion2obsidian --page-id <id> --vault ~/Vault --images --workers 1
    """
    if version:
        typer.echo(f"notion2obsidian version {__version__}")
        raise typer.Exit()

    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    overrides = {
        "token": token,
        "database_id": database_id,
        "page_id": page_id,
        "vault_path": vault,
        "vault_destination": destination,
        "page_properties": ConfigLoader.parse_page_properties(page_properties),
        "page_name_filters": ConfigLoader.parse_path_filters(path_filters),
        "store_images": images,
        "save_to_disk": False if dry_run else None,
        "workers": workers,
        "strict": strict,
    }

    exit_code = MigrateCommand(output_handler=output).run(overrides, config_path=config)
    raise typer.Exit(exit_code)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
