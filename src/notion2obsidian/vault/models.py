"""Data models for the vault side of a migration."""

import os
from dataclasses import dataclass, field
from typing import Dict, Set

DEFAULT_WORKERS = 10
IMAGES_FOLDER = "Images"


@dataclass
class MigrationConfig:
    """Everything a migration run needs to know.

    Exactly one of database_id and page_id is set. The vault destination is
    a subfolder of the vault where pages are written; images always go to
    the vault's top-level Images folder so links resolve from any note.

    Attributes:
        token: Notion integration token
        database_id: Database whose rows are the root pages
        page_id: Single root page (mutually exclusive with database_id)
        page_properties: Lowercased property names promoted to frontmatter
            ("all" selects every property)
        vault_path: Root directory of the Obsidian vault
        vault_destination: Subfolder of the vault receiving the pages
        store_images: Download Notion-hosted images and files into the vault
        page_name_filters: Property name (lowercased) -> strftime format used
            to compose filenames of database rows ("" for no format)
        save_to_disk: Write the vault; False prints the page tree instead
        workers: Number of root pages migrated concurrently
        strict: Report per-page failures through the exit code
    """
    token: str = ""
    database_id: str = ""
    page_id: str = ""
    page_properties: Set[str] = field(default_factory=set)
    vault_path: str = ""
    vault_destination: str = ""
    store_images: bool = False
    page_name_filters: Dict[str, str] = field(default_factory=dict)
    save_to_disk: bool = True
    workers: int = DEFAULT_WORKERS
    strict: bool = False

    def vault_filepath(self) -> str:
        """Directory receiving the migrated pages."""
        return os.path.join(self.vault_path, self.vault_destination)

    def vault_image_path(self) -> str:
        """Directory receiving downloaded images."""
        return os.path.join(self.vault_path, IMAGES_FOLDER)
