"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest

from notion2obsidian.vault.models import MigrationConfig
from tests.helpers import FakeNotionAPI

# notion-client logs every HTTP request at DEBUG through httpx
logging.getLogger("httpx").setLevel(logging.WARNING)


@pytest.fixture
def fake_api() -> FakeNotionAPI:
    """Empty in-memory Notion API."""
    return FakeNotionAPI()


@pytest.fixture
def page_config(tmp_path) -> MigrationConfig:
    """Single-page migration into a temporary vault."""
    return MigrationConfig(
        page_id="00000000000000000000000000000001",
        vault_path=str(tmp_path),
        vault_destination="Notion",
    )
