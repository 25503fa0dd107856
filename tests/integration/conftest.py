"""Pytest configuration and fixtures for integration tests.

Integration tests drive the notion2obsidian command end to end: the real
configuration loader, resolver, renderer, worker pool and vault writer run
against FakeNotionAPI and a temporary vault.
"""

from unittest.mock import patch

import pytest

from tests.helpers import FakeNotionAPI


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's environment and .env file out of the run."""
    for var in ("NOTION_TOKEN", "NOTION_DATABASE_ID", "NOTION_PAGE_ID", "OBSIDIAN_VAULT_PATH"):
        monkeypatch.delenv(var, raising=False)
    with patch('notion2obsidian.vault.config_loader.load_dotenv'), \
            patch('notion2obsidian.notion_api.auth.load_dotenv'):
        yield


@pytest.fixture
def notion():
    """Fake Notion served to the command instead of the real API."""
    api = FakeNotionAPI(page_size=2)
    with patch('notion2obsidian.cli.migrate_command.APIWrapper', return_value=api):
        yield api
