"""Unit tests for vault.vault_writer module."""

import os

import pytest
from unittest.mock import patch

from notion2obsidian.vault.errors import FilesystemError
from notion2obsidian.vault.models import MigrationConfig
from notion2obsidian.vault.vault_writer import VaultWriter


@pytest.fixture
def writer(tmp_path):
    return VaultWriter(MigrationConfig(page_id="x", vault_path=str(tmp_path)))


class TestWritePage:
    """Test cases for VaultWriter.write_page."""

    def test_writes_utf8_content(self, writer, tmp_path):
        """Content is written as UTF-8."""
        path = tmp_path / "Notion" / "Café.md"

        writer.write_page(str(path), "# Café ☕\n")

        assert path.read_text(encoding="utf-8") == "# Café ☕\n"

    def test_creates_nested_folders(self, writer, tmp_path):
        """Titles containing '/' create folders."""
        path = tmp_path / "Notion" / "2021" / "05" / "18Hello.md"

        writer.write_page(str(path), "hello")

        assert path.read_text() == "hello"

    def test_overwrites_existing(self, writer, tmp_path):
        """A second write replaces the note and leaves no temp file."""
        path = tmp_path / "Note.md"
        writer.write_page(str(path), "old")

        writer.write_page(str(path), "new")

        assert path.read_text() == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["Note.md"]

    def test_rejects_path_outside_vault(self, writer, tmp_path):
        """Paths escaping the vault raise FilesystemError."""
        with pytest.raises(FilesystemError) as exc_info:
            writer.write_page(str(tmp_path / ".." / "escape.md"), "x")

        assert exc_info.value.operation == "validate"
        assert not (tmp_path.parent / "escape.md").exists()

    def test_write_failure_cleans_up(self, writer, tmp_path):
        """A failed move raises FilesystemError and removes the temp file."""
        with patch('notion2obsidian.vault.vault_writer.os.replace', side_effect=OSError("disk full")):
            with pytest.raises(FilesystemError) as exc_info:
                writer.write_page(str(tmp_path / "Note.md"), "x")

        assert exc_info.value.operation == "write"
        assert "disk full" in str(exc_info.value)
        assert list(tmp_path.iterdir()) == []


class TestWriteAsset:
    """Test cases for VaultWriter.write_asset."""

    def test_writes_under_images_folder(self, writer, tmp_path):
        """Assets land under <vault>/Images/<name>."""
        path = writer.write_asset("Page/abc.png", b"\x89PNG")

        assert path == os.path.join(str(tmp_path), "Images", "Page/abc.png")
        assert (tmp_path / "Images" / "Page" / "abc.png").read_bytes() == b"\x89PNG"


class TestEnsureDirectory:
    """Test cases for VaultWriter.ensure_directory."""

    def test_creates_directory(self, writer, tmp_path):
        """Missing directories are created."""
        writer.ensure_directory(str(tmp_path / "a" / "b"))

        assert (tmp_path / "a" / "b").is_dir()

    def test_failure_raises(self, writer, tmp_path):
        """OS errors become FilesystemError."""
        with patch('notion2obsidian.vault.vault_writer.os.makedirs', side_effect=OSError("denied")):
            with pytest.raises(FilesystemError) as exc_info:
                writer.ensure_directory(str(tmp_path / "x"))

        assert exc_info.value.operation == "create_directory"
