"""Migrate a Notion workspace (a database or a page tree) into an Obsidian vault."""

__version__ = "0.1.0"
