"""Command-line interface for notion2obsidian."""
