"""Integration tests running whole migrations against an in-memory Notion."""
