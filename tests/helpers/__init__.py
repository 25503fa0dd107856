"""Test helper modules for notion2obsidian testing.

- fake_notion: In-memory APIWrapper replacement with call counters
"""

from .fake_notion import FakeNotionAPI

__all__ = [
    'FakeNotionAPI',
]
