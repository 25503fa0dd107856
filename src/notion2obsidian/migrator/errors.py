"""Errors raised while rendering Notion content to markdown."""

from notion2obsidian.notion_api.errors import MigrationError


class RenderError(MigrationError):
    """Base exception for rendering errors."""
    pass


class UnsupportedBlockError(RenderError):
    """Raised for a block type the renderer has no rule for."""

    def __init__(self, block_type: str, block_id: str):
        super().__init__(f"Block type '{block_type}' is not supported (block {block_id})")
        self.block_type = block_type
        self.block_id = block_id


class UnsupportedPropertyError(RenderError):
    """Raised for a page property type the frontmatter builder has no rule for."""

    def __init__(self, property_type: str, property_name: str):
        super().__init__(
            f"Property type '{property_type}' is not supported (property '{property_name}')"
        )
        self.property_type = property_type
        self.property_name = property_name
