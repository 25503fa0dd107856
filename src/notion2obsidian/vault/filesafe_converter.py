"""Filesafe title conversion for vault notes.

Obsidian resolves ``[[links]]`` by note name, so the sanitized title is used
both as the filename and as the link target.
"""

import re

# Invalid on Windows or special inside Obsidian links; "/" is kept on purpose
_SPECIAL_CHARS = re.compile(r'[\\:*?"<>|]')


class FilesafeConverter:
    """Converts Notion page titles to names that are safe as vault paths.

    Conversion rules:
    - Special characters (\\, :, *, ?, ", <, >, |) → hyphens (-)
    - Runs of hyphens introduced by the replacement → collapsed to one
    - Leading/trailing whitespace → trimmed
    - "/" is preserved so composed titles ("2021/05/18Hello") create folders
    - Empty, "." and ".." path segments → dropped
    - Case is preserved

    Examples:
        - "Meeting: Q3" → "Meeting- Q3"
        - "What? Why*" → "What- Why-"
        - "Projects/Roadmap" → "Projects/Roadmap"
    """

    @staticmethod
    def sanitize_title(title: str) -> str:
        """Convert a Notion page title to a filesafe vault name.

        Args:
            title: The Notion page title (may contain "/" separators)

        Returns:
            The sanitized name, without extension

        Examples:
            >>> FilesafeConverter.sanitize_title("Meeting: Q3")
            'Meeting- Q3'
        """
        sanitized = _SPECIAL_CHARS.sub('-', title)
        sanitized = re.sub(r'-{2,}', '-', sanitized)
        segments = (segment.strip() for segment in sanitized.split('/'))
        # Empty and dot segments would leave the vault folder
        return '/'.join(s for s in segments if s and s not in ('.', '..'))

    @staticmethod
    def title_to_filename(title: str) -> str:
        """Sanitize a title and append the markdown extension.

        Examples:
            >>> FilesafeConverter.title_to_filename("Hello")
            'Hello.md'
        """
        return f"{FilesafeConverter.sanitize_title(title)}.md"
