"""Data models for the page graph built during a migration.

All models use dataclasses. PageNodes reference each other by id only; the
CrossReferenceCache owns every node and is used to look ids up.
"""

from dataclasses import dataclass, field
from enum import Enum
from io import StringIO
from typing import List, Optional


@dataclass(frozen=True)
class ImageRef:
    """A Notion-hosted asset to download after rendering.

    Attributes:
        url: Signed download URL
        name: Path relative to the vault's Images folder ("Page/blockid.png")
    """
    url: str
    name: str


@dataclass
class PageNode:
    """One Notion page being migrated to one vault note.

    Attributes:
        page_id: Normalized Notion page id
        title: Sanitized note title, also the link target ("Db/Row" when nested)
        path: Destination file path
        parent_id: Id of the page that first linked to this one (display only)
        children: Ids of pages reached through references while rendering
        images: Assets registered while rendering, in document order
        cover: Cover image, if the page has one
        failed: Rendering raised; the note must not be written
        flushed: The note has been written
    """
    page_id: str
    title: str
    path: str
    parent_id: Optional[str] = None
    children: List[str] = field(default_factory=list)
    images: List[ImageRef] = field(default_factory=list)
    cover: Optional[ImageRef] = None
    failed: bool = False
    flushed: bool = False
    _buffer: StringIO = field(default_factory=StringIO, repr=False, compare=False)

    def write(self, text: str) -> None:
        """Append text to the note's content."""
        self._buffer.write(text)

    @property
    def content(self) -> str:
        """The note's content rendered so far."""
        return self._buffer.getvalue()

    def add_child(self, page_id: str) -> None:
        """Record an edge to a referenced page, once, never to itself."""
        if page_id != self.page_id and page_id not in self.children:
            self.children.append(page_id)


class EntryState(Enum):
    """Lifecycle of a page id in the CrossReferenceCache."""
    ABSENT = "absent"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


@dataclass
class CacheEntry:
    """State of one page id.

    A resolved entry without a node is the Untitled sentinel: the page is
    intentionally not migrated and references to it render as nothing. A
    page that could not be fetched is cached the same way but keeps the
    title of the first reference, which later references link to.

    Attributes:
        state: IN_PROGRESS while the first resolution runs, then RESOLVED
        node: The page's node once resolved (None for the sentinel)
        owner: Thread id of the job resolving the page while in progress
        fallback_title: Link title of an unreachable page ("" for none)
    """
    state: EntryState
    node: Optional[PageNode] = None
    owner: Optional[int] = None
    fallback_title: str = ""

    @property
    def is_sentinel(self) -> bool:
        return self.state is EntryState.RESOLVED and self.node is None


@dataclass(frozen=True)
class StyledRun:
    """One rendered rich-text run and the delimiters wrapping it.

    Attributes:
        text: Rendered body including delimiters ("**bold**")
        style: Opening delimiters ("**", "***`", "" when unstyled)
        bold: Run is bold
        italic: Run is italic
    """
    text: str
    style: str = ""
    bold: bool = False
    italic: bool = False

    @property
    def is_styled(self) -> bool:
        return bool(self.style)
