"""Data models for Note Indexer."""

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Dict, FrozenSet, List, Optional, Tuple, Union


class IndexerError(Exception):
    """Base class for all Note Indexer errors."""


class FatalError(IndexerError):
    """The root directory is missing or unreadable; the run cannot continue."""


class ConfigError(IndexerError):
    """Invalid indexer configuration."""


class NotReadableError(IndexerError):
    """A single note file could not be read or parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class Note:
    """A single Markdown file, loaded once.

    `references` holds the raw link targets found in the body. They are
    resolved into note identifiers by the graph builder.
    """
    identifier: str
    title: str
    body: str = ""
    references: FrozenSet[str] = frozenset()
    tags: FrozenSet[str] = frozenset()
    path: Optional[Path] = None

    @property
    def directory(self) -> str:
        """POSIX directory of the identifier, empty for notes at the root."""
        head, _, _ = self.identifier.rpartition("/")
        return head


@dataclass(frozen=True)
class NoteError:
    """A file that could not be loaded."""
    path: Path
    identifier: str
    error: str


@dataclass(frozen=True)
class LinkGraph:
    """Directed graph of references between notes.

    outgoing[src] = {dst, ...} where dst may be an unknown identifier.
    incoming[dst] = {src, ...} is the exact reverse, self-edges included.
    """
    outgoing: Dict[str, FrozenSet[str]] = field(default_factory=dict)
    incoming: Dict[str, FrozenSet[str]] = field(default_factory=dict)
    note_ids: FrozenSet[str] = frozenset()

    def targets(self, note_id: str) -> List[str]:
        return sorted(self.outgoing.get(note_id, frozenset()))

    def backlinks(self, note_id: str, include_self: bool = False) -> List[str]:
        """Return sorted identifiers of notes linking to note_id."""
        sources = self.incoming.get(note_id, frozenset())
        if not include_self:
            sources = sources - {note_id}
        return sorted(sources)

    def backlink_count(self, note_id: str) -> int:
        """Number of other notes linking to note_id."""
        return len(self.backlinks(note_id))

    def edges(self) -> List[Tuple[str, str]]:
        return sorted(
            (src, dst) for src, targets in self.outgoing.items() for dst in targets
        )

    def dangling_edges(self) -> List[Tuple[str, str]]:
        return [(src, dst) for src, dst in self.edges() if dst not in self.note_ids]

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.outgoing.values())


class IssueKind(enum.Enum):
    """Issue kinds, declared in report order."""
    DANGLING_LINK = "dangling-link"
    DUPLICATE_TITLE = "duplicate-title"
    ORPHAN_NOTE = "orphan-note"
    UNREADABLE_NOTE = "unreadable-note"

    @property
    def order(self) -> int:
        return list(IssueKind).index(self)


@dataclass(frozen=True)
class DanglingLink:
    """A reference whose target is not a known note."""
    kind: ClassVar[IssueKind] = IssueKind.DANGLING_LINK
    source: str
    target: str

    @property
    def sort_key(self) -> Tuple[str, ...]:
        return (self.source, self.target)


@dataclass(frozen=True)
class DuplicateTitle:
    """Two or more notes sharing one normalized title."""
    kind: ClassVar[IssueKind] = IssueKind.DUPLICATE_TITLE
    title: str
    notes: Tuple[str, ...]

    @property
    def sort_key(self) -> Tuple[str, ...]:
        return self.notes


@dataclass(frozen=True)
class OrphanNote:
    """A note no other note links to."""
    kind: ClassVar[IssueKind] = IssueKind.ORPHAN_NOTE
    note: str

    @property
    def sort_key(self) -> Tuple[str, ...]:
        return (self.note,)


@dataclass(frozen=True)
class UnreadableNote:
    """A note file that could not be loaded."""
    kind: ClassVar[IssueKind] = IssueKind.UNREADABLE_NOTE
    note: str
    reason: str

    @property
    def sort_key(self) -> Tuple[str, ...]:
        return (self.note,)


Issue = Union[DanglingLink, DuplicateTitle, OrphanNote, UnreadableNote]


def issue_sort_key(issue: Issue) -> Tuple[int, Tuple[str, ...]]:
    """Stable ordering: issue kind first, then identifiers."""
    return (issue.kind.order, issue.sort_key)
