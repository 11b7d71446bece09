"""Consistency checks over the link graph."""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from note_indexer.core.models import (
    DanglingLink,
    DuplicateTitle,
    Issue,
    LinkGraph,
    Note,
    NoteError,
    OrphanNote,
    UnreadableNote,
    issue_sort_key,
)
from note_indexer.core.parsing import normalize_title

logger = logging.getLogger(__name__)

Check = Callable[[Sequence[Note], LinkGraph], List[Issue]]


def find_dangling_links(notes: Sequence[Note], graph: LinkGraph) -> List[Issue]:
    """One DanglingLink per edge whose target is not a known note."""
    return [DanglingLink(source=src, target=dst) for src, dst in graph.dangling_edges()]


def find_orphan_notes(root_note_id: Optional[str] = None) -> Check:
    """Create a check reporting notes that no other note links to.

    Args:
        root_note_id: Identifier of the note exempt from the check
    """
    def check(notes: Sequence[Note], graph: LinkGraph) -> List[Issue]:
        return [
            OrphanNote(note=note.identifier)
            for note in notes
            if note.identifier != root_note_id and graph.backlink_count(note.identifier) == 0
        ]
    return check


def find_duplicate_titles(notes: Sequence[Note], graph: LinkGraph) -> List[Issue]:
    """One DuplicateTitle per normalized title shared by several notes."""
    by_title: Dict[str, List[Note]] = {}
    for note in notes:
        by_title.setdefault(normalize_title(note.title), []).append(note)

    issues: List[Issue] = []
    for group in by_title.values():
        identifiers = sorted({note.identifier for note in group})
        if len(identifiers) < 2:
            continue
        first = min(group, key=lambda note: note.identifier)
        issues.append(DuplicateTitle(title=first.title, notes=tuple(identifiers)))
    return issues


class ConsistencyChecker:
    """Runs independent checks over one immutable snapshot of notes and graph."""

    def __init__(
        self,
        root_note_id: Optional[str] = "README.md",
        checks: Optional[List[Check]] = None,
    ):
        """Initialize ConsistencyChecker.

        Args:
            root_note_id: Note exempt from orphan detection
            checks: Checks to run (default: dangling links, orphans, duplicate titles)
        """
        self.root_note_id = root_note_id
        if checks is None:
            checks = [
                find_dangling_links,
                find_orphan_notes(root_note_id),
                find_duplicate_titles,
            ]
        self.checks = checks

    def check(
        self,
        notes: Sequence[Note],
        graph: LinkGraph,
        errors: Iterable[NoteError] = (),
    ) -> List[Issue]:
        """Run every check and return the issues in report order.

        Args:
            notes: All loaded notes
            graph: Link graph built from the notes
            errors: Files that could not be loaded

        Returns:
            Issues sorted by kind, then identifier
        """
        notes = list(notes)
        if self.root_note_id and self.root_note_id not in graph.note_ids:
            logger.warning("Root note %s not found among loaded notes", self.root_note_id)

        issues: List[Issue] = []
        for check in self.checks:
            issues.extend(check(notes, graph))
        issues.extend(
            UnreadableNote(note=error.identifier, reason=error.error) for error in errors
        )

        issues.sort(key=issue_sort_key)
        logger.info("Consistency check found %d issues", len(issues))
        return issues
