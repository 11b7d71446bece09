"""Link graph construction from loaded notes."""

import logging
import posixpath
import re
from typing import Dict, Iterable, Optional, Set
from urllib.parse import unquote

from note_indexer.core.models import LinkGraph, Note

logger = logging.getLogger(__name__)


class LinkGraphBuilder:
    """Resolves note references into a directed graph of note identifiers.

    Only relative links to files with the note extension count as
    references. External URLs, mail links and pure anchors are ignored.
    """

    # http:, https:, mailto:, ftp: ... (but not Windows drive letters)
    SCHEME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]+:')

    def __init__(self, note_extension: str = ".md"):
        self.note_extension = note_extension

    def resolve(self, note: Note, raw_target: str) -> Optional[str]:
        """Resolve a raw link target to a note identifier.

        Args:
            note: The referencing note
            raw_target: Target exactly as written in the link

        Returns:
            Normalized identifier, or None if the target is not a note reference
        """
        target = raw_target.strip()
        if not target or target.startswith('#') or target.startswith('//'):
            return None
        if self.SCHEME_PATTERN.match(target):
            return None

        target = target.split('#', 1)[0].split('?', 1)[0]
        target = unquote(target).replace('\\', '/')
        if not target.endswith(self.note_extension):
            return None

        if target.startswith('/'):
            joined = target.lstrip('/')
        else:
            joined = posixpath.join(note.directory, target)

        return posixpath.normpath(joined)

    def build(self, notes: Iterable[Note]) -> LinkGraph:
        """Build the link graph.

        Duplicate references produce a single edge; self-references are kept.
        """
        notes = list(notes)
        note_ids = frozenset(note.identifier for note in notes)
        outgoing: Dict[str, Set[str]] = {}
        incoming: Dict[str, Set[str]] = {}

        for note in notes:
            targets = outgoing.setdefault(note.identifier, set())
            for raw_target in note.references:
                resolved = self.resolve(note, raw_target)
                if resolved is None:
                    continue
                targets.add(resolved)
                incoming.setdefault(resolved, set()).add(note.identifier)

        graph = LinkGraph(
            outgoing={src: frozenset(dst) for src, dst in outgoing.items()},
            incoming={dst: frozenset(src) for dst, src in incoming.items()},
            note_ids=note_ids,
        )
        logger.info("Built link graph: %d notes, %d links", len(note_ids), graph.edge_count)
        return graph
