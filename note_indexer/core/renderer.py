"""Markdown index rendering."""

from typing import Dict, List, Optional, Sequence
from urllib.parse import quote

import inflection

from note_indexer.core.models import (
    DanglingLink,
    DuplicateTitle,
    Issue,
    IssueKind,
    LinkGraph,
    Note,
    OrphanNote,
    UnreadableNote,
)

UNTAGGED = "Untagged"

ISSUE_HEADINGS = {
    IssueKind.DANGLING_LINK: "Dangling links",
    IssueKind.DUPLICATE_TITLE: "Duplicate titles",
    IssueKind.ORPHAN_NOTE: "Orphan notes",
    IssueKind.UNREADABLE_NOTE: "Unreadable files",
}


def group_by_tag(notes: Sequence[Note]) -> Dict[Optional[str], List[Note]]:
    """Group notes by tag.

    Tags are ordered case-insensitively; notes without tags are collected
    under the None key, which comes last. A note with several tags appears
    in each of their groups. Notes within a group are sorted by identifier.
    """
    groups: Dict[str, List[Note]] = {}
    untagged: List[Note] = []
    for note in notes:
        if not note.tags:
            untagged.append(note)
        for tag in note.tags:
            groups.setdefault(tag, []).append(note)

    ordered: Dict[Optional[str], List[Note]] = {}
    for tag in sorted(groups, key=lambda t: (t.casefold(), t)):
        ordered[tag] = sorted(groups[tag], key=lambda note: note.identifier)
    if untagged:
        ordered[None] = sorted(untagged, key=lambda note: note.identifier)
    return ordered


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _escape(text: str) -> str:
    return text.replace('\\', '\\\\').replace('[', '\\[').replace(']', '\\]')


class IndexRenderer:
    """Renders notes, their backlink counts and issues as one Markdown document.

    Rendering is pure: identical inputs always give identical output.
    """

    def __init__(self, title: str = "Note Index"):
        self.title = title

    def render(
        self,
        notes: Sequence[Note],
        graph: LinkGraph,
        issues: Sequence[Issue],
    ) -> str:
        """Render the index.

        Args:
            notes: All loaded notes
            graph: Link graph built from the notes
            issues: Issues in report order

        Returns:
            The Markdown document, ending with a single newline
        """
        groups = group_by_tag(notes)
        headings = [self._group_heading(tag) for tag in groups]
        anchors = self._anchors(headings)

        lines = [f"# {self.title}", ""]
        lines.append(
            f"{_plural(len(notes), 'note')}, {_plural(graph.edge_count, 'link')}, "
            f"{_plural(len(issues), 'issue')}."
        )
        lines.append("")

        if groups:
            lines.extend(["## Contents", ""])
            for (tag, members), heading, anchor in zip(groups.items(), headings, anchors):
                lines.append(f"- [{_escape(heading)}](#{anchor}) ({len(members)})")
            lines.append("")

        for (tag, members), heading in zip(groups.items(), headings):
            lines.extend([f"## {heading}", ""])
            lines.extend(self._render_entry(note, graph) for note in members)
            lines.append("")

        lines.extend(self._render_issues(issues))
        return "\n".join(lines).rstrip("\n") + "\n"

    def _group_heading(self, tag: Optional[str]) -> str:
        if tag is None:
            return UNTAGGED
        return tag

    def _anchors(self, headings: List[str]) -> List[str]:
        """GitHub-style anchors; repeats get a numeric suffix."""
        seen: Dict[str, int] = {}
        anchors = []
        for heading in headings:
            base = inflection.parameterize(heading) or "section"
            count = seen.get(base, 0)
            seen[base] = count + 1
            anchors.append(base if count == 0 else f"{base}-{count}")
        return anchors

    def _render_entry(self, note: Note, graph: LinkGraph) -> str:
        count = graph.backlink_count(note.identifier)
        href = quote(note.identifier, safe="/")
        return (
            f"- [{_escape(note.title)}]({href}) `{note.identifier}` "
            f"({_plural(count, 'backlink')})"
        )

    def _render_issues(self, issues: Sequence[Issue]) -> List[str]:
        lines = ["## Issues", ""]
        if not issues:
            lines.append("No issues found.")
            return lines

        for kind in IssueKind:
            of_kind = [issue for issue in issues if issue.kind is kind]
            if not of_kind:
                continue
            lines.extend([f"### {ISSUE_HEADINGS[kind]} ({len(of_kind)})", ""])
            lines.extend(self._render_issue(issue) for issue in of_kind)
            lines.append("")
        return lines

    def _render_issue(self, issue: Issue) -> str:
        if isinstance(issue, DanglingLink):
            return f"- `{issue.source}` -> `{issue.target}`"
        if isinstance(issue, DuplicateTitle):
            notes = ", ".join(f"`{note}`" for note in issue.notes)
            return f'- "{issue.title}": {notes}'
        if isinstance(issue, OrphanNote):
            return f"- `{issue.note}`"
        if isinstance(issue, UnreadableNote):
            return f"- `{issue.note}`: {issue.reason}"
        raise TypeError(f"Unknown issue type: {type(issue).__name__}")
