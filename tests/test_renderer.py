"""Tests for IndexRenderer."""

import pytest

from note_indexer.core.checker import ConsistencyChecker
from note_indexer.core.graph import LinkGraphBuilder
from note_indexer.core.models import UnreadableNote
from note_indexer.core.parsing import parse_note
from note_indexer.core.renderer import IndexRenderer, group_by_tag


EXAMPLE_REPORT = """\
# Note Index

3 notes, 2 links, 3 issues.

## Contents

- [js](#js) (1)
- [Untagged](#untagged) (2)

## js

- [Same Title](b.md) `b.md` (1 backlink)

## Untagged

- [Start](a.md) `a.md` (0 backlinks)
- [Same Title](c.md) `c.md` (0 backlinks)

## Issues

### Dangling links (1)

- `a.md` -> `missing.md`

### Duplicate titles (1)

- "Same Title": `b.md`, `c.md`

### Orphan notes (1)

- `c.md`
"""


@pytest.fixture
def example():
    notes = [
        parse_note("a.md", "# Start\n\n[b](b.md) [missing](missing.md)\n"),
        parse_note("b.md", "---\ntags: [js]\n---\n# Same Title\n"),
        parse_note("c.md", "# Same Title\n"),
    ]
    graph = LinkGraphBuilder().build(notes)
    issues = ConsistencyChecker(root_note_id="a.md").check(notes, graph)
    return notes, graph, issues


class TestGroupByTag:
    """Tests for group_by_tag."""

    def test_untagged_last(self, example):
        notes, _, _ = example
        groups = group_by_tag(notes)

        assert list(groups) == ["js", None]
        assert [n.identifier for n in groups["js"]] == ["b.md"]
        assert [n.identifier for n in groups[None]] == ["a.md", "c.md"]

    def test_note_in_every_tag_group(self):
        notes = [
            parse_note("z.md", "---\ntags: [Crypto, js]\n---\n"),
            parse_note("a.md", "---\ntags: [js]\n---\n"),
        ]
        groups = group_by_tag(notes)

        assert list(groups) == ["Crypto", "js"]
        assert [n.identifier for n in groups["js"]] == ["a.md", "z.md"]
        assert [n.identifier for n in groups["Crypto"]] == ["z.md"]

    def test_tags_sorted_case_insensitively(self):
        notes = [
            parse_note("a.md", "---\ntags: [beta, Alpha, gamma]\n---\n"),
        ]
        assert list(group_by_tag(notes)) == ["Alpha", "beta", "gamma"]

    def test_no_untagged_group_when_all_tagged(self):
        notes = [parse_note("a.md", "---\ntags: js\n---\n")]
        assert None not in group_by_tag(notes)


class TestIndexRenderer:
    """Tests for IndexRenderer."""

    def test_example_report(self, example):
        assert IndexRenderer().render(*example) == EXAMPLE_REPORT

    def test_deterministic(self, example):
        notes, graph, issues = example
        renderer = IndexRenderer()
        first = renderer.render(notes, graph, issues)
        second = renderer.render(list(reversed(notes)), graph, issues)
        assert first == second

    def test_custom_title(self, example):
        report = IndexRenderer(title="Learning Notes").render(*example)
        assert report.startswith("# Learning Notes\n")

    def test_no_issues(self):
        notes = [parse_note("README.md", "# Home\n")]
        graph = LinkGraphBuilder().build(notes)
        report = IndexRenderer().render(notes, graph, [])

        assert "## Issues\n\nNo issues found.\n" in report
        assert report.endswith("No issues found.\n")

    def test_empty(self):
        report = IndexRenderer().render([], LinkGraphBuilder().build([]), [])
        assert report == "# Note Index\n\n0 notes, 0 links, 0 issues.\n\n## Issues\n\nNo issues found.\n"

    def test_unreadable_issues_rendered(self):
        notes = [parse_note("README.md", "# Home\n")]
        graph = LinkGraphBuilder().build(notes)
        issues = [UnreadableNote("bad.md", "not valid UTF-8")]
        report = IndexRenderer().render(notes, graph, issues)

        assert "### Unreadable files (1)\n\n- `bad.md`: not valid UTF-8\n" in report

    def test_heading_is_tag_verbatim(self):
        notes = [parse_note("a.md", "---\ntags: [public key crypto]\n---\n# RSA\n")]
        graph = LinkGraphBuilder().build(notes)
        report = IndexRenderer().render(notes, graph, [])

        assert "- [public key crypto](#public-key-crypto) (1)" in report
        assert "## public key crypto\n" in report

    def test_tags_differing_in_case_stay_distinct(self):
        notes = [
            parse_note("a.md", "---\ntags: [api]\n---\n# Lower\n"),
            parse_note("b.md", "---\ntags: [API, JavaScript]\n---\n# Upper\n"),
        ]
        graph = LinkGraphBuilder().build(notes)
        report = IndexRenderer().render(notes, graph, [])

        assert (
            "- [API](#api) (1)\n"
            "- [api](#api-1) (1)\n"
            "- [JavaScript](#javascript) (1)\n"
        ) in report
        assert "## API\n\n- [Upper](b.md)" in report
        assert "## api\n\n- [Lower](a.md)" in report
        assert "## JavaScript\n" in report

    def test_colliding_anchors_get_suffix(self):
        notes = [
            parse_note("a.md", "---\ntags: [untagged]\n---\n"),
            parse_note("b.md", ""),
        ]
        graph = LinkGraphBuilder().build(notes)
        report = IndexRenderer().render(notes, graph, [])

        assert "- [untagged](#untagged) (1)\n- [Untagged](#untagged-1) (1)" in report

    def test_entry_escapes_title_and_quotes_path(self):
        notes = [parse_note("js/event loop.md", "# Arrays [and] Maps\n")]
        graph = LinkGraphBuilder().build(notes)
        report = IndexRenderer().render(notes, graph, [])

        assert "- [Arrays \\[and\\] Maps](js/event%20loop.md) `js/event loop.md` (0 backlinks)" in report

    def test_backlink_count_excludes_self(self):
        notes = [
            parse_note("README.md", "[a](a.md)"),
            parse_note("a.md", "[me](a.md)"),
        ]
        graph = LinkGraphBuilder().build(notes)
        report = IndexRenderer().render(notes, graph, [])

        assert "`a.md` (1 backlink)" in report
