"""Text parsing helpers: front-matter, titles, tags and link targets."""

import re
from pathlib import Path, PurePosixPath
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

import yaml

from note_indexer.core.models import Note


# Front-matter block: leading `---` line up to the next `---` line
FRONTMATTER_PATTERN = re.compile(
    r'\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)', re.DOTALL | re.MULTILINE
)

# Level-one ATX heading; closing hashes must be preceded by whitespace
HEADING_PATTERN = re.compile(r'^ {0,3}#[ \t]+(.*?)(?:[ \t]+#+)?[ \t]*$')

# Opening/closing line of a fenced code block
FENCE_PATTERN = re.compile(r'^ {0,3}(`{3,}|~{3,})')

INLINE_CODE_PATTERN = re.compile(r'(`+)(?!`).*?(?<!`)\1(?!`)')

# Inline links and images: [text](target "optional title")
INLINE_LINK_PATTERN = re.compile(
    r'\[(?:[^\[\]\n]|\[[^\[\]\n]*\])*\]'
    r'\(\s*(<[^>\n]+>|[^\s)]+)(?:\s+["\'(][^)\n]*)?\s*\)'
)

# Reference definitions: [label]: target
REFERENCE_DEF_PATTERN = re.compile(
    r'^ {0,3}\[([^\]\n]+)\]:[ \t]*(<[^>\n]+>|\S+)', re.MULTILINE
)


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split YAML front-matter from the note body.

    Args:
        text: Full file content

    Returns:
        Tuple of (frontmatter dict, body). The dict is empty when there is
        no front-matter, the block is unterminated, or it is not a mapping.

    Raises:
        yaml.YAMLError: If the front-matter block is not valid YAML
    """
    if text.startswith('\ufeff'):
        text = text[1:]
    match = FRONTMATTER_PATTERN.match(text)
    if match is None:
        return {}, text

    frontmatter = yaml.safe_load(match.group(1))
    body = text[match.end():]
    if not isinstance(frontmatter, dict):
        return {}, body
    return frontmatter, body


def blank_fenced_code(text: str) -> str:
    """Replace the lines of fenced code blocks with empty lines."""
    lines = text.split('\n')
    fence: Optional[str] = None

    for i, line in enumerate(lines):
        match = FENCE_PATTERN.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                lines[i] = ''
            continue

        lines[i] = ''
        if (
            match
            and match.group(1)[0] == fence[0]
            and len(match.group(1)) >= len(fence)
            and not line.strip().lstrip(fence[0])
        ):
            fence = None

    return '\n'.join(lines)


def extract_title(frontmatter: Dict[str, Any], body: str, fallback: str) -> str:
    """Pick a note title.

    Front-matter `title` wins, then the first level-one heading outside
    fenced code, then the fallback (normally the file stem).
    """
    title = frontmatter.get('title')
    if title is not None and str(title).strip():
        return str(title).strip()

    for line in blank_fenced_code(body).split('\n'):
        match = HEADING_PATTERN.match(line)
        if match and match.group(1).strip():
            return match.group(1).strip()

    return fallback


def extract_tags(frontmatter: Dict[str, Any]) -> FrozenSet[str]:
    """Extract tags from frontmatter.

    Handles both list and string formats; a string may hold several tags
    separated by commas or whitespace. Leading `#` is dropped.
    """
    tag_data = frontmatter.get('tags', frontmatter.get('tag'))
    if tag_data is None:
        return frozenset()

    if isinstance(tag_data, (list, tuple, set)):
        raw = [str(tag) for tag in tag_data if tag is not None]
    else:
        raw = re.split(r'[,\s]+', str(tag_data))

    tags = set()
    for tag in raw:
        tag = tag.strip().lstrip('#').strip()
        if tag:
            tags.add(tag)
    return frozenset(tags)


def extract_link_targets(body: str) -> FrozenSet[str]:
    """Collect raw link targets from Markdown body text.

    Inline links, images and reference definitions are recognised. Code
    blocks and inline code spans are ignored.
    """
    text = INLINE_CODE_PATTERN.sub('', blank_fenced_code(body))
    targets: List[str] = []

    for match in INLINE_LINK_PATTERN.finditer(text):
        targets.append(match.group(1))

    for match in REFERENCE_DEF_PATTERN.finditer(text):
        # [^1]: is a footnote, not a link
        if match.group(1).startswith('^'):
            continue
        targets.append(match.group(2))

    cleaned = set()
    for target in targets:
        if target.startswith('<') and target.endswith('>'):
            target = target[1:-1]
        target = target.strip()
        if target:
            cleaned.add(target)
    return frozenset(cleaned)


def normalize_title(title: str) -> str:
    """Case-insensitive, whitespace-collapsed title key."""
    return ' '.join(title.split()).casefold()


def parse_note(identifier: str, text: str, path: Optional[Path] = None) -> Note:
    """Build a Note from file content.

    Raises:
        yaml.YAMLError: If the front-matter is invalid
    """
    frontmatter, body = split_frontmatter(text)
    fallback = PurePosixPath(identifier).stem

    return Note(
        identifier=identifier,
        title=extract_title(frontmatter, body, fallback),
        body=body,
        references=extract_link_targets(body),
        tags=extract_tags(frontmatter),
        path=path,
    )
