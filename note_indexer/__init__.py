"""
Note Indexer - Catalog a tree of Markdown notes and check their cross-references

A small pipeline for keeping a growing set of topic notes navigable:
- Note discovery with YAML front-matter
- Link graph with backlinks
- Dangling link, orphan note and duplicate title checks
- A Markdown index grouped by tag
"""

from note_indexer.core.models import ConfigError, FatalError, LinkGraph, Note, NoteError, NotReadableError
from note_indexer.core.discovery import DocumentStore
from note_indexer.core.graph import LinkGraphBuilder
from note_indexer.core.checker import ConsistencyChecker
from note_indexer.core.renderer import IndexRenderer
from note_indexer.core.indexer import Indexer, IndexerConfig

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "FatalError",
    "LinkGraph",
    "Note",
    "NoteError",
    "NotReadableError",
    "DocumentStore",
    "LinkGraphBuilder",
    "ConsistencyChecker",
    "IndexRenderer",
    "Indexer",
    "IndexerConfig",
]
