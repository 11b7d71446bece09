"""Core components for Note Indexer."""

from note_indexer.core.models import (
    ConfigError,
    DanglingLink,
    DuplicateTitle,
    FatalError,
    IndexerError,
    Issue,
    IssueKind,
    LinkGraph,
    Note,
    NoteError,
    NotReadableError,
    OrphanNote,
    UnreadableNote,
)
from note_indexer.core.discovery import DocumentStore
from note_indexer.core.graph import LinkGraphBuilder
from note_indexer.core.checker import ConsistencyChecker
from note_indexer.core.renderer import IndexRenderer
from note_indexer.core.indexer import Indexer, IndexerConfig, IndexResult, create_indexer_from_config, load_config

__all__ = [
    "ConfigError",
    "DanglingLink",
    "DuplicateTitle",
    "FatalError",
    "IndexerError",
    "Issue",
    "IssueKind",
    "LinkGraph",
    "Note",
    "NoteError",
    "NotReadableError",
    "OrphanNote",
    "UnreadableNote",
    "DocumentStore",
    "LinkGraphBuilder",
    "ConsistencyChecker",
    "IndexRenderer",
    "Indexer",
    "IndexerConfig",
    "IndexResult",
    "create_indexer_from_config",
    "load_config",
]
