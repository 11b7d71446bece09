"""Indexer pipeline: discovery, graph building, checking and rendering."""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from note_indexer.core.checker import ConsistencyChecker
from note_indexer.core.discovery import DocumentStore
from note_indexer.core.graph import LinkGraphBuilder
from note_indexer.core.models import ConfigError, Issue, LinkGraph, Note, NoteError
from note_indexer.core.renderer import IndexRenderer

logger = logging.getLogger(__name__)

# Config file keys accepted in addition to the field names
CONFIG_ALIASES = {
    'rootNoteId': 'root_note_id',
    'noteExtension': 'note_extension',
    'maxWorkers': 'max_workers',
    'readTimeout': 'read_timeout',
}


@dataclass
class IndexerConfig:
    """Configuration for an indexing run."""
    root: Path
    root_note_id: Optional[str] = "README.md"
    note_extension: str = ".md"
    output: Optional[Path] = None
    max_workers: Optional[int] = None
    read_timeout: Optional[float] = 5.0
    title: str = "Note Index"

    def __post_init__(self):
        self.root = Path(self.root)
        if self.output is not None:
            self.output = Path(self.output)

        extension = str(self.note_extension or "").strip()
        if extension in ("", "."):
            raise ConfigError("note_extension must not be empty")
        if not extension.startswith('.'):
            extension = f".{extension}"
        self.note_extension = extension

        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError(f"max_workers must be positive, got {self.max_workers}")
        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ConfigError(f"read_timeout must be positive, got {self.read_timeout}")


def load_config(config_path: Union[str, Path], **overrides: Any) -> IndexerConfig:
    """Load an IndexerConfig from a YAML file.

    Args:
        config_path: Path to the YAML config file
        **overrides: Values that take precedence over the file (None is ignored)

    Returns:
        IndexerConfig

    Raises:
        ConfigError: If the file cannot be read, is not a mapping, has
            unknown keys, or lacks a root directory
    """
    config_path = Path(config_path)
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    known = {f.name for f in fields(IndexerConfig)}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        name = CONFIG_ALIASES.get(key, key)
        if name not in known:
            raise ConfigError(f"Unknown config key: {key}")
        values[name] = value

    # Relative paths in the file are relative to the file itself
    for key in ('root', 'output'):
        if values.get(key) is not None:
            path = Path(values[key]).expanduser()
            if not path.is_absolute():
                path = config_path.parent / path
            values[key] = path

    values.update({k: v for k, v in overrides.items() if v is not None})

    if values.get('root') is None:
        raise ConfigError("No root directory configured")

    try:
        return IndexerConfig(**values)
    except TypeError as e:
        raise ConfigError(f"Invalid config: {e}") from e


@dataclass
class IndexResult:
    """Everything produced by one indexing run."""
    notes: List[Note] = field(default_factory=list)
    graph: LinkGraph = field(default_factory=LinkGraph)
    issues: List[Issue] = field(default_factory=list)
    errors: List[NoteError] = field(default_factory=list)
    report: str = ""


class Indexer:
    """Runs DocumentStore -> LinkGraphBuilder -> ConsistencyChecker -> IndexRenderer."""

    def __init__(self, config: IndexerConfig):
        self.config = config
        self.store = DocumentStore(
            config.root,
            note_extension=config.note_extension,
            max_workers=config.max_workers,
            read_timeout=config.read_timeout,
            exclude=[config.output] if config.output is not None else None,
        )
        self.builder = LinkGraphBuilder(note_extension=config.note_extension)
        self.checker = ConsistencyChecker(root_note_id=config.root_note_id)
        self.renderer = IndexRenderer(title=config.title)

    def run(self) -> IndexResult:
        """Index the root directory.

        Raises:
            FatalError: If the root directory cannot be read
        """
        logger.info("Indexing %s", self.config.root)
        notes = self.store.discover_all()
        errors = list(self.store.errors)
        graph = self.builder.build(notes)
        issues = self.checker.check(notes, graph, errors)
        report = self.renderer.render(notes, graph, issues)
        return IndexResult(
            notes=notes, graph=graph, issues=issues, errors=errors, report=report
        )

    def write_report(self, result: IndexResult) -> Optional[Path]:
        """Write the report to the configured output file.

        Returns:
            The path written, or None when no output file is configured
        """
        output = self.config.output
        if output is None:
            return None
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.report, encoding='utf-8')
        logger.info("Wrote index to %s", output)
        return output


def create_indexer_from_config(config_path: Union[str, Path], **overrides: Any) -> Indexer:
    """Create an Indexer from a YAML config file."""
    return Indexer(load_config(config_path, **overrides))
