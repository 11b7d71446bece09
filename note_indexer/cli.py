"""Command-line entry point for Note Indexer."""

from pathlib import Path
from typing import Optional

import typer

from note_indexer.core.indexer import Indexer, IndexerConfig, load_config
from note_indexer.core.models import ConfigError, FatalError
from note_indexer.logging_setup import setup_logging

EXIT_FATAL = 1
EXIT_CONFIG = 2

app = typer.Typer(add_completion=False)


@app.command()
def index(
    root: Optional[Path] = typer.Argument(None, help="Directory of notes to index."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file."),
    root_note: Optional[str] = typer.Option(
        None, "--root-note", help="Identifier of the note exempt from orphan checks."
    ),
    extension: Optional[str] = typer.Option(
        None, "--ext", help="File suffix considered a note (default: .md)."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the index here instead of stdout."
    ),
    workers: Optional[int] = typer.Option(None, "--workers", help="Parallel file readers."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-file read timeout in seconds."
    ),
    title: Optional[str] = typer.Option(None, "--title", help="Heading of the index."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="-v for info, -vv for debug."),
) -> None:
    """Index a tree of Markdown notes and report broken cross-references."""
    setup_logging(verbose)

    overrides = dict(
        root=root,
        root_note_id=root_note,
        note_extension=extension,
        output=output,
        max_workers=workers,
        read_timeout=timeout,
        title=title,
    )
    try:
        if config is not None:
            indexer_config = load_config(config, **overrides)
        elif root is None:
            raise ConfigError("Provide a ROOT directory or --config")
        else:
            indexer_config = IndexerConfig(**{k: v for k, v in overrides.items() if v is not None})
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_CONFIG)

    indexer = Indexer(indexer_config)
    try:
        result = indexer.run()
    except FatalError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_FATAL)

    try:
        written = indexer.write_report(result)
    except OSError as e:
        typer.echo(f"Error: cannot write {indexer_config.output}: {e}", err=True)
        raise typer.Exit(code=EXIT_FATAL)

    if written is None:
        typer.echo(result.report, nl=False)
    else:
        typer.echo(f"Wrote index to {written} ({len(result.issues)} issues)", err=True)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
