"""Shared utilities for CLI commands."""

from pathlib import Path

import click

from wikireader.archive.index import Index
from wikireader.utils.config import Config

index_path_option = click.option(
    "--index-path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Index text file (default: $WIKIREADER_INDEX_PATH)",
)
archive_path_option = click.option(
    "--archive-path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Multistream .xml.bz2 archive (default: $WIKIREADER_ARCHIVE_PATH)",
)
workers_option = click.option(
    "--workers",
    type=click.IntRange(min=1),
    help="Threads used to load and scan the index (default: $WIKIREADER_INDEX_WORKERS)",
)


def resolve_index_path(config: Config, index_path: Path | None) -> Path:
    """Return the option value, falling back to the configuration.

    Raises:
        ConfigurationError: If neither is set
    """
    if index_path is not None:
        return index_path
    return config.require_index_path()


def resolve_archive_path(config: Config, archive_path: Path | None) -> Path:
    if archive_path is not None:
        return archive_path
    return config.require_archive_path()


def load_index(index_path: Path, workers: int | None) -> Index:
    """Load the index, reporting its size on stderr."""
    click.echo(f"Loading index from: {index_path}", err=True)
    index = Index.from_file(index_path, workers=workers)
    click.echo(f"Loaded {index.size():,} articles from index", err=True)
    return index
