"""CLI command for displaying an article's metadata and raw wikitext."""

from pathlib import Path

import click
import structlog

from wikireader.archive.reader import ArchiveReader
from wikireader.cli.utils import (
    archive_path_option,
    index_path_option,
    load_index,
    resolve_archive_path,
    resolve_index_path,
    workers_option,
)
from wikireader.utils.config import Config
from wikireader.utils.exceptions import ArticleNotFoundError, WikiReaderError

logger = structlog.get_logger(__name__)


@click.command()
@click.argument("title")
@index_path_option
@archive_path_option
@workers_option
@click.option("--no-body", is_flag=True, help="Only show metadata")
@click.pass_obj
def show(
    config: Config,
    title: str,
    index_path: Path | None,
    archive_path: Path | None,
    workers: int | None,
    no_body: bool,
) -> None:
    """Display metadata and raw wikitext of the article titled TITLE."""
    try:
        index = load_index(resolve_index_path(config, index_path), workers or config.index_workers)
        entry = index.find_exact(title)
        if entry is None:
            raise ArticleNotFoundError(f"Article '{title}' not found")

        with ArchiveReader.open(resolve_archive_path(config, archive_path)) as reader:
            article = reader.get_article(entry)

    except WikiReaderError as e:
        logger.error("show_failed", title=title, error=e.message)
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e

    click.echo("-" * 80)
    click.echo(f"  Title: {article.title}")
    click.echo(f"  Page ID: {article.id}")
    click.echo(f"  Block Offset: {entry.byte_offset}")
    click.echo(f"  Last Changed: {article.last_changed_at.isoformat()}")
    click.echo(f"  Last Changed By: {article.last_changed_by}")
    click.echo(f"  Body Length: {len(article.body):,} characters")
    click.echo("-" * 80)
    if not no_body:
        click.echo()
        click.echo(article.body)
