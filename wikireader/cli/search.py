"""CLI command for prefix search over the index."""

from pathlib import Path

import click
import structlog

from wikireader.cli.utils import (
    index_path_option,
    load_index,
    resolve_index_path,
    workers_option,
)
from wikireader.utils.config import Config
from wikireader.utils.exceptions import WikiReaderError

logger = structlog.get_logger(__name__)


@click.command()
@click.argument("query")
@index_path_option
@workers_option
@click.option("--ids", is_flag=True, help="Show block offset and page id for each title")
@click.pass_obj
def search(
    config: Config, query: str, index_path: Path | None, workers: int | None, ids: bool
) -> None:
    """List article titles starting with QUERY (case-insensitive, shortest first)."""
    try:
        index = load_index(resolve_index_path(config, index_path), workers or config.index_workers)
        results = index.find_prefix(query)
    except WikiReaderError as e:
        logger.error("search_failed", query=query, error=e.message)
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e

    if not results:
        click.echo(f"No titles start with '{query}'", err=True)
        return

    for entry in results:
        if ids:
            click.echo(f"{entry.title}\t{entry.byte_offset}\t{entry.record_id}")
        else:
            click.echo(entry.title)
