"""CLI command for rendering an article to a standalone HTML page."""

import tempfile
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
from wikireader.web.pages import render_article_page
from wikireader.web.resources import ResourceManager

logger = structlog.get_logger(__name__)


@click.command()
@click.argument("title")
@index_path_option
@archive_path_option
@workers_option
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the page here instead of stdout",
)
@click.option("--open", "open_page", is_flag=True, help="Open the page in the default browser")
@click.pass_obj
def render(
    config: Config,
    title: str,
    index_path: Path | None,
    archive_path: Path | None,
    workers: int | None,
    output: Path | None,
    open_page: bool,
) -> None:
    """Render the article titled TITLE (underscores allowed) to HTML."""
    name = title.replace("_", " ")
    try:
        index = load_index(resolve_index_path(config, index_path), workers or config.index_workers)
        entry = index.find_exact(name)
        if entry is None:
            raise ArticleNotFoundError(f"Article '{name}' not found")

        with ArchiveReader.open(resolve_archive_path(config, archive_path)) as reader:
            article = reader.get_article(entry)

        page = render_article_page(ResourceManager.with_defaults(), article)

    except WikiReaderError as e:
        logger.error("render_failed", title=name, error=e.message)
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e

    if output is None and open_page:
        with tempfile.NamedTemporaryFile(
            "w", suffix=".html", prefix="wikireader-", delete=False, encoding="utf-8"
        ) as f:
            f.write(page)
            output = Path(f.name)
    elif output is not None:
        output.write_text(page, encoding="utf-8")

    if output is None:
        click.echo(page)
        return

    click.echo(f"Wrote {article.title} to {output}", err=True)
    if open_page:
        click.launch(str(output))
