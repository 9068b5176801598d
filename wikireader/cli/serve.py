"""CLI command for the local browser viewer."""

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
from wikireader.utils.config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_START_PAGE, Config
from wikireader.utils.exceptions import WikiReaderError
from wikireader.web.resources import ResourceManager
from wikireader.web.router import Router
from wikireader.web.server import create_server, serve_forever

logger = structlog.get_logger(__name__)


@click.command()
@index_path_option
@archive_path_option
@workers_option
@click.option("--host", help=f"Interface to bind (default: $WIKIREADER_HOST or {DEFAULT_HOST})")
@click.option(
    "--port",
    type=click.IntRange(min=0, max=65535),
    help=f"Port to bind (default: $WIKIREADER_PORT or {DEFAULT_PORT})",
)
@click.option(
    "--start-page",
    help=f"Article opened at / (default: $WIKIREADER_START_PAGE or {DEFAULT_START_PAGE})",
)
@click.option("--open", "open_browser", is_flag=True, help="Open the start page in a browser")
@click.pass_obj
def serve(
    config: Config,
    index_path: Path | None,
    archive_path: Path | None,
    workers: int | None,
    host: str | None,
    port: int | None,
    start_page: str | None,
    open_browser: bool,
) -> None:
    """Serve articles to a local browser."""
    host = host or config.host
    port = port if port is not None else config.port
    start_page = start_page or config.start_page

    try:
        index = load_index(resolve_index_path(config, index_path), workers or config.index_workers)
        reader = ArchiveReader.open(resolve_archive_path(config, archive_path))
    except WikiReaderError as e:
        logger.error("serve_failed", error=e.message)
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e

    try:
        router = Router(index, reader, ResourceManager.with_defaults())
        server = create_server(router, host, port, start_page)
        bound_host, bound_port = server.server_address[:2]
        url = f"http://{bound_host}:{bound_port}/"
        click.echo(f"Serving {index.size():,} articles at {url}")
        if open_browser:
            click.launch(url)
        serve_forever(server)
    except OSError as e:
        logger.error("serve_failed", host=host, port=port, error=str(e))
        click.echo(f"Error: cannot listen on {host}:{port}: {e}", err=True)
        raise click.Abort() from e
    except KeyboardInterrupt:
        click.echo("\nViewer stopped by user")
    finally:
        reader.close()
