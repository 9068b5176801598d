"""Command group bundling the wikireader CLI commands."""

import click

from wikireader import __version__
from wikireader.cli.render import render
from wikireader.cli.search import search
from wikireader.cli.serve import serve
from wikireader.cli.show import show
from wikireader.utils.config import Config
from wikireader.utils.exceptions import ConfigurationError
from wikireader.utils.logger import LOG_FORMATS, configure_logging


@click.group()
@click.version_option(__version__, prog_name="wikireader")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (default: $LOG_LEVEL or INFO)",
)
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMATS, case_sensitive=False),
    help="Log line format on stderr (default: $LOG_FORMAT or json)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_format: str | None) -> None:
    """Read articles from an offline multistream MediaWiki dump."""
    try:
        config = Config()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e

    configure_logging(log_level or config.log_level, log_format or config.log_format)
    ctx.obj = config


cli.add_command(search)
cli.add_command(show)
cli.add_command(render)
cli.add_command(serve)


if __name__ == "__main__":
    cli()
