"""Main entry point for ``python -m wikireader``."""

from wikireader.cli.main import cli

if __name__ == "__main__":
    cli(prog_name="wikireader")
