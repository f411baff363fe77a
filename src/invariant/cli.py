"""CLI interface for Invariant.

Command-line tool for serving and checking the blog.
"""

import logging
import sys
from pathlib import Path

import click

from invariant.config import Config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
def cli() -> None:
    """Invariant - a blog about invariance."""


def _load_config(config_path: Path | None, **overrides: object) -> Config:
    try:
        return Config.load(config_path).with_overrides(**overrides)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover invariant.toml)",
)
@click.option(
    "--content-dir",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Content directory with home.md, posts/ and images/ (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    envvar="PORT",
    help="Port to bind to (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def serve(
    config_path: Path | None,
    content_dir: Path | None,
    host: str | None,
    port: int | None,
    verbose: bool,
) -> None:
    """Start the blog server."""
    from invariant.server import run_server

    config = _load_config(
        config_path,
        host=host,
        port=port,
        content_root=content_dir,
        log_level="DEBUG" if verbose else None,
    )
    _configure_logging(config.logging.level)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    if config.content.root is not None:
        click.echo(f"Content directory: {config.content.root}")
    else:
        click.echo("Content directory: bundled")

    run_server(config)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover invariant.toml)",
)
@click.option(
    "--content-dir",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Content directory with home.md, posts/ and images/ (overrides config)",
)
def check(config_path: Path | None, content_dir: Path | None) -> None:
    """Render every post and report the ones that fail."""
    from invariant.server import create_library

    config = _load_config(config_path, content_root=content_dir)
    _configure_logging(config.logging.level)

    library = create_library(config)
    results = library.check()

    for result in results:
        if result.ok:
            click.echo(f"ok {result.slug}")
        else:
            click.echo(f"error {result.slug}: {result.error}")

    failed = sum(1 for result in results if not result.ok)
    if failed:
        click.echo(f"{failed} of {len(results)} posts failed", err=True)
        sys.exit(1)
    click.echo(f"All {len(results)} posts rendered")
