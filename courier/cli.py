"""Courier CLI - serve a directory of static files.

Commands:
    serve    - Serve DIRECTORY over HTTP with cache headers
    version  - Show version information
"""

import logging
import sys
from typing import Optional, Tuple

import click

from . import __version__
from .asgi import StaticFiles
from .config import ConfigLoader
from .faults import Fault
from .files import FileSender

logger = logging.getLogger("courier.cli")


def build_static_app(
    directory: str,
    config: ConfigLoader,
    prefix: str = "/",
) -> StaticFiles:
    """Wire a ``StaticFiles`` app from loaded configuration."""
    sender = FileSender(
        config.get_cache_control_config(),
        chunk_size=config.get_response_config()["chunk_size"],
    )
    return StaticFiles(directory, prefix=prefix, file_sender=sender)


@click.group()
@click.version_option(version=__version__, prog_name="courier")
def cli():
    """Courier response toolkit."""


@cli.command('serve')
@click.argument('directory', type=click.Path(exists=True, file_okay=False))
@click.option('--host', type=str, default='127.0.0.1', help='Server host')
@click.option('--port', type=int, default=8000, help='Server port')
@click.option('--prefix', type=str, default='/', help='URL prefix to mount under')
@click.option('--config', 'config_paths', type=click.Path(exists=True, dir_okay=False),
              multiple=True, help='YAML or JSON config file (repeatable)')
@click.option('--env-file', type=click.Path(dir_okay=False), default=None, help='.env file')
@click.option('--log-level', type=click.Choice(['debug', 'info', 'warning', 'error']),
              default='info', help='Log level')
def serve(
    directory: str,
    host: str,
    port: int,
    prefix: str,
    config_paths: Tuple[str, ...],
    env_file: Optional[str],
    log_level: str,
):
    """
    Serve DIRECTORY with cache headers.

    Examples:
      courier serve ./public
      courier serve ./public --port=3000 --config=courier.yaml
    """
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        config = ConfigLoader.load(paths=list(config_paths), env_file=env_file)
        app = build_static_app(directory, config, prefix=prefix)
    except Fault as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    logger.info(f"Serving {app.directory} on http://{host}:{port}{app.prefix}")
    uvicorn.run(app, host=host, port=port, log_level=log_level)


@cli.command('version')
def version():
    """Show version information."""
    click.echo(f"courier {__version__}")


def main():
    """Entry point for `courier` command."""
    cli()


if __name__ == '__main__':
    main()
