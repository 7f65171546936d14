"""Command line interface for ccTracker."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console

from cctracker.config import ConfigManager
from cctracker.exceptions import CCTrackerError
from cctracker.logging_config import setup_logging
from cctracker.models import Config
from cctracker.server.http import TrackerServer
from cctracker.storage.memory import InMemorySwarmStore

logger = logging.getLogger(__name__)

config_path_option = click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to a cctracker.toml config file",
)


def _load(config_file: Path | None) -> ConfigManager:
    try:
        return ConfigManager(config_file)
    except CCTrackerError as e:
        raise click.ClickException(str(e)) from e


async def _serve(config: Config) -> None:
    server = TrackerServer(config, InMemorySwarmStore())
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


@click.group()
def cli() -> None:
    """ccTracker - peer discovery tracker."""


@cli.command()
@config_path_option
@click.option("--host", help="Bind address")
@click.option("--port", type=int, help="Listen port")
def serve(config_file: Path | None, host: str | None, port: int | None) -> None:
    """Run the tracker HTTP server."""
    manager = _load(config_file)
    config = manager.config
    if host is not None or port is not None:
        overrides = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
        try:
            server_cfg = config.server.model_validate(
                {**config.server.model_dump(), **overrides}
            )
        except ValueError as e:
            raise click.BadParameter(str(e)) from e
        config = config.model_copy(update={"server": server_cfg})

    setup_logging(config.observability)
    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except CCTrackerError as e:
        raise click.ClickException(str(e)) from e


@cli.group()
def config() -> None:
    """Inspect configuration."""


@config.command("show")
@config_path_option
def config_show(config_file: Path | None) -> None:
    """Print the effective configuration as TOML."""
    Console().print(_load(config_file).export(), markup=False, highlight=False, soft_wrap=True)


def main() -> None:
    """Entry point."""
    cli()
