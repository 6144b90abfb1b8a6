"""Helpers shared by CLI commands."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
import typer
from rich.console import Console

from ..config import Config
from ..db import close_connection_pool, get_connection_pool
from ..log import setup_logging
from ..pipeline import IngestionOrchestrator, create_orchestrator

console = Console()


def load_config(ctx: Optional[typer.Context] = None) -> Config:
    """Load configuration and set up logging, exiting on bad config."""
    obj = (ctx.obj if ctx is not None else None) or {}
    config = Config(obj.get("config_path"))
    try:
        model = config.config
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config.config_path}. Run 'feedpulse init' first.[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    setup_logging(obj.get("log_level") or model.logging.level, console=Console(stderr=True))
    return config


@asynccontextmanager
async def open_orchestrator(config: Config) -> AsyncIterator[IngestionOrchestrator]:
    """Open the pool and a shared HTTP client for the lifetime of a command."""
    pool = await get_connection_pool(config.get_db_config())
    try:
        async with httpx.AsyncClient() as client:
            yield create_orchestrator(config.config, pool, client=client)
    finally:
        await close_connection_pool()
