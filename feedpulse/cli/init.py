"""Init command implementation."""

import asyncio
from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, SourceConfig, save_config, save_sources
from ..config.loader import DEFAULT_CONFIG_DIR
from ..db import SourceRegistry, close_connection_pool, get_connection_pool, init_database, validate_connection
from ..log import setup_logging

console = Console()


def create_default_sources() -> List[SourceConfig]:
    """Create default news sources."""
    return [
        SourceConfig(
            name="Le Monde",
            url="https://www.lemonde.fr",
            rss_url="https://www.lemonde.fr/rss/une.xml",
            favicon_url="https://www.lemonde.fr/favicon.ico",
            orientation=["centre-gauche"],
            categories=["politique", "international", "société"],
        ),
        SourceConfig(
            name="franceinfo",
            url="https://www.francetvinfo.fr",
            rss_url="https://www.francetvinfo.fr/titres.rss",
            favicon_url="https://www.francetvinfo.fr/favicon.ico",
            orientation=["centre"],
            categories=["politique", "société"],
        ),
        SourceConfig(
            name="Le Figaro",
            url="https://www.lefigaro.fr",
            rss_url="https://www.lefigaro.fr/rss/figaro_actualites.xml",
            favicon_url="https://www.lefigaro.fr/favicon.ico",
            orientation=["centre-droit"],
            categories=["politique", "économie"],
        ),
        SourceConfig(
            name="Libération",
            url="https://www.liberation.fr",
            rss_url="https://www.liberation.fr/arc/outboundfeeds/rss-all/?outputType=xml",
            favicon_url="https://www.liberation.fr/favicon.ico",
            orientation=["gauche"],
            categories=["politique", "culture"],
        ),
        SourceConfig(
            name="Reporterre",
            url="https://reporterre.net",
            rss_url="https://reporterre.net/spip.php?page=backend",
            favicon_url="https://reporterre.net/favicon.ico",
            orientation=["écologiste"],
            categories=["environnement"],
        ),
    ]


async def _init_database(db_config: dict, sources: List[SourceConfig]) -> int:
    try:
        if not await validate_connection(db_config):
            return -1
        await init_database(db_config)
        pool = await get_connection_pool(db_config)
        source_map = await SourceRegistry(pool).sync_sources(sources)
        return len(source_map)
    finally:
        await close_connection_pool()


def init_command(
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR,
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("feedpulse", "--db-name", help="Database name"),
    db_user: str = typer.Option("feedpulse", "--db-user", help="Database user"),
    seed_sources: bool = typer.Option(
        True,
        "--seed-sources/--no-seed-sources",
        help="Seed default news sources",
    ),
) -> None:
    """Initialize feedpulse configuration and database."""
    setup_logging("WARNING")
    console.print(Panel.fit("feedpulse - Initialization", style="bold blue"))

    # Create configuration directory
    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"
    sources_path = config_dir / "sources.yaml"

    # Create default configuration
    config = ConfigModel(
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "FEEDPULSE_DB_PASSWORD",
        },
    )

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    sources = create_default_sources() if seed_sources else []
    save_sources(sources, sources_path)
    console.print(f"✅ Created sources: {sources_path} ({len(sources)} sources)")

    console.print("\n[bold]Initializing database...[/bold]")
    try:
        synced = asyncio.run(_init_database(config.postgres.model_dump(), sources))
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    if synced < 0:
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export FEEDPULSE_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print(f"✅ Database schema initialized, {synced} sources synced")
    console.print(
        Panel(
            f"[green]✅ feedpulse initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Sources: {sources_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export FEEDPULSE_DB_PASSWORD=your_password[/bold]\n"
            f"2. Run one cycle: [bold]feedpulse run[/bold]\n"
            f"3. Or keep ingesting: [bold]feedpulse serve[/bold]",
            style="green",
        )
    )
