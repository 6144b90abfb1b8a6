"""Run, serve and prune command implementations."""

import asyncio
import signal
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from ..db import ArticleStore, close_connection_pool, get_connection_pool
from ..ingestion import PersistenceError
from ..pipeline import CycleSummary, IngestionScheduler
from .common import console, load_config, open_orchestrator


def print_cycle_summary(summary: CycleSummary) -> None:
    """Print a per-source table and a final panel."""
    if summary.outcomes:
        table = Table(title="Ingestion Summary")
        table.add_column("Source", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("New", style="yellow", justify="right")
        table.add_column("Details", style="dim")

        for outcome in summary.outcomes:
            status = "[green]✓[/green]" if outcome.success else "[red]✗[/red]"
            table.add_row(outcome.source_name, status, str(outcome.articles_added), outcome.message)

        console.print(table)

    if summary.success:
        console.print(Panel(
            f"[green]{summary.message}[/green]\n\n"
            f"Sources: {summary.total_sources}\n"
            f"New articles: {summary.total_articles}\n"
            f"Failed sources: {len(summary.failed_sources)}\n"
            f"Duration: {summary.duration:.1f} seconds",
            style="green",
        ))
    else:
        console.print(Panel(f"[red]❌ Ingestion failed: {summary.message}[/red]", style="red"))


def run_command(ctx: typer.Context) -> None:
    """Run one ingestion cycle over all enabled sources."""
    config = load_config(ctx)

    async def _run() -> CycleSummary:
        async with open_orchestrator(config) as orchestrator:
            return await orchestrator.ingest_all_sources()

    try:
        summary = asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Ingestion interrupted by user[/yellow]")
        raise typer.Exit(1)

    print_cycle_summary(summary)
    if not summary.success:
        raise typer.Exit(1)


def serve_command(
    ctx: typer.Context,
    interval: Optional[int] = typer.Option(
        None,
        "--interval",
        "-i",
        help="Minutes between cycles (default: scheduler.interval_minutes)",
        min=1,
    ),
    skip_startup_run: bool = typer.Option(
        False,
        "--skip-startup-run",
        help="Wait for the first interval instead of ingesting immediately",
    ),
) -> None:
    """Ingest at startup and then on a fixed interval until interrupted."""
    config = load_config(ctx)
    scheduler_config = config.config.scheduler

    async def _serve() -> None:
        async with open_orchestrator(config) as orchestrator:
            scheduler = IngestionScheduler(
                orchestrator.ingest_all_sources,
                interval_minutes=interval or scheduler_config.interval_minutes,
                run_on_start=scheduler_config.run_on_start and not skip_startup_run,
                poll_seconds=scheduler_config.poll_seconds,
            )
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, scheduler.stop)
                except NotImplementedError:
                    # Windows event loops
                    pass
            await scheduler.run_forever()

    console.print(Panel.fit("feedpulse scheduler - press Ctrl+C to stop", style="bold blue"))
    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        console.print("\n[yellow]Scheduler interrupted[/yellow]")


def prune_command(
    ctx: typer.Context,
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Retention in days (default: retention.days)", min=1),
) -> None:
    """Delete articles older than the retention window."""
    config = load_config(ctx)
    retention_days = days or config.config.retention.days

    async def _prune() -> int:
        pool = await get_connection_pool(config.get_db_config())
        try:
            return await ArticleStore(pool).delete_expired(retention_days)
        finally:
            await close_connection_pool()

    try:
        deleted = asyncio.run(_prune())
    except PersistenceError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Deleted {deleted} articles older than {retention_days} days[/green]")
