"""Sources management commands."""

import asyncio
from typing import List, Optional

import typer
from rich.table import Table

from ..config import SourceConfig, load_sources, save_sources
from ..db import ArticleStore, SourceRegistry, close_connection_pool, get_connection_pool
from ..ingestion import FeedValidationError, RSSFetcher, SourceHealthReport, SourceHealthTracker
from ..log import setup_logging
from ..models import Source
from ..pipeline import FeedPreview, preview_feed
from .common import console, load_config

sources_app = typer.Typer(help="Manage RSS sources")


@sources_app.command("list")
def sources_list(ctx: typer.Context) -> None:
    """List all configured sources."""
    config = load_config(ctx)

    try:
        sources = load_sources(config.sources_path)
    except FileNotFoundError:
        console.print("[red]Sources file not found. Run 'feedpulse init' first.[/red]")
        raise typer.Exit(1)

    if not sources:
        console.print("[yellow]No sources configured.[/yellow]")
        return

    table = Table(title="Configured Sources")
    table.add_column("Name", style="cyan")
    table.add_column("Orientation", style="magenta")
    table.add_column("Categories", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Feed", style="blue")

    for source in sources:
        table.add_row(
            source.name,
            ", ".join(source.orientation),
            ", ".join(source.categories),
            "✓" if source.enabled else "✗",
            source.rss_url,
        )

    console.print(table)


@sources_app.command("add")
def sources_add(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Source name"),
    url: str = typer.Option(..., "--url", "-u", help="Website URL"),
    rss_url: str = typer.Option(..., "--rss-url", "-r", help="RSS/Atom feed URL"),
    favicon_url: Optional[str] = typer.Option(None, "--favicon", help="Favicon URL"),
    orientation: List[str] = typer.Option([], "--orientation", "-o", help="Orientation tag (repeatable)"),
    category: List[str] = typer.Option([], "--category", "-c", help="Category (repeatable)"),
    validate: bool = typer.Option(True, "--validate/--no-validate", help="Preview the feed before adding"),
) -> None:
    """Add a new RSS source."""
    config = load_config(ctx)

    try:
        sources = load_sources(config.sources_path)
    except FileNotFoundError:
        sources = []

    if any(s.name == name or s.rss_url == rss_url for s in sources):
        console.print(f"[red]Source '{name}' or feed URL already exists.[/red]")
        raise typer.Exit(1)

    try:
        new_source = SourceConfig(
            name=name,
            url=url,
            rss_url=rss_url,
            favicon_url=favicon_url,
            orientation=orientation,
            categories=category,
            enabled=True,
        )
    except ValueError as e:
        console.print(f"[red]Invalid source: {e}[/red]")
        raise typer.Exit(1)

    if validate:
        preview = _run_preview(rss_url, config.config.ingestion.timeout_seconds)
        console.print(f"[dim]Feed OK: {preview.title or rss_url} ({preview.total_items} items)[/dim]")

    sources.append(new_source)
    save_sources(sources, config.sources_path)

    console.print(f"[green]✅ Added source: {name}[/green] (run 'feedpulse sources sync' to register it)")


@sources_app.command("remove")
def sources_remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Source name to remove"),
) -> None:
    """Remove a source from the sources file."""
    config = load_config(ctx)

    try:
        sources = load_sources(config.sources_path)
    except FileNotFoundError:
        console.print("[red]Sources file not found.[/red]")
        raise typer.Exit(1)

    original_count = len(sources)
    sources = [s for s in sources if s.name != name]

    if len(sources) == original_count:
        console.print(f"[red]Source '{name}' not found.[/red]")
        raise typer.Exit(1)

    save_sources(sources, config.sources_path)
    console.print(f"[green]✅ Removed source: {name}[/green]")


@sources_app.command("sync")
def sources_sync(ctx: typer.Context) -> None:
    """Register or update every source of the sources file in the database."""
    config = load_config(ctx)

    try:
        sources = load_sources(config.sources_path)
    except FileNotFoundError:
        console.print("[red]Sources file not found.[/red]")
        raise typer.Exit(1)

    async def _sync() -> dict:
        pool = await get_connection_pool(config.get_db_config())
        try:
            return await SourceRegistry(pool).sync_sources(sources)
        finally:
            await close_connection_pool()

    source_map = asyncio.run(_sync())
    console.print(f"[green]✅ Synced {len(source_map)} sources[/green]")


def print_health_report(report: SourceHealthReport, sources: List[Source], article_count: int) -> None:
    """Print one row per source plus totals."""
    table = Table(title="Source Health")
    table.add_column("Source", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Last fetch", style="yellow")
    table.add_column("Message", style="dim")

    for source in sources:
        if source.fetch_status is None:
            status = "[yellow]never fetched[/yellow]"
            message = ""
        elif source.fetch_status.success:
            status = "[green]✓[/green]"
            message = source.fetch_status.message
        else:
            status = "[red]✗[/red]"
            message = source.fetch_status.message
        last = source.last_fetched_at.strftime("%Y-%m-%d %H:%M") if source.last_fetched_at else "-"
        table.add_row(source.name, status, last, message)

    console.print(table)
    console.print(
        f"Healthy: [green]{report.healthy}[/green]  "
        f"Failing: [red]{report.failing}[/red]  "
        f"Never fetched: [yellow]{report.never_fetched}[/yellow]  "
        f"Stored articles: [cyan]{article_count}[/cyan]"
    )


@sources_app.command("health")
def sources_health(ctx: typer.Context) -> None:
    """Show fetch health of every registered source."""
    config = load_config(ctx)

    async def _report():
        pool = await get_connection_pool(config.get_db_config())
        try:
            registry = SourceRegistry(pool)
            report = await SourceHealthTracker(registry).report()
            sources = await registry.list_sources(include_disabled=True)
            return report, sources, await ArticleStore(pool).count()
        finally:
            await close_connection_pool()

    report, sources, article_count = asyncio.run(_report())
    print_health_report(report, sources, article_count)


def _run_preview(url: str, timeout: float) -> FeedPreview:
    try:
        return asyncio.run(preview_feed(url, RSSFetcher(timeout=timeout)))
    except FeedValidationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)


@sources_app.command("preview")
def sources_preview(
    url: str = typer.Argument(..., help="Feed URL to preview"),
    timeout: float = typer.Option(10.0, "--timeout", help="HTTP timeout in seconds"),
) -> None:
    """Preview a feed without saving anything."""
    setup_logging("WARNING")
    preview = _run_preview(url, timeout)

    console.print(f"[bold]{preview.title or '(untitled feed)'}[/bold]")
    if preview.description:
        console.print(f"[dim]{preview.description}[/dim]")
    if preview.link:
        console.print(preview.link)

    table = Table(title=f"Sample items ({len(preview.sample_items)} of {preview.total_items})")
    table.add_column("Published", style="yellow")
    table.add_column("Title", style="cyan")
    table.add_column("Image", style="blue")

    for item in preview.sample_items:
        published = item.published_at.strftime("%Y-%m-%d %H:%M") if item.published_at else "-"
        table.add_row(published, item.title or "-", item.image or "-")

    console.print(table)
