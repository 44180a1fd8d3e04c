"""
CLI Main - Typer-based command-line interface.

Usage:
    tracksearch init
    tracksearch search "lake" --lat 47.37 --lon 8.54
    tracksearch search "summit" --current-track 4 --limit 5
    tracksearch version
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from tracksearch.config import TrackSearchError

app = typer.Typer(
    name="tracksearch",
    help="TrackSearch - Find tracks and markers by relevance",
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for all commands."""
    from tracksearch.config import get_settings

    level = logging.DEBUG if verbose else get_settings().log_level
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


@app.command()
def init(
    db_path: Path | None = typer.Option(None, "--db", "-d", help="Database path"),
) -> None:
    """Initialize the track database."""
    asyncio.run(_init_async(db_path))


async def _init_async(db_path: Path | None) -> None:
    """Async initialization."""
    from tracksearch.adapters import SQLiteTrackRepository
    from tracksearch.config import get_settings

    path = db_path or get_settings().db_path
    repo = SQLiteTrackRepository(path)
    try:
        await repo.initialize()
    finally:
        await repo.close()

    console.print("\n[green]Initialization complete![/green]")
    console.print(f"[dim]Database: {path}[/dim]")


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to search for"),
    lat: float | None = typer.Option(None, "--lat", help="Reference latitude"),
    lon: float | None = typer.Option(None, "--lon", help="Reference longitude"),
    current_track: int | None = typer.Option(
        None, "--current-track", "-c", help="ID of the track currently in focus"
    ),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Number of results"),
    db_path: Path | None = typer.Option(None, "--db", "-d", help="Database path"),
) -> None:
    """Search tracks and markers."""
    if (lat is None) != (lon is None):
        console.print("[red]Error:[/red] --lat and --lon must be given together")
        raise typer.Exit(1)

    asyncio.run(_search_async(query, lat, lon, current_track, limit, db_path))


async def _search_async(
    text: str,
    lat: float | None,
    lon: float | None,
    current_track: int | None,
    limit: int | None,
    db_path: Path | None,
) -> None:
    """Async search implementation."""
    from pydantic import ValidationError

    from tracksearch.adapters import SQLiteTrackRepository
    from tracksearch.config import get_settings
    from tracksearch.domains.search import RelevanceSearchEngine, SearchQuery
    from tracksearch.domains.tracks import GeoPosition

    settings = get_settings()
    path = db_path or settings.db_path
    if not path.exists():
        console.print(f"[red]Error:[/red] Database not found: {path}")
        console.print("[dim]Run `tracksearch init` first.[/dim]")
        raise typer.Exit(1)

    try:
        query = SearchQuery(
            text=text,
            position=GeoPosition(latitude=lat, longitude=lon) if lat is not None else None,
            current_track_id=current_track,
            limit=limit if limit is not None else settings.search_default_limit,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid query:[/red] {e}")
        raise typer.Exit(1)

    repo = SQLiteTrackRepository(path)
    try:
        engine = RelevanceSearchEngine(repo, settings=settings)
        results = await engine.search(query)
    except TrackSearchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await repo.close()

    if not results:
        console.print(f"\n[yellow]No results for:[/yellow] {text}")
        return

    table = Table(title=f"Results for '{text}'")
    table.add_column("#", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("ID")
    table.add_column("Name", style="bold")
    table.add_column("Category")
    table.add_column("Score", style="green", justify="right")

    for rank, result in enumerate(results, 1):
        record = result.record
        table.add_row(
            str(rank),
            record.kind,
            str(record.id),
            record.name,
            record.category,
            f"{result.score:.2f}",
        )

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from tracksearch import __version__

    console.print(f"TrackSearch v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
