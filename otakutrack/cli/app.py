"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from otakutrack import __version__
from otakutrack.api.client import TRENDING_PERIODS, CatalogClient
from otakutrack.models.config import STATUS_META, TrackerConfig
from otakutrack.models.progress import WatchStatus
from otakutrack.storage.cache import CacheStore
from otakutrack.storage.config_manager import ConfigManager
from otakutrack.storage.kv_store import JSONFileStorage
from otakutrack.storage.progress import ProgressStore

from .formatters import (
    print_anime_details,
    print_anime_table,
    print_config,
    print_progress_table,
    print_stats_table,
    print_upcoming,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("otakutrack")

app = typer.Typer(
    name="otakutrack",
    help=(
        "Track your anime watching progress from the terminal. Use 'otakutrack"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

MIN_QUERY_LENGTH = 2


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "otakutrack"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config() -> TrackerConfig:
    return ConfigManager(CONFIG_FILE).load_config()


def _open_store(config: TrackerConfig) -> ProgressStore:
    """Loads the tracked list and logs every write made through it."""
    store = ProgressStore(
        JSONFileStorage(Path(config.data_dir)),
        episode_length_minutes=config.episode_length_minutes,
    )
    store.load()
    store.subscribe(
        lambda progress: log.debug(f"Saved progress for {len(progress)} titles.")
    )
    return store


def _open_client(config: TrackerConfig) -> CatalogClient:
    cache = CacheStore(
        ttl_seconds=config.cache_ttl_seconds,
        storage=JSONFileStorage(Path(config.data_dir)),
    )
    return CatalogClient(
        cache=cache, base_url=config.api_base_url, request_limit=config.request_limit
    )


def _require_tracked(store: ProgressStore, anime_id: str) -> None:
    if anime_id not in store:
        console.print(f"[red]✗ '{anime_id}' is not in your list.[/red]")
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    clear_cache: bool = typer.Option(
        False, "--clear-cache", help="Clear the catalog response cache and exit."
    ),
):
    """OtakuTrack CLI"""
    if version:
        console.print(f"[bold]otakutrack[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("otakutrack").setLevel(log_level)

    if clear_cache:
        config = _load_config()
        cache = CacheStore(storage=JSONFileStorage(Path(config.data_dir)))
        console.print("[cyan]Clearing response cache...[/cyan]")
        removed = cache.clear()
        console.print(
            f"[green]✓ Cache cleared successfully ({removed} entries removed).[/green]"
        )
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def search(
    query: str = typer.Argument(..., help="Part of the title to look for."),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Result page."),
):
    """Search the catalog by title."""
    if len(query.strip()) < MIN_QUERY_LENGTH:
        console.print(
            f"[red]✗ Search query must be at least {MIN_QUERY_LENGTH} characters.[/red]"
        )
        raise typer.Exit(code=1)

    async def _search():
        async with _open_client(_load_config()) as client:
            return await client.search(query.strip(), page)

    result = asyncio.run(_search())
    print_anime_table(result.records, f"Results for '{query}' (page {page})", console)
    if result.has_next_page:
        console.print(f"[dim]More results: --page {page + 1}[/dim]")


@app.command()
def trending(
    period: str = typer.Option(
        "now", "--period", help=f"One of: {', '.join(TRENDING_PERIODS)}."
    ),
    limit: int = typer.Option(8, "--limit", "-n", min=1, help="Titles to show."),
):
    """Show the top airing anime."""

    async def _trending():
        async with _open_client(_load_config()) as client:
            return await client.get_trending(period)

    records = asyncio.run(_trending())
    print_anime_table(records[:limit], "Trending Now", console)


@app.command()
def random():
    """Suggest a random anime."""

    async def _random():
        async with _open_client(_load_config()) as client:
            return await client.get_random()

    record = asyncio.run(_random())
    console.print(f"[cyan]Random anime:[/cyan] [bold]{record.title}[/bold]")
    print_anime_details(record, console=console)


@app.command()
def info(anime_id: str = typer.Argument(..., help="Catalog ID of the anime.")):
    """Show details for one anime, including your progress."""
    config = _load_config()
    store = _open_store(config)

    async def _details():
        async with _open_client(config) as client:
            return await client.get_details(anime_id)

    record = asyncio.run(_details()) or store.display_record(anime_id)
    if record is None:
        console.print(f"[red]✗ Could not find anime '{anime_id}'.[/red]")
        raise typer.Exit(code=1)
    print_anime_details(record, store.get(anime_id), console)


@app.command()
def add(
    anime_id: str = typer.Argument(..., help="Catalog ID of the anime."),
    title: str | None = typer.Option(None, "--title", help="Title to store."),
    image: str | None = typer.Option(None, "--image", help="Cover image URL."),
    episodes: int | None = typer.Option(
        None, "--episodes", "-e", min=0, help="Total episode count."
    ),
    current: int = typer.Option(0, "--current", "-c", min=0, help="Episodes watched."),
    status: WatchStatus = typer.Option(
        WatchStatus.PLAN_TO_WATCH, "--status", "-s", help="Watch status."
    ),
    rating: int | None = typer.Option(
        None, "--rating", "-r", min=1, max=10, help="Your rating (1-10)."
    ),
):
    """Add an anime to your list. Missing details are looked up in the catalog."""
    config = _load_config()
    store = _open_store(config)

    if title is None or image is None or episodes is None:

        async def _details():
            async with _open_client(config) as client:
                return await client.get_details(anime_id)

        record = asyncio.run(_details())
        if record is not None:
            title = title or record.title
            image = image or record.image
            episodes = episodes if episodes is not None else record.episodes
        else:
            console.print(
                "[yellow]⚠️  Catalog details unavailable, saving what was given.[/yellow]"
            )

    data: dict[str, Any] = {
        "title": title,
        "image": image,
        "current_episode": current,
        "total_episodes": episodes,
        "status": status,
        "rating": rating,
    }
    if store.add(anime_id, data):
        console.print(f"[green]✓ Added \"{title or anime_id}\" to your list![/green]")
    else:
        console.print("[red]✗ Failed to add anime.[/red]")
        raise typer.Exit(code=1)


@app.command()
def update(
    anime_id: str = typer.Argument(..., help="Catalog ID of the anime."),
    current: int | None = typer.Option(
        None, "--current", "-c", min=0, help="Episodes watched."
    ),
    episodes: int | None = typer.Option(
        None, "--episodes", "-e", min=0, help="Total episodes (0 for unknown)."
    ),
    status: WatchStatus | None = typer.Option(None, "--status", "-s"),
    rating: int | None = typer.Option(
        None, "--rating", "-r", min=0, max=10, help="Your rating (0 to clear)."
    ),
):
    """Edit the progress stored for an anime."""
    store = _open_store(_load_config())
    _require_tracked(store, anime_id)

    changes = {
        key: value
        for key, value in {
            "current_episode": current,
            "total_episodes": episodes,
            "status": status,
            "rating": rating,
        }.items()
        if value is not None
    }
    if not changes:
        console.print("[yellow]Nothing to update.[/yellow]")
        raise typer.Exit()

    if store.update(anime_id, changes):
        console.print("[green]✓ Progress updated successfully![/green]")
    else:
        console.print("[red]✗ Failed to update progress.[/red]")
        raise typer.Exit(code=1)


def _report_episode(store: ProgressStore, anime_id: str, ok: bool) -> None:
    if not ok:
        console.print("[red]✗ Failed to update episode.[/red]")
        raise typer.Exit(code=1)
    entry = store.get(anime_id)
    if entry.status == WatchStatus.COMPLETED and entry.current_episode == entry.total_episodes:
        console.print(f"[green]✓ Completed \"{entry.title or anime_id}\"![/green]")
    else:
        console.print(f"[green]✓ Updated episode to {entry.current_episode}[/green]")


@app.command()
def episode(
    anime_id: str = typer.Argument(..., help="Catalog ID of the anime."),
    number: int = typer.Argument(..., min=0, help="Last episode watched."),
):
    """Set the last watched episode. Reaching the final episode completes it."""
    store = _open_store(_load_config())
    _require_tracked(store, anime_id)
    _report_episode(store, anime_id, store.set_episode(anime_id, number))


@app.command(name="next")
def next_episode(anime_id: str = typer.Argument(..., help="Catalog ID of the anime.")):
    """Mark one more episode as watched."""
    store = _open_store(_load_config())
    _require_tracked(store, anime_id)
    _report_episode(store, anime_id, store.increment_episode(anime_id))


@app.command()
def remove(
    anime_id: str = typer.Argument(..., help="Catalog ID of the anime."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Bypass the confirmation prompt."
    ),
):
    """Remove an anime from your list."""
    store = _open_store(_load_config())
    _require_tracked(store, anime_id)

    if not force and not typer.confirm(
        "Are you sure you want to remove this anime from your list?"
    ):
        console.print("[yellow]Operation cancelled.[/yellow]")
        raise typer.Abort()

    if store.remove(anime_id):
        console.print("[green]✓ Anime removed from your list.[/green]")
    else:
        console.print("[red]✗ Failed to remove anime.[/red]")
        raise typer.Exit(code=1)


@app.command(name="list")
def list_command(
    status: str = typer.Option(
        "all", "--status", "-s", help=f"'all' or one of: {', '.join(STATUS_META)}."
    ),
):
    """Show your tracked anime."""
    if status != "all" and status not in STATUS_META:
        console.print(f"[red]✗ Unknown status '{status}'.[/red]")
        raise typer.Exit(code=1)

    store = _open_store(_load_config())
    progress = store.filter(status)
    if len(store) and not progress:
        console.print("[yellow]No anime found for the selected filter.[/yellow]")
        return
    title = "Your List" if status == "all" else STATUS_META[status]["label"]
    print_progress_table(progress, title, console)


@app.command()
def upcoming(
    limit: int = typer.Option(5, "--limit", "-n", min=1, help="Titles to show."),
):
    """Show the next episode for each anime you are watching."""
    store = _open_store(_load_config())
    print_upcoming(store.next_episodes(limit), console)


@app.command()
def stats():
    """Show statistics for your list."""
    store = _open_store(_load_config())
    print_stats_table(store.compute_stats(), console)


@app.command()
def config(
    reset: bool = typer.Option(
        False, "--reset", help="Write a configuration file with default values."
    ),
):
    """Display (or reset) the configuration."""
    config_manager = ConfigManager(CONFIG_FILE)
    if reset:
        config_manager.save_new_config()
        console.print(f"[green]✓ Configuration saved to '{CONFIG_FILE}'[/green]")
    print_config(CONFIG_FILE, config_manager.load_config())
