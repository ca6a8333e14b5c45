"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any, Iterable, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from otakutrack.models.anime import AnimeRecord
from otakutrack.models.config import STATUS_META, TrackerConfig
from otakutrack.models.progress import ProgressEntry
from otakutrack.models.stats import TrackerStats
from otakutrack.utils.formatting import (
    calculate_progress,
    format_date,
    format_number,
    get_status_label,
)


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your config.ini.",
            "• Run `otakutrack config --reset` to write a fresh default file.",
        ],
        "StorageError": [
            "• Make sure the data directory is writable.",
            "• Check that the disk is not full.",
        ],
        "CatalogError": [
            "• A network connection issue occurred.",
            "• The catalog API might be temporarily unavailable or rate limiting.",
            "• Please try again in a few minutes.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def _status_text(status: Any) -> Text:
    value = getattr(status, "value", status)
    style = STATUS_META.get(value, {}).get("style", "white")
    return Text(get_status_label(value), style=style)


def _score(score: Optional[float]) -> str:
    return f"{score:.1f}" if score is not None else "N/A"


def print_anime_table(
    records: Iterable[AnimeRecord], title: str, console: Console | None = None
):
    """Displays catalog records as a table."""
    console = console or Console()
    table = Table(title=title, box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Episodes", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Genres")

    rows = 0
    for record in records:
        table.add_row(
            str(record.id),
            record.title,
            str(record.episodes or "?"),
            _score(record.score),
            ", ".join(record.genres[:3]),
        )
        rows += 1

    if rows == 0:
        console.print("[yellow]No results found.[/yellow]")
        return
    console.print(table)


def print_anime_details(
    record: AnimeRecord,
    progress: Optional[ProgressEntry] = None,
    console: Console | None = None,
):
    """Displays one record, with the user's progress when it is tracked."""
    console = console or Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    if record.title_english and record.title_english != record.title:
        table.add_row("English:", record.title_english)
    if record.title_japanese:
        table.add_row("Japanese:", record.title_japanese)
    table.add_row("Type:", record.type or "Unknown")
    table.add_row("Episodes:", str(record.episodes or "?"))
    table.add_row("Score:", f"{_score(record.score)}/10")
    if record.aired:
        table.add_row("Aired:", record.aired)
    if record.studios:
        table.add_row("Studios:", ", ".join(record.studios))
    if record.genres:
        table.add_row("Genres:", ", ".join(record.genres))
    if record.rank:
        table.add_row("Rank:", f"#{format_number(record.rank)}")
    if record.members:
        table.add_row("Members:", format_number(record.members))

    if progress is not None:
        percent = calculate_progress(progress.current_episode, progress.total_episodes)
        table.add_row("", "")
        table.add_row("Status:", _status_text(progress.status))
        table.add_row(
            "Progress:",
            f"{progress.current_episode}/{progress.total_episodes or '?'} ({percent}%)",
        )
        if progress.rating:
            table.add_row("Your Rating:", f"{progress.rating}/10")

    if record.synopsis:
        table.add_row("", "")
        table.add_row("Synopsis:", record.synopsis)

    console.print(
        Panel(
            table,
            title=f"[bold]{record.title}[/bold] [dim]({record.id})[/dim]",
            border_style="cyan",
        )
    )


def print_progress_table(
    progress: dict[str, ProgressEntry], title: str, console: Console | None = None
):
    """Displays the tracked list."""
    console = console or Console()
    if not progress:
        console.print(
            "[yellow]No anime in your list yet.[/yellow] "
            "Start with [cyan]otakutrack add <ID>[/cyan]."
        )
        return

    table = Table(title=title, box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    table.add_column("Rating", justify="right")
    table.add_column("Updated", style="dim")

    for anime_id, entry in progress.items():
        percent = calculate_progress(entry.current_episode, entry.total_episodes)
        table.add_row(
            anime_id,
            entry.title or anime_id,
            _status_text(entry.status),
            f"{entry.current_episode}/{entry.total_episodes or '?'} ({percent}%)",
            f"{entry.rating}/10" if entry.rating else "-",
            format_date(entry.updated_at),
        )
    console.print(table)


def print_stats_table(stats: TrackerStats, console: Console | None = None):
    """Displays aggregate statistics for the tracked list."""
    console = console or Console()
    table = Table(
        title="Your Anime Stats",
        show_header=False,
        box=box.ROUNDED,
        padding=(0, 2),
    )
    table.add_column(style="bold cyan")
    table.add_column(justify="right")

    table.add_row("Total Anime", format_number(stats.total))
    for status, meta in STATUS_META.items():
        table.add_row(
            f"  {meta['label']}",
            Text(format_number(getattr(stats, status)), style=meta["style"]),
        )
    table.add_row("Episodes Watched", format_number(stats.total_episodes))
    table.add_row("Hours Watched", format_number(stats.total_hours))
    table.add_row("Average Score", f"{stats.average_score:.1f}")
    console.print(table)


def print_upcoming(episodes: list[dict[str, Any]], console: Console | None = None):
    """Displays the next episode to watch for each title in progress."""
    console = console or Console()
    if not episodes:
        console.print("[yellow]No upcoming episodes.[/yellow]")
        return
    table = Table(title="Up Next", box=box.SIMPLE, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Episode", justify="right")
    for item in episodes:
        table.add_row(str(item["id"]), item["title"], str(item["episode"]))
    console.print(table)


def print_config(config_path: Path, config: TrackerConfig):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key in sorted(TrackerConfig.get_ini_keys()):
        content += f"{key} = {getattr(config, key)}\n"
    content += f"data_dir = {config.data_dir}"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )
