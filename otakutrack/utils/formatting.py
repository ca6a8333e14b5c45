"""
Helper functions for formatting data into human-readable strings.
"""

import re
from datetime import datetime
from typing import Optional

from otakutrack.models.config import STATUS_META

DEFAULT_EPISODE_LENGTH = 24


def calculate_progress(current: int, total: Optional[int]) -> int:
    """Returns the watched share as a whole percentage, capped at 100."""
    if not total:
        return 0
    return min(round(current / total * 100), 100)


def estimate_watch_time(
    episodes: int, episode_length: int = DEFAULT_EPISODE_LENGTH
) -> float:
    """Estimates hours spent on `episodes`, rounded to one decimal."""
    return round(episodes * episode_length / 60, 1)


def truncate_text(text: Optional[str], length: int = 100) -> Optional[str]:
    """Cuts `text` to `length` characters, adding an ellipsis when shortened."""
    if text is None:
        return None
    return text[:length] + "..." if len(text) > length else text


def get_status_label(status: str) -> str:
    """Maps a status value such as 'on_hold' to its label ('On Hold')."""
    status = getattr(status, "value", status)
    return STATUS_META.get(status, {}).get("label", status)


def get_status_color(status: str) -> str:
    status = getattr(status, "value", status)
    return STATUS_META.get(status, {}).get("color", "#6b7280")


def format_number(num: float) -> str:
    """Formats a number with thousands separators (e.g., '12,345')."""
    if isinstance(num, float) and not num.is_integer():
        return f"{num:,.1f}"
    return f"{int(num):,}"


def format_date(epoch_ms: Optional[int]) -> str:
    """Formats an epoch-milliseconds timestamp as 'October 18, 2026'."""
    if not epoch_ms:
        return "Unknown"
    date = datetime.fromtimestamp(epoch_ms / 1000)
    return f"{date.strftime('%B')} {date.day}, {date.year}"


def title_from_id(anime_id: str) -> str:
    """Builds a readable title from a slug id ('spy-family' -> 'Spy Family')."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), str(anime_id).replace("-", " "))
