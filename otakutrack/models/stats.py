"""
Dataclass holding aggregate statistics over the tracked list.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class TrackerStats:
    """Counts per status plus episode, hour and score totals."""

    total: int = 0
    watching: int = 0
    completed: int = 0
    on_hold: int = 0
    dropped: int = 0
    plan_to_watch: int = 0
    total_episodes: int = 0
    total_hours: float = 0.0
    average_score: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
