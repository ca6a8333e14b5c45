"""
Data Models Layer.

This package contains the models that define the core data structures
used throughout the application: catalog records, tracking entries,
statistics and configuration.
"""

from .anime import AnimeRecord, SearchResult
from .config import TrackerConfig
from .progress import ProgressEntry, WatchStatus
from .stats import TrackerStats

__all__ = [
    "AnimeRecord",
    "ProgressEntry",
    "SearchResult",
    "TrackerConfig",
    "TrackerStats",
    "WatchStatus",
]
