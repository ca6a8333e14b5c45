"""
The authoritative local record of the user's tracked titles.

Every mutation is validated, written through to storage and only then
applied in memory, so a failed write leaves the previous state intact.
"""

import json
import logging
import time
from collections.abc import Callable
from typing import Any, Optional, Union

from pydantic import ValidationError

from otakutrack.exceptions import StorageError
from otakutrack.models.anime import AnimeRecord
from otakutrack.models.config import STORAGE_KEYS
from otakutrack.models.progress import ProgressEntry, WatchStatus
from otakutrack.models.stats import TrackerStats
from otakutrack.utils.formatting import (
    DEFAULT_EPISODE_LENGTH,
    estimate_watch_time,
    title_from_id,
)

log = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x400?text=No+Image"

AnimeId = Union[int, str]
ProgressCollection = dict[str, ProgressEntry]
Listener = Callable[[ProgressCollection], None]


def epoch_millis() -> int:
    return int(time.time() * 1000)


class ProgressStore:
    """
    Owns the ProgressCollection: a mapping of anime id to ProgressEntry.

    Ids are stored as strings, so `42` and `"42"` name the same entry.
    Mutators return True on success and False when nothing was written.
    """

    def __init__(
        self,
        storage,
        clock: Callable[[], int] = epoch_millis,
        episode_length_minutes: int = DEFAULT_EPISODE_LENGTH,
    ):
        """
        Args:
            storage: Key-value storage with `get_item`/`set_item`.
            clock: Returns the current time in epoch milliseconds.
            episode_length_minutes: Used to estimate hours watched.
        """
        self._storage = storage
        self._clock = clock
        self.episode_length_minutes = episode_length_minutes
        self._progress: ProgressCollection = {}
        self._listeners: list[Listener] = []

    # Persistence
    def load(self) -> ProgressCollection:
        """
        Reads the persisted collection. Missing data gives an empty list;
        corrupt data is discarded rather than failing startup.
        """
        try:
            raw = self._storage.get_item(STORAGE_KEYS["progress"])
            if not raw:
                self._progress = {}
            else:
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise ValueError(f"expected an object, got {type(data).__name__}")
                self._progress = {
                    str(anime_id): ProgressEntry.model_validate(entry)
                    for anime_id, entry in data.items()
                }
        except (StorageError, ValueError) as e:
            # ValidationError and JSONDecodeError are both ValueErrors
            log.error(f"Failed to load progress, starting with an empty list: {e}")
            self._progress = {}

        log.debug(f"Loaded {len(self._progress)} tracked titles.")
        return self.get_all()

    def _commit(self, progress: ProgressCollection) -> bool:
        """Writes `progress` to storage, then makes it the live collection."""
        try:
            payload = json.dumps(
                {anime_id: entry.to_storage() for anime_id, entry in progress.items()}
            )
            self._storage.set_item(STORAGE_KEYS["progress"], payload)
        except (StorageError, TypeError, ValueError) as e:
            log.error(f"Failed to save progress: {e}")
            return False

        self._progress = progress
        self._notify_listeners()
        return True

    # Mutations
    def add(self, anime_id: AnimeId, data: dict[str, Any]) -> bool:
        """
        Starts tracking a title. An existing entry for the same id is replaced.
        """
        now = self._clock()
        try:
            entry = ProgressEntry.model_validate(
                {**_caller_fields(data), "added_at": now, "updated_at": now}
            )
        except ValidationError as e:
            log.warning(f"Rejected progress for '{anime_id}': {e}")
            return False

        if str(anime_id) in self._progress:
            log.debug(f"Replacing existing progress for '{anime_id}'.")
        return self._commit({**self._progress, str(anime_id): entry})

    def update(self, anime_id: AnimeId, data: dict[str, Any]) -> bool:
        """Merges `data` into an existing entry. False if the id is not tracked."""
        current = self._progress.get(str(anime_id))
        if current is None:
            return False

        merged = {
            **current.model_dump(),
            **_caller_fields(data),
            "added_at": current.added_at,
            "updated_at": self._clock(),
        }
        try:
            entry = ProgressEntry.model_validate(merged)
        except ValidationError as e:
            log.warning(f"Rejected update for '{anime_id}': {e}")
            return False

        return self._commit({**self._progress, str(anime_id): entry})

    def set_episode(self, anime_id: AnimeId, episode: int) -> bool:
        """
        Quick episode update. Reaching the known total marks the title completed.
        """
        current = self._progress.get(str(anime_id))
        if current is None:
            return False

        changes: dict[str, Any] = {"current_episode": episode}
        total = current.total_episodes
        if total and episode >= total:
            changes["status"] = WatchStatus.COMPLETED
            changes["current_episode"] = total
        return self.update(anime_id, changes)

    def increment_episode(self, anime_id: AnimeId) -> bool:
        current = self._progress.get(str(anime_id))
        if current is None:
            return False
        return self.set_episode(anime_id, current.current_episode + 1)

    def remove(self, anime_id: AnimeId) -> bool:
        """Stops tracking a title. False if it was not tracked."""
        if str(anime_id) not in self._progress:
            return False
        progress = {k: v for k, v in self._progress.items() if k != str(anime_id)}
        return self._commit(progress)

    # Queries
    def get(self, anime_id: AnimeId) -> Optional[ProgressEntry]:
        entry = self._progress.get(str(anime_id))
        return entry.model_copy() if entry else None

    def get_all(self) -> ProgressCollection:
        """Returns a snapshot of the whole collection."""
        return {anime_id: entry.model_copy() for anime_id, entry in self._progress.items()}

    def get_by_status(self, status: Union[WatchStatus, str]) -> ProgressCollection:
        status = getattr(status, "value", status)
        return {
            anime_id: entry.model_copy()
            for anime_id, entry in self._progress.items()
            if entry.status.value == status
        }

    def filter(self, status_filter: str = "all") -> ProgressCollection:
        """'all' returns every entry; any other value filters by status."""
        if status_filter == "all":
            return self.get_all()
        return self.get_by_status(status_filter)

    def continue_watching(self, limit: int = 4) -> ProgressCollection:
        """The first `limit` titles currently being watched."""
        watching = self.get_by_status(WatchStatus.WATCHING)
        return dict(list(watching.items())[:limit])

    def next_episodes(self, limit: int = 5) -> list[dict[str, Any]]:
        """Next episode to watch for each of the first `limit` watching titles."""
        return [
            {
                "id": anime_id,
                "title": entry.title or f"Anime {anime_id}",
                "episode": entry.current_episode + 1,
            }
            for anime_id, entry in list(
                self.get_by_status(WatchStatus.WATCHING).items()
            )[:limit]
        ]

    def compute_stats(self) -> TrackerStats:
        """Aggregates the collection. Has no side effects."""
        stats = TrackerStats(total=len(self._progress))
        ratings = []

        for entry in self._progress.values():
            status_field = entry.status.value
            setattr(stats, status_field, getattr(stats, status_field) + 1)
            stats.total_episodes += entry.current_episode
            if entry.rating is not None:
                ratings.append(entry.rating)

        stats.total_hours = estimate_watch_time(
            stats.total_episodes, self.episode_length_minutes
        )
        if ratings:
            stats.average_score = round(sum(ratings) / len(ratings), 1)
        return stats

    def display_record(self, anime_id: AnimeId) -> Optional[AnimeRecord]:
        """
        Builds a placeholder AnimeRecord from the stored entry, for use when
        the catalog cannot provide details.
        """
        entry = self._progress.get(str(anime_id))
        if entry is None:
            return None
        return AnimeRecord(
            id=anime_id,
            title=entry.title or title_from_id(str(anime_id)),
            image=entry.image or PLACEHOLDER_IMAGE,
            episodes=entry.total_episodes,
            synopsis="No description available.",
            genres=["Unknown"],
        )

    # Change notification
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Registers `listener` to receive the collection after each successful
        mutation. Returns a function that unregisters it; calling that more
        than once is harmless. Registering the same listener twice has no
        effect.
        """
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify_listeners(self) -> None:
        # Iterate over a copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(self.get_all())
            except Exception:
                log.exception("Progress listener raised an error.")

    def __len__(self) -> int:
        return len(self._progress)

    def __contains__(self, anime_id: object) -> bool:
        return str(anime_id) in self._progress


def _caller_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Maps persisted (camelCase) names to attribute names and drops timestamps,
    which are owned by the store.
    """
    names = {
        field.alias or name: name for name, field in ProgressEntry.model_fields.items()
    }
    fields = {names.get(k, k): v for k, v in data.items()}
    fields.pop("added_at", None)
    fields.pop("updated_at", None)
    return fields
