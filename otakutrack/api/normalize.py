"""
Converts catalog API documents into AnimeRecord objects.
"""

from typing import Any, Optional

from pydantic import ValidationError

from otakutrack.exceptions import MalformedResponseError
from otakutrack.models.anime import AnimeRecord
from otakutrack.utils.formatting import truncate_text

COMPACT_SYNOPSIS_LENGTH = 150
COMPACT_GENRE_COUNT = 3


def _names(items: Any) -> list[str]:
    """Extracts 'name' from a list of {mal_id, name, ...} objects."""
    if not isinstance(items, list):
        return []
    return [item["name"] for item in items if isinstance(item, dict) and item.get("name")]


def _image_url(anime: dict[str, Any]) -> Optional[str]:
    images = anime.get("images")
    if not isinstance(images, dict):
        return None
    for fmt in ("jpg", "webp"):
        if isinstance(variant := images.get(fmt), dict):
            if url := variant.get("large_image_url") or variant.get("image_url"):
                return url
    return None


def _aired(anime: dict[str, Any]) -> Optional[str]:
    aired = anime.get("aired")
    if isinstance(aired, dict):
        return aired.get("string")
    return aired if isinstance(aired, str) else None


def normalize_anime(anime: Any, compact: bool = False) -> AnimeRecord:
    """
    Maps one catalog document onto an AnimeRecord.

    Args:
        anime: A single anime object from the API.
        compact: Shorten the synopsis and keep only the first few genres,
        for list views.

    Raises:
        MalformedResponseError: If the document lacks an id or title, or a
        field has an impossible type.
    """
    if not isinstance(anime, dict):
        raise MalformedResponseError(f"Expected an anime object, got {type(anime).__name__}.")
    if anime.get("mal_id") is None or not anime.get("title"):
        raise MalformedResponseError("Anime object is missing 'mal_id' or 'title'.")

    genres = _names(anime.get("genres"))
    synopsis = anime.get("synopsis")
    if compact:
        genres = genres[:COMPACT_GENRE_COUNT]
        synopsis = truncate_text(synopsis, COMPACT_SYNOPSIS_LENGTH)

    trailer = anime.get("trailer")
    try:
        return AnimeRecord(
            id=anime["mal_id"],
            title=anime["title"],
            title_english=anime.get("title_english"),
            title_japanese=anime.get("title_japanese"),
            image=_image_url(anime),
            trailer=trailer.get("youtube_id") if isinstance(trailer, dict) else None,
            score=anime.get("score"),
            episodes=anime.get("episodes"),
            status=anime.get("status"),
            synopsis=synopsis,
            genres=genres,
            studios=_names(anime.get("studios")),
            year=anime.get("year"),
            season=anime.get("season"),
            duration=anime.get("duration"),
            rating=anime.get("rating"),
            type=anime.get("type"),
            aired=_aired(anime),
            popularity=anime.get("popularity"),
            rank=anime.get("rank"),
            members=anime.get("members"),
            favorites=anime.get("favorites"),
        )
    except ValidationError as e:
        raise MalformedResponseError(f"Invalid anime object {anime.get('mal_id')}: {e}") from e


def extract_data(response: Any) -> Any:
    """Returns the 'data' member of an API envelope."""
    if not isinstance(response, dict) or "data" not in response:
        raise MalformedResponseError("Response has no 'data' member.")
    return response["data"]


def normalize_list(response: Any, compact: bool = False) -> list[AnimeRecord]:
    data = extract_data(response)
    if not isinstance(data, list):
        raise MalformedResponseError("Expected 'data' to be a list.")
    return [normalize_anime(item, compact=compact) for item in data]
