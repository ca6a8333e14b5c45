"""
Pydantic model for anime metadata returned by the catalog.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


class AnimeRecord(BaseModel):
    """
    A normalized, display-ready description of one title.

    Only `id` and `title` are guaranteed; every other field is optional and
    defaults to None (or an empty list) when the source does not provide it.
    """

    id: Union[int, str]
    title: str

    title_english: Optional[str] = None
    title_japanese: Optional[str] = None
    image: Optional[str] = None
    trailer: Optional[str] = None

    score: Optional[float] = Field(default=None, ge=0, le=10)
    episodes: Optional[int] = None
    status: Optional[str] = None
    synopsis: Optional[str] = None
    genres: list[str] = Field(default_factory=list)
    studios: list[str] = Field(default_factory=list)

    year: Optional[int] = None
    season: Optional[str] = None
    duration: Optional[str] = None
    rating: Optional[str] = None
    type: Optional[str] = None
    aired: Optional[str] = None

    popularity: Optional[int] = None
    rank: Optional[int] = None
    members: Optional[int] = None
    favorites: Optional[int] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Title cannot be empty.")
        return v

    @field_validator("genres", "studios", mode="before")
    @classmethod
    def none_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v


class SearchResult(BaseModel):
    """One page of search results plus the upstream pagination block."""

    records: list[AnimeRecord] = Field(default_factory=list)
    pagination: dict[str, Any] = Field(default_factory=dict)

    @property
    def has_next_page(self) -> bool:
        return bool(self.pagination.get("has_next_page", False))
