"""
Pydantic models for the user's persisted tracking state.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class WatchStatus(str, Enum):
    """Where the user is with a title."""

    WATCHING = "watching"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DROPPED = "dropped"
    PLAN_TO_WATCH = "plan_to_watch"


class ProgressEntry(BaseModel):
    """
    Tracking state for one title.

    Attribute names are snake_case; the persisted layout uses the camelCase
    aliases (`currentEpisode`, `totalEpisodes`, ...). Either spelling is
    accepted on input.
    """

    title: Optional[str] = None
    image: Optional[str] = None
    current_episode: int = Field(default=0, ge=0, alias="currentEpisode")
    total_episodes: Optional[int] = Field(default=None, ge=1, alias="totalEpisodes")
    status: WatchStatus = WatchStatus.PLAN_TO_WATCH
    rating: Optional[int] = Field(default=None, ge=1, le=10)
    added_at: Optional[int] = Field(default=None, alias="addedAt")
    updated_at: Optional[int] = Field(default=None, alias="updatedAt")

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True
        extra = "ignore"

    @field_validator("current_episode", mode="before")
    @classmethod
    def default_current_episode(cls, v: Any) -> Any:
        return 0 if v in (None, "") else v

    @field_validator("total_episodes", "rating", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        # 0 and "" both mean "unknown" / "not rated"
        if v in (None, "", 0, "0"):
            return None
        return v

    @model_validator(mode="after")
    def clamp_to_total(self) -> "ProgressEntry":
        """Keeps the current episode within a known total."""
        if self.total_episodes is not None and self.current_episode > self.total_episodes:
            self.current_episode = self.total_episodes
        return self

    def to_storage(self) -> dict[str, Any]:
        """Serializes the entry using the persisted field names."""
        return self.model_dump(by_alias=True, mode="json")
