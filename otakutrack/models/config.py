"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator

JIKAN_BASE_URL = "https://api.jikan.moe/v4"

# Keys under which state lives in the local key-value storage
STORAGE_KEYS = {
    "progress": "otakutrack_progress",
    "settings": "otakutrack_settings",
    "cache": "otakutrack_cache",
}

# Display metadata per watch status
STATUS_META = {
    "watching": {"label": "Watching", "color": "#3b82f6", "style": "blue"},
    "completed": {"label": "Completed", "color": "#10b981", "style": "green"},
    "on_hold": {"label": "On Hold", "color": "#f59e0b", "style": "yellow"},
    "dropped": {"label": "Dropped", "color": "#ef4444", "style": "red"},
    "plan_to_watch": {
        "label": "Plan to Watch",
        "color": "#8b5cf6",
        "style": "magenta",
    },
}


class TrackerConfig(BaseModel):
    """A validated configuration model for the application."""

    # Catalog API
    api_base_url: str = JIKAN_BASE_URL
    request_limit: int = 20
    cache_ttl_seconds: int = 300

    # Presentation
    search_debounce_ms: int = 300

    # Statistics
    episode_length_minutes: int = 24

    # Internal fields not loaded from INI file
    data_dir: str = Field(default="", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensures the API base URL is absolute and has no trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("API base URL must start with http:// or https://.")
        return v.rstrip("/")

    @field_validator("request_limit")
    @classmethod
    def validate_request_limit(cls, v: int) -> int:
        """The catalog API caps page size at 25."""
        if v < 1 or v > 25:
            raise ValueError("Request limit must be between 1 and 25.")
        return v

    @field_validator("cache_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Cache TTL must be a positive number of seconds.")
        return v

    @field_validator("search_debounce_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Search debounce cannot be negative.")
        return v

    @field_validator("episode_length_minutes")
    @classmethod
    def validate_episode_length(cls, v: int) -> int:
        if v < 1 or v > 600:
            raise ValueError("Episode length must be between 1 and 600 minutes.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"data_dir"}
        return {key for key in cls.model_fields if key not in internal_fields}
