"""
Async client for the Jikan (MyAnimeList) catalog API with response caching
and fallback data.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

import aiohttp

from otakutrack.exceptions import CatalogError, MalformedResponseError
from otakutrack.models.anime import AnimeRecord, SearchResult
from otakutrack.models.config import JIKAN_BASE_URL
from otakutrack.storage.cache import CacheStore

from . import fallback
from .normalize import extract_data, normalize_anime, normalize_list
from .rate_limiter import AdaptiveRateLimiter

log = logging.getLogger(__name__)

TRENDING_PERIODS = ("now", "today", "week", "month")


class CatalogClient:
    """
    Fetches and normalizes anime metadata.

    Features:
    - TTL cache shared by all endpoints, consulted before the network
    - Rate limiting to the upstream quota (3 calls/s, 60 calls/min)
    - Static fallback data when the API is unreachable

    None of the public methods raise on transport errors: search, trending
    and random degrade to embedded data, details degrade to None.
    """

    def __init__(
        self,
        cache: Optional[CacheStore] = None,
        base_url: str = JIKAN_BASE_URL,
        request_limit: int = 20,
        rate_limiter: Optional[AdaptiveRateLimiter] = None,
    ):
        """
        Initializes the API client.

        Args:
            cache: The response cache. A fresh 5 minute cache is created if omitted.
            base_url: Root URL of the catalog API.
            request_limit: Page size for search and trending requests.
            rate_limiter: Overrides the default upstream rate limiter.
        """
        self.base_url = base_url.rstrip("/")
        self.request_limit = request_limit
        self.cache = cache if cache is not None else CacheStore()

        self._session: Optional[aiohttp.ClientSession] = None
        self._rate_limiter = rate_limiter or AdaptiveRateLimiter()

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Accept": "application/json",
                    "User-Agent": "otakutrack/1.0",
                },
                timeout=aiohttp.ClientTimeout(total=30, connect=10),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _fetch_json(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """
        Performs a rate-limited GET against the API and decodes the JSON body.

        Raises:
            CatalogError: On connection problems, timeouts and non-2xx statuses.
            MalformedResponseError: If the body is not valid JSON.
        """
        await self._initialize_session()
        await self._rate_limiter.acquire()

        url = f"{self.base_url}/{endpoint}"
        start_time = time.monotonic()
        try:
            async with self._session.get(url, params=params) as r:
                if r.status == 429:
                    await self._rate_limiter.on_429()
                r.raise_for_status()
                payload = await r.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CatalogError(f"Request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise MalformedResponseError(f"Invalid JSON from {endpoint}: {e}") from e

        duration_ms = (time.monotonic() - start_time) * 1000
        log.debug(f"GET {endpoint} completed in {duration_ms:.0f} ms")
        return payload

    async def api_call(
        self,
        endpoint: str,
        parse: Optional[Callable[[Any], Any]] = None,
        **params: Any,
    ) -> Any:
        """
        Returns the response for a request, from the cache when fresh.

        The raw payload is cached, and `parse` runs on it on every read. A
        payload is only cached once the request succeeded and `parse` accepted it.
        """
        params = {k: v for k, v in params.items() if v is not None}
        key = CacheStore.make_key(endpoint, params)

        cached = self.cache.get(key)
        if cached is not None:
            log.debug(f"Cache hit for {key}")
            return parse(cached) if parse else cached

        payload = await self._fetch_json(endpoint, params)
        result = parse(payload) if parse else payload
        self.cache.put(key, payload)
        return result

    # Public API Methods
    async def search(self, query: str, page: int = 1) -> SearchResult:
        """Searches titles by name. Falls back to embedded titles on failure."""

        def parse(response: Any) -> SearchResult:
            records = normalize_list(response)
            pagination = response.get("pagination")
            return SearchResult(
                records=records,
                pagination=pagination if isinstance(pagination, dict) else {},
            )

        try:
            return await self.api_call(
                "anime",
                parse=parse,
                q=query,
                page=page,
                limit=self.request_limit,
                sfw="true",
            )
        except CatalogError as e:
            log.warning(f"Search for '{query}' failed, using offline results: {e}")
            return SearchResult(
                records=fallback.search_fallback(query),
                pagination={"has_next_page": False},
            )

    async def get_trending(self, period: str = "now") -> List[AnimeRecord]:
        """
        Returns the top airing titles.

        `period` is accepted for compatibility with the trending tabs but the
        API offers a single airing ranking, so every period gets the same list.
        """
        if period not in TRENDING_PERIODS:
            log.debug(f"Unknown trending period '{period}', using 'now'.")
        try:
            return await self.api_call(
                "top/anime",
                parse=lambda r: normalize_list(r, compact=True),
                filter="airing",
                limit=self.request_limit,
            )
        except CatalogError as e:
            log.warning(f"Trending request failed, using offline list: {e}")
            return fallback.trending_fallback()

    async def get_details(self, anime_id: Union[int, str]) -> Optional[AnimeRecord]:
        """Full record for one title, or None if it cannot be fetched."""
        try:
            return await self.api_call(
                f"anime/{anime_id}/full",
                parse=lambda r: normalize_anime(extract_data(r)),
            )
        except CatalogError as e:
            log.warning(f"Details for '{anime_id}' unavailable: {e}")
            return None

    async def get_random(self) -> AnimeRecord:
        """A random title. Picks from embedded titles on failure."""
        try:
            return await self.api_call(
                "random/anime",
                parse=lambda r: normalize_anime(extract_data(r), compact=True),
            )
        except CatalogError as e:
            log.warning(f"Random request failed, using offline pick: {e}")
            return fallback.random_fallback()
