import aiohttp
import pytest

from otakutrack.api import fallback
from otakutrack.api.client import CatalogClient
from otakutrack.exceptions import CatalogError, MalformedResponseError
from otakutrack.storage.cache import CacheStore

from .conftest import FakeClock


def jikan_anime(mal_id=40748, title="Jujutsu Kaisen", **extra):
    anime = {
        "mal_id": mal_id,
        "title": title,
        "title_english": "JUJUTSU KAISEN",
        "title_japanese": "呪術廻戦",
        "images": {"jpg": {"large_image_url": f"https://cdn.example/{mal_id}.jpg"}},
        "trailer": {"youtube_id": "pkKu9hLT-t8"},
        "score": 8.6,
        "episodes": 24,
        "status": "Finished Airing",
        "synopsis": "Idly indulging in baseless paranormal activities " * 10,
        "genres": [
            {"mal_id": 1, "name": "Action"},
            {"mal_id": 10, "name": "Fantasy"},
            {"mal_id": 37, "name": "Supernatural"},
            {"mal_id": 23, "name": "School"},
        ],
        "studios": [{"mal_id": 569, "name": "MAPPA"}],
        "year": 2020,
        "season": "fall",
        "duration": "23 min per ep",
        "rating": "R - 17+ (violence & profanity)",
        "type": "TV",
        "aired": {"string": "Oct 3, 2020 to Mar 27, 2021"},
        "popularity": 20,
        "rank": 120,
        "members": 3000000,
        "favorites": 60000,
    }
    anime.update(extra)
    return anime


class FakeAPI:
    """Stands in for the HTTP layer, keyed by endpoint."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    async def __call__(self, endpoint, params):
        self.calls.append((endpoint, params))
        response = self.responses.get(endpoint, CatalogError("HTTP 404"))
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def cache_clock():
    return FakeClock(start=0)


@pytest.fixture
def client(cache_clock):
    return CatalogClient(cache=CacheStore(ttl_seconds=300, clock=cache_clock))


def install(monkeypatch, client, responses):
    api = FakeAPI(responses)
    monkeypatch.setattr(client, "_fetch_json", api)
    return api


MALFORMED_PAYLOADS = [
    {"unexpected": True},
    {"data": "nope"},
    {"data": [{"title": "No id"}]},
    [1, 2, 3],
]


# ---------- search ----------
async def test_search_normalizes_records(monkeypatch, client):
    install(
        monkeypatch,
        client,
        {
            "anime": {
                "data": [jikan_anime(), jikan_anime(mal_id=51009, title="Jujutsu Kaisen 2")],
                "pagination": {"has_next_page": True, "last_visible_page": 3},
            }
        },
    )
    result = await client.search("jujutsu")

    assert [r.id for r in result.records] == [40748, 51009]
    first = result.records[0]
    assert first.title_english == "JUJUTSU KAISEN"
    assert first.image == "https://cdn.example/40748.jpg"
    assert first.genres == ["Action", "Fantasy", "Supernatural", "School"]
    assert first.studios == ["MAPPA"]
    assert first.aired == "Oct 3, 2020 to Mar 27, 2021"
    assert result.has_next_page is True


async def test_search_sends_expected_params(monkeypatch, client):
    api = install(monkeypatch, client, {"anime": {"data": [], "pagination": {}}})
    await client.search("naruto", page=2)
    assert api.calls == [
        ("anime", {"q": "naruto", "page": 2, "limit": 20, "sfw": "true"})
    ]


async def test_search_is_cached_within_ttl(monkeypatch, client, cache_clock):
    api = install(monkeypatch, client, {"anime": {"data": [jikan_anime()]}})

    await client.search("jujutsu", 1)
    await client.search("jujutsu", 1)
    assert len(api.calls) == 1

    cache_clock.advance(301)
    result = await client.search("jujutsu", 1)
    assert len(api.calls) == 2
    assert result.records[0].title == "Jujutsu Kaisen"


async def test_cached_search_is_normalized_fresh(monkeypatch, client):
    install(monkeypatch, client, {"anime": {"data": [jikan_anime()]}})
    first = await client.search("jujutsu")
    second = await client.search("jujutsu")
    assert first == second
    assert first.records[0] is not second.records[0]


async def test_different_pages_are_cached_separately(monkeypatch, client):
    api = install(monkeypatch, client, {"anime": {"data": []}})
    await client.search("x", 1)
    await client.search("x", 2)
    assert len(api.calls) == 2


async def test_search_falls_back_on_transport_failure(monkeypatch, client):
    install(monkeypatch, client, {"anime": CatalogError("connection refused")})
    result = await client.search("Jujutsu")
    assert result.records
    assert all("jujutsu" in r.title.lower() for r in result.records)
    assert result.has_next_page is False


async def test_search_fallback_is_case_insensitive_and_may_be_empty(monkeypatch, client):
    install(monkeypatch, client, {})
    assert [r.title for r in (await client.search("SLAYER")).records] == ["Demon Slayer"]
    assert (await client.search("zzz")).records == []


@pytest.mark.parametrize("payload", MALFORMED_PAYLOADS)
async def test_search_falls_back_on_malformed_response(monkeypatch, client, payload):
    install(monkeypatch, client, {"anime": payload})
    result = await client.search("demon")
    assert [r.id for r in result.records] == ["demon-slayer"]


async def test_failed_requests_are_not_cached(monkeypatch, client):
    api = install(monkeypatch, client, {"anime": MalformedResponseError("bad json")})
    await client.search("x")
    await client.search("x")
    assert len(api.calls) == 2


@pytest.mark.parametrize("payload", MALFORMED_PAYLOADS)
async def test_malformed_responses_are_not_cached(monkeypatch, client, payload):
    api = install(monkeypatch, client, {"anime": payload})
    await client.search("demon")
    await client.search("demon")
    assert len(api.calls) == 2
    assert len(client.cache) == 0


async def test_malformed_details_are_not_cached(monkeypatch, client):
    api = install(monkeypatch, client, {"anime/5/full": {"data": []}})
    assert await client.get_details(5) is None
    assert await client.get_details(5) is None
    assert len(api.calls) == 2


async def test_unreachable_host_falls_back(monkeypatch, cache_clock):
    def refuse(self, url, **kwargs):
        raise aiohttp.ClientConnectionError(f"Cannot connect to {url}")

    monkeypatch.setattr(aiohttp.ClientSession, "get", refuse)
    client = CatalogClient(cache=CacheStore(clock=cache_clock))
    async with client:
        result = await client.search("Jujutsu")
    assert result.records[0].title == "Jujutsu Kaisen"
    assert len(client.cache) == 0


# ---------- trending ----------
async def test_trending_is_compact(monkeypatch, client):
    api = install(monkeypatch, client, {"top/anime": {"data": [jikan_anime()]}})
    records = await client.get_trending("week")

    assert api.calls == [("top/anime", {"filter": "airing", "limit": 20})]
    assert records[0].genres == ["Action", "Fantasy", "Supernatural"]
    assert len(records[0].synopsis) == 153
    assert records[0].synopsis.endswith("...")


async def test_trending_period_does_not_change_request(monkeypatch, client):
    api = install(monkeypatch, client, {"top/anime": {"data": []}})
    await client.get_trending("today")
    await client.get_trending("month")
    assert len(api.calls) == 1


async def test_trending_falls_back(monkeypatch, client):
    install(monkeypatch, client, {})
    records = await client.get_trending()
    assert [r.id for r in records] == [item["id"] for item in fallback.FALLBACK_TRENDING]


# ---------- details ----------
async def test_details(monkeypatch, client):
    api = install(monkeypatch, client, {"anime/40748/full": {"data": jikan_anime()}})
    record = await client.get_details(40748)
    assert api.calls == [("anime/40748/full", {})]
    assert record.trailer == "pkKu9hLT-t8"
    assert record.members == 3000000
    assert len(record.genres) == 4


async def test_details_missing_optional_fields(monkeypatch, client):
    install(
        monkeypatch,
        client,
        {"anime/1/full": {"data": {"mal_id": 1, "title": "Cowboy Bebop", "genres": None}}},
    )
    record = await client.get_details(1)
    assert record.title == "Cowboy Bebop"
    assert record.image is None
    assert record.genres == []
    assert record.score is None


async def test_details_failure_returns_none(monkeypatch, client):
    install(monkeypatch, client, {})
    assert await client.get_details("jujutsu-kaisen") is None


async def test_details_malformed_returns_none(monkeypatch, client):
    install(monkeypatch, client, {"anime/5/full": {"data": []}})
    assert await client.get_details(5) is None


# ---------- random ----------
async def test_random(monkeypatch, client):
    install(monkeypatch, client, {"random/anime": {"data": jikan_anime(mal_id=7)}})
    record = await client.get_random()
    assert record.id == 7
    assert len(record.genres) == 3


async def test_random_falls_back(monkeypatch, client):
    install(monkeypatch, client, {})
    record = await client.get_random()
    assert record.id in {item["id"] for item in fallback.FALLBACK_RANDOM}
