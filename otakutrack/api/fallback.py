"""
Static catalog data served when the remote API cannot be reached.
"""

import random
from typing import Any

from otakutrack.models.anime import AnimeRecord

FALLBACK_SEARCH: list[dict[str, Any]] = [
    {
        "id": "jujutsu-kaisen",
        "title": "Jujutsu Kaisen",
        "image": "https://s4.anilist.co/file/anilistcdn/media/anime/cover/large/bx113415-bbBWj4pEFseh.jpg",
        "score": 8.8,
        "episodes": 24,
        "synopsis": (
            "A high school student gains control of an extremely powerful cursed "
            "spirit and gets enrolled in the Tokyo Prefectural Jujutsu High School."
        ),
        "genres": ["Action", "Fantasy", "Supernatural"],
    },
    {
        "id": "demon-slayer",
        "title": "Demon Slayer",
        "image": "https://s4.anilist.co/file/anilistcdn/media/anime/cover/large/bx101922-PEn1CTc93blC.jpg",
        "score": 8.7,
        "episodes": 26,
        "synopsis": (
            "A family is attacked by demons and only two members survive - Tanjiro "
            "and his sister Nezuko, who is turning into a demon slowly."
        ),
        "genres": ["Action", "Historical", "Supernatural"],
    },
]

FALLBACK_TRENDING: list[dict[str, Any]] = [
    {
        "id": "spy-family",
        "title": "Spy x Family",
        "image": "https://s4.anilist.co/file/anilistcdn/media/anime/cover/large/bx140960-Yl5M3AiLZAMq.png",
        "score": 8.9,
        "episodes": 12,
        "synopsis": (
            "A spy must create a fake family to execute a mission, not realizing "
            "his wife is an assassin and his daughter is a telepath."
        ),
        "genres": ["Action", "Comedy", "Family"],
        "rank": 1,
        "popularity": 1,
    },
    {
        "id": "chainsaw-man",
        "title": "Chainsaw Man",
        "image": "https://s4.anilist.co/file/anilistcdn/media/anime/cover/large/bx127230-FlochcFsyoF4.png",
        "score": 8.6,
        "episodes": 12,
        "synopsis": (
            "Denji is a young man trapped in poverty, working off his deceased "
            "father's debt to the yakuza by working as a Devil Hunter."
        ),
        "genres": ["Action", "Horror", "Supernatural"],
        "rank": 2,
        "popularity": 2,
    },
]

FALLBACK_RANDOM: list[dict[str, Any]] = [
    {
        "id": "attack-on-titan",
        "title": "Attack on Titan",
        "image": "https://s4.anilist.co/file/anilistcdn/media/anime/cover/large/bx16498-8Y8wXbIBWYlQ.jpg",
        "score": 8.9,
        "episodes": 87,
        "synopsis": (
            "Humanity fights for survival against giant humanoid Titans behind "
            "enormous walls."
        ),
        "genres": ["Action", "Drama", "Fantasy"],
    },
    {
        "id": "one-piece",
        "title": "One Piece",
        "image": "https://s4.anilist.co/file/anilistcdn/media/anime/cover/large/bx21-YCNHwbMZg9rF.jpg",
        "score": 8.8,
        "episodes": 1000,
        "synopsis": (
            "Monkey D. Luffy explores the Grand Line to find the legendary "
            'treasure known as the "One Piece".'
        ),
        "genres": ["Action", "Adventure", "Comedy"],
    },
]


def search_fallback(query: str) -> list[AnimeRecord]:
    """Fallback titles whose name contains `query`, ignoring case."""
    needle = query.lower()
    return [
        AnimeRecord(**item)
        for item in FALLBACK_SEARCH
        if needle in item["title"].lower()
    ]


def trending_fallback() -> list[AnimeRecord]:
    return [AnimeRecord(**item) for item in FALLBACK_TRENDING]


def random_fallback() -> AnimeRecord:
    return AnimeRecord(**random.choice(FALLBACK_RANDOM))  # noqa: S311
