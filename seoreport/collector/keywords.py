"""
Keyword research collectors.

Question keywords for content ideas, and similar / related / long-tail
suggestions around a seed keyword.
"""

import asyncio
import logging
from typing import Any, List

from seoreport.models import KeywordQuestion, KeywordResearch, KeywordSuggestion
from seoreport.utils import to_float, to_int

from .client import SeRankingClient
from .fallback import with_default
from .payload import rows

logger = logging.getLogger(__name__)

SWEET_SPOT_MIN_VOLUME = 1000
SWEET_SPOT_MAX_DIFFICULTY = 40
SWEET_SPOT_LIMIT = 20


def normalize_questions(payload: Any) -> List[KeywordQuestion]:
    return [
        KeywordQuestion(
            keyword=k.get("keyword") or "",
            volume=to_int(k.get("volume")),
            difficulty=to_int(k.get("difficulty")),
            cpc=to_float(k.get("cpc")),
        )
        for k in rows(payload, "keywords")
    ]


def normalize_suggestions(payload: Any) -> List[KeywordSuggestion]:
    return [
        KeywordSuggestion(
            keyword=k.get("keyword") or "",
            volume=to_int(k.get("volume")),
            difficulty=to_int(k.get("difficulty")),
            cpc=to_float(k.get("cpc")),
            competition=to_float(k.get("competition")),
        )
        for k in rows(payload, "keywords")
    ]


def sweet_spot(suggestions: List[KeywordSuggestion]) -> List[KeywordSuggestion]:
    """High-volume, low-difficulty suggestions."""
    return [
        k for k in suggestions
        if k.volume >= SWEET_SPOT_MIN_VOLUME and k.difficulty < SWEET_SPOT_MAX_DIFFICULTY
    ][:SWEET_SPOT_LIMIT]


def build_keyword_research(
    seed_keyword: str,
    similar: List[KeywordSuggestion],
    related: List[KeywordSuggestion],
    long_tail: List[KeywordSuggestion],
) -> KeywordResearch:
    return KeywordResearch(
        seed_keyword=seed_keyword,
        similar_keywords=similar,
        related_keywords=related,
        long_tail_keywords=long_tail,
        sweet_spot_keywords=sweet_spot(similar + related + long_tail),
    )


async def fetch_keyword_questions(
    client: SeRankingClient,
    keyword: str,
    source: str = "us",
    limit: int = 10,
) -> List[KeywordQuestion]:
    payload = await client.request("/keywords/questions", {"keyword": keyword, "source": source, "limit": limit})
    return normalize_questions(payload)


async def fetch_suggestions(
    client: SeRankingClient,
    kind: str,
    keyword: str,
    source: str = "us",
    limit: int = 20,
) -> List[KeywordSuggestion]:
    """``kind`` is one of similar, related, long-tail."""
    payload = await client.request(f"/keywords/{kind}", {"keyword": keyword, "source": source, "limit": limit})
    return normalize_suggestions(payload)


async def fetch_keyword_research(
    client: SeRankingClient,
    seed_keyword: str,
    source: str = "us",
    limit: int = 20,
) -> KeywordResearch:
    similar, related, long_tail = await asyncio.gather(
        with_default(fetch_suggestions(client, "similar", seed_keyword, source, limit), [], "similar keywords"),
        with_default(fetch_suggestions(client, "related", seed_keyword, source, limit), [], "related keywords"),
        with_default(fetch_suggestions(client, "long-tail", seed_keyword, source, limit), [], "long-tail keywords"),
    )
    return build_keyword_research(seed_keyword, similar, related, long_tail)
