"""
AI Search Collectors

Visibility of the target in AI answer engines:
- Overview: brand/link presence per engine
- Leaderboard: share of voice against competitors
- Prompts: the questions whose answers mention or cite the target
- Brand discovery
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from seoreport.models import (
    AI_ENGINES,
    AILeaderboard,
    AIPrompt,
    AISearchOverview,
    EnginePresence,
    LeaderboardEntry,
    PromptClassification,
)
from seoreport.utils import brand_from_domain, round_half_up, to_float, to_int

from .client import SeRankingClient
from .fallback import with_default
from .payload import as_dict, as_list, nested, rows

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200

# Compared against when the target has no competitors of its own
DEFAULT_LEADERBOARD_COMPETITORS = [
    {"target": "semrush.com", "brand": "Semrush"},
    {"target": "ahrefs.com", "brand": "Ahrefs"},
    {"target": "moz.com", "brand": "Moz"},
]


def truncate_text(text: Optional[str], max_length: int = SNIPPET_LENGTH) -> str:
    """Collapse whitespace and cut to ``max_length`` characters plus an ellipsis."""
    if not text:
        return ""
    cleaned = re.sub(r"\s+", " ", text).strip()
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[:max_length].strip() + "..."


def classify_prompt(value: Any) -> PromptClassification:
    """Map the provider's "Link" / "Brand" / "Brand_Link" strings."""
    lowered = str(value or "").lower()
    if lowered == "link":
        return PromptClassification.LINK
    if lowered == "brand":
        return PromptClassification.BRAND
    return PromptClassification.BRAND_LINK


# =============================================================================
# NORMALIZERS
# =============================================================================

def normalize_engine_presence(payload: Any, engine: str) -> EnginePresence:
    summary = as_dict(payload).get("summary")
    return EnginePresence(
        engine=engine,
        brand_presence=to_int(nested(summary, "brand_presence", "current")),
        link_presence=to_int(nested(summary, "link_presence", "current")),
        traffic=to_int(nested(summary, "ai_opportunity_traffic", "current")),
    )


def build_ai_overview(
    target: str,
    aggregate: EnginePresence,
    engines: List[EnginePresence],
) -> AISearchOverview:
    """
    Keep engines with any presence; fall back to the aggregate as engine
    "all" when no single engine reports presence.
    """
    with_presence = [e for e in engines if e.brand_presence > 0 or e.link_presence > 0]
    if not with_presence and (aggregate.brand_presence > 0 or aggregate.link_presence > 0):
        with_presence = [aggregate.model_copy(update={"engine": "all"})]
    return AISearchOverview(target=target, engines=with_presence)


def normalize_leaderboard(payload: Any, primary_target: str, engines: List[str]) -> AILeaderboard:
    entries = []
    for entry in rows(payload, "leaderboard"):
        domain = entry.get("domain") or ""
        entries.append(LeaderboardEntry(
            rank=to_int(entry.get("rank")),
            domain=domain,
            brand=brand_from_domain(domain),
            share_of_voice=round_half_up(to_float(entry.get("share_of_voice")) * 100),
            brand_mentions=to_int(entry.get("brand_presence")),
            link_citations=to_int(entry.get("link_presence")),
            is_primary_target=bool(entry.get("is_primary_target")),
        ))

    primary_results = as_dict(nested(payload, "results", primary_target))
    engine_data = [
        EnginePresence(
            engine=engine,
            brand_presence=to_int(nested(primary_results, engine, "brand_presence")),
            link_presence=to_int(nested(primary_results, engine, "link_presence")),
        )
        for engine in engines
    ]
    return AILeaderboard(entries=entries, engine_data=engine_data)


def normalize_prompts(payload: Any, engine: str) -> List[AIPrompt]:
    """Prompt rows in provider order; rank is the 1-based position."""
    prompts = []
    for index, p in enumerate(rows(payload, "prompts")):
        answer = as_dict(p.get("answer"))
        text = answer.get("text") or None
        links = [str(link) for link in as_list(answer.get("links"))]
        prompts.append(AIPrompt(
            prompt=p.get("prompt") or "",
            engine=engine,
            classification=classify_prompt(p.get("type")),
            rank=index + 1,
            volume=to_int(p.get("volume")),
            snippet=truncate_text(text) if text else None,
            answer=text,
            sources=links or None,
        ))
    return prompts


def distribute_engine_traffic(engines: List[EnginePresence], total_traffic: int) -> List[EnginePresence]:
    """Split ``total_traffic`` across engines in proportion to their presence."""
    total_presence = sum(e.brand_presence + e.link_presence for e in engines)
    if total_presence <= 0 or total_traffic <= 0:
        return list(engines)
    return [
        e.model_copy(update={
            "traffic": round_half_up((e.brand_presence + e.link_presence) / total_presence * total_traffic),
        })
        for e in engines
    ]


# =============================================================================
# FETCHERS
# =============================================================================

async def fetch_ai_overview(client: SeRankingClient, target: str, source: str = "us") -> AISearchOverview:
    """Aggregate presence, then each engine concurrently (each failing to zero)."""
    payload = await client.request("/ai-search/overview", {"target": target, "source": source})
    aggregate = normalize_engine_presence(payload, "all")

    async def engine_presence(engine: str) -> EnginePresence:
        engine_payload = await client.request("/ai-search/overview", {"target": target, "source": source, "engine": engine})
        return normalize_engine_presence(engine_payload, engine)

    engines = await asyncio.gather(*(
        with_default(engine_presence(engine), EnginePresence(engine=engine), f"AI overview for {engine}")
        for engine in AI_ENGINES
    ))
    return build_ai_overview(target, aggregate, list(engines))


async def fetch_ai_leaderboard(
    client: SeRankingClient,
    primary: Dict[str, str],
    competitors: List[Dict[str, str]],
    source: str = "us",
    engines: Optional[List[str]] = None,
) -> AILeaderboard:
    """
    Share of voice for ``primary`` ({"target", "brand"}) against competitors.
    """
    engines = engines or list(AI_ENGINES)
    payload = await client.request(
        "/ai-search/overview/leaderboard",
        {"primary": primary, "competitors": competitors, "source": source, "engines": engines},
        method="POST",
    )
    return normalize_leaderboard(payload, primary.get("target", ""), engines)


async def fetch_prompts_by_target(
    client: SeRankingClient,
    target: str,
    source: str,
    engine: str,
    limit: int = 20,
    scope: str = "base_domain",
) -> List[AIPrompt]:
    payload = await client.request("/ai-search/prompts-by-target", {
        "target": target,
        "source": source,
        "engine": engine,
        "limit": limit,
        "scope": scope,
    })
    return normalize_prompts(payload, engine)


async def fetch_prompts_by_brand(
    client: SeRankingClient,
    brand: str,
    source: str,
    engine: str,
    limit: int = 20,
) -> List[AIPrompt]:
    payload = await client.request("/ai-search/prompts-by-brand", {
        "brand": brand,
        "source": source,
        "engine": engine,
        "limit": limit,
    })
    return normalize_prompts(payload, engine)


async def discover_brand(
    client: SeRankingClient,
    target: str,
    source: str = "us",
    scope: str = "base_domain",
) -> str:
    """First brand the provider associates with the target."""
    payload = await client.request("/ai-search/discover-brand", {"target": target, "source": source, "scope": scope})
    brands = as_list(as_dict(payload).get("brands"))
    return str(brands[0]) if brands and brands[0] else brand_from_domain(target)
