"""
Multi-competitor collection.

Fetches one result set per competitor (each failing to empty on its own)
and hands them to the pure aggregators. The three analyses run one after
another so a run never bursts more than one competitor fan-out at a time.
"""

import asyncio
import logging
from typing import List

from seoreport.aggregation import (
    aggregate_backlink_gaps,
    aggregate_keyword_gaps,
    aggregate_keyword_overlaps,
    summarize_analysis,
)
from seoreport.models import (
    AggregatedBacklinkGap,
    AggregatedKeywordGap,
    AggregatedKeywordOverlap,
    MultiCompetitorAnalysis,
)

from .backlinks import fetch_refdomains
from .client import SeRankingClient
from .domain import DEFAULT_MARKET, fetch_keyword_gaps, fetch_keyword_overlap
from .fallback import with_default

logger = logging.getLogger(__name__)

PER_COMPETITOR_LIMIT = 100
OUR_REFDOMAINS_LIMIT = 200


async def fetch_multi_competitor_keyword_gaps(
    client: SeRankingClient,
    our_domain: str,
    competitors: List[str],
    source: str = DEFAULT_MARKET,
    limit: int = 50,
) -> List[AggregatedKeywordGap]:
    gaps = await asyncio.gather(*(
        with_default(
            fetch_keyword_gaps(client, competitor, our_domain, source, PER_COMPETITOR_LIMIT),
            [],
            f"keyword gaps vs {competitor}",
        )
        for competitor in competitors
    ))
    return aggregate_keyword_gaps(list(zip(competitors, gaps)), limit)


async def fetch_multi_competitor_keyword_overlaps(
    client: SeRankingClient,
    our_domain: str,
    competitors: List[str],
    source: str = DEFAULT_MARKET,
    limit: int = 50,
) -> List[AggregatedKeywordOverlap]:
    overlaps = await asyncio.gather(*(
        with_default(
            fetch_keyword_overlap(client, our_domain, competitor, source, PER_COMPETITOR_LIMIT),
            [],
            f"keyword overlap vs {competitor}",
        )
        for competitor in competitors
    ))
    return aggregate_keyword_overlaps(list(zip(competitors, overlaps)), limit)


async def fetch_multi_competitor_backlink_gaps(
    client: SeRankingClient,
    our_domain: str,
    competitors: List[str],
    limit: int = 50,
) -> List[AggregatedBacklinkGap]:
    ours = await with_default(
        fetch_refdomains(client, our_domain, OUR_REFDOMAINS_LIMIT), [], "our referring domains"
    )
    theirs = await asyncio.gather(*(
        with_default(
            fetch_refdomains(client, competitor, PER_COMPETITOR_LIMIT),
            [],
            f"referring domains of {competitor}",
        )
        for competitor in competitors
    ))
    return aggregate_backlink_gaps((r.domain for r in ours), list(zip(competitors, theirs)), limit)


async def fetch_multi_competitor_analysis(
    client: SeRankingClient,
    our_domain: str,
    competitors: List[str],
    source: str = DEFAULT_MARKET,
    limit: int = 50,
) -> MultiCompetitorAnalysis:
    logger.info(f"Multi-competitor analysis of {our_domain} against {len(competitors)} competitors")

    keyword_gaps = await fetch_multi_competitor_keyword_gaps(client, our_domain, competitors, source, limit)
    keyword_overlaps = await fetch_multi_competitor_keyword_overlaps(client, our_domain, competitors, source, limit)
    backlink_gaps = await fetch_multi_competitor_backlink_gaps(client, our_domain, competitors, limit)

    return summarize_analysis(competitors, keyword_gaps, keyword_overlaps, backlink_gaps)
