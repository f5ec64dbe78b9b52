"""
Domain Collectors

Fetch + normalize for the /domain/* endpoint family: regional and worldwide
overviews, history, ranked keywords, competitors, keyword comparisons and
page-level statistics.
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from seoreport.models import (
    CompetitorComparison,
    CountryTraffic,
    DomainCompetitor,
    DomainHistory,
    DomainKeyword,
    DomainKeywords,
    DomainOverview,
    KeywordGap,
    KeywordOverlap,
    PageComparison,
    PositionChanges,
    Subdomain,
    TopPage,
    TrafficByCountry,
    URLKeywordComparison,
    URLOverviewWorldwide,
    UrlMetrics,
    WorldwideOverview,
)
from seoreport.utils import country_name, round_half_up, to_float, to_int, to_optional_int

from .backlinks import fetch_backlinks_authority
from .client import SeRankingClient
from .fallback import with_default
from .payload import as_dict, as_list, first_row, rows

logger = logging.getLogger(__name__)

# Reserved source marker of the aggregate row in worldwide responses
WORLDWIDE_SOURCE = "worldwide"
DEFAULT_MARKET = "us"


# =============================================================================
# NORMALIZERS
# =============================================================================

def normalize_domain_overview(payload: Any, domain: str = "") -> DomainOverview:
    """
    Regional organic overview.

    The API reports ranking buckets (1-5, 6-10, 11-20, ...); top-N counts are
    cumulative and top 3 is estimated as 60% of positions 1-5.
    """
    organic = as_dict(as_dict(payload).get("organic"))
    adv = as_dict(as_dict(payload).get("adv"))

    top1_5 = to_int(organic.get("top1_5"))
    top10 = top1_5 + to_int(organic.get("top6_10"))
    top20 = top10 + to_int(organic.get("top11_20"))
    top50 = top20 + to_int(organic.get("top21_50"))
    top100 = top50 + to_int(organic.get("top51_100"))

    return DomainOverview(
        domain=organic.get("base_domain") or domain,
        traffic=to_int(organic.get("traffic_sum")),
        traffic_cost=to_float(organic.get("price_sum")),
        keywords=to_int(organic.get("keywords_count")),
        keywords_top3=round_half_up(top1_5 * 0.6),
        keywords_top10=top10,
        keywords_top20=top20,
        keywords_top50=top50,
        keywords_top100=top100,
        ads_keywords=to_int(adv.get("keywords_count")),
    )


def normalize_worldwide_overview(payload: Any) -> WorldwideOverview:
    """
    Split a worldwide response into per-country rows and global changes.

    The aggregate row is excluded from the country list; its position change
    counts are summed across the organic and paid result sets.
    """
    organic = rows(payload, "organic")
    adv = rows(payload, "adv")

    def aggregate(result_set: List[Dict[str, Any]]) -> Dict[str, Any]:
        return next((row for row in result_set if row.get("source") == WORLDWIDE_SOURCE), {})

    organic_ww = aggregate(organic)
    adv_ww = aggregate(adv)

    def changes(field: str) -> int:
        return to_int(organic_ww.get(field)) + to_int(adv_ww.get(field))

    countries = sorted(
        (
            CountryTraffic(
                source=row.get("source") or "",
                traffic=to_int(row.get("traffic_sum")),
                keywords=to_int(row.get("keywords_count")),
            )
            for row in organic
            if row.get("source") != WORLDWIDE_SOURCE
        ),
        key=lambda c: c.traffic,
        reverse=True,
    )

    return WorldwideOverview(
        top_country=countries[0].source if countries and countries[0].source else DEFAULT_MARKET,
        countries=countries,
        position_changes=PositionChanges(
            up=changes("positions_up_count"),
            down=changes("positions_down_count"),
            new=changes("positions_new_count"),
            lost=changes("positions_lost_count"),
        ),
    )


def traffic_by_country(
    worldwide: WorldwideOverview,
    market_overviews: Dict[str, DomainOverview],
) -> List[TrafficByCountry]:
    """Per-country share of traffic, with detail for markets that have an overview."""
    total = sum(c.traffic for c in worldwide.countries)
    result = []
    for c in worldwide.countries:
        overview = market_overviews.get(c.source)
        result.append(TrafficByCountry(
            source=c.source,
            country=country_name(c.source),
            traffic=c.traffic,
            keywords=c.keywords,
            percentage=c.traffic / total * 100 if total > 0 else 0.0,
            traffic_cost=overview.traffic_cost if overview else None,
            keywords_top3=overview.keywords_top3 if overview else None,
            keywords_top10=overview.keywords_top10 if overview else None,
            keywords_top100=overview.keywords_top100 if overview else None,
        ))
    return result


def _url_metrics(row: Dict[str, Any]) -> UrlMetrics:
    return UrlMetrics(
        keywords_count=to_int(row.get("keywords_count")),
        traffic_sum=to_float(row.get("traffic_sum")),
        price_sum=to_float(row.get("price_sum")),
    )


def normalize_url_overview_worldwide(payload: Any, url: str) -> URLOverviewWorldwide:
    return URLOverviewWorldwide(
        url=url,
        organic=_url_metrics(first_row(payload, "organic")),
        adv=_url_metrics(first_row(payload, "adv")),
    )


def normalize_subdomains(payload: Any) -> List[Subdomain]:
    return [
        Subdomain(
            subdomain=s.get("subdomain") or "",
            traffic=to_int(s.get("traffic_sum")),
            keywords=to_int(s.get("keywords_count")),
        )
        for s in rows(payload)
    ]


def normalize_domain_history(payload: Any) -> List[DomainHistory]:
    history = []
    for h in rows(payload):
        year = to_int(h.get("year"))
        month = to_int(h.get("month"))
        history.append(DomainHistory(
            date=f"{year}-{month:02d}",
            year=year,
            month=month,
            traffic=to_int(h.get("traffic_sum")),
            keywords=to_int(h.get("keywords_count")),
            traffic_cost=to_float(h.get("price_sum")),
            top1_5=to_int(h.get("top1_5")),
            top6_10=to_int(h.get("top6_10")),
            top11_20=to_int(h.get("top11_20")),
            top21_50=to_int(h.get("top21_50")),
            top51_100=to_int(h.get("top51_100")),
        ))
    return history


def normalize_domain_keywords(payload: Any) -> DomainKeywords:
    keywords = [
        DomainKeyword(
            keyword=k.get("keyword") or "",
            position=to_int(k.get("position")),
            prev_position=to_optional_int(k.get("prev_pos")),
            volume=to_int(k.get("volume")),
            cpc=to_float(k.get("cpc")),
            competition=to_float(k.get("competition")),
            difficulty=to_int(k.get("difficulty")),
            traffic=to_float(k.get("traffic")),
            traffic_percent=to_float(k.get("traffic_percent")),
            url=k.get("url") or "",
            serp_features=[str(f) for f in as_list(k.get("serp_features"))],
        )
        for k in rows(payload)
    ]
    # The endpoint returns no total; callers take it from the overview
    return DomainKeywords(data=keywords, total=len(keywords))


def normalize_domain_competitors(payload: Any, limit: int = 10) -> List[DomainCompetitor]:
    """Competitors ordered by shared keywords, most relevant first."""
    ordered = sorted(rows(payload), key=lambda c: to_int(c.get("common_keywords")), reverse=True)
    return [
        DomainCompetitor(
            domain=c.get("domain") or "",
            common_keywords=to_int(c.get("common_keywords")),
            keywords=to_int(c.get("total_keywords")),
            traffic=to_int(c.get("traffic_sum")),
            traffic_cost=to_float(c.get("price_sum")),
            overlap=to_float(c.get("domain_relevance")),
        )
        for c in ordered[:limit]
    ]


def normalize_keyword_gaps(payload: Any) -> List[KeywordGap]:
    """Comparison rows with diff=1: the target does not rank for any of them."""
    return [
        KeywordGap(
            keyword=k.get("keyword") or "",
            volume=to_int(k.get("volume")),
            difficulty=to_int(k.get("difficulty")),
            competitor_position=to_int(k.get("position")),
            our_position=None,
        )
        for k in rows(payload)
    ]


def normalize_keyword_overlap(payload: Any) -> List[KeywordOverlap]:
    """Comparison rows with diff=0, queried with our domain first."""
    return [
        KeywordOverlap(
            keyword=k.get("keyword") or "",
            volume=to_int(k.get("volume")),
            our_position=to_int(k.get("position")),
            competitor_position=to_int(k.get("compare_position")),
        )
        for k in rows(payload)
    ]


def normalize_url_comparison(payload: Any) -> List[URLKeywordComparison]:
    return [
        URLKeywordComparison(
            keyword=k.get("keyword") or "",
            volume=to_int(k.get("volume")),
            cpc=to_float(k.get("cpc")),
            competition=to_float(k.get("competition")),
            difficulty=to_int(k.get("difficulty")),
            position=to_optional_int(k.get("position")),
            url=k.get("url"),
            traffic=to_float(k.get("traffic")) if k.get("traffic") is not None else None,
            price=to_float(k.get("price")) if k.get("price") is not None else None,
            compare_position=to_optional_int(k.get("compare_position")),
            compare_url=k.get("compare_url"),
            compare_traffic=to_float(k.get("compare_traffic")) if k.get("compare_traffic") is not None else None,
            compare_price=to_float(k.get("compare_price")) if k.get("compare_price") is not None else None,
        )
        for k in rows(payload)
    ]


def aggregate_top_pages(payload: Any, limit: int = 10) -> List[TopPage]:
    """Group ranked keyword rows by URL, summing traffic and counting keywords."""
    pages: "OrderedDict[str, Dict[str, float]]" = OrderedDict()
    for k in rows(payload):
        url = k.get("url")
        if not url:
            continue
        page = pages.setdefault(url, {"traffic": 0.0, "keywords": 0})
        page["traffic"] += to_float(k.get("traffic"))
        page["keywords"] += 1

    ranked = sorted(pages.items(), key=lambda item: item[1]["traffic"], reverse=True)
    return [
        TopPage(url=url, traffic=data["traffic"], keywords=int(data["keywords"]))
        for url, data in ranked[:limit]
    ]


# =============================================================================
# FETCHERS
# =============================================================================

async def fetch_domain_overview(
    client: SeRankingClient,
    domain: str,
    source: str = DEFAULT_MARKET,
) -> DomainOverview:
    payload = await client.request("/domain/overview/db", {"domain": domain, "source": source})
    return normalize_domain_overview(payload, domain)


async def fetch_worldwide_overview(client: SeRankingClient, domain: str) -> WorldwideOverview:
    payload = await client.request("/domain/overview/worldwide", {
        "domain": domain,
        "show_zones_list": 1,
        "fields": "price,traffic,keywords,positions_diff",
    })
    return normalize_worldwide_overview(payload)


async def fetch_url_overview_worldwide(
    client: SeRankingClient,
    url: str,
    fields: Optional[List[str]] = None,
) -> URLOverviewWorldwide:
    payload = await client.request("/domain/overview/worldwide/url", {
        "url": url,
        "fields": ",".join(fields or ["keywords", "traffic", "price"]),
    })
    return normalize_url_overview_worldwide(payload, url)


async def fetch_subdomains(
    client: SeRankingClient,
    domain: str,
    source: str = DEFAULT_MARKET,
    limit: int = 10,
    order_field: str = "traffic_sum",
    order_type: str = "desc",
) -> List[Subdomain]:
    payload = await client.request("/domain/subdomains", {
        "domain": domain,
        "source": source,
        "limit": limit,
        "order_field": order_field,
        "order_type": order_type,
    })
    return normalize_subdomains(payload)


async def fetch_domain_history(
    client: SeRankingClient,
    domain: str,
    source: str = DEFAULT_MARKET,
) -> List[DomainHistory]:
    payload = await client.request("/domain/overview/history", {"domain": domain, "source": source, "type": "organic"})
    return normalize_domain_history(payload)


async def fetch_domain_keywords(
    client: SeRankingClient,
    domain: str,
    source: str = DEFAULT_MARKET,
    result_type: str = "organic",
    limit: int = 20,
    offset: int = 0,
    position_from: Optional[int] = None,
    position_to: Optional[int] = None,
    volume_from: Optional[int] = None,
    order_field: str = "traffic",
    order_type: str = "desc",
) -> DomainKeywords:
    """
    Ranked keywords for a domain.

    ``offset`` is translated to the API's 1-based page number.
    """
    payload = await client.request("/domain/keywords", {
        "domain": domain,
        "source": source,
        "type": result_type,
        "limit": limit,
        "page": offset // limit + 1 if offset else 1,
        "filter_position_from": position_from,
        "filter_position_to": position_to,
        "filter_volume_from": volume_from,
        "order_field": order_field,
        "order_type": order_type,
    })
    return normalize_domain_keywords(payload)


async def fetch_domain_competitors(
    client: SeRankingClient,
    domain: str,
    source: str = DEFAULT_MARKET,
    limit: int = 10,
) -> List[DomainCompetitor]:
    payload = await client.request("/domain/competitors", {"domain": domain, "source": source, "stats": 1})
    return normalize_domain_competitors(payload, limit)


async def fetch_keyword_gaps(
    client: SeRankingClient,
    competitor: str,
    our_domain: str,
    source: str = DEFAULT_MARKET,
    limit: int = 10,
    order_field: str = "volume",
    order_type: str = "desc",
) -> List[KeywordGap]:
    """Keywords ``competitor`` ranks for and ``our_domain`` does not."""
    payload = await client.request("/domain/keywords/comparison", {
        "domain": competitor,
        "compare": our_domain,
        "source": source,
        "diff": 1,
        "limit": limit,
        "order_field": order_field,
        "order_type": order_type,
    })
    return normalize_keyword_gaps(payload)


async def fetch_keyword_overlap(
    client: SeRankingClient,
    our_domain: str,
    competitor: str,
    source: str = DEFAULT_MARKET,
    limit: int = 20,
) -> List[KeywordOverlap]:
    """Keywords both domains rank for."""
    payload = await client.request("/domain/keywords/comparison", {
        "domain": our_domain,
        "compare": competitor,
        "source": source,
        "diff": 0,
        "limit": limit,
        "order_field": "volume",
        "order_type": "desc",
    })
    return normalize_keyword_overlap(payload)


async def fetch_url_keywords_comparison(
    client: SeRankingClient,
    our_url: str,
    competitor_url: str,
    source: str = DEFAULT_MARKET,
    diff: int = 0,
    limit: int = 20,
) -> List[URLKeywordComparison]:
    """diff=0 returns common keywords, diff=1 keywords only our URL ranks for."""
    payload = await client.request("/domain/keywords/comparison", {
        "url": our_url,
        "compare": competitor_url,
        "source": source,
        "diff": diff,
        "limit": limit,
        "order_field": "volume",
        "order_type": "desc",
    })
    return normalize_url_comparison(payload)


async def fetch_page_comparison(
    client: SeRankingClient,
    our_url: str,
    competitor_url: str,
    source: str = DEFAULT_MARKET,
    limit: int = 10,
) -> PageComparison:
    common, unique = await asyncio.gather(
        with_default(fetch_url_keywords_comparison(client, our_url, competitor_url, source, 0, limit), [], "common page keywords"),
        with_default(fetch_url_keywords_comparison(client, our_url, competitor_url, source, 1, limit), [], "unique page keywords"),
    )
    return PageComparison(
        our_url=our_url,
        competitor_url=competitor_url,
        common_keywords=common,
        our_unique_keywords=unique,
    )


async def fetch_top_pages_by_traffic(
    client: SeRankingClient,
    domain: str,
    source: str = DEFAULT_MARKET,
    limit: int = 10,
) -> List[TopPage]:
    payload = await client.request("/domain/keywords", {
        "domain": domain,
        "source": source,
        "limit": 100,
        "order_field": "traffic",
        "order_type": "desc",
    })
    return aggregate_top_pages(payload, limit)


async def fetch_competitor_metrics(
    client: SeRankingClient,
    domains: List[str],
    source: str = DEFAULT_MARKET,
) -> List[CompetitorComparison]:
    """Traffic, keywords and authority for each domain, fetched concurrently."""

    async def metrics(domain: str) -> CompetitorComparison:
        overview, authority = await asyncio.gather(
            with_default(fetch_domain_overview(client, domain, source), None, f"overview for {domain}"),
            with_default(fetch_backlinks_authority(client, domain), None, f"authority for {domain}"),
        )
        return CompetitorComparison(
            domain=domain,
            traffic=overview.traffic if overview else 0,
            keywords=overview.keywords if overview else 0,
            authority=authority.domain_inlink_rank if authority else 0,
        )

    return list(await asyncio.gather(*(metrics(d) for d in domains)))


def merge_competitor_comparison(
    competitors: List[DomainCompetitor],
    metrics: List[CompetitorComparison],
) -> List[CompetitorComparison]:
    """Overlay fetched metrics onto the competitor list, keeping its order."""
    by_domain = {m.domain: m for m in metrics}
    merged = []
    for c in competitors:
        m = by_domain.get(c.domain)
        merged.append(CompetitorComparison(
            domain=c.domain,
            traffic=(m.traffic if m else 0) or c.traffic,
            keywords=(m.keywords if m else 0) or c.keywords,
            authority=m.authority if m else 0,
            backlinks=m.backlinks if m else 0,
            common_keywords=c.common_keywords,
            overlap=c.overlap,
        ))
    return merged
