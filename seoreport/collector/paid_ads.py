"""
Paid search collectors.

Keywords a domain bids on, its ad history, and the advertisers competing on
a given keyword. Numeric fields of the ads endpoints may arrive as strings.
"""

import asyncio
import logging
from typing import Any, List, Optional

from seoreport.models import AdSnippet, DomainPaidAd, DomainPaidKeyword, PaidAdAdvertiser, PaidAdsByKeyword
from seoreport.utils import to_float, to_int, to_optional_int

from .client import SeRankingClient
from .fallback import with_default
from .payload import as_dict, rows

logger = logging.getLogger(__name__)

PAID_KEYWORD_COLUMNS = (
    "keyword,position,prev_pos,volume,cpc,competition,traffic,traffic_percent,price,url,"
    "snippet_title,snippet_description,snippet_display_url,snippets_count"
)


def normalize_paid_keywords(payload: Any) -> List[DomainPaidKeyword]:
    return [
        DomainPaidKeyword(
            keyword=k.get("keyword") or "",
            position=to_int(k.get("position")),
            prev_position=to_optional_int(k.get("prev_pos")),
            volume=to_int(k.get("volume")),
            cpc=to_float(k.get("cpc")),
            competition=to_float(k.get("competition")),
            traffic=to_float(k.get("traffic")),
            traffic_percent=to_float(k.get("traffic_percent")),
            price=to_float(k.get("price")),
            url=k.get("url") or "",
            snippet_title=k.get("snippet_title") or "",
            snippet_description=k.get("snippet_description") or "",
            snippet_display_url=k.get("snippet_display_url") or "",
            snippets_count=to_int(k.get("snippets_count")),
        )
        for k in rows(payload)
    ]


def flatten_snippets(snippets: Any) -> List[AdSnippet]:
    """Turn the ``{date: snippet}`` map into a dated list."""
    result = []
    for snippet_date, snippet in as_dict(snippets).items():
        snippet = as_dict(snippet)
        result.append(AdSnippet(
            date=snippet_date,
            position=to_int(snippet.get("position")),
            snippet_title=snippet.get("snippet_title") or "",
            snippet_description=snippet.get("snippet_description") or "",
            snippet_display_url=snippet.get("snippet_display_url") or "",
            snippet_count=to_int(snippet.get("snippet_count")),
            snippet_num=to_int(snippet.get("snippet_num")),
            url=snippet.get("url") or "",
        ))
    return result


def normalize_domain_paid_ads(payload: Any) -> List[DomainPaidAd]:
    return [
        DomainPaidAd(
            keyword=a.get("keyword") or "",
            ads_count=to_int(a.get("ads_count")),
            competition=to_float(a.get("competition")),
            cpc=to_float(a.get("cpc")),
            volume=to_int(a.get("volume")),
            snippets=flatten_snippets(a.get("snippets")),
        )
        for a in rows(payload)
    ]


def normalize_advertisers(payload: Any, keyword: str) -> PaidAdsByKeyword:
    return PaidAdsByKeyword(
        keyword=keyword,
        advertisers=[
            PaidAdAdvertiser(
                domain=a.get("domain") or "",
                ads_count=to_int(a.get("ads_count")),
                keywords_count=to_int(a.get("keywords_count")),
                traffic_sum=to_float(a.get("traffic_sum")),
                price_sum=to_float(a.get("price_sum")),
                snippets=flatten_snippets(a.get("snippets")),
            )
            for a in rows(payload)
        ],
    )


async def fetch_domain_paid_keywords(
    client: SeRankingClient,
    domain: str,
    source: str = "us",
    limit: int = 20,
    order_field: str = "traffic",
    order_type: str = "desc",
) -> List[DomainPaidKeyword]:
    payload = await client.request("/domain/keywords", {
        "domain": domain,
        "source": source,
        "type": "adv",
        "limit": limit,
        "order_field": order_field,
        "order_type": order_type,
        "cols": PAID_KEYWORD_COLUMNS,
    })
    return normalize_paid_keywords(payload)


async def fetch_domain_paid_ads(
    client: SeRankingClient,
    domain: str,
    source: str = "us",
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> List[DomainPaidAd]:
    payload = await client.request("/domain/ads", {
        "domain": domain,
        "source": source,
        "from": date_from,
        "to": date_to,
        "page": page,
        "limit": limit,
    })
    return normalize_domain_paid_ads(payload)


async def fetch_paid_ads_by_keyword(
    client: SeRankingClient,
    keyword: str,
    source: str = "us",
    limit: int = 10,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> PaidAdsByKeyword:
    payload = await client.request("/domain/ads", {
        "source": source,
        "keyword": keyword,
        "from": date_from,
        "to": date_to,
        "limit": limit,
    })
    return normalize_advertisers(payload, keyword)


async def fetch_paid_ads_for_keywords(
    client: SeRankingClient,
    keywords: List[str],
    source: str = "us",
    limit: int = 5,
) -> List[PaidAdsByKeyword]:
    """Advertisers per keyword; keywords nobody advertises on are dropped."""
    results = await asyncio.gather(*(
        with_default(
            fetch_paid_ads_by_keyword(client, keyword, source, limit),
            PaidAdsByKeyword(keyword=keyword),
            f"paid ads for {keyword!r}",
        )
        for keyword in keywords
    ))
    return [r for r in results if r.advertisers]
