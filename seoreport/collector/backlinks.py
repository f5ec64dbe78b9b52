"""
Backlink Collectors

Fetch + normalize for the /backlinks/* endpoint family:
- Summary, authority and 30-day momentum
- Indexed pages and authority distribution
- Anchors, raw backlinks, referring domains
- Intelligence signals (history, new/lost links, IP concentration,
  referring-domain changes, authority trend)

Fetchers propagate gateway errors; the orchestrator wraps each one with
``with_default``. Composite fetchers degrade their sub-calls individually.
"""

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple

from seoreport.models import (
    DISTRIBUTION_RANGES,
    AnchorCount,
    AuthorityDistribution,
    BacklinkGap,
    BacklinkHistoryPoint,
    BacklinksAuthority,
    BacklinksIndexedPage,
    BacklinksNewLostCount,
    BacklinksSummary,
    DetailedBacklink,
    EnhancedAnchor,
    IndividualBacklink,
    IPConcentration,
    NewLostBacklinks,
    PageAuthorityPoint,
    RawBacklinks,
    RefDomain,
    RefDomainChange,
    RefDomainChanges,
    empty_distribution,
)
from seoreport.utils import extract_domain_from_url, round_half_up, to_int

from .client import SeRankingClient
from .fallback import with_default
from .payload import as_dict, first_row, rows

logger = logging.getLogger(__name__)

MOMENTUM_DAYS = 30


def date_window(days: int, today: Optional[date] = None) -> Tuple[str, str]:
    """(date_from, date_to) as ISO dates covering the last ``days`` days."""
    end = today or datetime.now(timezone.utc).date()
    start = end - timedelta(days=days)
    return start.isoformat(), end.isoformat()


# =============================================================================
# NORMALIZERS
# =============================================================================

def normalize_backlinks_summary(payload: Any) -> BacklinksSummary:
    data = first_row(payload, "summary")
    if not data:
        return BacklinksSummary()

    return BacklinksSummary(
        backlinks=to_int(data.get("backlinks")),
        backlinks_num=to_int(data.get("backlinks")),
        refdomains=to_int(data.get("refdomains")),
        refdomains_num=to_int(data.get("refdomains")),
        subnets=to_int(data.get("subnets")),
        ips=to_int(data.get("ips")),
        dofollow_backlinks=to_int(data.get("dofollow_backlinks")),
        nofollow_backlinks=to_int(data.get("nofollow_backlinks")),
        text_backlinks=to_int(data.get("text_backlinks")),
        gov_backlinks=to_int(data.get("gov_backlinks")),
        edu_backlinks=to_int(data.get("edu_backlinks")),
        tlds={str(t.get("tld", "")): to_int(t.get("count")) for t in rows(data, "top_tlds")},
        countries={str(c.get("country", "")): to_int(c.get("count")) for c in rows(data, "top_countries")},
        top_anchors_by_backlinks=[
            AnchorCount(anchor=a.get("anchor") or "", count=to_int(a.get("backlinks")))
            for a in rows(data, "top_anchors_by_backlinks")
        ],
        top_anchors_by_refdomains=[
            AnchorCount(anchor=a.get("anchor") or "", count=to_int(a.get("refdomains")))
            for a in rows(data, "top_anchors_by_refdomains")
        ],
    )


def normalize_backlinks_authority(payload: Any) -> BacklinksAuthority:
    page = first_row(payload, "pages")
    return BacklinksAuthority(
        domain_inlink_rank=to_int(page.get("domain_inlink_rank")),
        page_inlink_rank=to_int(page.get("inlink_rank")),
    )


def sum_history_counts(payload: Any, key: str, field: str) -> int:
    """Sum one column of a per-day new/lost count series."""
    return sum(to_int(row.get(field)) for row in rows(payload, key))


def normalize_indexed_pages(payload: Any) -> List[BacklinksIndexedPage]:
    return [
        BacklinksIndexedPage(
            page=p.get("url") or "",
            backlinks=to_int(p.get("backlinks")),
            refdomains=to_int(p.get("refdomains")),
            dofollow=to_int(p.get("dofollow_backlinks")),
            nofollow=to_int(p.get("nofollow_backlinks")),
        )
        for p in rows(payload, "pages")
    ]


def bucket_distribution(payload: Any) -> AuthorityDistribution:
    """
    Re-bucket a per-rank histogram into ten inclusive authority ranges.

    Ranks above 100 fall into the last range, ranks below 0 into the first.
    """
    distribution = empty_distribution()
    for item in rows(payload, "histogram"):
        rank = to_int(item.get("domain_inlink_rank"))
        count = to_int(item.get("refdomains"))
        for low, high in DISTRIBUTION_RANGES:
            if rank <= high:
                distribution[f"{low}-{high}"] += count
                break
        else:
            distribution["91-100"] += count
    return distribution


def normalize_anchors(payload: Any) -> List[EnhancedAnchor]:
    return [
        EnhancedAnchor(
            anchor=a.get("anchor") or "",
            backlinks=to_int(a.get("backlinks")),
            refdomains=to_int(a.get("refdomains")),
            dofollow_backlinks=to_int(a.get("dofollow_backlinks")),
            nofollow_backlinks=to_int(a.get("nofollow_backlinks")),
            first_seen=a.get("first_seen") or "",
            last_visited=a.get("last_visited") or "",
        )
        for a in rows(payload, "anchors")
    ]


def normalize_raw_backlinks(payload: Any) -> RawBacklinks:
    backlinks = [
        IndividualBacklink(
            url_from=b.get("url_from") or "",
            url_to=b.get("url_to") or "",
            title=b.get("title") or "",
            anchor=b.get("anchor") or "",
            nofollow=bool(b.get("nofollow")),
            image=bool(b.get("image")),
            image_source=b.get("image_source") or "",
            inlink_rank=to_int(b.get("inlink_rank")),
            domain_inlink_rank=to_int(b.get("domain_inlink_rank")),
            first_seen=b.get("first_seen") or "",
            last_visited=b.get("last_visited") or "",
            refdomain=extract_domain_from_url(b.get("url_from") or ""),
        )
        for b in rows(payload, "backlinks")
    ]
    total = to_int(as_dict(payload).get("total")) or len(backlinks)
    return RawBacklinks(backlinks=backlinks, total=total)


def normalize_refdomains(payload: Any) -> List[RefDomain]:
    return [
        RefDomain(
            domain=r.get("refdomain") or "",
            backlinks=to_int(r.get("backlinks")),
            domain_inlink_rank=to_int(r.get("domain_inlink_rank")),
            first_seen=r.get("first_seen") or "",
        )
        for r in rows(payload, "refdomains")
    ]


def normalize_backlink_history(payload: Any) -> List[BacklinkHistoryPoint]:
    return [
        BacklinkHistoryPoint(
            date=h.get("date") or "",
            backlinks=to_int(h.get("backlinks")),
            refdomains=to_int(h.get("refdomains")),
        )
        for h in rows(payload, "history")
    ]


def normalize_detailed_backlinks(payload: Any, kind: str) -> List[DetailedBacklink]:
    """New or lost links; ``kind`` selects which date field is carried."""
    result = []
    for b in rows(payload, "backlinks"):
        seen = b.get("first_seen") if kind == "new" else b.get("last_seen")
        result.append(DetailedBacklink(
            url_from=b.get("url_from") or "",
            url_to=b.get("url_to") or "",
            anchor=b.get("anchor") or "",
            domain_inlink_rank=to_int(b.get("domain_inlink_rank")),
            date_found=seen if kind == "new" else None,
            date_lost=seen if kind == "lost" else None,
            dofollow=not b.get("nofollow"),
            type=kind,
        ))
    return result


def risk_level(percentage: float) -> str:
    if percentage > 15:
        return "high"
    if percentage > 8:
        return "medium"
    return "low"


def normalize_referring_ips(payload: Any) -> List[IPConcentration]:
    ips = rows(payload, "ips")
    total = sum(to_int(ip.get("backlinks")) for ip in ips)

    result = []
    for ip in ips:
        backlinks = to_int(ip.get("backlinks"))
        percentage = backlinks / total * 100 if total > 0 else 0.0
        result.append(IPConcentration(
            ip=ip.get("ip") or "",
            backlinks=backlinks,
            percentage=percentage,
            risk_level=risk_level(percentage),
        ))
    return result


def normalize_refdomain_changes(payload: Any, kind: str) -> List[RefDomainChange]:
    return [
        RefDomainChange(
            refdomain=r.get("refdomain") or "",
            domain_inlink_rank=to_int(r.get("domain_inlink_rank")),
            backlinks=to_int(r.get("backlinks")),
            dofollow_backlinks=to_int(r.get("dofollow_backlinks")),
            first_seen=r.get("first_seen") or "",
            new_lost_date=r.get("new_lost_date") or "",
            new_lost_type=kind,
        )
        for r in rows(payload, "refdomains")
    ]


def summarize_refdomain_changes(changes: List[RefDomainChange]) -> RefDomainChanges:
    """Split changes into new/lost with the average authority of each side."""
    new = [c for c in changes if c.new_lost_type == "new"]
    lost = [c for c in changes if c.new_lost_type == "lost"]

    def average_rank(items: List[RefDomainChange]) -> int:
        if not items:
            return 0
        return round_half_up(sum(c.domain_inlink_rank for c in items) / len(items))

    return RefDomainChanges(
        new=new,
        lost=lost,
        quality_gained=average_rank(new),
        quality_lost=average_rank(lost),
    )


def normalize_page_authority_history(payload: Any) -> List[PageAuthorityPoint]:
    return [
        PageAuthorityPoint(date=h.get("date") or "", inlink_rank=to_int(h.get("inlink_rank")))
        for h in rows(payload, "history")
    ]


def backlink_gap(
    competitor_refdomains: List[RefDomain],
    our_refdomains: List[RefDomain],
    limit: int = 20,
) -> List[BacklinkGap]:
    """Domains linking to the competitor and not to us, in competitor order."""
    ours = {r.domain for r in our_refdomains}
    return [
        BacklinkGap(
            domain=r.domain,
            domain_inlink_rank=r.domain_inlink_rank,
            backlinks_to_competitor=r.backlinks,
        )
        for r in competitor_refdomains
        if r.domain not in ours
    ][:limit]


# =============================================================================
# FETCHERS
# =============================================================================

async def fetch_backlinks_summary(
    client: SeRankingClient,
    target: str,
    mode: str = "domain",
) -> BacklinksSummary:
    payload = await client.request("/backlinks/summary", {"target": target, "mode": mode})
    return normalize_backlinks_summary(payload)


async def fetch_backlinks_authority(client: SeRankingClient, target: str) -> BacklinksAuthority:
    payload = await client.request("/backlinks/authority", {"target": target})
    return normalize_backlinks_authority(payload)


async def fetch_backlinks_new_lost_count(
    client: SeRankingClient,
    target: str,
    days: int = MOMENTUM_DAYS,
    today: Optional[date] = None,
) -> BacklinksNewLostCount:
    """
    New/lost backlinks and referring domains over the last ``days`` days.

    The API returns only the requested type per call, so this issues four
    concurrent calls; each one falls back to zero on its own.
    """
    date_from, date_to = date_window(days, today)
    window = {"target": target, "mode": "domain", "date_from": date_from, "date_to": date_to}
    link_filters = {"link_type": "href", "anchor_type": "text", "dofollow": "dofollow"}

    async def count(endpoint: str, key: str, kind: str, extra: dict) -> int:
        payload = await client.request(endpoint, {**window, "new_lost_type": kind, **extra})
        return sum_history_counts(payload, key, kind)

    new_backlinks, lost_backlinks, new_refdomains, lost_refdomains = await asyncio.gather(
        with_default(count("/backlinks/history/count", "new_lost_backlinks_count", "new", link_filters), 0, "new backlinks count"),
        with_default(count("/backlinks/history/count", "new_lost_backlinks_count", "lost", link_filters), 0, "lost backlinks count"),
        with_default(count("/backlinks/history/refdomains/count", "new_lost_refdomains_count", "new", {}), 0, "new refdomains count"),
        with_default(count("/backlinks/history/refdomains/count", "new_lost_refdomains_count", "lost", {}), 0, "lost refdomains count"),
    )

    return BacklinksNewLostCount(
        new_backlinks=new_backlinks,
        lost_backlinks=lost_backlinks,
        new_refdomains=new_refdomains,
        lost_refdomains=lost_refdomains,
    )


async def fetch_indexed_pages(
    client: SeRankingClient,
    target: str,
    limit: int = 10,
) -> List[BacklinksIndexedPage]:
    payload = await client.request("/backlinks/indexed-pages", {"target": target, "limit": limit})
    return normalize_indexed_pages(payload)


async def fetch_authority_distribution(client: SeRankingClient, target: str) -> AuthorityDistribution:
    payload = await client.request(
        "/backlinks/authority/domain/distribution",
        {"target": target, "mode": "domain", "histogramMode": "domain"},
    )
    return bucket_distribution(payload)


async def fetch_anchors(client: SeRankingClient, target: str, limit: int = 20) -> List[EnhancedAnchor]:
    payload = await client.request(
        "/backlinks/anchors",
        {"target": target, "mode": "domain", "limit": limit, "order_by": "refdomains"},
    )
    return normalize_anchors(payload)


async def fetch_raw_backlinks(
    client: SeRankingClient,
    target: str,
    limit: int = 100,
    offset: int = 0,
    per_domain: int = 100,
    order_by: str = "domain_inlink_rank",
    dofollow_only: bool = False,
) -> RawBacklinks:
    payload = await client.request("/backlinks/raw", {
        "target": target,
        "mode": "domain",
        "limit": limit,
        "offset": offset,
        "per_domain": per_domain,
        "order_by": order_by,
        "dofollow": "dofollow" if dofollow_only else None,
    })
    return normalize_raw_backlinks(payload)


async def fetch_refdomains(
    client: SeRankingClient,
    target: str,
    limit: int = 100,
    order_by: str = "domain_inlink_rank",
) -> List[RefDomain]:
    payload = await client.request(
        "/backlinks/refdomains",
        {"target": target, "limit": limit, "order_by": order_by, "mode": "domain"},
    )
    return normalize_refdomains(payload)


async def fetch_referring_subnets_count(client: SeRankingClient, target: str) -> int:
    payload = await client.request("/backlinks/referring-subnets/count", {"target": target, "mode": "domain"})
    return to_int(as_dict(payload).get("count"))


async def fetch_cumulative_history(
    client: SeRankingClient,
    target: str,
    months: int = 12,
    today: Optional[date] = None,
) -> List[BacklinkHistoryPoint]:
    date_from, date_to = date_window(months * 30, today)
    payload = await client.request("/backlinks/history/cumulative", {
        "target": target,
        "mode": "domain",
        "date_from": date_from,
        "date_to": date_to,
    })
    return normalize_backlink_history(payload)


async def fetch_new_lost_backlinks(
    client: SeRankingClient,
    target: str,
    days: int = MOMENTUM_DAYS,
    limit: int = 50,
    today: Optional[date] = None,
) -> NewLostBacklinks:
    date_from, date_to = date_window(days, today)

    async def fetch(kind: str) -> List[DetailedBacklink]:
        payload = await client.request("/backlinks/history", {
            "target": target,
            "mode": "domain",
            "new_lost_type": kind,
            "date_from": date_from,
            "date_to": date_to,
            "limit": limit,
            "order_by": "domain_inlink_rank",
        })
        return normalize_detailed_backlinks(payload, kind)

    new, lost = await asyncio.gather(
        with_default(fetch("new"), [], "new backlinks"),
        with_default(fetch("lost"), [], "lost backlinks"),
    )
    return NewLostBacklinks(new=new, lost=lost)


async def fetch_referring_ips(client: SeRankingClient, target: str, limit: int = 20) -> List[IPConcentration]:
    payload = await client.request("/backlinks/ips", {"target": target, "mode": "domain", "limit": limit})
    return normalize_referring_ips(payload)


async def fetch_refdomain_changes(
    client: SeRankingClient,
    target: str,
    days: int = MOMENTUM_DAYS,
    limit: int = 25,
    today: Optional[date] = None,
) -> List[RefDomainChange]:
    """New referring domains followed by lost ones."""
    date_from, date_to = date_window(days, today)

    async def fetch(kind: str) -> List[RefDomainChange]:
        payload = await client.request("/backlinks/history/refdomains", {
            "target": target,
            "mode": "domain",
            "new_lost_type": kind,
            "date_from": date_from,
            "date_to": date_to,
            "limit": limit,
            "order_by": "domain_inlink_rank",
        })
        return normalize_refdomain_changes(payload, kind)

    new, lost = await asyncio.gather(
        with_default(fetch("new"), [], "new refdomains"),
        with_default(fetch("lost"), [], "lost refdomains"),
    )
    return new + lost


async def fetch_page_authority_history(
    client: SeRankingClient,
    target: str,
    months: int = 12,
) -> List[PageAuthorityPoint]:
    payload = await client.request("/backlinks/authority/page/history", {"target": target, "limit": months})
    return normalize_page_authority_history(payload)


async def fetch_backlink_gap(
    client: SeRankingClient,
    our_domain: str,
    competitor_domain: str,
    limit: int = 20,
) -> List[BacklinkGap]:
    """Single-competitor backlink gap from both referring-domain lists."""
    competitor = await fetch_refdomains(client, competitor_domain, 100)
    ours = await fetch_refdomains(client, our_domain, 100)
    return backlink_gap(competitor, ours, limit)
