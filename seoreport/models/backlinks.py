"""
Backlink records.

Normalized shapes for the /backlinks/* endpoint family.
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field

from .base import Record


# Inclusive authority ranges used to re-bucket the per-rank histogram.
DISTRIBUTION_RANGES = [(0, 10)] + [(low, low + 9) for low in range(11, 100, 10)]
DISTRIBUTION_LABELS = [f"{low}-{high}" for low, high in DISTRIBUTION_RANGES]

# {"0-10": n, "11-20": n, ..., "91-100": n}
AuthorityDistribution = Dict[str, int]


def empty_distribution() -> AuthorityDistribution:
    """Zero-filled distribution with every range present."""
    return {label: 0 for label in DISTRIBUTION_LABELS}


class AnchorCount(Record):
    anchor: str = ""
    count: int = 0


class BacklinksSummary(Record):
    """Totals from /backlinks/summary."""
    backlinks: int = 0
    backlinks_num: int = 0
    refdomains: int = 0
    refdomains_num: int = 0
    subnets: int = 0
    ips: int = 0
    dofollow_backlinks: int = 0
    nofollow_backlinks: int = 0
    text_backlinks: int = 0
    image_backlinks: int = 0
    redirect_backlinks: int = 0
    canonical_backlinks: int = 0
    gov_backlinks: int = 0
    edu_backlinks: int = 0
    tlds: Dict[str, int] = Field(default_factory=dict)
    countries: Dict[str, int] = Field(default_factory=dict)
    top_anchors_by_backlinks: List[AnchorCount] = Field(default_factory=list)
    top_anchors_by_refdomains: List[AnchorCount] = Field(default_factory=list)


class BacklinksAuthority(Record):
    domain_inlink_rank: int = 0
    page_inlink_rank: int = 0


class BacklinksNewLostCount(Record):
    """New/lost totals over the momentum window (30 days)."""
    new_backlinks: int = 0
    lost_backlinks: int = 0
    new_refdomains: int = 0
    lost_refdomains: int = 0


class BacklinksIndexedPage(Record):
    page: str = ""
    backlinks: int = 0
    refdomains: int = 0
    dofollow: int = 0
    nofollow: int = 0


class RefDomain(Record):
    """A domain hosting at least one link to the target."""
    domain: str = ""
    backlinks: int = 0
    domain_inlink_rank: int = 0
    first_seen: str = ""


class EnhancedAnchor(Record):
    anchor: str = ""
    backlinks: int = 0
    refdomains: int = 0
    dofollow_backlinks: int = 0
    nofollow_backlinks: int = 0
    first_seen: str = ""
    last_visited: str = ""


class IndividualBacklink(Record):
    url_from: str = ""
    url_to: str = ""
    title: str = ""
    anchor: str = ""
    nofollow: bool = False
    image: bool = False
    image_source: str = ""
    inlink_rank: int = 0
    domain_inlink_rank: int = 0
    first_seen: str = ""
    last_visited: str = ""
    refdomain: str = ""


class RawBacklinks(Record):
    backlinks: List[IndividualBacklink] = Field(default_factory=list)
    total: int = 0


class BacklinkHistoryPoint(Record):
    date: str = ""
    backlinks: int = 0
    refdomains: int = 0


class DetailedBacklink(Record):
    url_from: str = ""
    url_to: str = ""
    anchor: str = ""
    domain_inlink_rank: int = 0
    date_found: Optional[str] = None
    date_lost: Optional[str] = None
    dofollow: bool = True
    type: Literal["new", "lost"] = "new"


class NewLostBacklinks(Record):
    new: List[DetailedBacklink] = Field(default_factory=list)
    lost: List[DetailedBacklink] = Field(default_factory=list)


class IPConcentration(Record):
    ip: str = ""
    backlinks: int = 0
    percentage: float = 0.0
    risk_level: Literal["low", "medium", "high"] = "low"


class RefDomainChange(Record):
    refdomain: str = ""
    domain_inlink_rank: int = 0
    backlinks: int = 0
    dofollow_backlinks: int = 0
    first_seen: str = ""
    new_lost_date: str = ""
    new_lost_type: Literal["new", "lost"] = "new"


class RefDomainChanges(Record):
    new: List[RefDomainChange] = Field(default_factory=list)
    lost: List[RefDomainChange] = Field(default_factory=list)
    quality_gained: int = 0
    quality_lost: int = 0


class PageAuthorityPoint(Record):
    date: str = ""
    inlink_rank: int = 0


class NetChange(Record):
    backlinks: int = 0
    refdomains: int = 0
    period: str = "30 days"


class BacklinkIntelligence(Record):
    """History, momentum and quality signals for the backlink profile."""
    history: List[BacklinkHistoryPoint] = Field(default_factory=list)
    new_backlinks: List[DetailedBacklink] = Field(default_factory=list)
    lost_backlinks: List[DetailedBacklink] = Field(default_factory=list)
    ip_concentration: List[IPConcentration] = Field(default_factory=list)
    net_change: NetChange = Field(default_factory=NetChange)
    enhanced_anchors: List[EnhancedAnchor] = Field(default_factory=list)
    top_backlinks: List[IndividualBacklink] = Field(default_factory=list)
    ref_domain_changes: RefDomainChanges = Field(default_factory=RefDomainChanges)
    authority_trend: List[PageAuthorityPoint] = Field(default_factory=list)
    subnet_count: int = 0


class BacklinkGap(Record):
    """A domain linking to one competitor but not to the target."""
    domain: str = ""
    domain_inlink_rank: int = 0
    backlinks_to_competitor: int = 0
