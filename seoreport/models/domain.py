"""
Domain records.

Normalized shapes for the /domain/* endpoint family.
"""

from typing import List, Optional

from pydantic import Field

from .base import Record


class DomainOverview(Record):
    """Organic totals for one regional database."""
    domain: str = ""
    traffic: int = 0
    traffic_cost: float = 0
    keywords: int = 0
    keywords_top3: int = 0
    keywords_top10: int = 0
    keywords_top20: int = 0
    keywords_top50: int = 0
    keywords_top100: int = 0
    ads_keywords: int = 0


class PositionChanges(Record):
    up: int = 0
    down: int = 0
    new: int = 0
    lost: int = 0


class CountryTraffic(Record):
    source: str = ""
    traffic: int = 0
    keywords: int = 0


class WorldwideOverview(Record):
    """Per-country breakdown plus global position changes."""
    top_country: str = "us"
    countries: List[CountryTraffic] = Field(default_factory=list)
    position_changes: PositionChanges = Field(default_factory=PositionChanges)


class TrafficByCountry(Record):
    source: str = ""
    country: str = ""
    traffic: int = 0
    keywords: int = 0
    percentage: float = 0.0
    # Only populated for the top markets with a detailed overview
    traffic_cost: Optional[float] = None
    keywords_top3: Optional[int] = None
    keywords_top10: Optional[int] = None
    keywords_top100: Optional[int] = None


class Subdomain(Record):
    subdomain: str = ""
    traffic: int = 0
    keywords: int = 0


class DomainHistory(Record):
    date: str = ""
    year: int = 0
    month: int = 0
    traffic: int = 0
    keywords: int = 0
    traffic_cost: float = 0
    top1_5: int = 0
    top6_10: int = 0
    top11_20: int = 0
    top21_50: int = 0
    top51_100: int = 0


class DomainKeyword(Record):
    keyword: str = ""
    position: int = 0
    prev_position: Optional[int] = None
    volume: int = 0
    cpc: float = 0
    competition: float = 0
    difficulty: int = 0
    traffic: float = 0
    traffic_percent: float = 0
    url: str = ""
    serp_features: List[str] = Field(default_factory=list)


class DomainKeywords(Record):
    data: List[DomainKeyword] = Field(default_factory=list)
    total: int = 0


class DomainCompetitor(Record):
    domain: str = ""
    common_keywords: int = 0
    keywords: int = 0
    traffic: int = 0
    traffic_cost: float = 0
    overlap: float = 0


class CompetitorComparison(Record):
    domain: str = ""
    traffic: int = 0
    keywords: int = 0
    authority: int = 0
    backlinks: int = 0
    common_keywords: int = 0
    overlap: float = 0


class KeywordGap(Record):
    """A keyword a competitor ranks for and the target does not."""
    keyword: str = ""
    volume: int = 0
    difficulty: int = 0
    competitor_position: int = 0
    our_position: Optional[int] = None


class KeywordOverlap(Record):
    """A keyword both the target and a competitor rank for."""
    keyword: str = ""
    volume: int = 0
    our_position: int = 0
    competitor_position: int = 0


class TopPage(Record):
    url: str = ""
    traffic: float = 0
    keywords: int = 0
    backlinks: Optional[int] = None
    refdomains: Optional[int] = None


class UrlMetrics(Record):
    keywords_count: int = 0
    traffic_sum: float = 0
    price_sum: float = 0


class URLOverviewWorldwide(Record):
    url: str = ""
    organic: UrlMetrics = Field(default_factory=UrlMetrics)
    adv: UrlMetrics = Field(default_factory=UrlMetrics)


class URLKeywordComparison(Record):
    keyword: str = ""
    volume: int = 0
    cpc: float = 0
    competition: float = 0
    difficulty: int = 0
    position: Optional[int] = None
    url: Optional[str] = None
    traffic: Optional[float] = None
    price: Optional[float] = None
    compare_position: Optional[int] = None
    compare_url: Optional[str] = None
    compare_traffic: Optional[float] = None
    compare_price: Optional[float] = None


class PageComparison(Record):
    our_url: str = ""
    competitor_url: str = ""
    common_keywords: List[URLKeywordComparison] = Field(default_factory=list)
    our_unique_keywords: List[URLKeywordComparison] = Field(default_factory=list)
