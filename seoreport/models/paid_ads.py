"""
Paid search records.
"""

from typing import List, Optional

from pydantic import Field

from .base import Record


class DomainPaidKeyword(Record):
    """A keyword the domain is bidding on."""
    keyword: str = ""
    position: int = 0
    prev_position: Optional[int] = None
    volume: int = 0
    cpc: float = 0
    competition: float = 0
    traffic: float = 0
    traffic_percent: float = 0
    price: float = 0
    url: str = ""
    snippet_title: str = ""
    snippet_description: str = ""
    snippet_display_url: str = ""
    snippets_count: int = 0


class AdSnippet(Record):
    date: str = ""
    position: int = 0
    snippet_title: str = ""
    snippet_description: str = ""
    snippet_display_url: str = ""
    snippet_count: int = 0
    snippet_num: int = 0
    url: str = ""


class DomainPaidAd(Record):
    keyword: str = ""
    ads_count: int = 0
    competition: float = 0
    cpc: float = 0
    volume: int = 0
    snippets: List[AdSnippet] = Field(default_factory=list)


class PaidAdAdvertiser(Record):
    domain: str = ""
    ads_count: int = 0
    keywords_count: int = 0
    traffic_sum: float = 0
    price_sum: float = 0
    snippets: List[AdSnippet] = Field(default_factory=list)


class PaidAdsByKeyword(Record):
    """Domains advertising on one keyword."""
    keyword: str = ""
    advertisers: List[PaidAdAdvertiser] = Field(default_factory=list)
