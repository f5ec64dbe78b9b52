"""
Multi-competitor aggregates.

Value objects produced by the aggregators. They hold no reference to the raw
provider payloads they were folded from.
"""

from typing import List

from pydantic import Field

from .base import Record


class CompetitorPosition(Record):
    domain: str = ""
    position: int = 0


class CompetitorBacklinks(Record):
    domain: str = ""
    backlinks: int = 0


class AggregatedKeywordGap(Record):
    keyword: str = ""
    volume: int = 0
    difficulty: int = 0
    competitor_count: int = 0
    competitors: List[CompetitorPosition] = Field(default_factory=list)
    avg_position: int = 0
    best_position: int = 0


class AggregatedKeywordOverlap(Record):
    keyword: str = ""
    volume: int = 0
    our_position: int = 0
    # Competitors that outrank the target
    competitor_count: int = 0
    competitors: List[CompetitorPosition] = Field(default_factory=list)
    avg_competitor_position: int = 0
    position_gap: int = 0


class AggregatedBacklinkGap(Record):
    domain: str = ""
    domain_authority_score: int = 0
    competitor_count: int = 0
    total_backlinks_to_competitors: int = 0
    competitors: List[CompetitorBacklinks] = Field(default_factory=list)


class MultiCompetitorSummary(Record):
    total_keyword_gaps: int = 0
    keyword_gaps_multiple_competitors: int = 0
    total_backlink_gaps: int = 0
    backlink_gaps_multiple_competitors: int = 0
    potential_traffic_opportunity: int = 0


class MultiCompetitorAnalysis(Record):
    competitors_analyzed: List[str] = Field(default_factory=list)
    keyword_gaps: List[AggregatedKeywordGap] = Field(default_factory=list)
    keyword_overlaps: List[AggregatedKeywordOverlap] = Field(default_factory=list)
    backlink_gaps: List[AggregatedBacklinkGap] = Field(default_factory=list)
    summary: MultiCompetitorSummary = Field(default_factory=MultiCompetitorSummary)
