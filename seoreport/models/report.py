"""
Report models.

The compiled report, its sections, the developer-diagnostics call log and
the job/status types used while a report is being generated.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .ai_search import AIPrompt, AISearchOverview, LeaderboardEntry
from .backlinks import (
    AnchorCount,
    AuthorityDistribution,
    BacklinkGap,
    BacklinkIntelligence,
    BacklinksAuthority,
    BacklinksIndexedPage,
    BacklinksNewLostCount,
    BacklinksSummary,
    empty_distribution,
)
from .base import Record
from .competitive import MultiCompetitorAnalysis
from .domain import (
    CompetitorComparison,
    DomainCompetitor,
    DomainHistory,
    DomainKeyword,
    KeywordGap,
    KeywordOverlap,
    PageComparison,
    PositionChanges,
    Subdomain,
    TopPage,
    TrafficByCountry,
    URLOverviewWorldwide,
)
from .keywords import KeywordQuestion, KeywordResearch
from .paid_ads import DomainPaidAd, DomainPaidKeyword, PaidAdsByKeyword


# =============================================================================
# DIAGNOSTICS
# =============================================================================

class CallLogEntry(Record):
    """One successful provider call, as recorded by the gateway."""
    endpoint: str
    method: Literal["GET", "POST"] = "GET"
    params: Dict[str, Any] = Field(default_factory=dict)
    response: Any = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    duration_ms: float = 0
    credits: int = 0


class SubscriptionInfo(Record):
    status: str = ""
    start_date: str = ""
    expiration_date: str = ""
    units_limit: float = 0
    units_left: float = 0


# =============================================================================
# SECTIONS
# =============================================================================

class ExecutiveSummary(Record):
    traffic: int = 0
    backlinks: int = 0
    authority: int = 0
    keywords: int = 0
    ai_share_of_voice: int = 0


class BacklinksSection(Record):
    summary: BacklinksSummary = Field(default_factory=BacklinksSummary)
    authority: BacklinksAuthority = Field(default_factory=BacklinksAuthority)
    momentum: BacklinksNewLostCount = Field(default_factory=BacklinksNewLostCount)
    indexed_pages: List[BacklinksIndexedPage] = Field(default_factory=list)
    distribution: AuthorityDistribution = Field(default_factory=empty_distribution)
    intelligence: BacklinkIntelligence = Field(default_factory=BacklinkIntelligence)


class PositionDistribution(Record):
    top3: int = 0
    top10: int = 0
    top20: int = 0
    top50: int = 0
    top100: int = 0


class KeywordsSection(Record):
    total: int = 0
    top_keywords: List[DomainKeyword] = Field(default_factory=list)
    near_page_one: List[DomainKeyword] = Field(default_factory=list)
    position_distribution: PositionDistribution = Field(default_factory=PositionDistribution)
    history: List[DomainHistory] = Field(default_factory=list)
    position_changes: PositionChanges = Field(default_factory=PositionChanges)
    research: Optional[KeywordResearch] = None
    domain_paid_keywords: List[DomainPaidKeyword] = Field(default_factory=list)


class DomainAnalysisSection(Record):
    authority: int = 0
    traffic_by_country: List[TrafficByCountry] = Field(default_factory=list)
    subdomains: List[Subdomain] = Field(default_factory=list)
    traffic_trend: List[DomainHistory] = Field(default_factory=list)
    top_pages_by_traffic: List[TopPage] = Field(default_factory=list)
    top_pages_by_traffic_second_market: List[TopPage] = Field(default_factory=list)
    top_pages_by_backlinks: List[BacklinksIndexedPage] = Field(default_factory=list)
    anchor_text_distribution: List[AnchorCount] = Field(default_factory=list)
    ref_domains_distribution: AuthorityDistribution = Field(default_factory=empty_distribution)
    paid_ads: List[DomainPaidAd] = Field(default_factory=list)
    top_pages_worldwide: List[URLOverviewWorldwide] = Field(default_factory=list)


class CompetitiveSection(Record):
    competitors: List[DomainCompetitor] = Field(default_factory=list)
    competitor_comparison: List[CompetitorComparison] = Field(default_factory=list)
    keyword_gaps: List[KeywordGap] = Field(default_factory=list)
    keyword_overlap: List[KeywordOverlap] = Field(default_factory=list)
    backlink_gaps: List[BacklinkGap] = Field(default_factory=list)
    multi_competitor_analysis: Optional[MultiCompetitorAnalysis] = None
    page_comparisons: List[PageComparison] = Field(default_factory=list)
    paid_search_competitors: List[PaidAdsByKeyword] = Field(default_factory=list)


class AISearchSection(Record):
    overview: AISearchOverview = Field(default_factory=AISearchOverview)
    leaderboard: List[LeaderboardEntry] = Field(default_factory=list)
    prompts: List[AIPrompt] = Field(default_factory=list)
    market: str = "us"
    market_name: str = "United States"


class ContentOpportunities(Record):
    question_keywords: List[KeywordQuestion] = Field(default_factory=list)
    gaps: List[KeywordGap] = Field(default_factory=list)


class QuickWin(Record):
    type: str = ""
    description: str = ""
    impact: Literal["high", "medium", "low"] = "medium"
    effort: Literal["low", "medium", "high"] = "medium"


class QuickWinsSection(Record):
    near_page_one_keywords: List[DomainKeyword] = Field(default_factory=list)
    low_hanging_fruit: List[QuickWin] = Field(default_factory=list)


class Report(Record):
    """Terminal aggregate produced by the compiler."""
    executive: ExecutiveSummary = Field(default_factory=ExecutiveSummary)
    backlinks: BacklinksSection = Field(default_factory=BacklinksSection)
    keywords: KeywordsSection = Field(default_factory=KeywordsSection)
    domain_analysis: DomainAnalysisSection = Field(default_factory=DomainAnalysisSection)
    competitive: CompetitiveSection = Field(default_factory=CompetitiveSection)
    ai_search: AISearchSection = Field(default_factory=AISearchSection)
    content_opportunities: ContentOpportunities = Field(default_factory=ContentOpportunities)
    quick_wins: QuickWinsSection = Field(default_factory=QuickWinsSection)
    api_responses: List[CallLogEntry] = Field(default_factory=list)
    total_credits: int = 0
    subscription_info: Optional[SubscriptionInfo] = None


# =============================================================================
# JOBS
# =============================================================================

class ReportStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ReportJob(BaseModel):
    """Mutable tracking record for one report generation run."""
    id: str
    domain: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: ReportStatus = ReportStatus.PENDING
    progress: int = 0
    current_step: str = "Initializing..."
    error: Optional[str] = None
    report: Optional[Report] = None

    @property
    def is_finished(self) -> bool:
        return self.status in (ReportStatus.COMPLETED, ReportStatus.FAILED)
