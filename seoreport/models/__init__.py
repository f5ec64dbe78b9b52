"""
Typed records for normalized provider data, aggregates and the final report.
"""

from .ai_search import (
    AI_ENGINES,
    AILeaderboard,
    AIPrompt,
    AISearchOverview,
    EnginePresence,
    LeaderboardEntry,
    PromptClassification,
)
from .backlinks import (
    DISTRIBUTION_LABELS,
    DISTRIBUTION_RANGES,
    AnchorCount,
    AuthorityDistribution,
    BacklinkGap,
    BacklinkHistoryPoint,
    BacklinkIntelligence,
    BacklinksAuthority,
    BacklinksIndexedPage,
    BacklinksNewLostCount,
    BacklinksSummary,
    DetailedBacklink,
    EnhancedAnchor,
    IndividualBacklink,
    IPConcentration,
    NetChange,
    NewLostBacklinks,
    PageAuthorityPoint,
    RawBacklinks,
    RefDomain,
    RefDomainChange,
    RefDomainChanges,
    empty_distribution,
)
from .base import Record
from .competitive import (
    AggregatedBacklinkGap,
    AggregatedKeywordGap,
    AggregatedKeywordOverlap,
    CompetitorBacklinks,
    CompetitorPosition,
    MultiCompetitorAnalysis,
    MultiCompetitorSummary,
)
from .domain import (
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
from .keywords import KeywordQuestion, KeywordResearch, KeywordSuggestion
from .paid_ads import (
    AdSnippet,
    DomainPaidAd,
    DomainPaidKeyword,
    PaidAdAdvertiser,
    PaidAdsByKeyword,
)
from .report import (
    AISearchSection,
    BacklinksSection,
    CallLogEntry,
    CompetitiveSection,
    ContentOpportunities,
    DomainAnalysisSection,
    ExecutiveSummary,
    KeywordsSection,
    PositionDistribution,
    QuickWin,
    QuickWinsSection,
    Report,
    ReportJob,
    ReportStatus,
    SubscriptionInfo,
)
