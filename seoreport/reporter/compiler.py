"""
Report Compiler

Assembles normalized metrics and aggregates into the final Report:
- Position distribution (provider totals, else counted from fetched keywords)
- Quick wins (near-page-one keywords and content gaps)
- Executive summary including AI share of voice

Pure: no I/O, all inputs are already-resolved values.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from seoreport.models import (
    AIPrompt,
    AISearchOverview,
    AISearchSection,
    AuthorityDistribution,
    BacklinkGap,
    BacklinkIntelligence,
    BacklinksAuthority,
    BacklinksIndexedPage,
    BacklinksNewLostCount,
    BacklinksSection,
    BacklinksSummary,
    CallLogEntry,
    CompetitiveSection,
    CompetitorComparison,
    ContentOpportunities,
    DomainAnalysisSection,
    DomainCompetitor,
    DomainHistory,
    DomainKeyword,
    DomainOverview,
    DomainPaidAd,
    DomainPaidKeyword,
    EnginePresence,
    ExecutiveSummary,
    KeywordGap,
    KeywordOverlap,
    KeywordQuestion,
    KeywordResearch,
    KeywordsSection,
    LeaderboardEntry,
    MultiCompetitorAnalysis,
    PageComparison,
    PaidAdsByKeyword,
    PositionChanges,
    PositionDistribution,
    QuickWin,
    QuickWinsSection,
    Report,
    Subdomain,
    SubscriptionInfo,
    TopPage,
    TrafficByCountry,
    URLOverviewWorldwide,
    empty_distribution,
)
from seoreport.utils import country_name, round_half_up

logger = logging.getLogger(__name__)

POSITION_THRESHOLDS = (3, 10, 20, 50, 100)
# Share of search volume expected from moving a keyword onto page one
NEAR_PAGE_ONE_CTR = 0.15


@dataclass
class ReportInputs:
    """Everything collected during a run, already normalized and defaulted."""
    # Backlinks
    backlinks_summary: BacklinksSummary = field(default_factory=BacklinksSummary)
    backlinks_authority: BacklinksAuthority = field(default_factory=BacklinksAuthority)
    backlinks_momentum: BacklinksNewLostCount = field(default_factory=BacklinksNewLostCount)
    indexed_pages: List[BacklinksIndexedPage] = field(default_factory=list)
    distribution: AuthorityDistribution = field(default_factory=empty_distribution)
    backlink_intelligence: BacklinkIntelligence = field(default_factory=BacklinkIntelligence)

    # Domain and keywords
    domain_overview: Optional[DomainOverview] = None
    domain_history: List[DomainHistory] = field(default_factory=list)
    all_keywords: List[DomainKeyword] = field(default_factory=list)
    near_page_one: List[DomainKeyword] = field(default_factory=list)
    position_changes: PositionChanges = field(default_factory=PositionChanges)
    keyword_research: Optional[KeywordResearch] = None
    domain_paid_keywords: List[DomainPaidKeyword] = field(default_factory=list)
    top_market: str = "us"
    second_market: Optional[str] = None
    traffic_by_country: List[TrafficByCountry] = field(default_factory=list)
    subdomains: List[Subdomain] = field(default_factory=list)
    top_pages: List[TopPage] = field(default_factory=list)
    top_pages_second_market: List[TopPage] = field(default_factory=list)
    top_pages_worldwide: List[URLOverviewWorldwide] = field(default_factory=list)
    domain_paid_ads: List[DomainPaidAd] = field(default_factory=list)

    # Competitive
    competitors: List[DomainCompetitor] = field(default_factory=list)
    competitor_comparison: List[CompetitorComparison] = field(default_factory=list)
    keyword_gaps: List[KeywordGap] = field(default_factory=list)
    keyword_overlap: List[KeywordOverlap] = field(default_factory=list)
    backlink_gaps: List[BacklinkGap] = field(default_factory=list)
    multi_competitor_analysis: Optional[MultiCompetitorAnalysis] = None
    page_comparisons: List[PageComparison] = field(default_factory=list)
    paid_search_competitors: List[PaidAdsByKeyword] = field(default_factory=list)

    # AI search and content
    ai_overview: Optional[AISearchOverview] = None
    ai_engine_data: List[EnginePresence] = field(default_factory=list)
    ai_leaderboard: List[LeaderboardEntry] = field(default_factory=list)
    ai_prompts: List[AIPrompt] = field(default_factory=list)
    question_keywords: List[KeywordQuestion] = field(default_factory=list)

    # Diagnostics
    api_responses: List[CallLogEntry] = field(default_factory=list)
    total_credits: int = 0
    subscription_info: Optional[SubscriptionInfo] = None


def total_keywords(overview: Optional[DomainOverview], keywords: List[DomainKeyword]) -> int:
    """The keywords endpoint returns no total, so the overview count wins."""
    return (overview.keywords if overview else 0) or len(keywords)


def position_distribution(
    overview: Optional[DomainOverview],
    keywords: List[DomainKeyword],
) -> PositionDistribution:
    if overview is not None:
        return PositionDistribution(
            top3=overview.keywords_top3,
            top10=overview.keywords_top10,
            top20=overview.keywords_top20,
            top50=overview.keywords_top50,
            top100=overview.keywords_top100,
        )

    counts = {
        f"top{threshold}": sum(1 for k in keywords if k.position <= threshold)
        for threshold in POSITION_THRESHOLDS
    }
    return PositionDistribution(**counts)


def quick_wins(near_page_one: List[DomainKeyword], keyword_gaps: List[KeywordGap]) -> List[QuickWin]:
    """
    Low-hanging fruit.

    - keywords ranking 11-20, worth 15% of their volume once on page one
    - keyword gaps, worth their full monthly volume as new content
    """
    wins = []

    striking = [k for k in near_page_one if 11 <= k.position <= 20]
    if striking:
        potential = round_half_up(sum(k.volume * NEAR_PAGE_ONE_CTR for k in striking))
        wins.append(QuickWin(
            type="keywords",
            description=f"Optimize {len(striking)} keywords in positions 11-20 (potential +{potential} visits/mo)",
            impact="high",
            effort="medium",
        ))

    if keyword_gaps:
        gap_volume = sum(k.volume for k in keyword_gaps)
        wins.append(QuickWin(
            type="content",
            description=f"Create content for {len(keyword_gaps)} keyword gaps ({gap_volume:,} monthly searches)",
            impact="high",
            effort="medium",
        ))

    return wins


def ai_share_of_voice(leaderboard: List[LeaderboardEntry]) -> int:
    primary = next((e for e in leaderboard if e.is_primary_target), None)
    return primary.share_of_voice if primary else 0


def compile_report(inputs: ReportInputs) -> Report:
    """Build the immutable Report from collected inputs."""
    overview = inputs.domain_overview
    keywords_total = total_keywords(overview, inputs.all_keywords)

    ai_overview = inputs.ai_overview or AISearchOverview()
    engines = inputs.ai_engine_data or ai_overview.engines

    logger.debug(
        f"Compiling report: {keywords_total} keywords, {len(inputs.keyword_gaps)} gaps, "
        f"{len(inputs.api_responses)} logged calls"
    )

    return Report(
        executive=ExecutiveSummary(
            traffic=overview.traffic if overview else 0,
            backlinks=inputs.backlinks_summary.backlinks,
            authority=inputs.backlinks_authority.domain_inlink_rank,
            keywords=keywords_total,
            ai_share_of_voice=ai_share_of_voice(inputs.ai_leaderboard),
        ),
        backlinks=BacklinksSection(
            summary=inputs.backlinks_summary,
            authority=inputs.backlinks_authority,
            momentum=inputs.backlinks_momentum,
            indexed_pages=inputs.indexed_pages,
            distribution=inputs.distribution,
            intelligence=inputs.backlink_intelligence,
        ),
        keywords=KeywordsSection(
            total=keywords_total,
            top_keywords=inputs.all_keywords,
            near_page_one=inputs.near_page_one,
            position_distribution=position_distribution(overview, inputs.all_keywords),
            history=inputs.domain_history,
            position_changes=inputs.position_changes,
            research=inputs.keyword_research,
            domain_paid_keywords=inputs.domain_paid_keywords,
        ),
        domain_analysis=DomainAnalysisSection(
            authority=inputs.backlinks_authority.domain_inlink_rank,
            traffic_by_country=inputs.traffic_by_country,
            subdomains=inputs.subdomains,
            traffic_trend=inputs.domain_history,
            top_pages_by_traffic=inputs.top_pages,
            top_pages_by_traffic_second_market=inputs.top_pages_second_market,
            top_pages_by_backlinks=inputs.indexed_pages[:10],
            anchor_text_distribution=inputs.backlinks_summary.top_anchors_by_backlinks,
            ref_domains_distribution=inputs.distribution,
            paid_ads=inputs.domain_paid_ads,
            top_pages_worldwide=inputs.top_pages_worldwide,
        ),
        competitive=CompetitiveSection(
            competitors=inputs.competitors,
            competitor_comparison=inputs.competitor_comparison,
            keyword_gaps=inputs.keyword_gaps,
            keyword_overlap=inputs.keyword_overlap,
            backlink_gaps=inputs.backlink_gaps,
            multi_competitor_analysis=inputs.multi_competitor_analysis,
            page_comparisons=inputs.page_comparisons,
            paid_search_competitors=inputs.paid_search_competitors,
        ),
        ai_search=AISearchSection(
            overview=AISearchOverview(target=ai_overview.target, engines=engines),
            leaderboard=inputs.ai_leaderboard,
            prompts=inputs.ai_prompts,
            market=inputs.top_market,
            market_name=country_name(inputs.top_market),
        ),
        content_opportunities=ContentOpportunities(
            question_keywords=inputs.question_keywords,
            gaps=inputs.keyword_gaps,
        ),
        quick_wins=QuickWinsSection(
            near_page_one_keywords=inputs.near_page_one,
            low_hanging_fruit=quick_wins(inputs.near_page_one, inputs.keyword_gaps),
        ),
        api_responses=inputs.api_responses,
        total_credits=inputs.total_credits,
        subscription_info=inputs.subscription_info,
    )
