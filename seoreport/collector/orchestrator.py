"""
Report Orchestrator

Drives one report run through ordered phases. Phases run strictly in
sequence; fetches inside a phase run concurrently and each one degrades to
its documented default on failure.

Phases (progress %):
1. Worldwide overview, picks the top market (5)
2. Core backlinks, keywords, competitors, top-market overviews (10-35)
3. Domain analysis against the top competitor (38-42)
4. Multi-competitor gaps (43-48)
5. Worldwide stats for top pages (49)
6. Page-to-page keyword comparison (50)
7. AI search visibility and content opportunities (51-80)
8. Keyword research and backlink intelligence (82-87)
9. Paid search (88-90)
10. Backlink quality (91-93)
11. Compile (95-100)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from seoreport.aggregation import deduplicate_prompts
from seoreport.models import (
    AI_ENGINES,
    AILeaderboard,
    BacklinkIntelligence,
    BacklinksAuthority,
    BacklinksNewLostCount,
    BacklinksSummary,
    DomainCompetitor,
    DomainKeywords,
    DomainOverview,
    EnhancedAnchor,
    KeywordResearch,
    NetChange,
    NewLostBacklinks,
    RawBacklinks,
    Report,
    TopPage,
    WorldwideOverview,
    empty_distribution,
)
from seoreport.reporter import ReportInputs, compile_report
from seoreport.utils import brand_from_domain

from .ai_search import (
    DEFAULT_LEADERBOARD_COMPETITORS,
    discover_brand,
    distribute_engine_traffic,
    fetch_ai_leaderboard,
    fetch_ai_overview,
    fetch_prompts_by_brand,
    fetch_prompts_by_target,
)
from .backlinks import (
    fetch_anchors,
    fetch_authority_distribution,
    fetch_backlink_gap,
    fetch_backlinks_authority,
    fetch_backlinks_new_lost_count,
    fetch_backlinks_summary,
    fetch_cumulative_history,
    fetch_indexed_pages,
    fetch_new_lost_backlinks,
    fetch_page_authority_history,
    fetch_raw_backlinks,
    fetch_refdomain_changes,
    fetch_referring_ips,
    fetch_referring_subnets_count,
    summarize_refdomain_changes,
)
from .client import FatalConfigurationError, SeRankingClient
from .competitors import fetch_multi_competitor_analysis
from .domain import (
    fetch_competitor_metrics,
    fetch_domain_competitors,
    fetch_domain_history,
    fetch_domain_keywords,
    fetch_domain_overview,
    fetch_keyword_gaps,
    fetch_keyword_overlap,
    fetch_page_comparison,
    fetch_subdomains,
    fetch_top_pages_by_traffic,
    fetch_url_overview_worldwide,
    fetch_worldwide_overview,
    merge_competitor_comparison,
    traffic_by_country,
)
from .fallback import with_default
from .keywords import fetch_keyword_questions, fetch_keyword_research
from .paid_ads import fetch_domain_paid_ads, fetch_domain_paid_keywords, fetch_paid_ads_for_keywords
from .progress import ProgressCallback

logger = logging.getLogger(__name__)


@dataclass
class CollectionConfig:
    """Configuration for one report run."""
    domain: str
    max_competitors: int = 5
    max_markets: int = 5
    prompts_per_engine: int = 8
    prompts_per_query: int = 3
    aggregate_limit: int = 50


@dataclass
class RunContext:
    """Values decided by earlier phases and consumed by later ones."""
    domain: str
    top_market: str = "us"
    markets: List[str] = field(default_factory=list)
    market_overviews: Dict[str, DomainOverview] = field(default_factory=dict)
    worldwide: WorldwideOverview = field(default_factory=WorldwideOverview)
    competitors: List[DomainCompetitor] = field(default_factory=list)
    competitor_domains: List[str] = field(default_factory=list)
    top_keyword: str = ""
    brand: str = ""
    anchors: List[EnhancedAnchor] = field(default_factory=list)
    top_backlinks: RawBacklinks = field(default_factory=RawBacklinks)
    subnet_count: int = 0

    @property
    def top_competitor(self) -> Optional[str]:
        return self.competitors[0].domain if self.competitors else None

    @property
    def second_market(self) -> Optional[str]:
        return self.markets[1] if len(self.markets) > 1 else None


async def _resolved(value: Any) -> Any:
    return value


class ReportOrchestrator:
    """
    Orchestrates the phased collection of one report.

    The client (and with it the rate limiter and call log) belongs to this
    run only.
    """

    def __init__(self, client: SeRankingClient, on_progress: Optional[ProgressCallback] = None):
        """
        Initialize orchestrator.

        Args:
            client: SeRankingClient for this run
            on_progress: Optional ``(step, percent)`` sink
        """
        self.client = client
        self.on_progress = on_progress

    def _progress(self, step: str, percent: int) -> None:
        logger.info(f"[{percent:3d}%] {step}")
        if self.on_progress:
            self.on_progress(step, percent)

    async def generate(self, config: CollectionConfig) -> Report:
        """
        Run every phase and compile the report.

        Raises:
            FatalConfigurationError: No target domain
        """
        if not config.domain:
            raise FatalConfigurationError("A target domain is required")

        start_time = datetime.now(timezone.utc)
        logger.info(f"Starting report for {config.domain}")

        ctx = RunContext(domain=config.domain)
        inputs = ReportInputs()

        await self._phase_worldwide(ctx, inputs, config)
        await self._phase_core(ctx, inputs)
        await self._phase_domain_analysis(ctx, inputs, config)
        await self._phase_multi_competitor(ctx, inputs, config)
        await self._phase_pages_worldwide(ctx, inputs)
        await self._phase_page_comparisons(ctx, inputs)
        await self._phase_ai_search(ctx, inputs, config)
        await self._phase_research(ctx, inputs)
        await self._phase_paid_ads(ctx, inputs)
        await self._phase_backlink_quality(ctx, inputs)

        self._progress("Compiling report...", 95)
        inputs.api_responses = list(self.client.call_log)
        inputs.total_credits = self.client.total_credits()
        inputs.subscription_info = await with_default(self.client.get_subscription(), None, "subscription info")

        report = compile_report(inputs)

        elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(f"Report for {config.domain} complete in {elapsed:.1f}s ({inputs.total_credits} credits)")
        self._progress("Report ready!", 100)
        return report

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    async def _phase_worldwide(self, ctx: RunContext, inputs: ReportInputs, config: CollectionConfig) -> None:
        self._progress("Analyzing traffic distribution...", 5)

        ctx.worldwide = await with_default(
            fetch_worldwide_overview(self.client, ctx.domain), WorldwideOverview(), "worldwide overview"
        )
        ctx.top_market = ctx.worldwide.top_country
        ctx.markets = [c.source for c in ctx.worldwide.countries[:config.max_markets]] or [ctx.top_market]
        inputs.top_market = ctx.top_market
        inputs.second_market = ctx.second_market
        inputs.position_changes = ctx.worldwide.position_changes

    async def _phase_core(self, ctx: RunContext, inputs: ReportInputs) -> None:
        self._progress("Fetching backlink and domain data...", 10)
        client, domain, market = self.client, ctx.domain, ctx.top_market

        (
            inputs.backlinks_summary,
            inputs.backlinks_authority,
            inputs.backlinks_momentum,
            inputs.indexed_pages,
            inputs.distribution,
            inputs.domain_history,
            all_keywords,
            near_page_one,
            ctx.competitors,
            inputs.subdomains,
            ctx.anchors,
            ctx.top_backlinks,
            ctx.subnet_count,
            *market_overviews,
        ) = await asyncio.gather(
            with_default(fetch_backlinks_summary(client, domain), BacklinksSummary(), "backlinks summary"),
            with_default(fetch_backlinks_authority(client, domain), BacklinksAuthority(), "backlinks authority"),
            with_default(fetch_backlinks_new_lost_count(client, domain), BacklinksNewLostCount(), "backlinks momentum"),
            with_default(fetch_indexed_pages(client, domain, 10), [], "indexed pages"),
            with_default(fetch_authority_distribution(client, domain), empty_distribution(), "authority distribution"),
            with_default(fetch_domain_history(client, domain, market), [], "domain history"),
            with_default(fetch_domain_keywords(client, domain, market, limit=20), DomainKeywords(), "domain keywords"),
            with_default(
                fetch_domain_keywords(
                    client, domain, market,
                    limit=10, position_from=11, position_to=20, volume_from=500, order_field="volume",
                ),
                DomainKeywords(),
                "near page one keywords",
            ),
            with_default(fetch_domain_competitors(client, domain, market), [], "domain competitors"),
            with_default(fetch_subdomains(client, domain, market, limit=10), [], "subdomains"),
            with_default(fetch_anchors(client, domain, 20), [], "anchors"),
            with_default(
                fetch_raw_backlinks(client, domain, limit=50, per_domain=2), RawBacklinks(), "top backlinks"
            ),
            with_default(fetch_referring_subnets_count(client, domain), 0, "referring subnets"),
            *(
                with_default(fetch_domain_overview(client, domain, m), None, f"overview for {m}")
                for m in ctx.markets
            ),
        )

        inputs.all_keywords = all_keywords.data
        inputs.near_page_one = near_page_one.data
        inputs.competitors = ctx.competitors
        ctx.market_overviews = {
            m: overview for m, overview in zip(ctx.markets, market_overviews) if overview is not None
        }
        inputs.domain_overview = ctx.market_overviews.get(market)
        ctx.top_keyword = all_keywords.data[0].keyword if all_keywords.data else brand_from_domain(domain)

        self._progress("Backlinks & Keywords complete", 35)

    async def _phase_domain_analysis(self, ctx: RunContext, inputs: ReportInputs, config: CollectionConfig) -> None:
        self._progress("Fetching domain analysis data...", 38)
        client, domain, market = self.client, ctx.domain, ctx.top_market
        rival, second_market = ctx.top_competitor, ctx.second_market

        (
            inputs.top_pages,
            inputs.top_pages_second_market,
            inputs.keyword_overlap,
            inputs.backlink_gaps,
        ) = await asyncio.gather(
            with_default(fetch_top_pages_by_traffic(client, domain, market, 10), [], "top pages"),
            with_default(fetch_top_pages_by_traffic(client, domain, second_market, 10), [], "top pages (second market)")
            if second_market else _resolved([]),
            with_default(fetch_keyword_overlap(client, domain, rival, market, 20), [], "keyword overlap")
            if rival else _resolved([]),
            with_default(fetch_backlink_gap(client, domain, rival, 20), [], "backlink gap")
            if rival else _resolved([]),
        )

        inputs.traffic_by_country = traffic_by_country(ctx.worldwide, ctx.market_overviews)

        top = ctx.competitors[:config.max_competitors]
        ctx.competitor_domains = [c.domain for c in top]
        metrics = []
        if ctx.competitor_domains:
            metrics = await with_default(
                fetch_competitor_metrics(client, [domain, *ctx.competitor_domains], market),
                [],
                "competitor metrics",
            )
        inputs.competitor_comparison = merge_competitor_comparison(top, metrics)

        self._progress("Domain analysis complete", 42)

    async def _phase_multi_competitor(self, ctx: RunContext, inputs: ReportInputs, config: CollectionConfig) -> None:
        self._progress("Analyzing multi-competitor gaps...", 43)

        # Cross-competitor aggregates need at least two competitors
        if len(ctx.competitor_domains) >= 2:
            inputs.multi_competitor_analysis = await with_default(
                fetch_multi_competitor_analysis(
                    self.client, ctx.domain, ctx.competitor_domains, ctx.top_market, config.aggregate_limit
                ),
                None,
                "multi-competitor analysis",
            )

        self._progress("Multi-competitor analysis complete", 48)

    async def _phase_pages_worldwide(self, ctx: RunContext, inputs: ReportInputs) -> None:
        self._progress("Fetching worldwide page stats...", 49)

        results = await asyncio.gather(*(
            with_default(fetch_url_overview_worldwide(self.client, page.url), None, f"worldwide stats for {page.url}")
            for page in inputs.top_pages[:5]
        ))
        inputs.top_pages_worldwide = [r for r in results if r is not None]

    async def _phase_page_comparisons(self, ctx: RunContext, inputs: ReportInputs) -> None:
        self._progress("Comparing page keywords...", 50)

        rival = ctx.top_competitor
        if not rival or not inputs.top_pages:
            return

        rival_pages: List[TopPage] = await with_default(
            fetch_top_pages_by_traffic(self.client, rival, ctx.top_market, 3), [], "competitor top pages"
        )
        # Pair our top pages with theirs by rank, at most two comparisons
        pairs = list(zip(inputs.top_pages[:2], rival_pages[:2]))
        results = await asyncio.gather(*(
            with_default(
                fetch_page_comparison(self.client, ours.url, theirs.url, ctx.top_market, 10),
                None,
                f"page comparison {ours.url}",
            )
            for ours, theirs in pairs
        ))
        inputs.page_comparisons = [r for r in results if r is not None]

    async def _phase_ai_search(self, ctx: RunContext, inputs: ReportInputs, config: CollectionConfig) -> None:
        self._progress("Analyzing AI search visibility...", 51)
        client, domain, market = self.client, ctx.domain, ctx.top_market

        ctx.brand = await with_default(discover_brand(client, domain, market), brand_from_domain(domain), "brand discovery")

        rivals = [
            {"target": c.domain, "brand": brand_from_domain(c.domain)}
            for c in ctx.competitors[:config.max_competitors]
        ]
        if not rivals:
            rivals = [c for c in DEFAULT_LEADERBOARD_COMPETITORS if c["target"] != domain][:3]

        self._progress("Fetching AI leaderboard...", 55)
        leaderboard = await with_default(
            fetch_ai_leaderboard(client, {"target": domain, "brand": ctx.brand}, rivals, market, list(AI_ENGINES)),
            AILeaderboard(),
            "AI leaderboard",
        )
        inputs.ai_leaderboard = leaderboard.entries
        engine_data = leaderboard.engine_data

        self._progress("Fetching AI search data...", 65)

        # Brand-scoped prompts are dispatched before target-scoped ones for each engine
        engines = [e.engine for e in engine_data if e.brand_presence > 0 or e.link_presence > 0]
        prompt_fetches = []
        for engine in engines:
            prompt_fetches.append(with_default(
                fetch_prompts_by_brand(client, ctx.brand, market, engine, config.prompts_per_query),
                [],
                f"{engine} prompts by brand",
            ))
            prompt_fetches.append(with_default(
                fetch_prompts_by_target(client, domain, market, engine, config.prompts_per_query),
                [],
                f"{engine} prompts by target",
            ))

        rival = ctx.top_competitor
        ai_overview, inputs.keyword_gaps, inputs.question_keywords, *prompt_lists = await asyncio.gather(
            with_default(fetch_ai_overview(client, domain, market), None, "AI overview"),
            with_default(fetch_keyword_gaps(client, rival, domain, market, 10), [], "keyword gaps")
            if rival else _resolved([]),
            with_default(fetch_keyword_questions(client, ctx.top_keyword, market), [], "question keywords"),
            *prompt_fetches,
        )

        inputs.ai_prompts = deduplicate_prompts(prompt_lists, config.prompts_per_engine)
        inputs.ai_overview = ai_overview

        if not engine_data and ai_overview and ai_overview.engines:
            engine_data = ai_overview.engines
        if ai_overview and ai_overview.engines and engine_data:
            engine_data = distribute_engine_traffic(engine_data, ai_overview.engines[0].traffic)
        inputs.ai_engine_data = engine_data

        self._progress("AI & Content Analysis complete", 80)

    async def _phase_research(self, ctx: RunContext, inputs: ReportInputs) -> None:
        self._progress("Fetching keyword research data...", 82)
        client, domain = self.client, ctx.domain
        seed = ctx.top_keyword

        research, history, new_lost, ips = await asyncio.gather(
            with_default(fetch_keyword_research(client, seed, ctx.top_market, 20), KeywordResearch(seed_keyword=seed), "keyword research"),
            with_default(fetch_cumulative_history(client, domain, 12), [], "backlink history"),
            with_default(fetch_new_lost_backlinks(client, domain, 30), NewLostBacklinks(), "new/lost backlinks"),
            with_default(fetch_referring_ips(client, domain, 20), [], "referring IPs"),
        )

        inputs.keyword_research = research
        momentum = inputs.backlinks_momentum
        inputs.backlink_intelligence = BacklinkIntelligence(
            history=history,
            new_backlinks=new_lost.new,
            lost_backlinks=new_lost.lost,
            ip_concentration=ips,
            net_change=NetChange(
                backlinks=len(new_lost.new) - len(new_lost.lost),
                refdomains=momentum.new_refdomains - momentum.lost_refdomains,
            ),
            enhanced_anchors=ctx.anchors,
            top_backlinks=ctx.top_backlinks.backlinks,
            subnet_count=ctx.subnet_count,
        )

        self._progress("Keyword research & backlink intelligence complete", 87)

    async def _phase_paid_ads(self, ctx: RunContext, inputs: ReportInputs) -> None:
        self._progress("Analyzing paid ads...", 88)
        client, domain, market = self.client, ctx.domain, ctx.top_market

        inputs.domain_paid_keywords = await with_default(
            fetch_domain_paid_keywords(client, domain, market, limit=10), [], "domain paid keywords"
        )
        if inputs.domain_paid_keywords:
            keywords = [k.keyword for k in inputs.domain_paid_keywords[:5]]
            inputs.paid_search_competitors = await with_default(
                fetch_paid_ads_for_keywords(client, keywords, market, 5), [], "paid search competitors"
            )
        inputs.domain_paid_ads = await with_default(
            fetch_domain_paid_ads(client, domain, market, limit=20), [], "domain paid ads"
        )

        self._progress("Paid ads analysis complete", 90)

    async def _phase_backlink_quality(self, ctx: RunContext, inputs: ReportInputs) -> None:
        self._progress("Analyzing backlink quality...", 91)

        changes, authority_trend = await asyncio.gather(
            with_default(fetch_refdomain_changes(self.client, ctx.domain, 30), [], "referring domain changes"),
            with_default(fetch_page_authority_history(self.client, f"https://{ctx.domain}", 12), [], "authority trend"),
        )
        inputs.backlink_intelligence = inputs.backlink_intelligence.model_copy(update={
            "ref_domain_changes": summarize_refdomain_changes(changes),
            "authority_trend": authority_trend,
        })

        self._progress("Backlink quality analysis complete", 93)
