"""
End-to-end tests for the report orchestrator against the fake SE Ranking API.
"""

import pytest

from seoreport.collector import CollectionConfig, FatalConfigurationError, ReportOrchestrator
from seoreport.models import PromptClassification, Report


async def run_report(client, domain="example.com", on_progress=None):
    orchestrator = ReportOrchestrator(client, on_progress=on_progress)
    return await orchestrator.generate(CollectionConfig(domain=domain))


class TestFullRun:
    """A run where every endpoint answers."""

    @pytest.mark.asyncio
    async def test_executive_summary(self, api_client):
        report = await run_report(api_client)

        assert report.executive.traffic == 1000
        assert report.executive.keywords == 200
        assert report.executive.backlinks == 5000
        assert report.executive.authority == 42
        assert report.executive.ai_share_of_voice == 42

    @pytest.mark.asyncio
    async def test_top_market_from_worldwide_traffic(self, api_client, fake_api):
        report = await run_report(api_client)

        assert report.ai_search.market == "us"
        assert [c.source for c in report.domain_analysis.traffic_by_country] == ["us", "uk"]
        keyword_calls = fake_api.calls_to("/domain/keywords")
        assert {c["params"]["source"] for c in keyword_calls} >= {"us", "uk"}

    @pytest.mark.asyncio
    async def test_competitive_section(self, api_client):
        report = await run_report(api_client)
        competitive = report.competitive

        assert [c.domain for c in competitive.competitors] == ["rival.com", "other.com"]
        assert [c.domain for c in competitive.competitor_comparison] == ["rival.com", "other.com"]
        assert len(competitive.keyword_gaps) == 2
        assert competitive.multi_competitor_analysis is not None
        assert competitive.multi_competitor_analysis.competitors_analyzed == ["rival.com", "other.com"]

        backlink_gaps = competitive.multi_competitor_analysis.backlink_gaps
        assert [g.domain for g in backlink_gaps] == ["blog.site"]
        assert backlink_gaps[0].competitor_count == 2

    @pytest.mark.asyncio
    async def test_quick_wins(self, api_client):
        report = await run_report(api_client)

        assert len(report.quick_wins.near_page_one_keywords) == 2
        descriptions = [w.description for w in report.quick_wins.low_hanging_fruit]
        assert descriptions == [
            "Optimize 2 keywords in positions 11-20 (potential +240 visits/mo)",
            "Create content for 2 keyword gaps (3,700 monthly searches)",
        ]

    @pytest.mark.asyncio
    async def test_prompts_merged_across_query_angles(self, api_client, fake_api):
        """The brand listing and the target listing fold into one brand_link prompt per engine."""
        report = await run_report(api_client)
        prompts = report.ai_search.prompts

        # Only engines with presence in the leaderboard are queried
        assert {c["params"]["engine"] for c in fake_api.calls_to("/ai-search/prompts-by-brand")} == {"chatgpt", "perplexity"}
        assert [p.engine for p in prompts] == ["chatgpt", "chatgpt", "perplexity", "perplexity"]

        chatgpt = [p for p in prompts if p.engine == "chatgpt"]
        assert [p.prompt for p in chatgpt] == ["trail running tips", "Best running shoes"]
        assert chatgpt[1].classification == PromptClassification.BRAND_LINK
        assert chatgpt[0].classification == PromptClassification.LINK

    @pytest.mark.asyncio
    async def test_backlink_intelligence(self, api_client):
        report = await run_report(api_client)
        intelligence = report.backlinks.intelligence

        assert intelligence.subnet_count == 12
        assert intelligence.net_change.period == "30 days"
        assert len(intelligence.top_backlinks) == 1
        assert len(intelligence.enhanced_anchors) == 1

    @pytest.mark.asyncio
    async def test_paid_search(self, api_client):
        report = await run_report(api_client)

        assert [k.keyword for k in report.keywords.domain_paid_keywords] == ["buy running shoes", "running shoes sale"]
        assert len(report.competitive.paid_search_competitors) == 2


class TestDiagnostics:
    """Call log, credits and subscription info."""

    @pytest.mark.asyncio
    async def test_credits_match_call_log(self, api_client):
        report = await run_report(api_client)

        assert report.api_responses
        assert report.total_credits == sum(e.credits for e in report.api_responses)
        assert report.total_credits > 0

    @pytest.mark.asyncio
    async def test_subscription_not_in_call_log(self, api_client, fake_api):
        report = await run_report(api_client)

        assert fake_api.calls_to("/account/subscription")
        assert "/account/subscription" not in {e.endpoint for e in report.api_responses}
        assert report.subscription_info is not None
        assert report.subscription_info.expiration_date == "2025-01-01"

    @pytest.mark.asyncio
    async def test_logging_disabled(self, make_client):
        client = make_client(enable_logging=False)
        async with client:
            report = await run_report(client)

        assert report.api_responses == []
        assert report.total_credits == 0


class TestDegradation:
    """A failing fetch degrades to its default and the run completes."""

    @pytest.mark.asyncio
    async def test_failed_summary(self, api_client, fake_api):
        fake_api.fail("/backlinks/summary")

        report = await run_report(api_client)

        assert report.executive.backlinks == 0
        assert report.backlinks.summary.refdomains == 0
        assert len(report.keywords.top_keywords) == 3
        assert "/backlinks/summary" not in {e.endpoint for e in report.api_responses}

    @pytest.mark.asyncio
    async def test_failed_worldwide_defaults_to_us(self, api_client, fake_api):
        fake_api.fail("/domain/overview/worldwide")

        report = await run_report(api_client)

        assert report.ai_search.market == "us"
        assert report.domain_analysis.traffic_by_country == []
        assert report.executive.traffic == 1000

    @pytest.mark.asyncio
    async def test_no_competitors(self, api_client, fake_api):
        fake_api.routes["/domain/competitors"] = []

        report = await run_report(api_client)

        assert report.competitive.competitors == []
        assert report.competitive.keyword_gaps == []
        assert report.competitive.multi_competitor_analysis is None
        assert "/domain/keywords/comparison" not in fake_api.endpoints

    @pytest.mark.asyncio
    async def test_failed_subscription(self, api_client, fake_api):
        fake_api.fail("/account/subscription", 403)

        report = await run_report(api_client)

        assert report.subscription_info is None

    @pytest.mark.asyncio
    async def test_everything_failing(self, api_client, fake_api):
        fake_api.routes.clear()

        report = await run_report(api_client)

        assert report.executive.traffic == 0
        assert report.api_responses == []
        assert report.total_credits == 0


class TestProgress:
    @pytest.mark.asyncio
    async def test_progress_sequence(self, api_client):
        events = []
        await run_report(api_client, on_progress=lambda step, percent: events.append((step, percent)))

        percents = [p for _, p in events]
        assert percents == sorted(percents)
        assert percents[0] == 5
        assert events[-1] == ("Report ready!", 100)
        assert 35 in percents and 80 in percents and 95 in percents


class TestValidation:
    @pytest.mark.asyncio
    async def test_empty_domain(self, api_client, fake_api):
        with pytest.raises(FatalConfigurationError):
            await run_report(api_client, domain="")
        assert fake_api.requests == []


class TestReportImmutability:
    """A produced report cannot be changed in place."""

    @pytest.mark.asyncio
    async def test_nested_collections_read_only(self, api_client):
        report = await run_report(api_client)

        with pytest.raises(TypeError):
            report.keywords.top_keywords.append(report.keywords.top_keywords[0])
        with pytest.raises(TypeError):
            report.backlinks.distribution["0-10"] = 999
        with pytest.raises(TypeError):
            report.api_responses.clear()
        with pytest.raises(TypeError):
            report.api_responses[0].params["target"] = "other.com"

        assert len(report.keywords.top_keywords) == 3
        assert report.api_responses

    @pytest.mark.asyncio
    async def test_raw_responses_read_only(self, api_client):
        report = await run_report(api_client)
        entry = next(e for e in report.api_responses if e.endpoint == "/backlinks/summary")

        with pytest.raises(TypeError):
            entry.response["summary"].append({})
        with pytest.raises(TypeError):
            entry.response["summary"][0]["backlinks"] = 0

    @pytest.mark.asyncio
    async def test_copied_sections_read_only(self, api_client):
        """Sections rebuilt with model_copy during the run are frozen as well."""
        report = await run_report(api_client)

        with pytest.raises(TypeError):
            report.backlinks.intelligence.authority_trend.append(None)
        with pytest.raises(TypeError):
            report.ai_search.overview.engines.pop()

    @pytest.mark.asyncio
    async def test_still_serializes(self, api_client):
        report = await run_report(api_client)
        dumped = report.model_dump(mode="json")

        assert type(dumped["keywords"]["top_keywords"]) is list
        assert type(dumped["backlinks"]["distribution"]) is dict
        assert Report.model_validate_json(report.model_dump_json()) == report


class TestCompetitorCap:
    @pytest.mark.asyncio
    async def test_leaderboard_rivals_follow_config(self, api_client, fake_api):
        orchestrator = ReportOrchestrator(api_client)
        await orchestrator.generate(CollectionConfig(domain="example.com", max_competitors=1))

        body = fake_api.calls_to("/ai-search/overview/leaderboard")[0]["params"]
        assert [c["target"] for c in body["competitors"]] == ["rival.com"]


class TestTiming:
    @pytest.mark.asyncio
    @pytest.mark.filterwarnings("error:datetime.datetime.utcnow:DeprecationWarning")
    async def test_no_naive_utc_clock(self, api_client):
        report = await run_report(api_client)
        assert report.executive.traffic == 1000
