"""
Tests for report compilation.
"""

import copy

import pytest

from seoreport.models import (
    AISearchOverview,
    BacklinksAuthority,
    BacklinksIndexedPage,
    BacklinksSummary,
    CallLogEntry,
    DomainKeyword,
    DomainOverview,
    EnginePresence,
    LeaderboardEntry,
    Report,
)
from seoreport.reporter import (
    ReportInputs,
    ai_share_of_voice,
    compile_report,
    position_distribution,
    quick_wins,
    total_keywords,
)


class TestPositionDistribution:
    """Test cumulative position buckets."""

    def test_overview_totals_win(self, sample_keywords):
        overview = DomainOverview(
            keywords=500, keywords_top3=10, keywords_top10=25,
            keywords_top20=45, keywords_top50=75, keywords_top100=115,
        )
        dist = position_distribution(overview, sample_keywords)

        assert (dist.top3, dist.top10, dist.top20, dist.top50, dist.top100) == (10, 25, 45, 75, 115)

    def test_counted_from_keywords_without_overview(self, sample_keywords):
        """Positions 3, 8, 15, 42 give cumulative counts per threshold."""
        dist = position_distribution(None, sample_keywords)

        assert dist.top3 == 1
        assert dist.top10 == 2
        assert dist.top20 == 3
        assert dist.top50 == 4
        assert dist.top100 == 4

    def test_empty(self):
        dist = position_distribution(None, [])
        assert dist.top100 == 0


class TestTotalKeywords:
    def test_overview_count(self, sample_keywords):
        assert total_keywords(DomainOverview(keywords=200), sample_keywords) == 200

    def test_falls_back_to_fetched_count(self, sample_keywords):
        assert total_keywords(None, sample_keywords) == 4
        assert total_keywords(DomainOverview(keywords=0), sample_keywords) == 4


class TestQuickWins:
    """Test low-hanging fruit generation."""

    def test_near_page_one(self):
        near = [
            DomainKeyword(keyword="a", position=12, volume=1000),
            DomainKeyword(keyword="b", position=18, volume=600),
        ]
        wins = quick_wins(near, [])

        assert len(wins) == 1
        assert wins[0].type == "keywords"
        assert wins[0].impact == "high"
        assert wins[0].effort == "medium"
        assert wins[0].description == "Optimize 2 keywords in positions 11-20 (potential +240 visits/mo)"

    def test_ignores_positions_outside_page_two(self):
        near = [
            DomainKeyword(keyword="a", position=9, volume=1000),
            DomainKeyword(keyword="b", position=25, volume=1000),
        ]
        assert quick_wins(near, []) == []

    def test_content_gaps(self, sample_gaps):
        wins = quick_wins([], sample_gaps)

        assert len(wins) == 1
        assert wins[0].type == "content"
        assert wins[0].description == "Create content for 2 keyword gaps (3,700 monthly searches)"

    def test_both_in_order(self, sample_gaps):
        wins = quick_wins([DomainKeyword(keyword="a", position=11, volume=100)], sample_gaps)
        assert [w.type for w in wins] == ["keywords", "content"]

    def test_none(self):
        assert quick_wins([], []) == []


class TestShareOfVoice:
    def test_primary_entry(self, sample_leaderboard):
        assert ai_share_of_voice(sample_leaderboard) == 30

    def test_no_primary(self):
        assert ai_share_of_voice([LeaderboardEntry(domain="rival.com", share_of_voice=55)]) == 0
        assert ai_share_of_voice([]) == 0


class TestCompileReport:
    """Test full report assembly."""

    def test_empty_inputs(self):
        """A run where every fetch degraded still compiles."""
        report = compile_report(ReportInputs())

        assert isinstance(report, Report)
        assert report.executive.traffic == 0
        assert report.executive.keywords == 0
        assert report.ai_search.market == "us"
        assert report.ai_search.market_name == "United States"
        assert report.quick_wins.low_hanging_fruit == []
        assert report.total_credits == 0
        assert report.subscription_info is None

    def test_executive_summary(self, sample_keywords, sample_gaps, sample_leaderboard):
        inputs = ReportInputs(
            backlinks_summary=BacklinksSummary(backlinks=5000),
            backlinks_authority=BacklinksAuthority(domain_inlink_rank=42),
            domain_overview=DomainOverview(traffic=1000, keywords=200),
            all_keywords=sample_keywords,
            keyword_gaps=sample_gaps,
            ai_leaderboard=sample_leaderboard,
        )
        report = compile_report(inputs)

        assert report.executive.traffic == 1000
        assert report.executive.backlinks == 5000
        assert report.executive.authority == 42
        assert report.executive.keywords == 200
        assert report.executive.ai_share_of_voice == 30
        assert report.keywords.total == 200
        assert report.domain_analysis.authority == 42
        assert report.content_opportunities.gaps == sample_gaps
        assert report.competitive.keyword_gaps == sample_gaps

    def test_engine_data_preferred_over_overview(self):
        inputs = ReportInputs(
            ai_overview=AISearchOverview(target="example.com", engines=[EnginePresence(engine="all", brand_presence=1)]),
            ai_engine_data=[EnginePresence(engine="chatgpt", brand_presence=3, traffic=10)],
        )
        report = compile_report(inputs)

        assert report.ai_search.overview.target == "example.com"
        assert [e.engine for e in report.ai_search.overview.engines] == ["chatgpt"]

    def test_overview_engines_when_no_engine_data(self):
        inputs = ReportInputs(ai_overview=AISearchOverview(engines=[EnginePresence(engine="all")]))
        assert [e.engine for e in compile_report(inputs).ai_search.overview.engines] == ["all"]

    def test_diagnostics_carried(self):
        entries = [CallLogEntry(endpoint="/backlinks/summary", credits=100)]
        report = compile_report(ReportInputs(api_responses=entries, total_credits=100, top_market="uk"))

        assert report.api_responses == entries
        assert report.total_credits == 100
        assert report.ai_search.market_name == "United Kingdom"

    def test_top_pages_by_backlinks_capped(self):
        pages = [BacklinksIndexedPage(page=f"https://example.com/{i}") for i in range(15)]
        report = compile_report(ReportInputs(indexed_pages=pages))
        assert len(report.domain_analysis.top_pages_by_backlinks) == 10
        assert len(report.backlinks.indexed_pages) == 15


class TestRecordImmutability:
    """Records are deeply read-only, including copies."""

    def test_dict_field(self):
        summary = BacklinksSummary(tlds={"com": 200})

        with pytest.raises(TypeError):
            summary.tlds["net"] = 5
        with pytest.raises(TypeError):
            summary.tlds.update({"net": 5})
        assert summary.tlds == {"com": 200}

    def test_list_field(self, sample_leaderboard):
        report = compile_report(ReportInputs(ai_leaderboard=sample_leaderboard))

        with pytest.raises(TypeError):
            report.ai_search.leaderboard.sort(key=lambda e: e.rank)
        with pytest.raises(TypeError):
            report.ai_search.leaderboard += []
        assert report.ai_search.leaderboard == sample_leaderboard

    def test_input_lists_untouched(self, sample_keywords):
        compile_report(ReportInputs(all_keywords=sample_keywords))
        sample_keywords.append(DomainKeyword(keyword="extra"))
        assert len(sample_keywords) == 5

    def test_model_copy_frozen(self):
        overview = AISearchOverview(target="example.com")
        copied = overview.model_copy(update={"engines": [EnginePresence(engine="chatgpt")]})

        with pytest.raises(TypeError):
            copied.engines.append(EnginePresence(engine="gemini"))

    def test_deepcopy(self):
        summary = BacklinksSummary(tlds={"com": 200})
        assert copy.deepcopy(summary) == summary
