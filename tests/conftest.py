"""
Pytest Configuration and Shared Fixtures

Provides a fake SE Ranking API (served through httpx.MockTransport) with
realistic payloads for every endpoint a report run touches.
"""

import json
from typing import Any, Callable, Dict, List, Set

import httpx
import pytest
import pytest_asyncio

from seoreport.collector import RateLimiter, SeRankingClient
from seoreport.models import DomainKeyword, KeywordGap, LeaderboardEntry

API_BASE = "https://api.seranking.com/v1"


# ============================================================================
# Fake API
# ============================================================================

class FakeSeRankingApi:
    """
    Routes requests by endpoint path.

    A route is either a payload or a callable ``(params) -> payload``.
    Endpoints listed in ``failures`` answer with the given status code.
    """

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.failures: Dict[str, int] = {}
        self.requests: List[Dict[str, Any]] = []

    def fail(self, endpoint: str, status_code: int = 500):
        self.failures[endpoint] = status_code

    def calls_to(self, endpoint: str) -> List[Dict[str, Any]]:
        return [r for r in self.requests if r["endpoint"] == endpoint]

    @property
    def endpoints(self) -> Set[str]:
        return {r["endpoint"] for r in self.requests}

    def handler(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path[len("/v1"):]
        if request.method == "POST":
            params = json.loads(request.content or b"{}")
        else:
            params = dict(request.url.params)

        self.requests.append({"endpoint": endpoint, "method": request.method, "params": params})

        if endpoint in self.failures:
            return httpx.Response(self.failures[endpoint], json={"message": "error"})
        if endpoint not in self.routes:
            return httpx.Response(404, json={"message": "not found"})

        route = self.routes[endpoint]
        payload = route(params) if callable(route) else route
        return httpx.Response(200, json=payload)


def _domain_keywords(params: Dict[str, Any]) -> Any:
    if params.get("type") == "adv":
        return [
            {"keyword": "buy running shoes", "position": 1, "volume": 800, "cpc": "1.5", "traffic": 40},
            {"keyword": "running shoes sale", "position": 2, "volume": 600, "cpc": "1.1", "traffic": 20},
        ]
    if params.get("filter_position_from"):
        return [
            {"keyword": "running shoes review", "position": 12, "volume": 1000, "traffic": 5.0,
             "url": "https://example.com/review"},
            {"keyword": "marathon shoes", "position": 18, "volume": 600, "traffic": 2.0,
             "url": "https://example.com/marathon"},
        ]
    return [
        {"keyword": "running shoes", "position": 3, "volume": 5000, "traffic": 400.0,
         "url": "https://example.com/shoes", "cpc": 1.2, "difficulty": 55},
        {"keyword": "trail shoes", "position": 8, "volume": 2000, "traffic": 100.0,
         "url": "https://example.com/trail", "difficulty": 35},
        {"keyword": "shoe sizes", "position": 15, "volume": 900, "traffic": 10.0,
         "url": "https://example.com/shoes"},
    ]


def _keywords_comparison(params: Dict[str, Any]) -> Any:
    if str(params.get("diff")) == "1":
        return [
            {"keyword": "best running shoes", "volume": 3000, "difficulty": 40, "position": 4},
            {"keyword": "running socks", "volume": 700, "difficulty": 20, "position": 9},
        ]
    return [
        {"keyword": "running shoes", "volume": 5000, "position": 3, "compare_position": 1},
        {"keyword": "trail shoes", "volume": 2000, "position": 8, "compare_position": 12},
    ]


def _refdomains(params: Dict[str, Any]) -> Any:
    if params.get("target") == "example.com":
        return {"refdomains": [{"refdomain": "news.site", "backlinks": 3, "domain_inlink_rank": 60}]}
    return {"refdomains": [
        {"refdomain": "news.site", "backlinks": 3, "domain_inlink_rank": 60},
        {"refdomain": "blog.site", "backlinks": 2, "domain_inlink_rank": 40},
    ]}


def _domain_ads(params: Dict[str, Any]) -> Any:
    if params.get("keyword"):
        return [{"domain": "rival.com", "ads_count": 3, "keywords_count": 12, "traffic_sum": "150"}]
    return [{
        "keyword": "buy running shoes",
        "ads_count": "2",
        "cpc": "1.2",
        "volume": "800",
        "snippets": {"2024-05-01": {"position": 1, "snippet_title": "Running Shoes"}},
    }]


def default_routes() -> Dict[str, Any]:
    ai_presence = {
        "summary": {
            "brand_presence": {"current": 8},
            "link_presence": {"current": 2},
            "ai_opportunity_traffic": {"current": 100},
        }
    }
    return {
        "/domain/overview/worldwide": {
            "organic": [
                {"source": "worldwide", "traffic_sum": 1500, "keywords_count": 300,
                 "positions_up_count": 10, "positions_down_count": 4,
                 "positions_new_count": 3, "positions_lost_count": 2},
                {"source": "uk", "traffic_sum": 500, "keywords_count": 100},
                {"source": "us", "traffic_sum": 1000, "keywords_count": 200},
            ],
            "adv": [{"source": "worldwide", "positions_up_count": 1}],
        },
        "/domain/overview/db": {
            "organic": {
                "base_domain": "example.com", "traffic_sum": 1000, "price_sum": 250.5,
                "keywords_count": 200, "top1_5": 10, "top6_10": 15, "top11_20": 20,
                "top21_50": 30, "top51_100": 40,
            },
            "adv": {"keywords_count": 5},
        },
        "/domain/overview/history": [{"year": 2024, "month": 1, "traffic_sum": 900, "keywords_count": 180}],
        "/domain/overview/worldwide/url": {"organic": [{"keywords_count": 10, "traffic_sum": 50, "price_sum": 20}]},
        "/domain/keywords": _domain_keywords,
        "/domain/competitors": [
            {"domain": "other.com", "common_keywords": 80, "total_keywords": 500, "traffic_sum": 1200},
            {"domain": "rival.com", "common_keywords": 120, "total_keywords": 900, "traffic_sum": 3000},
        ],
        "/domain/subdomains": [{"subdomain": "blog.example.com", "traffic_sum": 200, "keywords_count": 40}],
        "/domain/keywords/comparison": _keywords_comparison,
        "/domain/ads": _domain_ads,
        "/backlinks/summary": {"summary": [{
            "backlinks": 5000, "refdomains": 300, "subnets": 120, "ips": 150,
            "dofollow_backlinks": 4000, "nofollow_backlinks": 1000,
            "top_tlds": [{"tld": "com", "count": 200}],
            "top_anchors_by_backlinks": [{"anchor": "example", "backlinks": 900}],
        }]},
        "/backlinks/authority": {"pages": [{"domain_inlink_rank": 42, "inlink_rank": 30}]},
        "/backlinks/history/count": {"new_lost_backlinks_count": [
            {"date": "2024-05-01", "new": 3, "lost": 1},
            {"date": "2024-05-02", "new": 2, "lost": 1},
        ]},
        "/backlinks/history/refdomains/count": {"new_lost_refdomains_count": [{"new": 4, "lost": 1}]},
        "/backlinks/indexed-pages": {"pages": [{"url": "https://example.com/", "backlinks": 100, "refdomains": 20}]},
        "/backlinks/authority/domain/distribution": {"histogram": [
            {"domain_inlink_rank": 5, "refdomains": 10},
            {"domain_inlink_rank": 45, "refdomains": 3},
        ]},
        "/backlinks/anchors": {"anchors": [{"anchor": "example", "backlinks": 50, "refdomains": 10}]},
        "/backlinks/raw": {"backlinks": [{
            "url_from": "https://news.site/a", "url_to": "https://example.com/",
            "anchor": "example", "domain_inlink_rank": 60,
        }], "total": 1},
        "/backlinks/referring-subnets/count": {"count": 12},
        "/backlinks/refdomains": _refdomains,
        "/backlinks/history/cumulative": {"history": [{"date": "2024-01-01", "backlinks": 4800, "refdomains": 290}]},
        "/backlinks/history": {"backlinks": [{
            "url_from": "https://a.site/x", "url_to": "https://example.com/",
            "domain_inlink_rank": 30, "first_seen": "2024-05-01", "last_seen": "2024-05-02",
        }]},
        "/backlinks/ips": {"ips": [{"ip": "1.2.3.4", "backlinks": 10}]},
        "/backlinks/history/refdomains": {"refdomains": [{"refdomain": "c.site", "domain_inlink_rank": 50}]},
        "/backlinks/authority/page/history": {"history": [{"date": "2024-01", "inlink_rank": 30}]},
        "/ai-search/discover-brand": {"brands": ["Example"]},
        "/ai-search/overview/leaderboard": {
            "leaderboard": [
                {"rank": 1, "domain": "example.com", "share_of_voice": 0.42,
                 "brand_presence": 10, "link_presence": 5, "is_primary_target": True},
                {"rank": 2, "domain": "rival.com", "share_of_voice": 0.3},
            ],
            "results": {"example.com": {
                "chatgpt": {"brand_presence": 6, "link_presence": 2},
                "perplexity": {"brand_presence": 2, "link_presence": 0},
            }},
        },
        "/ai-search/overview": ai_presence,
        "/ai-search/prompts-by-brand": {"prompts": [
            {"prompt": "Best running shoes", "type": "Brand", "volume": 500,
             "answer": {"text": "Example is a popular brand.", "links": []}},
        ]},
        "/ai-search/prompts-by-target": {"prompts": [
            {"prompt": "best running shoes", "type": "Link", "volume": 500,
             "answer": {"text": "See example.com", "links": ["https://example.com"]}},
            {"prompt": "trail running tips", "type": "Link", "volume": 900,
             "answer": {"text": "Tips at example.com", "links": ["https://example.com/trail"]}},
        ]},
        "/keywords/questions": {"keywords": [{"keyword": "how to choose running shoes", "volume": 700, "difficulty": 20}]},
        "/keywords/similar": {"keywords": [{"keyword": "cheap running shoes", "volume": 1500, "difficulty": 30}]},
        "/keywords/related": {"keywords": [{"keyword": "running gear", "volume": 4000, "difficulty": 60}]},
        "/keywords/long-tail": {"keywords": [{"keyword": "best running shoes for flat feet", "volume": 300, "difficulty": 10}]},
        "/account/subscription": {"subscription_info": {
            "status": "active", "start_date": "2024-01-01", "expiraton_date": "2025-01-01",
            "units_limit": 100000, "units_left": "1000",
        }},
    }


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def fake_api() -> FakeSeRankingApi:
    """Fake API answering every endpoint of a report run."""
    return FakeSeRankingApi(default_routes())


@pytest.fixture
def make_client(fake_api) -> Callable[..., SeRankingClient]:
    """Factory for clients wired to the fake API with an effectively unlimited rate."""
    def factory(**kwargs) -> SeRankingClient:
        kwargs.setdefault("api_key", "test-key")
        kwargs.setdefault("rate_limiter", RateLimiter(10_000))
        return SeRankingClient(transport=httpx.MockTransport(fake_api.handler), **kwargs)
    return factory


@pytest_asyncio.fixture
async def api_client(make_client):
    client = make_client()
    yield client
    await client.close()


@pytest.fixture
def sample_keywords():
    return [
        DomainKeyword(keyword="running shoes", position=3, volume=5000),
        DomainKeyword(keyword="trail shoes", position=8, volume=2000),
        DomainKeyword(keyword="shoe sizes", position=15, volume=900),
        DomainKeyword(keyword="marathon shoes", position=42, volume=600),
    ]


@pytest.fixture
def sample_gaps():
    return [
        KeywordGap(keyword="best running shoes", volume=3000, difficulty=40, competitor_position=4),
        KeywordGap(keyword="running socks", volume=700, difficulty=20, competitor_position=9),
    ]


@pytest.fixture
def sample_leaderboard():
    return [
        LeaderboardEntry(rank=1, domain="rival.com", share_of_voice=55),
        LeaderboardEntry(rank=2, domain="example.com", share_of_voice=30, is_primary_target=True),
    ]
