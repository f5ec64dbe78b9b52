"""
Credit cost table.

SE Ranking bills each call either per request, per returned record, or both.
Costs are looked up by the longest table pattern contained in the called
endpoint, so ``/backlinks/history/count`` wins over ``/backlinks/history``.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class CreditCost:
    per_request: int = 0
    per_record: int = 0


CREDIT_COSTS: Dict[str, CreditCost] = {
    # Backlinks
    "/backlinks/summary": CreditCost(per_record=100),
    "/backlinks/all": CreditCost(per_record=1),
    "/backlinks/anchors": CreditCost(per_record=1),
    "/backlinks/count": CreditCost(per_record=10),
    "/backlinks/authority": CreditCost(per_record=100),
    "/backlinks/authority/page": CreditCost(per_record=10),
    "/backlinks/authority/domain": CreditCost(per_record=10),
    "/backlinks/authority/domain/distribution": CreditCost(per_record=1),
    "/backlinks/referring-ips": CreditCost(per_record=1),
    "/backlinks/referring-ips/count": CreditCost(per_record=10),
    "/backlinks/metrics": CreditCost(per_record=100),
    "/backlinks/history": CreditCost(per_record=1),
    "/backlinks/history/count": CreditCost(per_record=100),
    "/backlinks/history/cumulative": CreditCost(per_record=100),
    "/backlinks/refdomains/history": CreditCost(per_record=1),
    "/backlinks/refdomains/history/count": CreditCost(per_record=100),
    "/backlinks/indexed-pages": CreditCost(per_record=1),
    "/backlinks/raw": CreditCost(per_record=1),
    "/backlinks/refdomains": CreditCost(per_record=1),
    "/backlinks/refdomains/count": CreditCost(per_record=10),
    "/backlinks/referring-subnets/count": CreditCost(per_record=10),
    "/backlinks/ips": CreditCost(per_record=1),

    # Domain
    "/domain/overview/db": CreditCost(per_request=100),
    "/domain/overview/worldwide": CreditCost(per_request=100),
    "/domain/overview/worldwide/url": CreditCost(per_request=100),
    "/domain/overview/history": CreditCost(per_request=100),
    "/domain/keywords": CreditCost(per_request=100),
    "/domain/pages": CreditCost(per_request=100),
    "/domain/subdomains": CreditCost(per_request=100),
    "/domain/ads": CreditCost(per_request=100),
    "/domain/competitors": CreditCost(per_request=100),
    "/domain/keywords/comparison": CreditCost(per_request=100),

    # AI search
    "/ai-search/overview": CreditCost(per_request=1800),
    "/ai-search/overview/leaderboard": CreditCost(per_request=7500),
    "/ai-search/discover-brand": CreditCost(per_request=100),
    "/ai-search/prompts-by-target": CreditCost(per_record=200),
    "/ai-search/prompts-by-brand": CreditCost(per_record=200),

    # Keywords
    "/keywords/export": CreditCost(per_record=10),
    "/keywords/related": CreditCost(per_record=10),
    "/keywords/similar": CreditCost(per_record=10),
    "/keywords/questions": CreditCost(per_record=10),
    "/keywords/long-tail": CreditCost(per_record=1),

    # Account
    "/account/subscription": CreditCost(),
}

# Wrapper fields that carry the record list of an object payload, in lookup order
COLLECTION_FIELDS = (
    "data", "pages", "keywords", "backlinks", "refdomains", "prompts",
    "summary", "leaderboard", "history", "ips", "histogram",
)


def match_cost(endpoint: str, table: Dict[str, CreditCost] = CREDIT_COSTS) -> CreditCost:
    """Return the cost of the longest pattern contained in endpoint, or a zero cost."""
    matches = [pattern for pattern in table if pattern in endpoint]
    if not matches:
        return CreditCost()
    return table[max(matches, key=len)]


def calculate_credits(
    endpoint: str,
    record_count: int,
    table: Dict[str, CreditCost] = CREDIT_COSTS,
) -> int:
    cost = match_cost(endpoint, table)
    return cost.per_request + cost.per_record * record_count


def count_records(payload: Any) -> int:
    """
    Estimate how many billable records a payload carries.

    A list counts its items; an object counts the first list-valued
    collection field it carries; anything else counts as one record.
    """
    if isinstance(payload, list):
        return len(payload)
    if isinstance(payload, dict):
        for key in COLLECTION_FIELDS:
            value = payload.get(key)
            if isinstance(value, list):
                return len(value)
    return 1
