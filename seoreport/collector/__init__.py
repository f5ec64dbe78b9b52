"""
SE Ranking data collection.

The client, its rate limiter and credit accounting, one fetcher module per
API area, and the orchestrator that runs them in phases.
"""

from .client import (
    ApiSession,
    FatalConfigurationError,
    InsufficientCredits,
    ProviderError,
    RateLimitExceeded,
    SeRankingClient,
    SeRankingError,
    TransportError,
)
from .credits import CREDIT_COSTS, CreditCost, calculate_credits, count_records, match_cost
from .fallback import with_default
from .orchestrator import CollectionConfig, ReportOrchestrator
from .progress import ProgressCallback, ProgressEvent, ProgressStream
from .rate_limit import DEFAULT_RATE_LIMIT, RateLimiter

__all__ = [
    "ApiSession",
    "CREDIT_COSTS",
    "CollectionConfig",
    "CreditCost",
    "DEFAULT_RATE_LIMIT",
    "FatalConfigurationError",
    "InsufficientCredits",
    "ProgressCallback",
    "ProgressEvent",
    "ProgressStream",
    "ProviderError",
    "RateLimitExceeded",
    "RateLimiter",
    "ReportOrchestrator",
    "SeRankingClient",
    "SeRankingError",
    "TransportError",
    "calculate_credits",
    "count_records",
    "match_cost",
    "with_default",
]
