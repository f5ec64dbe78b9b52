"""
SE Ranking API Client

Async HTTP client with:
- Token bucket rate limiting (5 requests/second by default)
- Classified provider errors (429, 402, other non-2xx, transport)
- Per-call credit estimation and an append-only call log
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

import httpx

from seoreport.models import CallLogEntry, SubscriptionInfo

from .credits import calculate_credits, count_records
from .payload import as_dict
from .rate_limit import DEFAULT_RATE_LIMIT, RateLimiter

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.seranking.com/v1"


# =============================================================================
# ERRORS
# =============================================================================

class SeRankingError(Exception):
    """Base exception for SE Ranking API errors."""
    def __init__(self, message: str, status_code: int = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class RateLimitExceeded(SeRankingError):
    def __init__(self, response: Any = None):
        super().__init__(
            "Rate limit exceeded. The API allows 5 requests per second by default. "
            "Reduce the request rate or contact api@seranking.com for higher limits.",
            status_code=429,
            response=response,
        )


class InsufficientCredits(SeRankingError):
    def __init__(self, response: Any = None):
        super().__init__(
            "Insufficient funds: the API key is disabled until additional credits "
            "are purchased.",
            status_code=402,
            response=response,
        )


class ProviderError(SeRankingError):
    def __init__(self, status_code: int, body: Any = None):
        super().__init__(f"API Error {status_code}: {body}", status_code=status_code, response=body)


class TransportError(SeRankingError):
    """Network failure, timeout or an undecodable response body."""


class FatalConfigurationError(SeRankingError):
    """No usable credential or an invalid target; the run cannot start."""


# =============================================================================
# SESSION
# =============================================================================

@dataclass
class ApiSession:
    """
    Per-run call log.

    Owned by exactly one client; a new client starts a new session, so two
    concurrent report runs never share log state.
    """
    mode: Literal["user", "shared"] = "user"
    enable_logging: bool = True
    call_log: List[CallLogEntry] = field(default_factory=list)

    @property
    def track_credits(self) -> bool:
        return self.mode == "shared"

    def record(self, entry: CallLogEntry) -> None:
        if self.enable_logging:
            self.call_log.append(entry)

    def total_credits(self) -> int:
        return sum(entry.credits for entry in self.call_log)

    def clear(self) -> None:
        self.call_log = []


# =============================================================================
# CLIENT
# =============================================================================

class SeRankingClient:
    """
    Async client for the SE Ranking data API.

    Usage:
        async with SeRankingClient(api_key="...") as client:
            data = await client.request("/domain/overview/db", {"source": "us", "domain": "example.com"})
            print(client.total_credits())
    """

    BASE_URL = API_BASE_URL

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        rate_limit: float = DEFAULT_RATE_LIMIT,
        enable_logging: bool = True,
        mode: Literal["user", "shared"] = "user",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        """
        Initialize SE Ranking client.

        Args:
            api_key: SE Ranking data API key
            base_url: API root, defaults to the public v1 endpoint
            rate_limit: Requests per second (token bucket capacity and refill)
            enable_logging: Record every successful call in the call log
            mode: "shared" when running on the shared fallback key
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
            rate_limiter: Optional preconfigured limiter
        """
        if not api_key:
            raise FatalConfigurationError("An SE Ranking API key is required")

        self.api_key = api_key
        self.rate_limiter = rate_limiter or RateLimiter(rate_limit)
        self.session = ApiSession(mode=mode, enable_logging=enable_logging)

        self._client = httpx.AsyncClient(
            base_url=(base_url or self.BASE_URL).rstrip("/"),
            headers={
                "Authorization": f"Token {api_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    # -------------------------------------------------------------------------
    # Call log
    # -------------------------------------------------------------------------

    @property
    def call_log(self) -> List[CallLogEntry]:
        return self.session.call_log

    def total_credits(self) -> int:
        """Total credits consumed across all logged calls."""
        return self.session.total_credits()

    def clear_call_log(self) -> None:
        self.session.clear()

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    async def request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        method: Literal["GET", "POST"] = "GET",
    ) -> Any:
        """
        Make one rate-limited request and return the decoded JSON body.

        Args:
            endpoint: API path (e.g., "/backlinks/summary")
            params: Query parameters for GET, JSON body for POST
            method: "GET" or "POST"

        Raises:
            RateLimitExceeded: HTTP 429
            InsufficientCredits: HTTP 402
            ProviderError: Any other non-2xx status
            TransportError: Network failure or undecodable body
        """
        if self._closed:
            raise TransportError("Client is closed")

        params = params or {}
        await self.rate_limiter.acquire()

        logger.debug(f"{method} {endpoint}")
        start = time.perf_counter()

        try:
            if method == "GET":
                query = {key: value for key, value in params.items() if value is not None}
                response = await self._client.get(endpoint, params=query)
            else:
                response = await self._client.post(endpoint, json=params)
        except httpx.HTTPError as e:
            logger.warning(f"Transport error on {endpoint}: {e}")
            raise TransportError(f"Request to {endpoint} failed: {e}") from e

        if not response.is_success:
            body = response.text
            logger.warning(f"{endpoint} returned HTTP {response.status_code}")
            if response.status_code == 429:
                raise RateLimitExceeded(body)
            if response.status_code == 402:
                raise InsufficientCredits(body)
            raise ProviderError(response.status_code, body)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {endpoint}: {e}") from e

        duration_ms = (time.perf_counter() - start) * 1000

        if self.session.enable_logging:
            self.session.record(CallLogEntry(
                endpoint=endpoint,
                method=method,
                params=params,
                response=data,
                duration_ms=round(duration_ms, 2),
                credits=calculate_credits(endpoint, count_records(data)),
            ))

        return data

    async def get_subscription(self) -> SubscriptionInfo:
        """Account subscription status (0 credits)."""
        response = await self.request("/account/subscription")
        info = as_dict(as_dict(response).get("subscription_info"))
        # The provider spells the field "expiraton_date"
        return SubscriptionInfo(
            status=info.get("status", "") or "",
            start_date=info.get("start_date", "") or "",
            expiration_date=info.get("expiraton_date") or info.get("expiration_date") or "",
            units_limit=float(info.get("units_limit", 0) or 0),
            units_left=float(info.get("units_left", 0) or 0),
        )

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

