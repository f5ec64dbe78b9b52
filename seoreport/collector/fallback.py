"""
Degradation combinator.

Every individual fetch of a report run goes through ``with_default`` so one
failing endpoint yields that metric's empty/zero default instead of aborting
the phase.
"""

import copy
import logging
from typing import Awaitable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_default(fetch: Awaitable[T], default: T, name: str = "fetch") -> T:
    """
    Await ``fetch`` and return its result, or ``default`` if it raises.

    Mutable defaults are copied so callers never share one instance.
    Cancellation is not intercepted.
    """
    try:
        return await fetch
    except Exception as e:
        logger.warning(f"{name} failed, using default: {type(e).__name__}: {e}")
        if isinstance(default, (list, dict, set)):
            return copy.copy(default)
        return default
