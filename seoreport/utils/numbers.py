"""
Numeric coercion for provider payloads.

The API returns counts as ints, floats or numeric strings depending on the
endpoint; every normalizer goes through these helpers so a missing or
malformed value becomes 0 instead of an exception.
"""

import math
from typing import Any


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 -> 3), unlike round()."""
    return int(math.floor(value + 0.5))


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        return parsed if math.isfinite(parsed) else default
    return default


def to_int(value: Any, default: int = 0) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    parsed = to_float(value, None)
    if parsed is None:
        return default
    return round_half_up(parsed)


def to_optional_int(value: Any):
    """Like to_int but keeps an absent value as None."""
    if value is None:
        return None
    return to_int(value)
