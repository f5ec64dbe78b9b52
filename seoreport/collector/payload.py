"""
Payload shape guards.

Provider responses are either a bare list or an object wrapping one; these
helpers return an empty container for any other shape.
"""

from typing import Any, Dict, List


def as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def rows(payload: Any, key: str = None) -> List[Dict[str, Any]]:
    """
    Extract the list of row objects from a payload.

    Args:
        payload: Raw decoded JSON
        key: Wrapper field holding the list; None when the payload is the list

    Returns:
        The dict rows, skipping any non-object entries
    """
    items = as_list(payload) if key is None else as_list(as_dict(payload).get(key))
    return [item for item in items if isinstance(item, dict)]


def first_row(payload: Any, key: str = None) -> Dict[str, Any]:
    items = rows(payload, key)
    return items[0] if items else {}


def nested(payload: Any, *keys: str) -> Any:
    """Walk nested objects, returning None as soon as a level is missing."""
    value = payload
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value
