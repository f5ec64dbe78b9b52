"""
Base record type.

Every normalized metric, aggregate and report section is an immutable value
object with a default for every field, so a record built from an empty or
failed payload is always complete.

Immutability is deep: list and dict values (including nested records and raw
payloads such as call-log responses) are replaced with read-only copies once
the record is validated.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, model_validator


def _readonly(self, *args, **kwargs):
    raise TypeError(f"{type(self).__name__} is read-only")


class FrozenList(list):
    """List that rejects in-place mutation. Compares and serializes like a list."""

    __setitem__ = __delitem__ = __iadd__ = __imul__ = _readonly
    append = extend = insert = pop = remove = clear = sort = reverse = _readonly

    def __reduce__(self):
        return type(self), (list(self),)


class FrozenDict(dict):
    """Dict that rejects in-place mutation. Compares and serializes like a dict."""

    __setitem__ = __delitem__ = __ior__ = _readonly
    pop = popitem = clear = update = setdefault = _readonly

    def __reduce__(self):
        return type(self), (dict(self),)


def freeze(value: Any) -> Any:
    """Return ``value`` with every list and dict replaced by a read-only copy, recursively."""
    if isinstance(value, (FrozenList, FrozenDict)):
        return value
    if isinstance(value, Record):
        value._freeze_fields()
        return value
    if isinstance(value, list):
        return FrozenList(freeze(v) for v in value)
    if isinstance(value, tuple):
        return tuple(freeze(v) for v in value)
    if isinstance(value, dict):
        return FrozenDict({k: freeze(v) for k, v in value.items()})
    return value


class Record(BaseModel):
    """Immutable value object with per-field defaults."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    def _freeze_fields(self) -> None:
        for name in type(self).model_fields:
            self.__dict__[name] = freeze(self.__dict__.get(name))

    @model_validator(mode="after")
    def freeze_collections(self):
        self._freeze_fields()
        return self

    def model_copy(self, *, update: Optional[Dict[str, Any]] = None, deep: bool = False):
        # Updated values bypass validation
        copied = super().model_copy(update=update, deep=deep)
        copied._freeze_fields()
        return copied
