"""Compiled accessors for configuration keys.

Compiling a key turns its effective raw value into something callable: a
callable value is used as is, so call arguments reach it, and anything else
is wrapped in a :class:`Constant`. Accessors are memoized per key and evicted
one key at a time when that key's value changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Callable

from .layers import LayeredStore
from .values import Constant

logger = logging.getLogger(__name__)

Accessor = Callable[..., Any]


class AccessorCache:
    """Per-key memo of compiled accessors over a LayeredStore."""

    def __init__(self, store: LayeredStore):
        self.store = store
        self._cache: dict[str, Accessor] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def compile(self, key: str) -> Accessor:
        """Build an accessor for ``key`` without touching the cache."""
        raw = self.store.resolve_raw(key)
        if callable(raw):
            return raw
        return Constant(raw)

    def get_accessor(self, key: str) -> Accessor:
        accessor = self._cache.get(key)
        if accessor is not None:
            return accessor

        accessor = self.compile(key)
        # Unknown keys are recompiled on every access so each one is reported
        if self.store.schema.get_slot(key) is not None:
            self._cache[key] = accessor
        return accessor

    def get(self, key: str, *args: Any, **kwargs: Any) -> Any:
        return self.get_accessor(key)(*args, **kwargs)

    def evict(self, key: str) -> bool:
        """Drop the cached accessor for ``key``; True if one was cached."""
        return self._cache.pop(key, None) is not None

    def evict_many(self, keys: Iterable[str]) -> int:
        evicted = sum(1 for key in keys if self.evict(key))
        if evicted:
            logger.debug(f"Evicted {evicted} cached accessor(s)")
        return evicted

    def clear(self) -> None:
        self._cache.clear()
