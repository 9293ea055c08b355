"""Keyed TTL cache for odds-feed responses."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any


class TTLCache:
    """In-memory cache whose entries go stale ``ttl_seconds`` after being set.

    Stale entries are kept so callers can fall back to them when the feed is
    rate limited.
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        time_fn: Callable[[], float] | None = None,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._time = time_fn or time.monotonic
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._time():
            return None
        return value

    def get_stale(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        return entry[1] if entry else None

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._time() + self.ttl_seconds, value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
