"""Result cache with per-entry TTL.

Keys are opaque strings built with `coord_key` / `hour_key` so that requests
for the same rounded location (and calendar hour) share one entry.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Protocol

_LOGGER = logging.getLogger(__name__)


def coord_key(prefix: str, latitude: float, longitude: float) -> str:
    """Cache key for a coordinate rounded to two decimals (~1 km)."""
    return f"{prefix}_{float(latitude):.2f}_{float(longitude):.2f}"


def hour_key(value: datetime) -> str:
    """YYYYMMDDHH of the datetime's own wall clock."""
    return value.strftime("%Y%m%d%H")


class ResultCache(Protocol):
    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any, ttl: float) -> None:
        ...


class MemoryResultCache:
    """In-process cache; entries are dropped lazily when read after expiry."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: Dict[str, Dict[str, Any]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry["expires_at"]:
            _LOGGER.debug("Cache entry expired: %s", key)
            self._entries.pop(key, None)
            return None
        return entry["data"]

    async def set(self, key: str, value: Any, ttl: float) -> None:
        now = self._clock()
        self._entries[key] = {
            "data": value,
            "expires_at": now + float(ttl),
            "cached_at": now,
        }

    async def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, int]:
        now = self._clock()
        valid = sum(1 for e in self._entries.values() if now < e["expires_at"])
        return {
            "total_entries": len(self._entries),
            "valid_entries": valid,
            "expired_entries": len(self._entries) - valid,
        }
