from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from fuel_tracker.services.types import FuelKind, PriceQuote

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(slots=True, frozen=True)
class CacheEntry:
    value: PriceQuote
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


def cache_key(fuel_kind: FuelKind) -> str:
    return f"price_{fuel_kind.value}"


class PriceCache:
    """In-memory TTL store for price quotes, expired lazily on read."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = float(ttl_seconds)
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> PriceQuote | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self.clock()):
            self._entries.pop(key, None)
            return None
        return entry.value

    def put(self, key: str, value: PriceQuote) -> None:
        self._entries[key] = CacheEntry(value=value, expires_at=self.clock() + self.ttl_seconds)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
