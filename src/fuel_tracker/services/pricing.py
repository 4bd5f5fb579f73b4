from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

from django.conf import settings
from django.utils import timezone

from fuel_tracker.services.price_cache import PriceCache, cache_key
from fuel_tracker.services.price_sources import PriceSource, build_default_sources
from fuel_tracker.services.types import FuelKind, PriceQuote, parse_fuel_kind

logger = logging.getLogger(__name__)

EMERGENCY_FALLBACK_SOURCE = "emergency_fallback"

# December 2024 Belgian averages.
EMERGENCY_PRICES: dict[FuelKind, float] = {
    FuelKind.EURO95: 1.649,
    FuelKind.EURO98: 1.759,
    FuelKind.DIESEL: 1.689,
    FuelKind.LPG: 0.749,
}


class PriceResolver:
    """Resolves a current fuel price, trying each source in order.

    A cached quote short-circuits the chain. The first source returning a
    positive amount wins and is cached; failing sources are logged and
    skipped. When every source fails an uncached emergency quote is returned,
    so ``resolve`` always produces a usable price.
    """

    def __init__(
        self,
        sources: Sequence[PriceSource] | None = None,
        cache: PriceCache | None = None,
    ) -> None:
        self.sources = list(build_default_sources() if sources is None else sources)
        if cache is None:
            cache = PriceCache(ttl_seconds=settings.FUEL_PRICE_CACHE_TTL_SECONDS)
        self.cache = cache

    def resolve(self, fuel_kind: FuelKind | str) -> PriceQuote:
        kind = parse_fuel_kind(fuel_kind)
        key = cache_key(kind)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Fuel price cache hit for %s (%s)", kind.value, cached.source_name)
            return cached

        for source in self.sources:
            amount = self._try_source(source, kind)
            if amount is None:
                continue

            quote = PriceQuote(
                fuel_kind=kind,
                amount=amount,
                source_name=source.name,
                retrieved_at=timezone.now(),
            )
            self.cache.put(key, quote)
            logger.info("Resolved %s price %.3f from %s", kind.value, amount, source.name)
            return quote

        logger.warning("All fuel price sources failed for %s, using emergency price", kind.value)
        return PriceQuote(
            fuel_kind=kind,
            amount=EMERGENCY_PRICES[kind],
            source_name=EMERGENCY_FALLBACK_SOURCE,
            retrieved_at=timezone.now(),
        )

    def clear_cache(self) -> None:
        self.cache.clear()

    @staticmethod
    def _try_source(source: PriceSource, kind: FuelKind) -> float | None:
        try:
            raw = source.fetch(kind)
        except Exception as exc:
            logger.warning("Fuel price source %s failed for %s: %s", source.name, kind.value, exc)
            return None

        amount = _positive_amount(raw)
        if amount is None:
            logger.warning(
                "Fuel price source %s returned no usable price for %s: %r",
                source.name,
                kind.value,
                raw,
            )
        return amount


def _positive_amount(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        amount = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


_shared_resolver: PriceResolver | None = None


def get_price_resolver() -> PriceResolver:
    """Process-wide resolver, so every caller shares one price cache."""
    global _shared_resolver
    if _shared_resolver is None:
        _shared_resolver = PriceResolver()
    return _shared_resolver
