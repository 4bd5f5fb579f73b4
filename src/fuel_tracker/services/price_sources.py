from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx
import polars as pl
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from fuel_tracker.exceptions import SourceUnavailableError
from fuel_tracker.services.types import FuelKind

logger = logging.getLogger(__name__)

PRODUCT_FIELD = "Product"
PRICE_FIELD = "Price incl. VAT"
PERIOD_FIELD = "Period"
PERIOD_DAY_FORMATS = ("%Y-%m-%d", "%d-%m-%Y")

STATBEL_PRODUCT_LABELS: dict[FuelKind, str] = {
    FuelKind.EURO95: "Euro Super 95 E10 (€/L)",
    FuelKind.EURO98: "Super Plus 98 E5 (€/L)",
    FuelKind.DIESEL: "Road Diesel B7 (€/L)",
    FuelKind.LPG: "LPG (€/L)",
}

# Belgian pump averages, October through March and April through September.
SEASONAL_PRICES: dict[str, dict[FuelKind, float]] = {
    "winter": {
        FuelKind.EURO95: 1.659,
        FuelKind.EURO98: 1.769,
        FuelKind.DIESEL: 1.709,
        FuelKind.LPG: 0.769,
    },
    "summer": {
        FuelKind.EURO95: 1.689,
        FuelKind.EURO98: 1.799,
        FuelKind.DIESEL: 1.669,
        FuelKind.LPG: 0.739,
    },
}

PriceFetcher = Callable[[FuelKind], float | None]


@dataclass(slots=True, frozen=True)
class PriceSource:
    name: str
    fetch: PriceFetcher


class StatbelClient:
    """Reads the StatBel fuel price dataset.

    ``timeout`` is the whole budget for one fetch. httpx applies it to each
    connect/read phase, and the body download is additionally cut off once
    the budget is spent, so a slowly trickling response cannot stall the
    fallback chain.
    """

    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.timeout = settings.FUEL_PRICE_TIMEOUT_SECONDS if timeout is None else timeout
        self.clock = clock

    def fetch_price(self, fuel_kind: FuelKind) -> float:
        return select_latest_price(self._download(), fuel_kind)

    def _download(self) -> Any:
        deadline = self.clock() + self.timeout
        chunks: list[bytes] = []
        try:
            with httpx.stream(
                "GET",
                self.url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
            ) as response:
                response.raise_for_status()
                for chunk in response.iter_bytes():
                    if self.clock() > deadline:
                        raise SourceUnavailableError(
                            f"Statbel response exceeded {self.timeout:g}s budget"
                        )
                    chunks.append(chunk)
        except httpx.HTTPError as exc:
            raise SourceUnavailableError("Statbel request failed") from exc

        try:
            return json.loads(b"".join(chunks))
        except ValueError as exc:
            raise SourceUnavailableError("Statbel returned invalid JSON") from exc


def select_latest_price(payload: Any, fuel_kind: FuelKind) -> float:
    if not isinstance(payload, dict) or not isinstance(payload.get("facts"), list):
        raise SourceUnavailableError("Malformed statistics payload")

    facts = [fact for fact in payload["facts"] if isinstance(fact, dict)]
    frame = pl.DataFrame(
        {
            "product": [_text(fact.get(PRODUCT_FIELD)) for fact in facts],
            "price": [_text(fact.get(PRICE_FIELD)) for fact in facts],
            "period": [_text(fact.get(PERIOD_FIELD)) for fact in facts],
        },
        schema={"product": pl.Utf8, "price": pl.Utf8, "period": pl.Utf8},
    )

    label = STATBEL_PRODUCT_LABELS[fuel_kind]
    latest = (
        frame.filter((pl.col("product") == label) & pl.col("price").is_not_null())
        .with_columns(
            pl.col("price").str.replace(",", ".").cast(pl.Float64, strict=False),
            _period_date(),
        )
        .filter(pl.col("price").is_not_null())
        .sort("period_date", descending=True, nulls_last=True)
        .head(1)
    )
    if latest.is_empty():
        raise SourceUnavailableError(f"No statistics record for {label}")
    if latest["period_date"][0] is None:
        raise SourceUnavailableError(f"No dated statistics record for {label}")

    return float(latest["price"][0])


def _period_date() -> pl.Expr:
    # Full dates, datetimes, year-month and bare years; "/" and "-" alike.
    period = pl.col("period").str.strip_chars().str.replace_all("/", "-", literal=True)
    day = period.str.slice(0, 10)
    return pl.coalesce(
        *[day.str.to_date(fmt, strict=False) for fmt in PERIOD_DAY_FORMATS],
        pl.when(period.str.contains(r"^\d{4}-\d{2}$")).then(
            pl.concat_str([period, pl.lit("-01")]).str.to_date("%Y-%m-%d", strict=False)
        ),
        pl.when(period.str.contains(r"^\d{4}$")).then(
            pl.concat_str([period, pl.lit("-01-01")]).str.to_date("%Y-%m-%d", strict=False)
        ),
    ).alias("period_date")


def season_for(moment: datetime) -> str:
    return "summer" if 4 <= moment.month <= 9 else "winter"


def seasonal_source(clock: Callable[[], float] = time.time) -> PriceSource:
    def fetch(fuel_kind: FuelKind) -> float:
        moment = datetime.fromtimestamp(clock(), tz=timezone.utc)
        return SEASONAL_PRICES[season_for(moment)][fuel_kind]

    return PriceSource(name="seasonal", fetch=fetch)


def statbel_source() -> PriceSource:
    client = StatbelClient(settings.STATBEL_DATASET_URL)
    return PriceSource(name="statbel", fetch=client.fetch_price)


def statbel_proxy_source() -> PriceSource:
    proxied_url = f"{settings.STATBEL_PROXY_URL}{quote(settings.STATBEL_DATASET_URL, safe='')}"
    client = StatbelClient(proxied_url)
    return PriceSource(name="statbel_proxy", fetch=client.fetch_price)


def build_default_sources(
    names: Sequence[str] | None = None,
    clock: Callable[[], float] = time.time,
) -> list[PriceSource]:
    factories: dict[str, Callable[[], PriceSource]] = {
        "statbel": statbel_source,
        "statbel_proxy": statbel_proxy_source,
        "seasonal": lambda: seasonal_source(clock),
    }
    selected = list(settings.FUEL_PRICE_SOURCES if names is None else names)

    unknown = [name for name in selected if name not in factories]
    if unknown:
        raise ImproperlyConfigured(f"Unknown fuel price sources: {sorted(unknown)}")

    logger.debug("Fuel price sources configured: %s", ", ".join(selected))
    return [factories[name]() for name in selected]


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)
