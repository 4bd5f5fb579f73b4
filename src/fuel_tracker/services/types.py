from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from fuel_tracker.exceptions import ValidationError


class FuelKind(str, Enum):
    EURO95 = "euro95"
    EURO98 = "euro98"
    DIESEL = "diesel"
    LPG = "lpg"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]

    @property
    def emission_factor(self) -> float:
        """kg CO2 released per liter burned."""
        return EMISSION_FACTORS[self]


DISPLAY_NAMES: dict[FuelKind, str] = {
    FuelKind.EURO95: "Euro 95",
    FuelKind.EURO98: "Euro 98",
    FuelKind.DIESEL: "Diesel",
    FuelKind.LPG: "LPG",
}

EMISSION_FACTORS: dict[FuelKind, float] = {
    FuelKind.EURO95: 2.35,
    FuelKind.EURO98: 2.35,
    FuelKind.DIESEL: 2.65,
    FuelKind.LPG: 1.66,
}


@dataclass(slots=True, frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class GeocodeResult:
    point: GeoPoint
    label: str
    country_code: str


@dataclass(slots=True, frozen=True)
class RouteData:
    coordinates: list[tuple[float, float]]
    distance_meters: float
    duration_seconds: float


@dataclass(slots=True, frozen=True)
class PriceQuote:
    fuel_kind: FuelKind
    amount: float
    source_name: str
    retrieved_at: datetime

    def __post_init__(self) -> None:
        if not math.isfinite(self.amount) or self.amount <= 0:
            raise ValueError(f"Price amount must be positive, got {self.amount!r}")


@dataclass(slots=True, frozen=True)
class TripRecord:
    departure_label: str
    destination_label: str
    distance_km: float
    duration_min: float
    consumption_l_per_100km: float
    fuel_kind: FuelKind
    price_per_liter: float
    fuel_liters: float
    cost_total: float
    co2_kg: float
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["fuel_kind"] = self.fuel_kind.value
        data["created_at"] = self.created_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TripRecord:
        return cls(
            departure_label=str(data["departure_label"]),
            destination_label=str(data["destination_label"]),
            distance_km=float(data["distance_km"]),
            duration_min=float(data["duration_min"]),
            consumption_l_per_100km=float(data["consumption_l_per_100km"]),
            fuel_kind=FuelKind(data["fuel_kind"]),
            price_per_liter=float(data["price_per_liter"]),
            fuel_liters=float(data["fuel_liters"]),
            cost_total=float(data["cost_total"]),
            co2_kg=float(data["co2_kg"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass(slots=True, frozen=True)
class TripResult:
    record: TripRecord
    departure: GeoPoint
    destination: GeoPoint
    route: RouteData
    quote: PriceQuote
    # Geocoder labels for the matched places; None where a point was supplied.
    departure_match: str | None = None
    destination_match: str | None = None


@dataclass(slots=True, frozen=True)
class HistorySummary:
    trip_count: int
    total_distance_km: float
    total_cost: float
    average_cost_per_km: float


def parse_fuel_kind(value: FuelKind | str) -> FuelKind:
    if isinstance(value, FuelKind):
        return value
    try:
        return FuelKind(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(kind.value for kind in FuelKind)
        raise ValidationError(f"Unknown fuel kind {value!r}; expected one of {choices}") from exc


@dataclass(slots=True, frozen=True)
class Favorite:
    """A saved departure/destination pair, optionally with trip defaults."""

    departure_label: str
    destination_label: str
    consumption_l_per_100km: float | None
    fuel_kind: FuelKind | None
    added_at: datetime
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "departure_label": self.departure_label,
            "destination_label": self.destination_label,
            "consumption_l_per_100km": self.consumption_l_per_100km,
            "fuel_kind": self.fuel_kind.value if self.fuel_kind else None,
            "added_at": self.added_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Favorite:
        consumption = data.get("consumption_l_per_100km")
        fuel_kind = data.get("fuel_kind")
        return cls(
            departure_label=str(data["departure_label"]),
            destination_label=str(data["destination_label"]),
            consumption_l_per_100km=None if consumption is None else float(consumption),
            fuel_kind=None if fuel_kind is None else FuelKind(fuel_kind),
            added_at=datetime.fromisoformat(data["added_at"]),
        )


@dataclass(slots=True, frozen=True)
class Preferences:
    default_fuel_kind: FuelKind
    default_consumption: float | None
    language: str
    units: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "default_fuel_kind": self.default_fuel_kind.value,
            "default_consumption": self.default_consumption,
            "language": self.language,
            "units": self.units,
        }


@dataclass(slots=True, frozen=True)
class StorageInfo:
    trip_count: int
    favorite_count: int
    size_bytes: int

    @property
    def formatted_size(self) -> str:
        return format_bytes(self.size_bytes)


@dataclass(slots=True, frozen=True)
class ImportResult:
    trips: int | None
    favorites: int | None
    preferences: bool


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    for unit in ("Bytes", "KB"):
        if value < 1024:
            return f"{round(value, 2):g} {unit}"
        value /= 1024
    return f"{round(value, 2):g} MB"
