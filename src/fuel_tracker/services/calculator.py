from __future__ import annotations

import logging
import math
from typing import Any

from django.utils import timezone

from fuel_tracker.exceptions import (
    AddressNotFoundError,
    ExternalServiceError,
    NoRouteFoundError,
    ValidationError,
)
from fuel_tracker.services.geocoding import GeocodingClient
from fuel_tracker.services.osrm import OsrmClient
from fuel_tracker.services.pricing import PriceResolver, get_price_resolver
from fuel_tracker.services.types import (
    FuelKind,
    GeoPoint,
    TripRecord,
    TripResult,
    parse_fuel_kind,
)

logger = logging.getLogger(__name__)

MIN_CONSUMPTION_L_PER_100KM = 2.0
MAX_CONSUMPTION_L_PER_100KM = 25.0


class TripCalculator:
    def __init__(
        self,
        geocoding_client: GeocodingClient | None = None,
        osrm_client: OsrmClient | None = None,
        price_resolver: PriceResolver | None = None,
    ) -> None:
        self.geocoding_client = geocoding_client or GeocodingClient()
        self.osrm_client = osrm_client or OsrmClient()
        self.price_resolver = price_resolver or get_price_resolver()

    def compute_trip(
        self,
        departure: str,
        destination: str,
        consumption: Any,
        fuel_kind: FuelKind | str,
        *,
        departure_point: GeoPoint | None = None,
        destination_point: GeoPoint | None = None,
    ) -> TripResult:
        departure, destination, consumption, kind = validate_trip_input(
            departure, destination, consumption, fuel_kind
        )

        start, departure_match = self._locate(departure, departure_point)
        finish, destination_match = self._locate(destination, destination_point)

        try:
            route = self.osrm_client.route(start, finish)
        except ExternalServiceError as exc:
            raise NoRouteFoundError("route not found") from exc

        quote = self.price_resolver.resolve(kind)

        distance_km = route.distance_meters / 1000.0
        duration_min = route.duration_seconds / 60.0
        fuel_liters = distance_km * consumption / 100.0
        cost_total = fuel_liters * quote.amount
        co2_kg = fuel_liters * kind.emission_factor

        record = TripRecord(
            departure_label=departure,
            destination_label=destination,
            distance_km=round(distance_km, 3),
            duration_min=round(duration_min, 2),
            consumption_l_per_100km=consumption,
            fuel_kind=kind,
            price_per_liter=round(quote.amount, 3),
            fuel_liters=round(fuel_liters, 3),
            cost_total=round(cost_total, 2),
            co2_kg=round(co2_kg, 2),
            created_at=timezone.now(),
        )
        logger.info(
            "Trip %r -> %r: %.1f km, %.2f EUR (%s via %s)",
            departure,
            destination,
            record.distance_km,
            record.cost_total,
            kind.value,
            quote.source_name,
        )
        return TripResult(
            record=record,
            departure=start,
            destination=finish,
            route=route,
            quote=quote,
            departure_match=departure_match,
            destination_match=destination_match,
        )

    def _locate(self, address: str, supplied: GeoPoint | None) -> tuple[GeoPoint, str | None]:
        if supplied is not None:
            return supplied, None
        try:
            match = self.geocoding_client.geocode(address)
        except ExternalServiceError as exc:
            raise AddressNotFoundError("address not found") from exc
        return match.point, match.label


def validate_trip_input(
    departure: Any,
    destination: Any,
    consumption: Any,
    fuel_kind: FuelKind | str,
) -> tuple[str, str, float, FuelKind]:
    departure_text = str(departure or "").strip()
    destination_text = str(destination or "").strip()
    if not departure_text or not destination_text:
        raise ValidationError("Both departure and destination addresses are required")

    try:
        rate = float(consumption)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Fuel consumption must be a number") from exc
    if not math.isfinite(rate) or not (
        MIN_CONSUMPTION_L_PER_100KM <= rate <= MAX_CONSUMPTION_L_PER_100KM
    ):
        raise ValidationError(
            "Fuel consumption must be a realistic value "
            f"({MIN_CONSUMPTION_L_PER_100KM:g}-{MAX_CONSUMPTION_L_PER_100KM:g} L/100km)"
        )

    return departure_text, destination_text, rate, parse_fuel_kind(fuel_kind)
