from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from django.conf import settings
from django.utils import timezone

from fuel_tracker.exceptions import FavoriteNotFoundError, ValidationError
from fuel_tracker.models import FavoriteRoute
from fuel_tracker.services.calculator import (
    MAX_CONSUMPTION_L_PER_100KM,
    MIN_CONSUMPTION_L_PER_100KM,
)
from fuel_tracker.services.types import Favorite, FuelKind, parse_fuel_kind

logger = logging.getLogger(__name__)


class FavoritesStore:
    """Saved routes for one profile, oldest first."""

    def __init__(self, profile: str | None = None) -> None:
        self.profile = profile or settings.FUEL_TRACKER_PROFILE

    def add(
        self,
        departure: Any,
        destination: Any,
        consumption: Any = None,
        fuel_kind: FuelKind | str | None = None,
    ) -> Favorite:
        favorite = clean_favorite(departure, destination, consumption, fuel_kind)
        row = FavoriteRoute.objects.create(
            profile=self.profile,
            departure_label=favorite.departure_label,
            destination_label=favorite.destination_label,
            consumption_l_per_100km=favorite.consumption_l_per_100km,
            fuel_kind=favorite.fuel_kind.value if favorite.fuel_kind else "",
            added_at=favorite.added_at,
        )
        logger.info("Saved favorite %s -> %s", row.departure_label, row.destination_label)
        return _to_favorite(row)

    def load_all(self) -> list[Favorite]:
        return [_to_favorite(row) for row in FavoriteRoute.objects.filter(profile=self.profile)]

    def get(self, favorite_id: int) -> Favorite:
        row = FavoriteRoute.objects.filter(profile=self.profile, id=favorite_id).first()
        if row is None:
            raise FavoriteNotFoundError(f"No favorite with id {favorite_id}")
        return _to_favorite(row)

    def delete(self, favorite_id: int) -> None:
        deleted, _ = FavoriteRoute.objects.filter(profile=self.profile, id=favorite_id).delete()
        if not deleted:
            raise FavoriteNotFoundError(f"No favorite with id {favorite_id}")

    def replace(self, favorites: Iterable[Favorite]) -> None:
        FavoriteRoute.objects.filter(profile=self.profile).delete()
        FavoriteRoute.objects.bulk_create(
            [
                FavoriteRoute(
                    profile=self.profile,
                    departure_label=favorite.departure_label,
                    destination_label=favorite.destination_label,
                    consumption_l_per_100km=favorite.consumption_l_per_100km,
                    fuel_kind=favorite.fuel_kind.value if favorite.fuel_kind else "",
                    added_at=favorite.added_at,
                )
                for favorite in favorites
            ]
        )

    def count(self) -> int:
        return FavoriteRoute.objects.filter(profile=self.profile).count()


def clean_favorite(
    departure: Any,
    destination: Any,
    consumption: Any = None,
    fuel_kind: FuelKind | str | None = None,
) -> Favorite:
    departure_text = str(departure or "").strip()
    destination_text = str(destination or "").strip()
    if not departure_text or not destination_text:
        raise ValidationError("Both departure and destination addresses are required")

    return Favorite(
        departure_label=departure_text,
        destination_label=destination_text,
        consumption_l_per_100km=clean_consumption(consumption),
        fuel_kind=None if fuel_kind in (None, "") else parse_fuel_kind(fuel_kind),
        added_at=timezone.now(),
    )


def clean_consumption(value: Any) -> float | None:
    """Optional consumption default; ``None`` means "ask every time"."""
    if value is None or value == "":
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Fuel consumption must be a number") from exc
    if not MIN_CONSUMPTION_L_PER_100KM <= rate <= MAX_CONSUMPTION_L_PER_100KM:
        raise ValidationError(
            "Fuel consumption must be a realistic value "
            f"({MIN_CONSUMPTION_L_PER_100KM:g}-{MAX_CONSUMPTION_L_PER_100KM:g} L/100km)"
        )
    return rate


def _to_favorite(row: FavoriteRoute) -> Favorite:
    return Favorite(
        id=row.id,
        departure_label=row.departure_label,
        destination_label=row.destination_label,
        consumption_l_per_100km=row.consumption_l_per_100km,
        fuel_kind=FuelKind(row.fuel_kind) if row.fuel_kind else None,
        added_at=row.added_at,
    )
