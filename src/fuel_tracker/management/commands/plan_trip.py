from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandError

from fuel_tracker.exceptions import LocationLookupError, ValidationError
from fuel_tracker.services.calculator import TripCalculator
from fuel_tracker.services.favorites import FavoritesStore
from fuel_tracker.services.history import HistoryStore
from fuel_tracker.services.preferences import PreferencesStore
from fuel_tracker.services.types import FuelKind


class Command(BaseCommand):
    help = "Calculate fuel cost and CO2 for a trip and append it to the history."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument("departure", type=str, help="Departure address")
        parser.add_argument("destination", type=str, help="Destination address")
        parser.add_argument(
            "--consumption",
            type=float,
            default=None,
            help="Fuel consumption in L/100km (2-25); defaults to the saved preference",
        )
        parser.add_argument(
            "--fuel-kind",
            type=str,
            default=None,
            choices=[kind.value for kind in FuelKind],
            help="Fuel kind used for price and emission factor; defaults to the saved preference",
        )
        parser.add_argument(
            "--no-save",
            action="store_true",
            help="Do not append the trip to the history",
        )
        parser.add_argument(
            "--save-favorite",
            action="store_true",
            help="Also keep the departure and destination as a favorite route",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        preferences = PreferencesStore().load()
        consumption = options["consumption"]
        if consumption is None:
            consumption = preferences.default_consumption
        if consumption is None:
            raise CommandError("--consumption is required when no default consumption is saved")
        fuel_kind = options["fuel_kind"] or preferences.default_fuel_kind

        calculator = TripCalculator()
        try:
            result = calculator.compute_trip(
                options["departure"],
                options["destination"],
                consumption,
                fuel_kind,
            )
        except (ValidationError, LocationLookupError) as exc:
            raise CommandError(str(exc)) from exc

        record = result.record
        if not options["no_save"]:
            HistoryStore().append(record)
        if options["save_favorite"]:
            FavoritesStore().add(
                record.departure_label,
                record.destination_label,
                record.consumption_l_per_100km,
                record.fuel_kind,
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"{record.departure_label} -> {record.destination_label}: "
                f"{record.distance_km:.1f} km, {record.duration_min:.0f} min, "
                f"{record.fuel_liters:.2f} L {record.fuel_kind.display_name} "
                f"at {record.price_per_liter:.3f} EUR/L ({result.quote.source_name}) = "
                f"{record.cost_total:.2f} EUR, {record.co2_kg:.1f} kg CO2"
            )
        )
