from __future__ import annotations

import json
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from fuel_tracker.services import pricing
from fuel_tracker.services.favorites import FavoritesStore
from fuel_tracker.services.history import HistoryStore
from fuel_tracker.services.preferences import PreferencesStore
from fuel_tracker.services.price_cache import PriceCache
from fuel_tracker.services.price_sources import PriceSource
from fuel_tracker.services.types import (
    FuelKind,
    GeoPoint,
    PriceQuote,
    RouteData,
    TripRecord,
    TripResult,
)

CREATED_AT = datetime(2024, 12, 16, 9, 30, tzinfo=timezone.utc)


def _record(departure: str = "Brussel") -> TripRecord:
    return TripRecord(
        departure_label=departure,
        destination_label="Luik",
        distance_km=100.0,
        duration_min=60.0,
        consumption_l_per_100km=6.0,
        fuel_kind=FuelKind.DIESEL,
        price_per_liter=1.7,
        fuel_liters=6.0,
        cost_total=10.2,
        co2_kg=15.9,
        created_at=CREATED_AT,
    )


def test_fuel_price_command_reports_source(settings) -> None:
    settings.FUEL_PRICE_SOURCES = ["seasonal"]
    stdout = StringIO()

    call_command("fuel_price", "diesel", stdout=stdout)

    output = stdout.getvalue()
    assert "Diesel" in output
    assert "source=seasonal" in output


def test_fuel_price_command_lists_every_kind_when_omitted(settings) -> None:
    settings.FUEL_PRICE_SOURCES = ["seasonal"]
    stdout = StringIO()

    call_command("fuel_price", stdout=stdout)

    assert len(stdout.getvalue().strip().splitlines()) == len(FuelKind)


def test_fuel_price_command_flags_emergency_price(settings) -> None:
    settings.FUEL_PRICE_SOURCES = []
    stdout = StringIO()

    call_command("fuel_price", "lpg", stdout=stdout)

    assert "0.749" in stdout.getvalue()
    assert "source=emergency_fallback" in stdout.getvalue()


def test_fuel_price_command_rejects_unknown_kind(settings) -> None:
    settings.FUEL_PRICE_SOURCES = ["seasonal"]

    with pytest.raises(CommandError):
        call_command("fuel_price", "kerosene", stdout=StringIO())


def test_fuel_price_refresh_drops_cached_quote(mocker, clock) -> None:
    fetch = mocker.Mock(side_effect=[1.5, 1.6])
    pricing._shared_resolver = pricing.PriceResolver(
        sources=[PriceSource(name="stub", fetch=fetch)],
        cache=PriceCache(clock=clock),
    )

    outputs = []
    for refresh in (False, False, True):
        stdout = StringIO()
        call_command("fuel_price", "diesel", refresh=refresh, stdout=stdout)
        outputs.append(stdout.getvalue())

    assert "1.500" in outputs[0]
    assert "1.500" in outputs[1]
    assert "1.600" in outputs[2]
    assert fetch.call_count == 2


def _trip_result() -> TripResult:
    return TripResult(
        record=_record(),
        departure=GeoPoint(latitude=50.8467, longitude=4.3525),
        destination=GeoPoint(latitude=50.6326, longitude=5.5797),
        route=RouteData(
            coordinates=[(4.3525, 50.8467), (5.5797, 50.6326)],
            distance_meters=100_000.0,
            duration_seconds=3_600.0,
        ),
        quote=PriceQuote(
            fuel_kind=FuelKind.DIESEL,
            amount=1.7,
            source_name="statbel",
            retrieved_at=CREATED_AT,
        ),
    )


@pytest.mark.django_db
def test_plan_trip_command_saves_trip(mocker) -> None:
    calculator_cls = mocker.patch("fuel_tracker.management.commands.plan_trip.TripCalculator")
    calculator_cls.return_value.compute_trip.return_value = _trip_result()
    stdout = StringIO()

    call_command("plan_trip", "Brussel", "Luik", consumption=6.0, fuel_kind="diesel", stdout=stdout)

    calculator_cls.return_value.compute_trip.assert_called_once_with("Brussel", "Luik", 6.0, "diesel")
    assert "10.20 EUR" in stdout.getvalue()
    assert HistoryStore().load_all() == [_record()]


@pytest.mark.django_db
def test_plan_trip_command_rejects_unrealistic_consumption() -> None:
    with pytest.raises(CommandError, match="L/100km"):
        call_command("plan_trip", "Brussel", "Luik", consumption=40.0, stdout=StringIO())

    assert HistoryStore().load_all() == []


@pytest.mark.django_db
def test_trip_history_list_and_remove() -> None:
    store = HistoryStore()
    store.append(_record("Brussel"))
    store.append(_record("Gent"))

    listing = StringIO()
    call_command("trip_history", "list", stdout=listing)
    assert "[0]" in listing.getvalue()
    assert "[1]" in listing.getvalue()
    assert "2 trips" in listing.getvalue()

    call_command("trip_history", "remove", index=0, stdout=StringIO())
    assert [record.departure_label for record in store.load_all()] == ["Gent"]


@pytest.mark.django_db
def test_trip_history_remove_out_of_range() -> None:
    with pytest.raises(CommandError):
        call_command("trip_history", "remove", index=4, stdout=StringIO())


@pytest.mark.django_db
def test_trip_history_export_and_import(tmp_path: Path) -> None:
    export_path = tmp_path / "history.json"
    HistoryStore().append(_record("Brussel"))

    call_command("trip_history", "export", path=str(export_path), stdout=StringIO())
    assert json.loads(export_path.read_text(encoding="utf-8"))["history"][0]["departure_label"] == "Brussel"

    call_command("trip_history", "clear", stdout=StringIO())
    assert HistoryStore().load_all() == []

    stdout = StringIO()
    call_command("trip_history", "import", path=str(export_path), stdout=stdout)

    assert "Imported 1 trips" in stdout.getvalue()
    assert HistoryStore().load_all() == [_record("Brussel")]


@pytest.mark.django_db
def test_trip_history_import_requires_existing_file(tmp_path: Path) -> None:
    with pytest.raises(CommandError, match="does not exist"):
        call_command("trip_history", "import", path=str(tmp_path / "missing.json"), stdout=StringIO())


@pytest.mark.django_db
def test_plan_trip_command_falls_back_to_saved_preferences(mocker) -> None:
    PreferencesStore().update(default_consumption=7.5, default_fuel_kind="diesel")
    calculator_cls = mocker.patch("fuel_tracker.management.commands.plan_trip.TripCalculator")
    calculator_cls.return_value.compute_trip.return_value = _trip_result()

    call_command("plan_trip", "Brussel", "Luik", stdout=StringIO())

    calculator_cls.return_value.compute_trip.assert_called_once_with(
        "Brussel", "Luik", 7.5, FuelKind.DIESEL
    )


@pytest.mark.django_db
def test_plan_trip_command_requires_consumption_without_default(mocker) -> None:
    calculator_cls = mocker.patch("fuel_tracker.management.commands.plan_trip.TripCalculator")

    with pytest.raises(CommandError, match="--consumption is required"):
        call_command("plan_trip", "Brussel", "Luik", stdout=StringIO())

    calculator_cls.return_value.compute_trip.assert_not_called()


@pytest.mark.django_db
def test_plan_trip_command_can_save_favorite(mocker) -> None:
    calculator_cls = mocker.patch("fuel_tracker.management.commands.plan_trip.TripCalculator")
    calculator_cls.return_value.compute_trip.return_value = _trip_result()

    call_command(
        "plan_trip", "Brussel", "Luik", consumption=6.0, no_save=True, save_favorite=True, stdout=StringIO()
    )

    assert HistoryStore().load_all() == []
    [favorite] = FavoritesStore().load_all()
    assert (favorite.departure_label, favorite.destination_label) == ("Brussel", "Luik")
    assert favorite.fuel_kind is FuelKind.DIESEL


@pytest.mark.django_db
def test_trip_history_favorites_and_info() -> None:
    HistoryStore().append(_record())
    FavoritesStore().add("Gent", "Antwerpen", 5.5, "lpg")

    favorites = StringIO()
    call_command("trip_history", "favorites", stdout=favorites)
    assert "Gent -> Antwerpen (5.5 L/100km, LPG)" in favorites.getvalue()

    info = StringIO()
    call_command("trip_history", "info", stdout=info)
    assert info.getvalue().startswith("1 trips, 1 favorites, ")
