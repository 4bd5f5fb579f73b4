from __future__ import annotations

from pathlib import Path
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from fuel_tracker.exceptions import HistoryIndexError, ValidationError
from fuel_tracker.services.backup import DataBackup
from fuel_tracker.services.favorites import FavoritesStore
from fuel_tracker.services.history import HistoryStore


class Command(BaseCommand):
    help = "Inspect and edit the trip history; export, import or size up all saved data."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "action",
            choices=["list", "remove", "clear", "export", "import", "favorites", "info"],
            help="Operation to perform on the history and saved data",
        )
        parser.add_argument(
            "--index", type=int, default=None, help="Position of the trip to remove (oldest is 0)"
        )
        parser.add_argument(
            "--path", type=str, default=None, help="JSON file to export to or import from"
        )

    def handle(self, *_: Any, **options: Any) -> None:
        store = HistoryStore()
        action = options["action"]

        if action == "list":
            self._list(store)
        elif action == "remove":
            if options["index"] is None:
                raise CommandError("--index is required for remove")
            try:
                removed = store.remove_at(options["index"])
            except HistoryIndexError as exc:
                raise CommandError(str(exc)) from exc
            self.stdout.write(
                self.style.SUCCESS(
                    f"Removed trip {removed.departure_label} -> {removed.destination_label}"
                )
            )
        elif action == "clear":
            store.clear()
            self.stdout.write(self.style.SUCCESS("Trip history cleared"))
        elif action == "export":
            document = DataBackup().export_data()
            if options["path"]:
                Path(options["path"]).write_text(document, encoding="utf-8")
                self.stdout.write(self.style.SUCCESS(f"Exported saved data to {options['path']}"))
            else:
                self.stdout.write(document)
        elif action == "favorites":
            self._favorites()
        elif action == "info":
            info = DataBackup().storage_info()
            self.stdout.write(
                f"{info.trip_count} trips, {info.favorite_count} favorites, {info.formatted_size} stored"
            )
        else:
            if not options["path"]:
                raise CommandError("--path is required for import")
            path = Path(options["path"])
            if not path.exists():
                raise CommandError(f"Import file does not exist: {path}")
            try:
                result = DataBackup().import_data(path.read_text(encoding="utf-8"))
            except ValidationError as exc:
                raise CommandError(str(exc)) from exc
            self.stdout.write(
                self.style.SUCCESS(
                    f"Imported {result.trips or 0} trips, {result.favorites or 0} favorites"
                    + (", preferences" if result.preferences else "")
                )
            )

    def _list(self, store: HistoryStore) -> None:
        records = store.load_all()
        if not records:
            self.stdout.write(self.style.WARNING("No trips recorded"))
            return

        for index, record in enumerate(records):
            self.stdout.write(
                f"[{index}] {record.created_at:%Y-%m-%d %H:%M} "
                f"{record.departure_label} -> {record.destination_label} "
                f"{record.distance_km:.1f} km {record.cost_total:.2f} EUR "
                f"({record.fuel_kind.display_name} @ {record.price_per_liter:.3f})"
            )

        summary = store.summary()
        self.stdout.write(
            self.style.SUCCESS(
                f"{summary.trip_count} trips, {summary.total_distance_km:.1f} km, "
                f"{summary.total_cost:.2f} EUR, {summary.average_cost_per_km:.3f} EUR/km"
            )
        )

    def _favorites(self) -> None:
        favorites = FavoritesStore().load_all()
        if not favorites:
            self.stdout.write(self.style.WARNING("No favorite routes saved"))
            return

        for favorite in favorites:
            defaults = []
            if favorite.consumption_l_per_100km is not None:
                defaults.append(f"{favorite.consumption_l_per_100km:g} L/100km")
            if favorite.fuel_kind:
                defaults.append(favorite.fuel_kind.display_name)
            line = f"#{favorite.id} {favorite.departure_label} -> {favorite.destination_label}"
            self.stdout.write(f"{line} ({', '.join(defaults)})" if defaults else line)
