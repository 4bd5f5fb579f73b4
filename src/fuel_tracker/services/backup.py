from __future__ import annotations

import json
import logging
from typing import Any

from django.utils import timezone

from fuel_tracker.exceptions import ValidationError
from fuel_tracker.services.favorites import FavoritesStore, clean_favorite
from fuel_tracker.services.history import HistoryStore
from fuel_tracker.services.preferences import FIELDS, PreferencesStore, clean_preferences
from fuel_tracker.services.types import (
    Favorite,
    ImportResult,
    Preferences,
    StorageInfo,
    TripRecord,
)

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


class DataBackup:
    """Export and import of history, favorites and preferences as one document."""

    def __init__(
        self,
        history: HistoryStore | None = None,
        favorites: FavoritesStore | None = None,
        preferences: PreferencesStore | None = None,
    ) -> None:
        self.history = history or HistoryStore()
        self.favorites = favorites or FavoritesStore()
        self.preferences = preferences or PreferencesStore()

    def export_data(self) -> str:
        document = {
            "version": EXPORT_VERSION,
            "exported_at": timezone.now().isoformat(),
            "history": [record.to_dict() for record in self.history.load_all()],
            "settings": self.preferences.load().to_dict(),
            "favorites": [favorite.to_dict() for favorite in self.favorites.load_all()],
        }
        return json.dumps(document, indent=2, ensure_ascii=False)

    def import_data(self, text: str) -> ImportResult:
        """Replace every section present in ``text``.

        A bare JSON list is read as a history. The whole document is
        validated before anything is written, so a bad section leaves all
        stored data untouched.
        """
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError("Import data must be valid JSON") from exc

        if isinstance(document, list):
            document = {"history": document}
        if not isinstance(document, dict):
            raise ValidationError("Import data must be a JSON object or list")

        records = _parse_history(document.get("history"))
        favorites = _parse_favorites(document.get("favorites"))
        preferences = _parse_preferences(document.get("settings"))
        if records is None and favorites is None and preferences is None:
            raise ValidationError("Import data must contain history, settings or favorites")

        if records is not None:
            self.history.replace(records)
        if favorites is not None:
            self.favorites.replace(favorites)
        if preferences is not None:
            self.preferences.save(preferences)

        result = ImportResult(
            trips=None if records is None else len(records),
            favorites=None if favorites is None else len(favorites),
            preferences=preferences is not None,
        )
        logger.info("Imported data: %s", result)
        return result

    def storage_info(self) -> StorageInfo:
        entries = self.history.raw_entries()
        favorites = self.favorites.load_all()
        size = _encoded_size(entries) if entries else 0
        if favorites:
            size += _encoded_size([favorite.to_dict() for favorite in favorites])
        if self.preferences.is_saved():
            size += _encoded_size(self.preferences.load().to_dict())

        return StorageInfo(
            trip_count=len(self.history.load_all()),
            favorite_count=len(favorites),
            size_bytes=size,
        )


def _parse_history(section: Any) -> list[TripRecord] | None:
    if section is None:
        return None
    if not isinstance(section, list):
        raise ValidationError("Import history must be a list")
    try:
        return [TripRecord.from_dict(entry) for entry in section]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"Import data contains an invalid trip: {exc}") from exc


def _parse_favorites(section: Any) -> list[Favorite] | None:
    if section is None:
        return None
    if not isinstance(section, list):
        raise ValidationError("Import favorites must be a list")

    favorites: list[Favorite] = []
    for entry in section:
        try:
            parsed = Favorite.from_dict(entry)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Import data contains an invalid favorite: {exc}") from exc
        cleaned = clean_favorite(
            parsed.departure_label,
            parsed.destination_label,
            parsed.consumption_l_per_100km,
            parsed.fuel_kind,
        )
        favorites.append(
            Favorite(
                departure_label=cleaned.departure_label,
                destination_label=cleaned.destination_label,
                consumption_l_per_100km=cleaned.consumption_l_per_100km,
                fuel_kind=cleaned.fuel_kind,
                added_at=parsed.added_at,
            )
        )
    return favorites


def _parse_preferences(section: Any) -> Preferences | None:
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ValidationError("Import settings must be an object")
    # Older exports may carry display-only keys such as a theme.
    return clean_preferences({key: value for key, value in section.items() if key in FIELDS})


def _encoded_size(value: Any) -> int:
    return len(json.dumps(value, ensure_ascii=False).encode("utf-8"))
