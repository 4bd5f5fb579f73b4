from __future__ import annotations

import logging
from typing import Any

from django.conf import settings

from fuel_tracker.exceptions import ValidationError
from fuel_tracker.models import UserPreferences
from fuel_tracker.services.favorites import clean_consumption
from fuel_tracker.services.types import Preferences, parse_fuel_kind

logger = logging.getLogger(__name__)

LANGUAGES = ("nl", "fr", "de", "en")
UNITS = ("metric", "imperial")
FIELDS = ("default_fuel_kind", "default_consumption", "language", "units")


def default_preferences() -> Preferences:
    return Preferences(
        default_fuel_kind=parse_fuel_kind(settings.DEFAULT_FUEL_KIND),
        default_consumption=None,
        language="nl",
        units="metric",
    )


class PreferencesStore:
    """User defaults for new trips, one row per profile.

    Reading an unsaved profile yields the defaults without writing them.
    """

    def __init__(self, profile: str | None = None) -> None:
        self.profile = profile or settings.FUEL_TRACKER_PROFILE

    def load(self) -> Preferences:
        row = UserPreferences.objects.filter(profile=self.profile).first()
        if row is None:
            return default_preferences()
        try:
            return Preferences(
                default_fuel_kind=parse_fuel_kind(row.default_fuel_kind),
                default_consumption=row.default_consumption,
                language=row.language,
                units=row.units,
            )
        except ValidationError as exc:
            logger.error("Ignoring unreadable preferences for %s: %s", self.profile, exc)
            return default_preferences()

    def update(self, **changes: Any) -> Preferences:
        preferences = clean_preferences(changes, base=self.load())
        self.save(preferences)
        return preferences

    def save(self, preferences: Preferences) -> None:
        UserPreferences.objects.update_or_create(
            profile=self.profile,
            defaults={
                "default_fuel_kind": preferences.default_fuel_kind.value,
                "default_consumption": preferences.default_consumption,
                "language": preferences.language,
                "units": preferences.units,
            },
        )

    def is_saved(self) -> bool:
        return UserPreferences.objects.filter(profile=self.profile).exists()

    def reset(self) -> None:
        UserPreferences.objects.filter(profile=self.profile).delete()


def clean_preferences(data: dict[str, Any], base: Preferences | None = None) -> Preferences:
    """Apply ``data`` on top of ``base``; unknown keys and bad values are rejected."""
    unknown = sorted(set(data) - set(FIELDS))
    if unknown:
        raise ValidationError(f"Unknown preference fields: {', '.join(unknown)}")

    current = (base or default_preferences()).to_dict()
    current.update(data)

    language = str(current["language"]).strip().lower()
    if language not in LANGUAGES:
        raise ValidationError(f"Language must be one of {', '.join(LANGUAGES)}")
    units = str(current["units"]).strip().lower()
    if units not in UNITS:
        raise ValidationError(f"Units must be one of {', '.join(UNITS)}")

    return Preferences(
        default_fuel_kind=parse_fuel_kind(current["default_fuel_kind"]),
        default_consumption=clean_consumption(current["default_consumption"]),
        language=language,
        units=units,
    )
