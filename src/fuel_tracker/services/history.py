from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from django.conf import settings

from fuel_tracker.exceptions import HistoryIndexError
from fuel_tracker.models import TripHistory
from fuel_tracker.services.types import HistorySummary, TripRecord

logger = logging.getLogger(__name__)


class HistoryStore:
    """Ordered trip history persisted as a single named record.

    Every mutation reads the stored entries, changes them and writes them
    back, so concurrent writers resolve as last-write-wins. Entries that no
    longer parse are hidden from readers but kept in storage; positions
    passed to ``remove_at`` count readable trips only.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name or settings.TRIP_HISTORY_NAME

    def append(self, record: TripRecord) -> None:
        entries = self._entries()
        entries.append(record.to_dict())
        self._save(entries)

    def load_all(self) -> list[TripRecord]:
        return [record for _, record in self._readable(self._entries())]

    def remove_at(self, index: int) -> TripRecord:
        entries = self._entries()
        readable = self._readable(entries)
        if not 0 <= index < len(readable):
            raise HistoryIndexError(f"No trip at position {index}")

        position, removed = readable[index]
        del entries[position]
        self._save(entries)
        return removed

    def replace(self, records: Iterable[TripRecord]) -> None:
        self._save([record.to_dict() for record in records])

    def clear(self) -> None:
        TripHistory.objects.filter(name=self.name).delete()

    def summary(self) -> HistorySummary:
        records = self.load_all()
        total_distance = sum(record.distance_km for record in records)
        total_cost = sum(record.cost_total for record in records)
        average = total_cost / total_distance if total_distance > 0 else 0.0
        return HistorySummary(
            trip_count=len(records),
            total_distance_km=round(total_distance, 1),
            total_cost=round(total_cost, 2),
            average_cost_per_km=round(average, 3),
        )

    def raw_entries(self) -> list[Any]:
        return self._entries()

    def _entries(self) -> list[Any]:
        history = TripHistory.objects.filter(name=self.name).first()
        if history is None:
            return []
        if not isinstance(history.entries, list):
            logger.error("Trip history %s is not a list, ignoring it", self.name)
            return []
        return list(history.entries)

    def _readable(self, entries: list[Any]) -> list[tuple[int, TripRecord]]:
        readable: list[tuple[int, TripRecord]] = []
        for position, entry in enumerate(entries):
            try:
                readable.append((position, TripRecord.from_dict(entry)))
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Skipping unreadable trip at position %s in %s: %s", position, self.name, exc)
        return readable

    def _save(self, entries: list[Any]) -> None:
        TripHistory.objects.update_or_create(name=self.name, defaults={"entries": entries})
