"""Diary entry store."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from food_diary.domain.entries import DailyEntry
from food_diary.domain.errors import ValidationError
from food_diary.services.periods import filter_by_range

_logger = logging.getLogger(__name__)


class EntryRepository(Protocol):
    """Persistence interface for the entry collection."""

    def load_entries(self) -> list[DailyEntry]:
        """Return every stored entry."""

    def save_entries(self, entries: list[DailyEntry]) -> None:
        """Replace the stored collection."""


@dataclass
class EntryService:
    """Keeps at most one entry per date, sorted by date ascending."""

    repository: EntryRepository

    def upsert(self, entry: DailyEntry) -> DailyEntry:
        """Insert or replace the entry for its date and return what was stored."""
        stored = entry.without_analysis()
        entries = [
            existing
            for existing in self.repository.load_entries()
            if existing.key != stored.key
        ]
        entries.append(stored)
        entries.sort(key=lambda item: item.key)
        self.repository.save_entries(entries)
        _logger.info("Saved diary entry: date=%s total=%s", stored.key, len(entries))
        return stored

    def get(self, day: date) -> DailyEntry | None:
        """Return the entry for a date, if any."""
        key = day.isoformat()
        for entry in self.repository.load_entries():
            if entry.key == key:
                return entry
        return None

    def list_entries(self) -> list[DailyEntry]:
        """Return all entries sorted by date."""
        return sorted(self.repository.load_entries(), key=lambda item: item.key)

    def list_range(self, start: date, end: date) -> list[DailyEntry]:
        """Return entries between start and end inclusive."""
        if start > end:
            raise ValidationError("La data di inizio deve precedere la data di fine.")
        return filter_by_range(self.repository.load_entries(), start, end)
