"""Entry and profile repositories over a key-value store."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError as SchemaValidationError

from food_diary.domain.entries import DailyEntry, entry_to_record, record_to_entry
from food_diary.domain.profile import UserProfile
from food_diary.services.entries import EntryRepository
from food_diary.services.profile import ProfileRepository

ENTRIES_KEY = "food-diary-entries"
PROFILE_KEY = "food-diary-profile"

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal JSON key-value persistence."""

    def get(self, key: str) -> object | None:
        """Return the value stored under a key."""

    def set(self, key: str, value: object) -> None:
        """Store a JSON-serializable value under a key."""


@dataclass
class KeyValueEntryRepository(EntryRepository):
    """Keeps the entry collection as one JSON array."""

    store: KeyValueStore
    key: str = ENTRIES_KEY

    def load_entries(self) -> list[DailyEntry]:
        """Return every stored entry, skipping malformed records."""
        raw = self.store.get(self.key)
        if not isinstance(raw, list):
            return []
        entries = []
        for record in raw:
            try:
                entries.append(record_to_entry(record))
            except (KeyError, TypeError, ValueError):
                _logger.warning("Skipping malformed entry record: %r", record)
        return entries

    def save_entries(self, entries: list[DailyEntry]) -> None:
        """Replace the stored array."""
        self.store.set(self.key, [entry_to_record(entry) for entry in entries])


@dataclass
class KeyValueProfileRepository(ProfileRepository):
    """Keeps the profile as one JSON object."""

    store: KeyValueStore
    key: str = PROFILE_KEY

    def load_profile(self) -> UserProfile | None:
        """Return the stored profile, if present and valid."""
        raw = self.store.get(self.key)
        if not isinstance(raw, dict):
            return None
        try:
            return UserProfile.model_validate(raw)
        except SchemaValidationError:
            _logger.warning("Ignoring invalid stored profile")
            return None

    def save_profile(self, profile: UserProfile) -> None:
        """Overwrite the stored object."""
        self.store.set(self.key, profile.model_dump(mode="json", exclude_none=True))
