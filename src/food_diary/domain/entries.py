"""Domain models for diary entries."""

from dataclasses import dataclass, replace
from datetime import date

from food_diary.domain.analysis import NutrientAnalysis


@dataclass(frozen=True)
class DailyEntry:
    """Meals and activity logged for a single calendar day."""

    date: date
    meals: str = ""
    activity: str = ""
    is_non_working_day: bool = False
    analysis: NutrientAnalysis | None = None

    @property
    def key(self) -> str:
        """ISO date used as the unique storage key."""
        return self.date.isoformat()

    def without_analysis(self) -> "DailyEntry":
        """Return a copy with the transient analysis removed."""
        if self.analysis is None:
            return self
        return replace(self, analysis=None)


def entry_to_record(entry: DailyEntry) -> dict[str, object]:
    """Serialize an entry for storage.

    The analysis is never written: it is re-derived on request, so a stored
    copy could only go stale.
    """
    return {
        "date": entry.key,
        "meals": entry.meals,
        "activity": entry.activity,
        "isNonWorkingDay": entry.is_non_working_day,
    }


def record_to_entry(record: dict[str, object]) -> DailyEntry:
    """Deserialize a stored record; any stored analysis is ignored."""
    return DailyEntry(
        date=date.fromisoformat(str(record["date"])),
        meals=str(record.get("meals") or ""),
        activity=str(record.get("activity") or ""),
        is_non_working_day=bool(record.get("isNonWorkingDay", False)),
    )
