"""Period domain models."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum


class Granularity(StrEnum):
    """Granularity of an aggregated analysis period."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def label(self) -> str:
        """Italian adjective used in prompts and file names."""
        return _GRANULARITY_LABELS[self]


_GRANULARITY_LABELS = {
    Granularity.WEEK: "settimanale",
    Granularity.MONTH: "mensile",
    Granularity.YEAR: "annuale",
}


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive first and last day of a period."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        """Return True when the day falls inside the window."""
        return self.start <= day <= self.end
