"""View state models for the diary UI."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from food_diary.domain.periods import Granularity


class ViewMode(StrEnum):
    """Top-level view of the diary."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ANNUAL = "annual"

    @property
    def granularity(self) -> Granularity | None:
        """Analysis granularity shown by this view, if any."""
        return _VIEW_GRANULARITY.get(self)


_VIEW_GRANULARITY = {
    ViewMode.WEEKLY: Granularity.WEEK,
    ViewMode.MONTHLY: Granularity.MONTH,
    ViewMode.ANNUAL: Granularity.YEAR,
}


@dataclass(frozen=True)
class ChangeDate:
    """Navigate to another day."""

    date: date


@dataclass(frozen=True)
class ChangeViewMode:
    """Switch between daily and period views."""

    view_mode: ViewMode


@dataclass(frozen=True)
class SetDirty:
    """Report whether the daily form differs from the saved entry."""

    is_dirty: bool


@dataclass(frozen=True)
class EntrySaved:
    """The current entry was saved."""


@dataclass(frozen=True)
class ConfirmNavigation:
    """The user accepted discarding unsaved changes."""


@dataclass(frozen=True)
class CancelNavigation:
    """The user kept editing instead of navigating away."""


Navigation = ChangeDate | ChangeViewMode
Action = (
    ChangeDate
    | ChangeViewMode
    | SetDirty
    | EntrySaved
    | ConfirmNavigation
    | CancelNavigation
)


@dataclass(frozen=True)
class AppState:
    """Explicit UI state threaded through the reducer."""

    current_date: date
    view_mode: ViewMode = ViewMode.DAILY
    is_dirty: bool = False
    pending_navigation: Navigation | None = None
