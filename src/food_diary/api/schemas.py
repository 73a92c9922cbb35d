"""Pydantic models for the HTTP API."""

from datetime import date
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from food_diary.domain.analysis import NutrientAnalysis, PeriodAnalysis
from food_diary.domain.entries import DailyEntry
from food_diary.domain.navigation import (
    Action,
    AppState,
    CancelNavigation,
    ChangeDate,
    ChangeViewMode,
    ConfirmNavigation,
    EntrySaved,
    SetDirty,
    ViewMode,
)
from food_diary.domain.periods import Granularity


class EntryPayload(BaseModel):
    """Editable fields of a diary entry."""

    meals: str = ""
    activity: str = ""
    is_non_working_day: bool = False

    def to_entry(self, day: date) -> DailyEntry:
        """Build a domain entry for the given day."""
        return DailyEntry(
            date=day,
            meals=self.meals,
            activity=self.activity,
            is_non_working_day=self.is_non_working_day,
        )


class EntryResponse(BaseModel):
    """Diary entry as returned by the API."""

    date: date
    meals: str
    activity: str
    is_non_working_day: bool
    analysis: NutrientAnalysis | None = None

    @classmethod
    def from_entry(cls, entry: DailyEntry) -> "EntryResponse":
        """Convert a domain entry."""
        return cls(
            date=entry.date,
            meals=entry.meals,
            activity=entry.activity,
            is_non_working_day=entry.is_non_working_day,
            analysis=entry.analysis,
        )


class DailyAnalysisResponse(BaseModel):
    """Saved entry with its freshly computed analysis."""

    entry: EntryResponse
    analysis: NutrientAnalysis


class PeriodAnalysisResponse(BaseModel):
    """Period report; `message` is set instead of `analysis` when there is no data."""

    granularity: Granularity
    title: str
    start: date
    end: date
    entry_count: int
    analysis: PeriodAnalysis | None = None
    message: str | None = None


class DailyAnalysisExportRequest(BaseModel):
    """Daily analysis to render as a text report."""

    date: date
    analysis: NutrientAnalysis


class PeriodAnalysisExportRequest(BaseModel):
    """Period analysis to render as a text report."""

    date: date
    granularity: Granularity
    analysis: PeriodAnalysis | str


class ChangeDateRequest(BaseModel):
    type: Literal["change_date"]
    date: date

    def to_action(self) -> Action:
        return ChangeDate(date=self.date)


class ChangeViewModeRequest(BaseModel):
    type: Literal["change_view_mode"]
    view_mode: ViewMode

    def to_action(self) -> Action:
        return ChangeViewMode(view_mode=self.view_mode)


class SetDirtyRequest(BaseModel):
    type: Literal["set_dirty"]
    is_dirty: bool

    def to_action(self) -> Action:
        return SetDirty(is_dirty=self.is_dirty)


class EntrySavedRequest(BaseModel):
    type: Literal["entry_saved"]

    def to_action(self) -> Action:
        return EntrySaved()


class ConfirmNavigationRequest(BaseModel):
    type: Literal["confirm_navigation"]

    def to_action(self) -> Action:
        return ConfirmNavigation()


class CancelNavigationRequest(BaseModel):
    type: Literal["cancel_navigation"]

    def to_action(self) -> Action:
        return CancelNavigation()


ActionRequest = Annotated[
    ChangeDateRequest
    | ChangeViewModeRequest
    | SetDirtyRequest
    | EntrySavedRequest
    | ConfirmNavigationRequest
    | CancelNavigationRequest,
    Field(discriminator="type"),
]


class StateResponse(BaseModel):
    """Current view state."""

    current_date: date
    view_mode: ViewMode
    is_dirty: bool
    pending_navigation: dict[str, str] | None
    block_unload: bool

    @classmethod
    def from_state(cls, state: AppState, block_unload: bool) -> "StateResponse":
        """Convert the reducer state."""
        pending = state.pending_navigation
        if isinstance(pending, ChangeDate):
            pending_payload = {"type": "change_date", "date": pending.date.isoformat()}
        elif isinstance(pending, ChangeViewMode):
            pending_payload = {
                "type": "change_view_mode",
                "view_mode": pending.view_mode.value,
            }
        else:
            pending_payload = None
        return cls(
            current_date=state.current_date,
            view_mode=state.view_mode,
            is_dirty=state.is_dirty,
            pending_navigation=pending_payload,
            block_unload=block_unload,
        )
