"""Reducer for the diary's view state."""

from dataclasses import replace

from food_diary.domain.navigation import (
    Action,
    AppState,
    CancelNavigation,
    ChangeDate,
    ChangeViewMode,
    ConfirmNavigation,
    EntrySaved,
    Navigation,
    SetDirty,
    ViewMode,
)


def reduce(state: AppState, action: Action) -> AppState:  # noqa: PLR0911
    """Return the state that results from applying an action."""
    if isinstance(action, ChangeViewMode) and action.view_mode == state.view_mode:
        return state
    if isinstance(action, ChangeDate | ChangeViewMode):
        if _needs_confirmation(state):
            return replace(state, pending_navigation=action)
        return _navigate(state, action)
    if isinstance(action, ConfirmNavigation):
        if state.pending_navigation is None:
            return state
        return _navigate(
            replace(state, is_dirty=False, pending_navigation=None),
            state.pending_navigation,
        )
    if isinstance(action, CancelNavigation):
        return replace(state, pending_navigation=None)
    if isinstance(action, SetDirty):
        return replace(state, is_dirty=action.is_dirty)
    if isinstance(action, EntrySaved):
        return replace(state, is_dirty=False)
    raise TypeError(f"Unsupported action: {action!r}")


def should_block_unload(state: AppState) -> bool:
    """Return True when leaving the app would lose unsaved changes."""
    return state.is_dirty


def _needs_confirmation(state: AppState) -> bool:
    return state.is_dirty and state.view_mode is ViewMode.DAILY


def _navigate(state: AppState, navigation: Navigation) -> AppState:
    if isinstance(navigation, ChangeDate):
        return replace(
            state, current_date=navigation.date, is_dirty=False, pending_navigation=None
        )
    is_dirty = state.is_dirty if navigation.view_mode is ViewMode.DAILY else False
    return replace(
        state,
        view_mode=navigation.view_mode,
        is_dirty=is_dirty,
        pending_navigation=None,
    )
