"""Period windows and entry filtering."""

import calendar
from collections.abc import Iterable
from datetime import date, timedelta

from food_diary.domain.entries import DailyEntry
from food_diary.domain.periods import Granularity, PeriodWindow

WEEK_SPAN_DAYS = 7

ITALIAN_WEEKDAYS = (
    "lunedì",
    "martedì",
    "mercoledì",
    "giovedì",
    "venerdì",
    "sabato",
    "domenica",
)
ITALIAN_MONTHS = (
    "gennaio",
    "febbraio",
    "marzo",
    "aprile",
    "maggio",
    "giugno",
    "luglio",
    "agosto",
    "settembre",
    "ottobre",
    "novembre",
    "dicembre",
)


def period_window(reference_date: date, granularity: Granularity) -> PeriodWindow:
    """Return the inclusive window for a reference date and granularity."""
    if granularity is Granularity.WEEK:
        span = timedelta(days=WEEK_SPAN_DAYS - 1)
        # Clamp at the first representable day.
        start = date.min if reference_date - date.min < span else reference_date - span
        return PeriodWindow(start=start, end=reference_date)
    if granularity is Granularity.MONTH:
        last_day = calendar.monthrange(reference_date.year, reference_date.month)[1]
        return PeriodWindow(
            start=reference_date.replace(day=1),
            end=reference_date.replace(day=last_day),
        )
    return PeriodWindow(
        start=date(reference_date.year, 1, 1),
        end=date(reference_date.year, 12, 31),
    )


def filter_entries(
    entries: Iterable[DailyEntry], reference_date: date, granularity: Granularity
) -> list[DailyEntry]:
    """Return entries inside the period, keeping their original order.

    An empty list means the period has no data; it is not an error.
    """
    if granularity is Granularity.WEEK:
        window = period_window(reference_date, granularity)
        return [entry for entry in entries if window.contains(entry.date)]
    if granularity is Granularity.MONTH:
        return [
            entry
            for entry in entries
            if entry.date.year == reference_date.year
            and entry.date.month == reference_date.month
        ]
    return [entry for entry in entries if entry.date.year == reference_date.year]


def filter_by_range(
    entries: Iterable[DailyEntry], start: date, end: date
) -> list[DailyEntry]:
    """Return entries between start and end inclusive, sorted by date."""
    selected = [entry for entry in entries if start <= entry.date <= end]
    return sorted(selected, key=lambda entry: entry.key)


def period_title(reference_date: date, granularity: Granularity) -> str:
    """Return the heading shown above a period report."""
    if granularity is Granularity.WEEK:
        window = period_window(reference_date, granularity)
        return (
            f"Report Settimanale: {format_short_date(window.start)}"
            f" - {format_short_date(window.end)}"
        )
    if granularity is Granularity.MONTH:
        month_name = ITALIAN_MONTHS[reference_date.month - 1]
        return f"Report Mensile: {month_name} {reference_date.year}"
    return f"Report Annuale: {reference_date.year}"


def format_short_date(day: date) -> str:
    """Format a date as d/m/yyyy."""
    return f"{day.day}/{day.month}/{day.year}"


def format_long_date(day: date) -> str:
    """Format a date with Italian weekday and month names."""
    weekday = ITALIAN_WEEKDAYS[day.weekday()]
    month_name = ITALIAN_MONTHS[day.month - 1]
    return f"{weekday} {day.day} {month_name} {day.year}"
