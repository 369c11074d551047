"""Active window resolution: last day with activity and inclusive day count."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Tuple

from cpr.mappers import parse_date, to_int
from cpr.schema import DailyMetricRow


@dataclass(frozen=True)
class ActiveWindow:
    last_active_date: date
    active_days: int
    effective_end: date


def compute_active_days(start: date, end: date) -> int:
    """Inclusive number of days from *start* to *end*, never less than 1."""
    return max((end - start).days + 1, 1)


def active_days_within(start: date, end: date, period: Tuple[date, date]) -> int:
    """Inclusive days shared by [start, end] and *period*; 0 when they do not overlap."""
    first = max(start, period[0])
    last = min(end, period[1])
    return max((last - first).days + 1, 0)


def has_activity(row: DailyMetricRow) -> bool:
    return (
        to_int(row.cost_micros) > 0
        or to_int(row.impressions) > 0
        or to_int(row.clicks) > 0
    )


def resolve_last_active_date(
    start_date: date, rows: Iterable[DailyMetricRow], today: date
) -> date:
    """Latest day with any cost, impression or click, bounded to [start_date, today]."""
    last_active = start_date
    for row in rows:
        if not has_activity(row):
            continue
        day = parse_date(row.date)
        if day is not None and day > last_active:
            last_active = day
    # a start date in the future wins over today
    if last_active > today:
        last_active = max(today, start_date)
    return last_active


def resolve_active_window(
    start_date: date,
    is_paused: bool,
    rows: Iterable[DailyMetricRow],
    today: date,
) -> ActiveWindow:
    """Paused campaigns end on their last active day, everything else runs to today."""
    last_active = resolve_last_active_date(start_date, rows, today)
    effective_end = last_active if is_paused else today
    return ActiveWindow(
        last_active_date=last_active,
        active_days=compute_active_days(start_date, effective_end),
        effective_end=effective_end,
    )
