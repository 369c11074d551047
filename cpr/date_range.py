"""Report date-range handling: predefined platform tokens or a custom span."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple


class DateRangeError(ValueError):
    pass


PREDEFINED_RANGES = (
    "TODAY",
    "YESTERDAY",
    "LAST_7_DAYS",
    "LAST_14_DAYS",
    "LAST_30_DAYS",
    "LAST_BUSINESS_WEEK",
    "LAST_WEEK_MON_SUN",
    "LAST_WEEK_SUN_SAT",
    "THIS_WEEK_MON_TODAY",
    "THIS_WEEK_SUN_TODAY",
    "THIS_MONTH",
    "LAST_MONTH",
)

CUSTOM = "CUSTOM"


@dataclass(frozen=True)
class DateRangeSpec:
    """Either a predefined *token* or an explicit *start*/*end* pair."""

    token: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None

    def resolve(self, today: date) -> Tuple[date, date]:
        if self.token is None:
            return self.start, self.end
        return resolve_predefined(self.token, today)

    def describe(self) -> str:
        if self.token is not None:
            return self.token
        return f"{self.start.isoformat()} to {self.end.isoformat()}"


def _parse_iso(value: str, name: str) -> date:
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise DateRangeError(
            f"Invalid {name} {value!r}: expected YYYY-MM-DD."
        ) from exc


def parse_date_range(
    token: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Optional[DateRangeSpec]:
    """Build a range from CLI/library input. ``None`` means campaign start through today."""
    tok = (token or "").strip().upper() or None

    if tok is None and start is None and end is None:
        return None

    if tok is None or tok == CUSTOM:
        if not start or not end:
            raise DateRangeError("A custom date range needs both a start and an end date.")
        s = _parse_iso(start, "start date")
        e = _parse_iso(end, "end date")
        if s > e:
            raise DateRangeError(f"Start date {s} is after end date {e}.")
        return DateRangeSpec(start=s, end=e)

    if start or end:
        raise DateRangeError(
            f"Start/end dates only apply to a {CUSTOM} range, not {tok}."
        )
    if tok not in PREDEFINED_RANGES:
        raise DateRangeError(
            f"Unknown date range {tok!r}. Use one of: "
            + ", ".join(PREDEFINED_RANGES + (CUSTOM,))
        )
    return DateRangeSpec(token=tok)


def resolve_predefined(token: str, today: date) -> Tuple[date, date]:
    """Concrete inclusive dates for a token; ``LAST_N_DAYS`` excludes today."""
    yesterday = today - timedelta(days=1)
    monday = today - timedelta(days=today.weekday())
    # weekday(): Monday=0 .. Sunday=6
    sunday = today - timedelta(days=(today.weekday() + 1) % 7)

    if token == "TODAY":
        return today, today
    if token == "YESTERDAY":
        return yesterday, yesterday
    if token in ("LAST_7_DAYS", "LAST_14_DAYS", "LAST_30_DAYS"):
        n = int(token.split("_")[1])
        return today - timedelta(days=n), yesterday
    if token == "LAST_WEEK_MON_SUN":
        start = monday - timedelta(days=7)
        return start, start + timedelta(days=6)
    if token == "LAST_BUSINESS_WEEK":
        start = monday - timedelta(days=7)
        return start, start + timedelta(days=4)
    if token == "LAST_WEEK_SUN_SAT":
        start = sunday - timedelta(days=7)
        return start, start + timedelta(days=6)
    if token == "THIS_WEEK_MON_TODAY":
        return monday, today
    if token == "THIS_WEEK_SUN_TODAY":
        return sunday, today
    if token == "THIS_MONTH":
        return today.replace(day=1), today
    if token == "LAST_MONTH":
        last_day = today.replace(day=1) - timedelta(days=1)
        return last_day.replace(day=1), last_day
    raise DateRangeError(f"Unknown date range {token!r}.")


def metrics_window(
    spec: Optional[DateRangeSpec], campaign_start: date, today: date
) -> Optional[Tuple[date, date]]:
    """Dates to query for one campaign, or None when nothing can overlap."""
    if spec is None:
        date_from, date_to = campaign_start, today
    else:
        date_from, date_to = spec.resolve(today)
        date_from = max(date_from, campaign_start)
        date_to = min(date_to, today)
    if date_from > date_to:
        return None
    return date_from, date_to
