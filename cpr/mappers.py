"""Defensive value parsing and mapping of report records to tabular data."""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Iterable, Optional

import pandas as pd

from cpr.schema import FormattedCampaignReport

REPORT_COLUMNS = [
    "campaignId",
    "campaignName",
    "startDate",
    "endDate",
    "status",
    "activeDuration",
    "totalCost",
    "dailyAvgCost",
    "totalConversions",
    "totalConversionsValue",
    "totalImpressions",
    "totalClicks",
    "ctr",
    "averageCpc",
    "costPerDay",
    "isPaused",
    "lastActiveDate",
]


def to_float(v: Any) -> float:
    """Parse a metric value; anything missing, invalid or negative is 0.0."""
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        if pd.isna(v):
            return 0.0
    except (TypeError, ValueError):
        pass
    try:
        f = float(v)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(f) or f < 0:
        return 0.0
    return f


def to_int(v: Any) -> int:
    if isinstance(v, int) and not isinstance(v, bool):
        return v if v > 0 else 0
    return int(to_float(v))


def parse_date(v: Any) -> Optional[date]:
    """Accept ``date``/``datetime`` objects and ``YYYY-MM-DD`` or ``YYYYMMDD`` strings."""
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    s = str(v).strip()
    for fmt in ("%Y-%m-%d", "%Y%m%d"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def reports_to_dataframe(reports: Iterable[FormattedCampaignReport]) -> pd.DataFrame:
    data = [r.to_dict() for r in reports]
    return pd.DataFrame(data, columns=REPORT_COLUMNS)
