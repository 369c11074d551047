"""Roll daily metric rows up into per-campaign totals."""

from __future__ import annotations

import math
from datetime import date
from typing import List, Optional, Sequence, Tuple

from cpr.duration import active_days_within, resolve_active_window
from cpr.mappers import parse_date, to_float, to_int
from cpr.schema import AggregatedCampaign, CampaignInfo, DailyMetricRow


def rows_in_period(
    rows: Sequence[DailyMetricRow], period: Tuple[date, date]
) -> List[DailyMetricRow]:
    """Rows dated inside *period* (inclusive). Undated rows cannot be placed and are dropped."""
    out = []
    for r in rows:
        day = parse_date(r.date)
        if day is not None and period[0] <= day <= period[1]:
            out.append(r)
    return out


def aggregate_metrics(
    campaign: CampaignInfo,
    rows: Sequence[DailyMetricRow],
    today: date,
    period: Optional[Tuple[date, date]] = None,
) -> AggregatedCampaign:
    """Sum every metric field across *rows*.

    *rows* is the campaign's history from its start date through *today*;
    the active window is always resolved from all of it. With a *period*
    only rows dated inside it are summed, and ``period_active_days`` counts
    the active days that fall inside it.

    Each field of each row is parsed on its own: a bad value counts as zero
    for that field and row only.
    """
    window = resolve_active_window(campaign.start_date, campaign.is_paused, rows, today)

    period_days = None
    counted = rows
    if period is not None:
        counted = rows_in_period(rows, period)
        period_days = active_days_within(campaign.start_date, window.effective_end, period)

    return AggregatedCampaign(
        campaign=campaign,
        last_active_date=window.last_active_date,
        active_days=window.active_days,
        total_cost_micros=sum(to_int(r.cost_micros) for r in counted),
        total_conversions=math.fsum(to_float(r.conversions) for r in counted),
        total_conversions_value=math.fsum(to_float(r.conversions_value) for r in counted),
        total_impressions=sum(to_int(r.impressions) for r in counted),
        total_clicks=sum(to_int(r.clicks) for r in counted),
        period_active_days=period_days,
    )


def zero_metrics(campaign: CampaignInfo) -> AggregatedCampaign:
    """Stand-in for a campaign whose metrics could not be fetched."""
    return AggregatedCampaign(
        campaign=campaign,
        last_active_date=campaign.start_date,
        active_days=1,
    )
