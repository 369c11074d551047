"""Derived KPIs and display labels for aggregated campaigns."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from cpr.schema import AggregatedCampaign, FormattedCampaignReport, parse_status

MICROS_PER_UNIT = 1_000_000

# Google Ads stores "no end date" as a far-future date such as 2037-12-30.
NO_END_DATE_YEARS_AHEAD = 10


def no_end_date_year_threshold(today: date) -> int:
    return today.year + NO_END_DATE_YEARS_AHEAD


def micros_to_currency(micros: int) -> float:
    return micros / MICROS_PER_UNIT


def _money(v: float) -> str:
    return f"{v:.2f}"


def format_ctr(clicks: int, impressions: int) -> str:
    if impressions <= 0:
        return "0%"
    return f"{clicks / impressions * 100:.2f}%"


def format_status(raw: Any, is_paused: bool, active_days: int) -> str:
    status = parse_status(raw)
    text = status.label if status is not None else f"Unknown ({raw})"
    if is_paused:
        text += f" (Ran for {active_days} days)"
    return text


def format_end_date(
    end_date: Optional[date],
    is_paused: bool,
    last_active_date: date,
    today: date,
) -> str:
    if is_paused:
        return f"Paused on {last_active_date.isoformat()}"
    if end_date is None:
        return "No end date"
    if end_date.year > no_end_date_year_threshold(today):
        return "No end date"
    return end_date.isoformat()


def format_campaign(agg: AggregatedCampaign, today: date) -> FormattedCampaignReport:
    campaign = agg.campaign
    cost = micros_to_currency(agg.total_cost_micros)
    average_cpc = cost / agg.total_clicks if agg.total_clicks > 0 else 0.0
    cost_days = agg.active_days if agg.period_active_days is None else agg.period_active_days
    daily_avg_cost = cost / cost_days if cost_days > 0 else 0.0

    return FormattedCampaignReport(
        campaign_id=campaign.campaign_id,
        campaign_name=campaign.name,
        start_date=campaign.start_date.isoformat(),
        end_date=format_end_date(
            campaign.end_date, campaign.is_paused, agg.last_active_date, today
        ),
        status=format_status(campaign.status_code, campaign.is_paused, agg.active_days),
        active_duration=f"{agg.active_days} days",
        total_cost=_money(cost),
        daily_avg_cost=_money(daily_avg_cost),
        total_conversions=_money(agg.total_conversions),
        total_conversions_value=_money(agg.total_conversions_value),
        total_impressions=agg.total_impressions,
        total_clicks=agg.total_clicks,
        ctr=format_ctr(agg.total_clicks, agg.total_impressions),
        average_cpc=_money(average_cpc),
        cost_per_day=_money(daily_avg_cost),
        is_paused=campaign.is_paused,
        last_active_date=agg.last_active_date.isoformat(),
    )
