"""Report assembly: catalog, per-campaign metrics, active window and totals, KPIs.

Per campaign the flow is::

    metrics_window    : start date through today, the whole history
    DailyMetricsSource: fetch rows (may fail; isolated to this campaign)
    aggregate_metrics : active window from the history, totals over the period
    format_campaign   : display-ready record

A failed metrics fetch yields a ``Failed`` outcome which is replaced by a
zero-metrics record, so one bad campaign never sinks the whole report. A
failed catalog fetch is fatal and raised as :class:`CatalogFetchError`.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Union

from cpr.aggregator import aggregate_metrics, zero_metrics
from cpr.connectors.base import CampaignCatalog, DailyMetricsSource
from cpr.date_range import DateRangeSpec, metrics_window, parse_date_range
from cpr.formatter import format_campaign
from cpr.mappers import to_float
from cpr.schema import AggregatedCampaign, CampaignInfo, FormattedCampaignReport

logger = logging.getLogger(__name__)


class CatalogFetchError(RuntimeError):
    """The campaign list could not be fetched; no report can be built."""


@dataclass(frozen=True)
class Ok:
    campaign: AggregatedCampaign


@dataclass(frozen=True)
class Failed:
    campaign_id: str
    cause: Exception


CampaignOutcome = Union[Ok, Failed]


@dataclass(frozen=True)
class ReportTotals:
    campaigns: int = 0
    cost: float = 0.0
    conversions: float = 0.0
    conversions_value: float = 0.0
    impressions: int = 0
    clicks: int = 0


def collect_campaign(
    campaign: CampaignInfo,
    metrics: DailyMetricsSource,
    customer_id: str,
    date_range: Optional[DateRangeSpec],
    today: date,
) -> CampaignOutcome:
    # the active window needs the whole history even when a period is asked for
    history = metrics_window(None, campaign.start_date, today)
    try:
        rows = [] if history is None else metrics.query(customer_id, campaign.campaign_id, *history)
    except Exception as exc:
        return Failed(campaign.campaign_id, exc)
    period = None if date_range is None else date_range.resolve(today)
    return Ok(aggregate_metrics(campaign, rows, today, period))


def resolve_outcome(campaign: CampaignInfo, outcome: CampaignOutcome) -> AggregatedCampaign:
    if isinstance(outcome, Ok):
        return outcome.campaign
    logger.warning(
        "Could not get metrics for campaign %s: %s", outcome.campaign_id, outcome.cause
    )
    return zero_metrics(campaign)


def get_campaign_data(
    customer_id: str,
    date_range: Optional[DateRangeSpec] = None,
    *,
    catalog: CampaignCatalog,
    metrics: DailyMetricsSource,
    today: Optional[date] = None,
    max_workers: int = 1,
    exclude_statuses: Sequence[str] = ("REMOVED",),
) -> List[FormattedCampaignReport]:
    """Build the per-campaign report for *customer_id*.

    *date_range* of ``None`` totals each campaign from its own start date
    through *today*. With a range only the days inside it are totalled, but
    the active window and status still come from the whole history, and
    ``dailyAvgCost`` divides by the active days inside the range.
    *today* defaults to the current date and is evaluated once per
    call, so active campaigns report a different duration from day to day.
    Records come back in catalog order whatever *max_workers* is.
    """
    today = today or date.today()

    try:
        campaigns = catalog.list_campaigns(customer_id, exclude_statuses)
    except Exception as exc:
        raise CatalogFetchError(
            f"Campaign catalog fetch failed for customer {customer_id}: {exc}"
        ) from exc

    logger.info("Found %d campaigns. Getting detailed metrics...", len(campaigns))

    def _collect(c: CampaignInfo) -> CampaignOutcome:
        return collect_campaign(c, metrics, customer_id, date_range, today)

    if max_workers > 1 and len(campaigns) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(_collect, campaigns))
    else:
        outcomes = [_collect(c) for c in campaigns]

    return [
        format_campaign(resolve_outcome(c, o), today)
        for c, o in zip(campaigns, outcomes)
    ]


def get_overall_campaign_data(customer_id: str, **kwargs) -> List[FormattedCampaignReport]:
    return get_campaign_data(customer_id, None, **kwargs)


def get_campaign_data_custom_range(
    customer_id: str, start_date: str, end_date: str, **kwargs
) -> List[FormattedCampaignReport]:
    return get_campaign_data(
        customer_id, parse_date_range(start=start_date, end=end_date), **kwargs
    )


def get_campaign_data_predefined(
    customer_id: str, date_range: str, **kwargs
) -> List[FormattedCampaignReport]:
    return get_campaign_data(customer_id, parse_date_range(token=date_range), **kwargs)


def summarize(reports: Sequence[FormattedCampaignReport]) -> ReportTotals:
    """Roll the display values of every campaign up into report-wide totals."""
    return ReportTotals(
        campaigns=len(reports),
        cost=math.fsum(to_float(r.total_cost) for r in reports),
        conversions=math.fsum(to_float(r.total_conversions) for r in reports),
        conversions_value=math.fsum(to_float(r.total_conversions_value) for r in reports),
        impressions=sum(r.total_impressions for r in reports),
        clicks=sum(r.total_clicks for r in reports),
    )
