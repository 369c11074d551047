"""Tests for metric roll-ups and the zero-metrics fallback."""

from __future__ import annotations

import itertools
from datetime import date

from cpr.aggregator import aggregate_metrics, zero_metrics
from cpr.schema import CampaignInfo, DailyMetricRow

TODAY = date(2025, 6, 15)


def _campaign(status=2) -> CampaignInfo:
    return CampaignInfo(
        campaign_id="42", name="Camp", start_date=date(2024, 1, 1), status_code=status
    )


def _rows():
    return [
        DailyMetricRow("2024-01-01", 2_000_000, 1.5, 30.25, 100, 4),
        DailyMetricRow("2024-01-02", 3_000_000, 0.5, 9.75, 100, 6),
        DailyMetricRow("2024-01-03", 0, 0, 0, 0, 0),
    ]


def test_totals_sum_every_field():
    agg = aggregate_metrics(_campaign(), _rows(), TODAY)
    assert agg.total_cost_micros == 5_000_000
    assert agg.total_conversions == 2.0
    assert agg.total_conversions_value == 40.0
    assert agg.total_impressions == 200
    assert agg.total_clicks == 10


def test_bad_values_default_to_zero_per_field():
    rows = [
        DailyMetricRow("2024-01-01", "1000000", "2", None, "abc", 3),
        DailyMetricRow("2024-01-02", None, float("nan"), "7.5", "50", "x"),
        DailyMetricRow("2024-01-03", -500, "inf", {}, 10.0, "2"),
    ]
    agg = aggregate_metrics(_campaign(), rows, TODAY)
    assert agg.total_cost_micros == 1_000_000
    assert agg.total_conversions == 2.0
    assert agg.total_conversions_value == 7.5
    assert agg.total_impressions == 60
    assert agg.total_clicks == 5


def test_order_independent_totals_and_last_active():
    rows = _rows()
    results = {
        aggregate_metrics(_campaign(status=3), list(p), TODAY)
        for p in itertools.permutations(rows)
    }
    assert len(results) == 1
    agg = results.pop()
    assert agg.last_active_date == date(2024, 1, 2)
    assert agg.active_days == 2


def test_active_campaign_days_run_to_today():
    agg = aggregate_metrics(_campaign(status=2), _rows(), TODAY)
    assert agg.active_days == (TODAY - date(2024, 1, 1)).days + 1


def test_zero_metrics_fallback():
    agg = zero_metrics(_campaign(status=3))
    assert agg.total_cost_micros == 0
    assert agg.total_clicks == 0
    assert agg.total_impressions == 0
    assert agg.total_conversions == 0.0
    assert agg.total_conversions_value == 0.0
    assert agg.last_active_date == date(2024, 1, 1)
    assert agg.active_days == 1


def test_period_limits_totals_but_not_the_window():
    period = (date(2024, 1, 2), date(2024, 1, 31))
    agg = aggregate_metrics(_campaign(status=3), _rows(), TODAY, period)
    assert agg.total_cost_micros == 3_000_000
    assert agg.total_clicks == 6
    assert agg.last_active_date == date(2024, 1, 2)
    assert agg.active_days == 2
    assert agg.period_active_days == 1


def test_period_after_pause_has_no_active_days():
    period = (date(2025, 6, 1), date(2025, 6, 7))
    agg = aggregate_metrics(_campaign(status=3), _rows(), TODAY, period)
    assert agg.total_cost_micros == 0
    assert agg.period_active_days == 0
    assert agg.last_active_date == date(2024, 1, 2)


def test_undated_rows_are_left_out_of_a_period():
    rows = _rows() + [DailyMetricRow(None, 9_000_000, 0, 0, 1, 1)]
    period = (date(2024, 1, 1), date(2024, 1, 31))
    assert aggregate_metrics(_campaign(), rows, TODAY, period).total_cost_micros == 5_000_000
    assert aggregate_metrics(_campaign(), rows, TODAY).total_cost_micros == 14_000_000


def test_no_period_leaves_period_days_unset():
    assert aggregate_metrics(_campaign(), _rows(), TODAY).period_active_days is None
