"""Tests for report assembly: ordering, isolation of failures, date ranges."""

from __future__ import annotations

import threading
import time
from datetime import date, timedelta

import pytest

from cpr.connectors.static import StaticSource
from cpr.date_range import parse_date_range
from cpr.report import (
    CatalogFetchError,
    Failed,
    Ok,
    collect_campaign,
    get_campaign_data,
    get_campaign_data_custom_range,
    get_campaign_data_predefined,
    get_overall_campaign_data,
    summarize,
)
from cpr.schema import CampaignInfo, DailyMetricRow

TODAY = date(2025, 6, 18)


def _campaign(cid: str, name: str, status=2, start=date(2025, 6, 1)) -> CampaignInfo:
    return CampaignInfo(campaign_id=cid, name=name, start_date=start, status_code=status)


def _five_campaign_source(fail=("3",)) -> StaticSource:
    campaigns = [_campaign(str(i), f"Campaign {chr(ord('A') + i - 1)}") for i in range(1, 6)]
    metrics = {
        str(i): [
            DailyMetricRow("2025-06-02", 1_000_000 * i, 1, 10, 100, 5),
            DailyMetricRow("2025-06-03", 1_000_000 * i, 0, 0, 100, 5),
        ]
        for i in range(1, 6)
    }
    return StaticSource(campaigns, metrics, fail_campaigns=fail)


class TestGetCampaignData:
    def test_one_failure_among_five_is_isolated(self, caplog):
        src = _five_campaign_source()
        with caplog.at_level("WARNING", logger="cpr.report"):
            reports = get_campaign_data("123", catalog=src, metrics=src, today=TODAY)

        assert [r.campaign_id for r in reports] == ["1", "2", "3", "4", "5"]
        failed = reports[2]
        assert failed.total_cost == "0.00"
        assert failed.ctr == "0%"
        assert failed.active_duration == "1 days"
        assert failed.last_active_date == "2025-06-01"
        for r in reports[:2] + reports[3:]:
            assert r.total_clicks == 10
            assert r.total_impressions == 200
        assert reports[1].total_cost == "4.00"
        assert "campaign 3" in caplog.text

    def test_catalog_failure_is_fatal_with_cause(self):
        class BrokenCatalog:
            def list_campaigns(self, customer_id, exclude_statuses=("REMOVED",)):
                raise ConnectionError("boom")

        with pytest.raises(CatalogFetchError) as excinfo:
            get_campaign_data("123", catalog=BrokenCatalog(), metrics=None, today=TODAY)
        assert isinstance(excinfo.value.__cause__, ConnectionError)

    def test_catalog_order_is_kept_with_workers(self):
        src = _five_campaign_source(fail=())
        original_query = src.query
        lock = threading.Lock()

        def slow_first(customer_id, campaign_id, date_from, date_to):
            # the first campaign finishes last
            if campaign_id == "1":
                time.sleep(0.05)
            with lock:
                return original_query(customer_id, campaign_id, date_from, date_to)

        src.query = slow_first
        reports = get_campaign_data(
            "123", catalog=src, metrics=src, today=TODAY, max_workers=4
        )
        assert [r.campaign_name for r in reports] == [
            "Campaign A", "Campaign B", "Campaign C", "Campaign D", "Campaign E",
        ]

    def test_default_window_is_campaign_start_to_today(self):
        src = _five_campaign_source(fail=())
        get_campaign_data("123", catalog=src, metrics=src, today=TODAY)
        assert src.queries[0] == ("123", "1", date(2025, 6, 1), TODAY)

    def test_custom_range_totals_only_rows_inside_it(self):
        src = _five_campaign_source(fail=())
        reports = get_campaign_data_custom_range(
            "123", "2025-06-03", "2025-06-10", catalog=src, metrics=src, today=TODAY
        )
        assert reports[0].total_impressions == 100
        # history is still fetched from the campaign start
        assert src.queries[0][2:] == (date(2025, 6, 1), TODAY)

    def test_range_before_campaign_start_totals_nothing(self):
        src = _five_campaign_source(fail=())
        reports = get_campaign_data_predefined(
            "123", "LAST_MONTH", catalog=src, metrics=src, today=TODAY
        )
        for r in reports:
            assert r.total_cost == "0.00"
            assert r.daily_avg_cost == "0.00"
            assert r.last_active_date == "2025-06-03"
            assert r.active_duration == "18 days"

    def test_overall_wrapper(self):
        src = _five_campaign_source(fail=())
        reports = get_overall_campaign_data("123", catalog=src, metrics=src, today=TODAY)
        assert len(reports) == 5

    def test_removed_campaigns_are_excluded(self):
        src = StaticSource(
            [_campaign("1", "Live"), _campaign("2", "Gone", status=4)], {}
        )
        reports = get_campaign_data("123", catalog=src, metrics=src, today=TODAY)
        assert [r.campaign_name for r in reports] == ["Live"]

    def test_invariants_hold(self):
        src = _five_campaign_source()
        for r in get_campaign_data("123", catalog=src, metrics=src, today=TODAY):
            assert int(r.active_duration.split()[0]) >= 1
            assert "2025-06-01" <= r.last_active_date <= TODAY.isoformat()


def _daily_rows(first: date, last: date, cost_micros: int):
    rows = []
    day = first
    while day <= last:
        rows.append(DailyMetricRow(day.isoformat(), cost_micros, 0, 0, 10, 1))
        day += timedelta(days=1)
    return rows


class TestReportingPeriod:
    """A range narrows the totals; the active window comes from the whole history."""

    def _paused_source(self):
        campaign = _campaign("1", "Spring Sale", status=3, start=date(2025, 1, 1))
        rows = _daily_rows(date(2025, 1, 1), date(2025, 3, 31), 1_000_000)
        return StaticSource([campaign], {"1": rows})

    def _active_source(self):
        campaign = _campaign("2", "Always On", status=2, start=date(2024, 6, 18))
        rows = [DailyMetricRow("2024-06-18", 1_000_000, 0, 0, 10, 1)]
        rows += _daily_rows(date(2025, 6, 11), date(2025, 6, 17), 10_000_000)
        return StaticSource([campaign], {"2": rows})

    def test_paused_campaign_without_range(self):
        src = self._paused_source()
        [r] = get_campaign_data("123", catalog=src, metrics=src, today=TODAY)
        assert r.end_date == "Paused on 2025-03-31"
        assert r.status == "Paused (Ran for 90 days)"
        assert r.total_cost == "90.00"
        assert r.daily_avg_cost == "1.00"

    def test_paused_campaign_last_7_days_keeps_its_window(self):
        src = self._paused_source()
        [r] = get_campaign_data_predefined(
            "123", "LAST_7_DAYS", catalog=src, metrics=src, today=TODAY
        )
        assert src.queries[0][2:] == (date(2025, 1, 1), TODAY)
        assert r.last_active_date == "2025-03-31"
        assert r.end_date == "Paused on 2025-03-31"
        assert r.status == "Paused (Ran for 90 days)"
        assert r.active_duration == "90 days"
        assert r.total_cost == "0.00"
        assert r.daily_avg_cost == "0.00"

    def test_paused_campaign_custom_range_across_pause(self):
        src = self._paused_source()
        [r] = get_campaign_data_custom_range(
            "123", "2025-03-25", "2025-04-10", catalog=src, metrics=src, today=TODAY
        )
        assert r.end_date == "Paused on 2025-03-31"
        assert r.status == "Paused (Ran for 90 days)"
        # 7 active days inside the range at 1.00 each
        assert r.total_cost == "7.00"
        assert r.daily_avg_cost == "1.00"
        assert r.cost_per_day == "1.00"

    def test_active_campaign_last_7_days(self):
        src = self._active_source()
        [r] = get_campaign_data_predefined(
            "123", "LAST_7_DAYS", catalog=src, metrics=src, today=TODAY
        )
        assert r.total_cost == "70.00"
        assert r.active_duration == "366 days"
        assert r.daily_avg_cost == "10.00"
        assert r.last_active_date == "2025-06-17"
        assert r.end_date == "No end date"

    def test_active_campaign_custom_range_is_cut_at_today(self):
        src = self._active_source()
        [r] = get_campaign_data_custom_range(
            "123", "2025-06-11", "2025-06-20", catalog=src, metrics=src, today=TODAY
        )
        assert r.total_cost == "70.00"
        # 2025-06-11 through today is 8 days
        assert r.daily_avg_cost == "8.75"
        assert r.status == "Active"


class TestCollectCampaign:
    def test_ok_outcome(self):
        src = _five_campaign_source(fail=())
        outcome = collect_campaign(_campaign("2", "B"), src, "123", None, TODAY)
        assert isinstance(outcome, Ok)
        assert outcome.campaign.total_cost_micros == 4_000_000

    def test_failed_outcome_keeps_cause(self):
        src = _five_campaign_source(fail=("2",))
        outcome = collect_campaign(_campaign("2", "B"), src, "123", None, TODAY)
        assert isinstance(outcome, Failed)
        assert outcome.campaign_id == "2"
        assert "unavailable" in str(outcome.cause)

    def test_paused_campaign_window(self):
        src = _five_campaign_source(fail=())
        outcome = collect_campaign(
            _campaign("1", "A", status=3), src, "123", parse_date_range(), TODAY
        )
        assert outcome.campaign.last_active_date == date(2025, 6, 3)
        assert outcome.campaign.active_days == 3


def test_summarize_totals():
    src = _five_campaign_source()
    totals = summarize(get_campaign_data("123", catalog=src, metrics=src, today=TODAY))
    assert totals.campaigns == 5
    # campaigns 1, 2, 4, 5 at 2 days x i currency units
    assert totals.cost == pytest.approx(24.0)
    assert totals.conversions == pytest.approx(4.0)
    assert totals.conversions_value == pytest.approx(40.0)
    assert totals.impressions == 800
    assert totals.clicks == 40


def test_summarize_empty():
    totals = summarize([])
    assert totals.campaigns == 0
    assert totals.cost == 0.0
