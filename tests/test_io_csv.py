"""Tests for report CSV / JSON output."""

from __future__ import annotations

import json
from datetime import date

import pandas as pd

from cpr.aggregator import aggregate_metrics
from cpr.formatter import format_campaign
from cpr.io_csv import reports_to_json, write_report_csv
from cpr.mappers import REPORT_COLUMNS
from cpr.schema import CampaignInfo, DailyMetricRow

TODAY = date(2025, 6, 15)


def _reports():
    campaign = CampaignInfo(
        campaign_id="0042", name="Khuyến mãi hè", start_date=date(2025, 6, 1), status_code=3
    )
    rows = [DailyMetricRow("2025-06-02", 5_000_000, 1, 20, 200, 10)]
    return [format_campaign(aggregate_metrics(campaign, rows, TODAY), TODAY)]


def test_csv_has_report_columns_and_no_bom(tmp_path):
    out = write_report_csv(_reports(), tmp_path / "nested" / "report.csv")
    raw = out.read_bytes()
    assert not raw.startswith(b"\xef\xbb\xbf")

    df = pd.read_csv(out, dtype=str)
    assert list(df.columns) == REPORT_COLUMNS
    row = df.iloc[0]
    assert row["campaignId"] == "0042"
    assert row["campaignName"] == "Khuyến mãi hè"
    assert row["ctr"] == "5.00%"
    assert row["endDate"] == "Paused on 2025-06-02"


def test_empty_report_still_has_header(tmp_path):
    out = write_report_csv([], tmp_path / "empty.csv")
    assert out.read_text(encoding="utf-8").strip() == ",".join(REPORT_COLUMNS)


def test_json_output():
    data = json.loads(reports_to_json(_reports()))
    assert data[0]["averageCpc"] == "0.50"
    assert data[0]["status"] == "Paused (Ran for 2 days)"
