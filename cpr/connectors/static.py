"""In-memory campaign source for dry runs, fixture-driven.

Fixture YAML layout::

    campaigns:
      - id: "111"
        name: Brand Search
        start_date: 2024-01-01
        end_date: 2037-12-30      # optional
        status: 3                 # numeric code or name
    metrics:
      "111":
        - {date: 2024-01-02, cost_micros: 1500000, impressions: 40, clicks: 3}
    fail_campaigns: ["222"]       # optional, metrics fetch raises for these
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

from cpr.connectors.base import CampaignCatalog, DailyMetricsSource
from cpr.mappers import parse_date
from cpr.schema import CampaignInfo, DailyMetricRow, parse_status


class StaticSourceError(RuntimeError):
    pass


class StaticSource(CampaignCatalog, DailyMetricsSource):
    """Serves a fixed catalog and metric rows, optionally failing some campaigns."""

    def __init__(
        self,
        campaigns: Iterable[CampaignInfo],
        metrics: Optional[Mapping[str, Sequence[DailyMetricRow]]] = None,
        fail_campaigns: Iterable[str] = (),
    ) -> None:
        self.campaigns = list(campaigns)
        self.metrics: Dict[str, List[DailyMetricRow]] = {
            str(k): list(v) for k, v in (metrics or {}).items()
        }
        self.fail_campaigns = {str(c) for c in fail_campaigns}
        self.queries: List[tuple] = []

    @classmethod
    def from_yaml(cls, path: str | Path) -> "StaticSource":
        p = Path(path)
        if not p.exists():
            raise StaticSourceError(f"Fixture file not found: {p}")
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

        campaigns = []
        for c in raw.get("campaigns", []):
            start = parse_date(c.get("start_date"))
            if start is None:
                raise StaticSourceError(
                    f"Campaign {c.get('id')!r} in {p} has no valid start_date."
                )
            campaigns.append(
                CampaignInfo(
                    campaign_id=str(c.get("id", "")),
                    name=str(c.get("name", "") or ""),
                    start_date=start,
                    end_date=parse_date(c.get("end_date")),
                    status_code=c.get("status"),
                )
            )

        metrics = {
            str(cid): [
                DailyMetricRow(
                    date=r.get("date"),
                    cost_micros=r.get("cost_micros", 0),
                    conversions=r.get("conversions", 0.0),
                    conversions_value=r.get("conversions_value", 0.0),
                    impressions=r.get("impressions", 0),
                    clicks=r.get("clicks", 0),
                )
                for r in (rows or [])
            ]
            for cid, rows in (raw.get("metrics") or {}).items()
        }
        return cls(campaigns, metrics, raw.get("fail_campaigns") or ())

    def list_campaigns(
        self, customer_id: str, exclude_statuses: Sequence[str] = ("REMOVED",)
    ) -> List[CampaignInfo]:
        excluded = {parse_status(s) for s in exclude_statuses}
        kept = [c for c in self.campaigns if c.status is None or c.status not in excluded]
        return sorted(kept, key=lambda c: c.name)

    def query(
        self, customer_id: str, campaign_id: str, date_from: date, date_to: date
    ) -> List[DailyMetricRow]:
        self.queries.append((customer_id, campaign_id, date_from, date_to))
        if campaign_id in self.fail_campaigns:
            raise StaticSourceError(f"Metrics unavailable for campaign {campaign_id}")
        rows = []
        for r in self.metrics.get(campaign_id, []):
            d = parse_date(r.date)
            # undated rows are passed through, the aggregator decides
            if d is None or date_from <= d <= date_to:
                rows.append(r)
        return rows
