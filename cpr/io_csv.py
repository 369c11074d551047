"""CSV / JSON writers for finished reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from cpr.mappers import reports_to_dataframe
from cpr.schema import FormattedCampaignReport


def write_report_csv(reports: Sequence[FormattedCampaignReport], path: str | Path) -> Path:
    """Write one row per campaign, UTF-8 without BOM."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    df = reports_to_dataframe(reports)
    df.to_csv(p, index=False, encoding="utf-8")
    return p


def reports_to_json(reports: Sequence[FormattedCampaignReport]) -> str:
    return json.dumps([r.to_dict() for r in reports], ensure_ascii=False, indent=2)
