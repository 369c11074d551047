"""Internal schema for campaigns, daily metric rows and report records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional


class CampaignStatus(Enum):
    ENABLED = "Active"
    PAUSED = "Paused"
    REMOVED = "Removed"
    DRAFT = "Draft"
    ENDED = "Ended"
    UNKNOWN = "Unknown"

    @property
    def label(self) -> str:
        return self.value


# Platform enum codes (Google Ads CampaignStatus numbering).
_STATUS_BY_CODE = {
    2: CampaignStatus.ENABLED,
    3: CampaignStatus.PAUSED,
    4: CampaignStatus.REMOVED,
    5: CampaignStatus.DRAFT,
    6: CampaignStatus.ENDED,
}

_STATUS_BY_NAME = {s.name: s for s in CampaignStatus}


def parse_status(raw: Any) -> Optional[CampaignStatus]:
    """Normalize a numeric, numeric-string or named status to the enum.

    Returns None when the value does not map to a known status.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, CampaignStatus):
        return raw
    if isinstance(raw, int):
        return _STATUS_BY_CODE.get(int(raw))

    s = str(raw).strip()
    if not s:
        return None
    try:
        code = float(s)
    except ValueError:
        name = s.upper()
        if name.startswith("CAMPAIGNSTATUS."):
            name = name[len("CAMPAIGNSTATUS."):]
        return _STATUS_BY_NAME.get(name)
    if code != code or not code.is_integer():
        return None
    return _STATUS_BY_CODE.get(int(code))


@dataclass(frozen=True)
class CampaignInfo:
    campaign_id: str
    name: str
    start_date: date
    end_date: Optional[date] = None
    status_code: Any = None

    @property
    def status(self) -> Optional[CampaignStatus]:
        return parse_status(self.status_code)

    @property
    def is_paused(self) -> bool:
        return self.status is CampaignStatus.PAUSED


@dataclass(frozen=True)
class DailyMetricRow:
    """One day of platform metrics, values kept as the platform sent them."""

    date: Any
    cost_micros: Any = 0
    conversions: Any = 0.0
    conversions_value: Any = 0.0
    impressions: Any = 0
    clicks: Any = 0


@dataclass(frozen=True)
class AggregatedCampaign:
    campaign: CampaignInfo
    last_active_date: date
    active_days: int
    total_cost_micros: int = 0
    total_conversions: float = 0.0
    total_conversions_value: float = 0.0
    total_impressions: int = 0
    total_clicks: int = 0
    # days of the active window inside the reporting period; None = whole window
    period_active_days: Optional[int] = None


@dataclass(frozen=True)
class FormattedCampaignReport:
    campaign_id: str
    campaign_name: str
    start_date: str
    end_date: str
    status: str
    active_duration: str
    total_cost: str
    daily_avg_cost: str
    total_conversions: str
    total_conversions_value: str
    total_impressions: int
    total_clicks: int
    ctr: str
    average_cpc: str
    cost_per_day: str
    is_paused: bool
    last_active_date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaignId": self.campaign_id,
            "campaignName": self.campaign_name,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "status": self.status,
            "activeDuration": self.active_duration,
            "totalCost": self.total_cost,
            "dailyAvgCost": self.daily_avg_cost,
            "totalConversions": self.total_conversions,
            "totalConversionsValue": self.total_conversions_value,
            "totalImpressions": self.total_impressions,
            "totalClicks": self.total_clicks,
            "ctr": self.ctr,
            "averageCpc": self.average_cpc,
            "costPerDay": self.cost_per_day,
            "isPaused": self.is_paused,
            "lastActiveDate": self.last_active_date,
        }
