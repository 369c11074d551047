"""Abstract collaborators the report assembler pulls data from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Sequence

from cpr.schema import CampaignInfo, DailyMetricRow


class CampaignCatalog(ABC):
    """Source of base campaign records."""

    @abstractmethod
    def list_campaigns(
        self, customer_id: str, exclude_statuses: Sequence[str] = ("REMOVED",)
    ) -> List[CampaignInfo]:
        """Return campaigns ordered by name, skipping *exclude_statuses*."""
        ...


class DailyMetricsSource(ABC):
    """Source of per-day metric rows for a single campaign."""

    @abstractmethod
    def query(
        self, customer_id: str, campaign_id: str, date_from: date, date_to: date
    ) -> List[DailyMetricRow]:
        """Return the campaign's rows for the inclusive date window."""
        ...
