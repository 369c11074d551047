"""Data source and output connectors."""
from cpr.connectors.base import CampaignCatalog, DailyMetricsSource
from cpr.connectors.static import StaticSource

__all__ = ["CampaignCatalog", "DailyMetricsSource", "StaticSource"]
