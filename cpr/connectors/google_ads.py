"""Google Ads connector: campaign catalog and daily metric rows via GAQL."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from cpr.config import RetryConfig
from cpr.config_google_ads import GoogleAdsConfig, load_google_ads_config
from cpr.connectors.base import CampaignCatalog, DailyMetricsSource
from cpr.mappers import parse_date
from cpr.schema import CampaignInfo, DailyMetricRow, parse_status

logger = logging.getLogger(__name__)


class GoogleAdsConnectorError(RuntimeError):
    pass


@dataclass
class RetryPolicy:
    max_retries: int = 3
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 15.0
    jitter_seconds: float = 0.5

    @classmethod
    def from_config(cls, cfg: RetryConfig) -> "RetryPolicy":
        return cls(
            max_retries=cfg.max_retries,
            backoff_base_seconds=cfg.backoff_base_seconds,
            backoff_max_seconds=cfg.backoff_max_seconds,
            jitter_seconds=cfg.jitter_seconds,
        )


def _build_client(cfg: GoogleAdsConfig):
    try:
        from google.ads.googleads.client import GoogleAdsClient
    except Exception as exc:  # pragma: no cover
        raise GoogleAdsConnectorError(
            "google-ads SDK missing. Install dependency `google-ads` and retry."
        ) from exc

    payload = {
        "developer_token": cfg.developer_token,
        "client_id": cfg.client_id,
        "client_secret": cfg.client_secret,
        "refresh_token": cfg.refresh_token,
        "use_proto_plus": True,
    }
    if cfg.login_customer_id:
        payload["login_customer_id"] = cfg.login_customer_id

    return GoogleAdsClient.load_from_dict(payload)


def map_campaign_row(row) -> Optional[CampaignInfo]:
    campaign = getattr(row, "campaign", None)
    campaign_id = str(getattr(campaign, "id", "") or "")
    start = parse_date(getattr(campaign, "start_date", None))
    if start is None:
        logger.warning("Skipping campaign %s: no usable start date", campaign_id)
        return None

    return CampaignInfo(
        campaign_id=campaign_id,
        name=str(getattr(campaign, "name", "") or ""),
        start_date=start,
        end_date=parse_date(getattr(campaign, "end_date", None) or None),
        status_code=getattr(campaign, "status", None),
    )


def map_metrics_row(row) -> DailyMetricRow:
    metrics = getattr(row, "metrics", None)
    segments = getattr(row, "segments", None)

    return DailyMetricRow(
        date=getattr(segments, "date", None),
        cost_micros=getattr(metrics, "cost_micros", 0),
        conversions=getattr(metrics, "conversions", 0.0),
        conversions_value=getattr(metrics, "conversions_value", 0.0),
        impressions=getattr(metrics, "impressions", 0),
        clicks=getattr(metrics, "clicks", 0),
    )


def _status_names(exclude_statuses: Sequence[str]) -> List[str]:
    names = []
    for s in exclude_statuses:
        status = parse_status(s)
        if status is None:
            raise GoogleAdsConnectorError(f"Unknown campaign status to exclude: {s!r}")
        names.append(status.name)
    return names


def campaign_query(exclude_statuses: Sequence[str] = ("REMOVED",)) -> str:
    where = ""
    names = _status_names(exclude_statuses)
    if names:
        quoted = ", ".join(f"'{n}'" for n in names)
        where = f"\nWHERE campaign.status NOT IN ({quoted})"

    return f"""
SELECT
  campaign.id,
  campaign.name,
  campaign.start_date,
  campaign.end_date,
  campaign.status
FROM campaign{where}
ORDER BY campaign.name ASC
""".strip()


def metrics_query(campaign_id: str, date_from: date, date_to: date) -> str:
    if not str(campaign_id).isdigit():
        raise GoogleAdsConnectorError(f"Invalid campaign id: {campaign_id!r}")

    return f"""
SELECT
  campaign.id,
  segments.date,
  metrics.cost_micros,
  metrics.conversions,
  metrics.conversions_value,
  metrics.impressions,
  metrics.clicks
FROM campaign
WHERE campaign.id = {campaign_id}
  AND segments.date BETWEEN '{date_from.isoformat()}' AND '{date_to.isoformat()}'
ORDER BY segments.date ASC
""".strip()


def _is_retryable_error(exc: Exception) -> bool:
    s = str(exc).lower()
    return any(
        k in s
        for k in ["rate", "quota", "resource exhausted", "429", "too many requests"]
    )


def _search_with_retry(service, customer_id: str, query: str, retry: RetryPolicy):
    attempt = 0
    while True:
        try:
            return list(service.search_stream(customer_id=customer_id, query=query))
        except Exception as exc:
            if attempt >= retry.max_retries or not _is_retryable_error(exc):
                raise
            sleep_s = min(
                retry.backoff_base_seconds * (2**attempt), retry.backoff_max_seconds
            )
            sleep_s += random.uniform(0, retry.jitter_seconds)
            logger.info(
                "Google Ads rate limited, retry %d/%d in %.1fs",
                attempt + 1, retry.max_retries, sleep_s,
            )
            time.sleep(sleep_s)
            attempt += 1


def _wrap_error(exc: Exception, what: str) -> GoogleAdsConnectorError:
    msg = str(exc)
    if any(k in msg.lower() for k in ["permission", "unauthorized", "authentication"]):
        return GoogleAdsConnectorError(
            "Google Ads authentication/permission error. Verify developer token, OAuth creds, "
            "refresh token, and account access."
        )
    return GoogleAdsConnectorError(f"Google Ads {what} failed: {exc}")


class GoogleAdsSource(CampaignCatalog, DailyMetricsSource):
    """Campaign catalog and daily metrics backed by ``GoogleAdsService``."""

    def __init__(self, client, retry_policy: Optional[RetryPolicy] = None) -> None:
        self.service = client.get_service("GoogleAdsService")
        self.retry = retry_policy or RetryPolicy()

    @classmethod
    def from_config(
        cls,
        customer_id: Optional[str] = None,
        config_path: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "GoogleAdsSource":
        cfg = load_google_ads_config(customer_id=customer_id, yaml_path=config_path)
        return cls(_build_client(cfg), retry_policy)

    def _search(self, customer_id: str, query: str, what: str) -> list:
        cid = str(customer_id).replace("-", "")
        try:
            batches = _search_with_retry(self.service, cid, query, self.retry)
        except Exception as exc:
            raise _wrap_error(exc, what) from exc

        rows = []
        for batch in batches:
            rows.extend(getattr(batch, "results", []))
        return rows

    def list_campaigns(
        self, customer_id: str, exclude_statuses: Sequence[str] = ("REMOVED",)
    ) -> List[CampaignInfo]:
        logger.info("Executing campaign info query for customer %s", customer_id)
        rows = self._search(customer_id, campaign_query(exclude_statuses), "campaign query")
        campaigns = [c for c in (map_campaign_row(r) for r in rows) if c is not None]
        logger.info("Found %d campaigns", len(campaigns))
        return campaigns

    def query(
        self, customer_id: str, campaign_id: str, date_from: date, date_to: date
    ) -> List[DailyMetricRow]:
        logger.debug(
            "Executing metrics query for campaign %s (%s to %s)",
            campaign_id, date_from, date_to,
        )
        q = metrics_query(campaign_id, date_from, date_to)
        rows = self._search(customer_id, q, f"metrics query for campaign {campaign_id}")
        return [map_metrics_row(r) for r in rows]
