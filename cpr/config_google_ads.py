"""Configuration loader/validator for the Google Ads connector (BYO creds)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml


class GoogleAdsConfigError(ValueError):
    pass


@dataclass
class GoogleAdsConfig:
    developer_token: str
    client_id: str
    client_secret: str
    refresh_token: str
    customer_id: str
    login_customer_id: Optional[str] = None


def _clean_secret(v) -> str:
    return str(v or "").strip()


def _clean(v) -> str:
    return _clean_secret(v).replace("-", "")


def _env(*names: str) -> Optional[str]:
    for n in names:
        v = os.environ.get(n)
        if v:
            return v
    return None


def google_ads_yaml_path(yaml_path: Optional[str] = None) -> Path:
    """The google-ads.yaml in effect: explicit path, `CPR_GOOGLE_ADS_YAML`, then cwd."""
    return Path(yaml_path or os.environ.get("CPR_GOOGLE_ADS_YAML") or "google-ads.yaml")


def _read_yaml(yaml_path: Optional[str]) -> dict:
    p = google_ads_yaml_path(yaml_path)
    if p.exists():
        return yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    return {}


def load_client_credentials(yaml_path: Optional[str] = None) -> Tuple[str, str]:
    """OAuth client id and secret only, for minting a refresh token."""
    raw = _read_yaml(yaml_path)
    cid = _clean_secret(_env("CPR_GOOGLE_ADS_CLIENT_ID", "OAUTH_CLIENT_ID") or raw.get("client_id"))
    csec = _clean_secret(_env("CPR_GOOGLE_ADS_CLIENT_SECRET", "OAUTH_SECRET") or raw.get("client_secret"))
    if not cid or not csec:
        raise GoogleAdsConfigError(
            "Missing client credentials. Set CPR_GOOGLE_ADS_CLIENT_ID and "
            "CPR_GOOGLE_ADS_CLIENT_SECRET (or OAUTH_CLIENT_ID/OAUTH_SECRET), "
            "or put client_id/client_secret in google-ads.yaml."
        )
    return cid, csec


def load_google_ads_config(customer_id: Optional[str] = None, yaml_path: Optional[str] = None) -> GoogleAdsConfig:
    """Load config from env and optional google-ads.yaml style file.

    Priority:
    1) explicit *yaml_path*
    2) env `CPR_GOOGLE_ADS_YAML`
    3) default `google-ads.yaml` in cwd
    4) env vars only

    Env vars win over file values. Besides the `CPR_GOOGLE_ADS_*` names the
    bare `DEVELOPER_TOKEN`, `OAUTH_CLIENT_ID`, `OAUTH_SECRET` and
    `REFRESH_TOKEN` names used by the scheduled sync job are accepted.
    """
    raw = _read_yaml(yaml_path)

    dev = _clean_secret(_env("CPR_GOOGLE_ADS_DEVELOPER_TOKEN", "DEVELOPER_TOKEN") or raw.get("developer_token"))
    cid = _clean_secret(_env("CPR_GOOGLE_ADS_CLIENT_ID", "OAUTH_CLIENT_ID") or raw.get("client_id"))
    csec = _clean_secret(_env("CPR_GOOGLE_ADS_CLIENT_SECRET", "OAUTH_SECRET") or raw.get("client_secret"))
    rtok = _clean_secret(_env("CPR_GOOGLE_ADS_REFRESH_TOKEN", "REFRESH_TOKEN") or raw.get("refresh_token"))
    lcid = _clean(_env("CPR_GOOGLE_ADS_LOGIN_CUSTOMER_ID") or raw.get("login_customer_id")) or None

    # customer ids are accepted with or without dashes (123-456-7890)
    cust = _clean(customer_id or os.environ.get("CPR_GOOGLE_ADS_CUSTOMER_ID") or raw.get("customer_id"))

    missing = [
        name for name, value in [
            ("developer_token", dev),
            ("client_id", cid),
            ("client_secret", csec),
            ("refresh_token", rtok),
            ("customer_id", cust),
        ] if not value
    ]
    if missing:
        raise GoogleAdsConfigError(
            "Missing Google Ads config: " + ", ".join(missing) + ". "
            "Set env vars or provide google-ads.yaml."
        )

    return GoogleAdsConfig(
        developer_token=dev,
        client_id=cid,
        client_secret=csec,
        refresh_token=rtok,
        customer_id=cust,
        login_customer_id=lcid,
    )
