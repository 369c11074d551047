"""Load and validate config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import yaml


@dataclass
class ReportConfig:
    max_workers: int = 1  # 1 = fetch campaigns one after another
    exclude_statuses: List[str] = field(default_factory=lambda: ["REMOVED"])


@dataclass
class StoreConfig:
    """JSONL document store the report is upserted into."""

    path: str = "reports/campaigns.jsonl"


@dataclass
class RetryConfig:
    """Exponential-backoff settings for Google Ads rate-limit errors."""

    max_retries: int = 3
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 15.0
    jitter_seconds: float = 0.5


@dataclass
class AppConfig:
    report: ReportConfig = field(default_factory=ReportConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    retry_api: RetryConfig = field(default_factory=RetryConfig)


class ConfigError(ValueError):
    pass


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    p = Path(path)
    raw: dict = {}
    if p.exists():
        with open(p, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    cfg = AppConfig(
        report=ReportConfig(**raw.get("report", {})),
        store=StoreConfig(**raw.get("store", {})),
        retry_api=RetryConfig(**raw.get("retry_api", {})),
    )
    if cfg.report.max_workers < 1:
        raise ConfigError(
            f"report.max_workers must be at least 1, got {cfg.report.max_workers}"
        )
    return cfg
