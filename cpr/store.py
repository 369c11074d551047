"""Report store: one JSON document per campaign, upserted by ``campaignId``.

JSONL schema (one JSON object per line)::

    {
      "campaignId":   "123456",
      "campaignName": "Brand Search",
      ...                              # every FormattedCampaignReport field
      "syncedAt":     "2026-02-18T05:00:00+00:00"   # ISO-8601 UTC
    }
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from cpr.schema import FormattedCampaignReport

logger = logging.getLogger(__name__)


def _rewrite(path: Path, docs: List[Dict]) -> None:
    """Overwrite the entire JSONL file from *docs*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        for d in docs:
            f.write(json.dumps(d, ensure_ascii=False) + "\n")
    tmp.replace(path)


def load_reports(store_path: str | Path) -> List[Dict]:
    """Load every stored campaign document, in file order."""
    p = Path(store_path)
    if not p.exists():
        return []
    docs: List[Dict] = []
    with open(p, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                docs.append(json.loads(line))
    return docs


def get_report(store_path: str | Path, campaign_id: str) -> Optional[Dict]:
    for d in load_reports(store_path):
        if d.get("campaignId") == str(campaign_id):
            return d
    return None


def upsert_reports(
    store_path: str | Path,
    reports: Iterable[FormattedCampaignReport],
    synced_at: Optional[datetime] = None,
) -> Tuple[int, int]:
    """Insert or replace one document per campaign.

    Returns
    -------
    tuple[int, int]
        ``(updated, appended)``: documents replaced in place and documents
        added at the end of the store.
    """
    p = Path(store_path)
    docs = load_reports(p)
    index = {d.get("campaignId"): i for i, d in enumerate(docs)}
    stamp = (synced_at or datetime.now(timezone.utc)).isoformat()

    updated = 0
    appended = 0
    for r in reports:
        doc = dict(r.to_dict(), syncedAt=stamp)
        if r.campaign_id in index:
            docs[index[r.campaign_id]] = doc
            updated += 1
        else:
            index[r.campaign_id] = len(docs)
            docs.append(doc)
            appended += 1

    _rewrite(p, docs)
    logger.info("Report store %s: %d updated, %d appended", p, updated, appended)
    return updated, appended
