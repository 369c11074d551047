"""Optional Google Sheets connector: publish a report CSV to a worksheet."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

import pandas as pd

try:
    import gspread  # type: ignore
except Exception:  # pragma: no cover
    gspread = None

try:
    from google.oauth2.service_account import Credentials  # type: ignore
except Exception:  # pragma: no cover
    Credentials = None


class GoogleSheetsConfigError(RuntimeError):
    pass


def _resolve_creds_path() -> str:
    path = os.environ.get("CPR_GOOGLE_CREDS_JSON") or os.environ.get(
        "GOOGLE_APPLICATION_CREDENTIALS"
    )
    if not path:
        raise GoogleSheetsConfigError(
            "Google credentials not configured. Set CPR_GOOGLE_CREDS_JSON or "
            "GOOGLE_APPLICATION_CREDENTIALS to a Service Account JSON path."
        )
    if not Path(path).exists():
        raise GoogleSheetsConfigError(f"Credential file not found: {path}.")
    return path


def push_report_csv(spreadsheet_id: str, worksheet: str, input_path: str) -> int:
    """Replace *worksheet* with the report CSV. Returns number of campaign rows uploaded."""
    creds_path = _resolve_creds_path()
    if gspread is None or Credentials is None:
        raise GoogleSheetsConfigError(
            "Google Sheets dependencies missing. Install gspread and google-auth, "
            "then retry."
        )

    p = Path(input_path)
    if not p.exists():
        raise GoogleSheetsConfigError(f"Report file not found: {p}")
    # keep ids and formatted amounts exactly as written
    df = pd.read_csv(p, dtype=str).fillna("")

    scopes = ["https://www.googleapis.com/auth/spreadsheets"]
    creds = Credentials.from_service_account_file(creds_path, scopes=scopes)
    client = gspread.authorize(creds)
    ws = client.open_by_key(spreadsheet_id).worksheet(worksheet)

    values: List[List[str]] = [list(df.columns)] + df.values.tolist()
    ws.clear()
    ws.update(values, "A1")
    return len(df)
