"""Installed-app OAuth flow that mints the Google Ads refresh token.

The client id and secret come from the same env vars / google-ads.yaml the
report connector reads; the refresh token can be written back into that file.
"""

from __future__ import annotations

from pathlib import Path

import yaml

ADWORDS_SCOPE = "https://www.googleapis.com/auth/adwords"


class OAuthSetupError(RuntimeError):
    pass


def installed_app_config(client_id: str, client_secret: str) -> dict:
    return {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }


def fetch_refresh_token(client_id: str, client_secret: str, port: int = 8080) -> str:
    """Open the consent page in a browser and return the granted refresh token."""
    try:
        from google_auth_oauthlib.flow import InstalledAppFlow
    except ImportError as exc:
        raise OAuthSetupError(
            "Missing dependency google-auth-oauthlib. Install it and retry."
        ) from exc

    flow = InstalledAppFlow.from_client_config(
        installed_app_config(client_id, client_secret), scopes=[ADWORDS_SCOPE]
    )
    creds = flow.run_local_server(port=port, prompt="consent", access_type="offline")
    if not creds.refresh_token:
        raise OAuthSetupError(
            "Google returned no refresh token. Revoke the app's access for this "
            "account and run the flow again."
        )
    return creds.refresh_token


def save_refresh_token(path: str | Path, refresh_token: str) -> Path:
    """Set ``refresh_token`` in a google-ads.yaml, keeping every other key."""
    p = Path(path)
    raw = {}
    if p.exists():
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    raw["refresh_token"] = refresh_token
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(yaml.safe_dump(raw, sort_keys=False), encoding="utf-8")
    return p
