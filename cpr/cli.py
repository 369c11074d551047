"""CLI entry point for Campaign Performance Report."""

from __future__ import annotations

import logging
from datetime import date

import click

from cpr import __version__
from cpr.config import ConfigError, load_config
from cpr.config_google_ads import GoogleAdsConfigError, google_ads_yaml_path, load_client_credentials
from cpr.connectors.google_ads import GoogleAdsConnectorError, GoogleAdsSource, RetryPolicy
from cpr.connectors.google_sheets import GoogleSheetsConfigError, push_report_csv
from cpr.connectors.static import StaticSource, StaticSourceError
from cpr.date_range import DateRangeError, metrics_window, parse_date_range
from cpr.io_csv import reports_to_json, write_report_csv
from cpr.mappers import to_float, to_int
from cpr.oauth import OAuthSetupError, fetch_refresh_token, save_refresh_token
from cpr.report import CatalogFetchError, get_campaign_data, summarize
from cpr.store import upsert_reports


def _get_source(mode: str, fixture: str | None, google_ads_config: str | None, customer_id: str, cfg):
    """Return the campaign/metrics source for *mode*."""
    if mode == "dry":
        if not fixture:
            raise click.UsageError("--fixture is required in dry mode.")
        try:
            return StaticSource.from_yaml(fixture)
        except StaticSourceError as exc:
            raise click.ClickException(str(exc))

    try:
        return GoogleAdsSource.from_config(
            customer_id=customer_id,
            config_path=google_ads_config,
            retry_policy=RetryPolicy.from_config(cfg.retry_api),
        )
    except (GoogleAdsConfigError, GoogleAdsConnectorError) as exc:
        raise click.ClickException(str(exc))


def _load(config_path: str):
    try:
        return load_config(config_path)
    except (ConfigError, TypeError) as exc:
        raise click.ClickException(f"Invalid config {config_path}: {exc}")


def _print_report(reports) -> None:
    click.echo("")
    click.echo("=== OVERALL CAMPAIGN PERFORMANCE REPORT ===")
    click.echo("")
    for i, r in enumerate(reports, start=1):
        click.echo(f"{i}. {r.campaign_name} (ID: {r.campaign_id})")
        click.echo(f"   Start Date: {r.start_date}")
        click.echo(f"   End Date: {r.end_date}")
        click.echo(f"   Active Duration: {r.active_duration}")
        click.echo(f"   Total Cost: {r.total_cost}  (per day: {r.daily_avg_cost})")
        click.echo(f"   Total Conversions: {r.total_conversions}")
        click.echo(f"   Conversion Value: {r.total_conversions_value}")
        click.echo(f"   Impressions: {r.total_impressions:,}")
        click.echo(f"   Clicks: {r.total_clicks:,}")
        click.echo(f"   CTR: {r.ctr}")
        click.echo(f"   Avg CPC: {r.average_cpc}")
        click.echo(f"   Status: {r.status}")
        click.echo("   " + "-" * 50)

    totals = summarize(reports)
    click.echo("")
    click.echo("=== SUMMARY ===")
    click.echo(f"Total Campaigns: {totals.campaigns}")
    click.echo(f"Total Cost: ${totals.cost:,.2f}")
    click.echo(f"Total Conversions: {totals.conversions:,.2f}")
    click.echo(f"Total Conversion Value: ${totals.conversions_value:,.2f}")
    click.echo(f"Total Impressions: {totals.impressions:,}")
    click.echo(f"Total Clicks: {totals.clicks:,}")


@click.group()
@click.version_option(version=__version__, prog_name="cpr")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
def cli(log_level: str):
    """Campaign Performance Report: active-window aware Google Ads rollups."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--customer_id", required=True, help="Google Ads customer ID")
@click.option("--date_range", default=None, help="Predefined range (e.g. LAST_30_DAYS) or CUSTOM")
@click.option("--start", default=None, help="Custom range start, YYYY-MM-DD")
@click.option("--end", default=None, help="Custom range end, YYYY-MM-DD")
@click.option(
    "--mode",
    type=click.Choice(["live", "dry"]),
    default="live",
    show_default=True,
    help="live = Google Ads API; dry = fixture file",
)
@click.option("--fixture", default=None, help="Fixture YAML for dry mode")
@click.option("--out", "out_path", default=None, help="Write report CSV here")
@click.option("--store/--no-store", default=False, help="Upsert records into the report store")
@click.option("--json", "as_json", is_flag=True, help="Print records as JSON instead of the summary")
@click.option("--workers", type=int, default=None, help="Campaigns fetched in parallel")
@click.option("--config", "config_path", default="config.yaml", help="Config file path")
@click.option("--google_ads_config", default=None, help="Optional google-ads.yaml path")
def report(
    customer_id: str,
    date_range: str | None,
    start: str | None,
    end: str | None,
    mode: str,
    fixture: str | None,
    out_path: str | None,
    store: bool,
    as_json: bool,
    workers: int | None,
    config_path: str,
    google_ads_config: str | None,
):
    """Fetch, aggregate and print the per-campaign performance report."""
    cfg = _load(config_path)
    try:
        spec = parse_date_range(date_range, start, end)
    except DateRangeError as exc:
        raise click.BadParameter(str(exc))

    source = _get_source(mode, fixture, google_ads_config, customer_id, cfg)

    try:
        reports = get_campaign_data(
            customer_id,
            spec,
            catalog=source,
            metrics=source,
            max_workers=max(workers or cfg.report.max_workers, 1),
            exclude_statuses=cfg.report.exclude_statuses,
        )
    except CatalogFetchError as exc:
        raise click.ClickException(str(exc))

    if as_json:
        click.echo(reports_to_json(reports))
    else:
        _print_report(reports)

    if out_path:
        write_report_csv(reports, out_path)
        click.echo(f"✅ Wrote {len(reports)} campaigns to {out_path}", err=as_json)
    if store:
        updated, appended = upsert_reports(cfg.store.path, reports)
        click.echo(
            f"✅ Report store {cfg.store.path}: {updated} updated, {appended} new",
            err=as_json,
        )


@cli.command()
@click.option("--customer_id", required=True, help="Google Ads customer ID")
@click.option("--campaign_id", required=True, help="Campaign to list day by day")
@click.option("--date_range", default=None, help="Predefined range or CUSTOM")
@click.option("--start", default=None, help="Custom range start, YYYY-MM-DD")
@click.option("--end", default=None, help="Custom range end, YYYY-MM-DD")
@click.option("--mode", type=click.Choice(["live", "dry"]), default="live", show_default=True)
@click.option("--fixture", default=None, help="Fixture YAML for dry mode")
@click.option("--config", "config_path", default="config.yaml", help="Config file path")
@click.option("--google_ads_config", default=None, help="Optional google-ads.yaml path")
def daily(
    customer_id: str,
    campaign_id: str,
    date_range: str | None,
    start: str | None,
    end: str | None,
    mode: str,
    fixture: str | None,
    config_path: str,
    google_ads_config: str | None,
):
    """Print one campaign's daily clicks, conversions and cost."""
    cfg = _load(config_path)
    try:
        spec = parse_date_range(date_range, start, end)
    except DateRangeError as exc:
        raise click.BadParameter(str(exc))

    source = _get_source(mode, fixture, google_ads_config, customer_id, cfg)
    try:
        campaigns = source.list_campaigns(customer_id, cfg.report.exclude_statuses)
    except Exception as exc:
        raise click.ClickException(f"Campaign catalog fetch failed: {exc}")

    campaign = next((c for c in campaigns if c.campaign_id == str(campaign_id)), None)
    if campaign is None:
        raise click.ClickException(f"Campaign {campaign_id} not found for customer {customer_id}.")

    window = metrics_window(spec, campaign.start_date, date.today())
    if window is None:
        click.echo(f"Campaign {campaign_id} has no days in the requested range.")
        return

    try:
        rows = source.query(customer_id, campaign.campaign_id, *window)
    except Exception as exc:
        raise click.ClickException(f"Metrics query for campaign {campaign_id} failed: {exc}")

    click.echo(f"{campaign.name} (ID: {campaign.campaign_id}) {window[0]} to {window[1]}")
    for r in rows:
        click.echo(
            f"  Date: {r.date}, Clicks: {to_int(r.clicks)}, "
            f"Conversions: {to_float(r.conversions):.2f}, "
            f"Cost: {to_int(r.cost_micros) / 1_000_000:.2f}"
        )
    click.echo(f"Finished processing campaign {campaign.campaign_id}: {len(rows)} days.")


@cli.command("auth")
@click.option("--google_ads_config", default=None, help="google-ads.yaml holding client_id/client_secret")
@click.option("--port", type=int, default=8080, show_default=True, help="Local redirect port")
@click.option("--write/--no-write", default=False, help="Save the refresh token into google-ads.yaml")
def auth(google_ads_config: str | None, port: int, write: bool):
    """Run the browser OAuth flow and print a Google Ads refresh token."""
    try:
        client_id, client_secret = load_client_credentials(google_ads_config)
        token = fetch_refresh_token(client_id, client_secret, port=port)
    except (GoogleAdsConfigError, OAuthSetupError) as exc:
        raise click.ClickException(str(exc))

    if write:
        path = save_refresh_token(google_ads_yaml_path(google_ads_config), token)
        click.echo(f"✅ Refresh token saved to {path}")
    else:
        click.echo("✅ OAuth complete. Refresh token (store securely, do not commit):")
        click.echo(token)


@cli.group("sheets")
def sheets_group():
    """Google Sheets helper commands."""
    pass


@sheets_group.command("push")
@click.option("--spreadsheet_id", required=True, help="Target Google Sheet ID")
@click.option("--worksheet", required=True, help="Worksheet/tab name")
@click.option("--input", "input_path", required=True, help="Report CSV written by `cpr report --out`")
def sheets_push(spreadsheet_id: str, worksheet: str, input_path: str):
    """Push a report CSV to Google Sheets (optional connector)."""
    try:
        n = push_report_csv(spreadsheet_id, worksheet, input_path)
    except GoogleSheetsConfigError as exc:
        raise click.ClickException(str(exc))
    except Exception as exc:
        raise click.ClickException(f"Failed to push to Google Sheets: {exc}")

    click.echo(
        f"✅ Pushed {n} campaigns to worksheet '{worksheet}' in spreadsheet {spreadsheet_id}."
    )


if __name__ == "__main__":
    cli()
