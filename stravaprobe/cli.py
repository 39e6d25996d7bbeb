# stravaprobe/cli.py
from __future__ import annotations

import json
import webbrowser
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .errors import ConfigurationError, StravaError
from .gpx import export_activities
from .logs import configure_logging, log
from .oauth_callback import CallbackServer
from .settings import Settings, get_settings, load_env
from .strava_auth import (
    TokenResponse,
    authorize_url,
    exchange_code,
    refresh_access_token,
    resolve_access_token,
)
from .strava_client import StravaClient
from .transport import RequestsTransport, Transport


def print_tokens(token: TokenResponse) -> None:
    click.echo(f"Access token: {token.access_token}")
    if token.refresh_token:
        click.echo(f"Refresh token: {token.refresh_token}")
    click.echo("Note: Save tokens securely. Do NOT commit them.")


def format_athlete(athlete: dict) -> str:
    return (
        f"Authenticated as athlete id={athlete.get('id', '')} "
        f"name={athlete.get('firstname') or ''} {athlete.get('lastname') or ''} "
        f"username={athlete.get('username') or ''}"
    )


def format_activities(activities: list) -> str:
    # Nøkkelrekkefølgen fra Strava beholdes (ingen sort_keys)
    return json.dumps(activities, ensure_ascii=False, indent=2)


def obtain_token_via_browser(settings: Settings, transport: Transport, timeout: float) -> str:
    """Åpne consent-URL, fang code på lokal callback og bytt den mot token."""
    if not settings.has_client_credentials:
        raise ConfigurationError("--authorize needs STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET.")
    url = authorize_url(settings.client_id, settings.redirect_uri)
    with CallbackServer.from_redirect_uri(settings.redirect_uri) as server:
        click.echo(f"Opening browser for OAuth: {url}")
        try:
            webbrowser.open(url)
        except webbrowser.Error:
            log("WARNING", "oauth.browser_unavailable")
        code = server.wait(timeout)
    token = exchange_code(settings, code, transport)
    click.echo("Obtained access token via OAuth.")
    return token.access_token


def run(
    settings: Settings,
    transport: Transport,
    *,
    exchange: Optional[str] = None,
    refresh: Optional[str] = None,
    authorize: bool = False,
    callback_timeout: float = 120.0,
    per_page: int = 5,
    page: int = 1,
    export_gpx: Optional[Path] = None,
) -> None:
    if exchange is not None:
        print_tokens(exchange_code(settings, exchange, transport))
        return
    if refresh is not None:
        print_tokens(refresh_access_token(settings, refresh, transport))
        return

    if authorize:
        token = obtain_token_via_browser(settings, transport, callback_timeout)
    else:
        token, _source = resolve_access_token(settings, transport)

    client = StravaClient(token, transport=transport)

    athlete = client.fetch_profile()
    click.echo(format_athlete(athlete))

    activities = client.fetch_activities(per_page=per_page, page=page)
    click.echo("Recent activities (JSON):")
    click.echo(format_activities(activities))

    if export_gpx is not None:
        for path in export_activities(client, activities, export_gpx):
            click.echo(f"Saved GPX: {path}")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--exchange-code", "exchange", metavar="CODE",
              help="Exchange an OAuth authorization code for tokens, print them and exit.")
@click.option("--refresh-token", "refresh", metavar="TOKEN",
              help="Exchange a refresh token for new tokens, print them and exit.")
@click.option("--authorize", is_flag=True,
              help="Run the browser OAuth flow with a local callback server to get a token.")
@click.option("--callback-timeout", type=click.FloatRange(min=0, min_open=True), default=120.0,
              show_default=True, help="Seconds to wait for the OAuth callback.")
@click.option("--per-page", type=click.IntRange(min=1), default=5, show_default=True,
              help="Page size for the activities list.")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True,
              help="Page number for the activities list.")
@click.option("--export-gpx", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Write a GPX track per listed activity into this folder.")
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Dotenv file to load instead of ./.env.")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=None, help="Overrides LOG_LEVEL.")
@click.version_option(__version__, prog_name="stravaprobe")
def main(exchange, refresh, authorize, callback_timeout, per_page, page, export_gpx, env_file, log_level):
    """Fetch the authenticated Strava athlete and recent activities."""
    modes = [name for name, on in (("--exchange-code", exchange is not None),
                                   ("--refresh-token", refresh is not None),
                                   ("--authorize", authorize)) if on]
    if len(modes) > 1:
        raise click.UsageError(f"{' and '.join(modes)} cannot be combined.")

    load_env(env_file)
    configure_logging(log_level)
    try:
        settings = get_settings()
        if not log_level:
            configure_logging(settings.log_level)
        with RequestsTransport(timeout=settings.http_timeout) as transport:
            run(
                settings,
                transport,
                exchange=exchange,
                refresh=refresh,
                authorize=authorize,
                callback_timeout=callback_timeout,
                per_page=per_page,
                page=page,
                export_gpx=export_gpx,
            )
    except StravaError as e:
        log("ERROR", "cli.failed", error=type(e).__name__)
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(e.exit_code)


if __name__ == "__main__":
    main()
