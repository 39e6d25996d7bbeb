# stravaprobe/strava_auth.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

from .errors import ApiError, ConfigurationError, DeserializationError
from .logs import log
from .settings import Settings
from .transport import Transport

TOKEN_URL = "https://www.strava.com/oauth/token"
AUTHORIZE_URL = "https://www.strava.com/oauth/authorize"
DEFAULT_SCOPE = "read,activity:read,activity:read_all"


@dataclass
class TokenResponse:
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    expires_in: Optional[int] = None
    token_type: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Any) -> "TokenResponse":
        if not isinstance(data, dict) or not data.get("access_token"):
            raise DeserializationError("Token response has no access_token")
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=data.get("refresh_token") or None,
            expires_at=data.get("expires_at"),
            expires_in=data.get("expires_in"),
            token_type=data.get("token_type"),
            raw=data,
        )


def authorize_url(client_id: str, redirect_uri: str, scope: str = DEFAULT_SCOPE) -> str:
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "approval_prompt": "auto",
        "scope": scope,
    }
    return f"{AUTHORIZE_URL}?{urlencode(params, safe=',:/')}"


def _require_client_credentials(settings: Settings) -> Tuple[str, str]:
    missing = []
    if not settings.client_id:     missing.append("STRAVA_CLIENT_ID")
    if not settings.client_secret: missing.append("STRAVA_CLIENT_SECRET")
    if missing:
        raise ConfigurationError("Missing " + ", ".join(missing) + ". Populate .env first.")
    return settings.client_id, settings.client_secret


def _post_token(transport: Transport, payload: Dict[str, Any], what: str) -> TokenResponse:
    log("INFO", "token.request", grant_type=payload.get("grant_type"))
    resp = transport.request("POST", TOKEN_URL, data=payload)
    if not resp.ok:
        raise ApiError(resp.status, resp.text, what=what)
    return TokenResponse.from_json(resp.json(what=what))


def exchange_code(settings: Settings, code: str, transport: Transport) -> TokenResponse:
    """Bytt authorization code -> access/refresh token (ett POST-kall)."""
    cid, csec = _require_client_credentials(settings)
    if not code:
        raise ConfigurationError("Authorization code is empty")
    payload = {
        "client_id": cid,
        "client_secret": csec,
        "code": code,
        "grant_type": "authorization_code",
    }
    return _post_token(transport, payload, "Token exchange")


def refresh_access_token(settings: Settings, refresh_token: str, transport: Transport) -> TokenResponse:
    cid, csec = _require_client_credentials(settings)
    if not refresh_token:
        raise ConfigurationError("Refresh token is empty")
    payload = {
        "client_id": cid,
        "client_secret": csec,
        "refresh_token": refresh_token,
        "grant_type": "refresh_token",
    }
    # Strava kan rotere refresh_token; kalleren må lagre det som skrives ut
    return _post_token(transport, payload, "Token refresh")


def exchange_client_credentials(settings: Settings, transport: Transport) -> TokenResponse:
    """
    Ikke-standard snarvei: client_id/secret uten authorization code.
    Strava støtter normalt ikke dette; virker bare med spesiell app-oppsett.
    """
    cid, csec = _require_client_credentials(settings)
    log("WARNING", "token.client_credentials",
        detail="client_credentials is not a standard Strava grant; prefer --exchange-code or --authorize")
    payload = {
        "client_id": cid,
        "client_secret": csec,
        "grant_type": "client_credentials",
    }
    return _post_token(transport, payload, "Client credentials exchange")


def resolve_access_token(settings: Settings, transport: Transport) -> Tuple[str, str]:
    """
    Returner (access_token, kilde). Rekkefølge:
      1) STRAVA_ACCESS_TOKEN
      2) client_id/secret -> client_credentials-bytte
      3) ConfigurationError (ingen nettverkskall)
    """
    if settings.access_token:
        log("INFO", "token.resolve", source="env")
        return settings.access_token, "env"

    if settings.has_client_credentials:
        token = exchange_client_credentials(settings, transport)
        log("INFO", "token.resolve", source="client_credentials")
        return token.access_token, "client_credentials"

    raise ConfigurationError(
        "No usable access token. Set STRAVA_ACCESS_TOKEN, or STRAVA_CLIENT_ID and "
        "STRAVA_CLIENT_SECRET, or run with --exchange-code / --authorize."
    )
