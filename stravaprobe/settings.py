# stravaprobe/settings.py
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_REDIRECT_URI = "http://localhost:8080/callback"
DEFAULT_HTTP_TIMEOUT = 15.0


# --- Helpere for miljøvariabler ---
def _env_str(name: str) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return None
    v = v.strip()
    return v or None


def _env_float(name: str, default: float) -> float:
    v = _env_str(name)
    if v is None:
        return default
    try:
        f = float(v)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {v!r}") from None
    if not math.isfinite(f) or f <= 0:
        raise ConfigurationError(f"{name} must be positive, got {v!r}")
    return f


@dataclass(frozen=True)
class Settings:
    client_id: Optional[str]
    client_secret: Optional[str]
    access_token: Optional[str]
    redirect_uri: str = DEFAULT_REDIRECT_URI
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"

    @property
    def has_client_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


def load_env(path: Optional[str] = None) -> bool:
    """
    Last .env fra arbeidsmappen (eller gitt path) inn i os.environ.
    Eksisterende miljøvariabler vinner (override=False).
    """
    env_path = Path(path) if path else Path.cwd() / ".env"
    if not env_path.is_file():
        return False
    return load_dotenv(dotenv_path=str(env_path), override=False)


def get_settings() -> Settings:
    return Settings(
        client_id=_env_str("STRAVA_CLIENT_ID"),
        client_secret=_env_str("STRAVA_CLIENT_SECRET"),
        access_token=_env_str("STRAVA_ACCESS_TOKEN"),
        redirect_uri=_env_str("STRAVA_REDIRECT_URI") or DEFAULT_REDIRECT_URI,
        http_timeout=_env_float("STRAVA_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        log_level=(_env_str("LOG_LEVEL") or "INFO").upper(),
    )
