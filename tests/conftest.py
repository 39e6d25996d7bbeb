# tests/conftest.py
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest

# Sørg for at prosjektets rot er på sys.path slik at imports fungerer i tester
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from stravaprobe.transport import HttpResponse  # noqa: E402


ENV_VARS = (
    "STRAVA_CLIENT_ID",
    "STRAVA_CLIENT_SECRET",
    "STRAVA_ACCESS_TOKEN",
    "STRAVA_REDIRECT_URI",
    "STRAVA_HTTP_TIMEOUT",
    "LOG_LEVEL",
)


@dataclass
class Call:
    method: str
    url: str
    params: Any = None
    data: Optional[Dict[str, Any]] = None
    headers: Optional[Dict[str, str]] = None


class FakeTransport:
    """
    Spiller av køede HttpResponse-objekter i rekkefølge og logger alle kall.
    Et kall uten kø-svar gir 599 slik at uventede kall blir synlige.
    """

    def __init__(self, responses=None):
        self.responses: List[HttpResponse] = list(responses or [])
        self.calls: List[Call] = []

    def add(self, status: int, body: Any = None) -> "FakeTransport":
        text = body if isinstance(body, str) else json.dumps(body)
        self.responses.append(HttpResponse(status=status, text=text))
        return self

    def request(self, method, url, *, params=None, data=None, headers=None):
        self.calls.append(Call(method, url, params, data, headers))
        if not self.responses:
            return HttpResponse(status=599, text="unexpected call")
        return self.responses.pop(0)

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


# --- Generelle fixtures ------------------------------------------------------

@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Fjern STRAVA_* fra miljøet og kjør i en tom mappe (ingen tilfeldig .env).
    """
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def athlete_json() -> Dict[str, Any]:
    return {"id": 1234567, "username": "kari_n", "firstname": "Kari", "lastname": "Nordmann", "city": "Bergen"}


@pytest.fixture
def activities_json() -> List[Dict[str, Any]]:
    # Bevisst usortert nøkkelrekkefølge: utskriften skal beholde den
    return [
        {
            "name": "Morgentur Fløyen",
            "id": 111,
            "distance": 12034.5,
            "moving_time": 2710,
            "type": "Ride",
            "start_date": "2024-05-01T06:30:00Z",
        },
        {
            "type": "Run",
            "id": 112,
            "name": "Intervaller",
            "distance": 8000.0,
            "moving_time": 2400,
            "start_date": "2024-05-02T17:05:00Z",
        },
    ]


@pytest.fixture(autouse=True)
def _reset_logger():
    # CLI-tester binder handler til CliRunner sin stderr; fjern den etter hver test
    yield
    lg = logging.getLogger("stravaprobe")
    for h in list(lg.handlers):
        lg.removeHandler(h)
    lg.propagate = True
    lg.setLevel(logging.NOTSET)
