# stravaprobe/transport.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple, Union

import requests

from . import __version__
from .errors import DeserializationError, NetworkError
from .logs import log

USER_AGENT = f"stravaprobe/{__version__}"

Params = Union[Dict[str, Any], Sequence[Tuple[str, Any]], None]


@dataclass
class HttpResponse:
    status: int
    text: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self, what: str = "Response") -> Any:
        try:
            return json.loads(self.text)
        except ValueError as e:
            raise DeserializationError(f"{what}: body is not valid JSON ({e})") from e


class Transport(Protocol):
    def request(
        self,
        method: str,
        url: str,
        *,
        params: Params = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse: ...


class RequestsTransport:
    """Én gjenbrukbar requests.Session for alle kall (TLS via requests-defaults)."""

    def __init__(self, timeout: float = 15.0, session: Optional[requests.Session] = None):
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = USER_AGENT
        self._timeout = timeout

    def request(self, method, url, *, params=None, data=None, headers=None) -> HttpResponse:
        log("DEBUG", "http.request", method=method, url=url)
        try:
            r = self._session.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e
        log("DEBUG", "http.response", method=method, url=url, status=r.status_code)
        return HttpResponse(status=r.status_code, text=r.text, headers=dict(r.headers))

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
