# stravaprobe/errors.py
from __future__ import annotations

from typing import Optional


class StravaError(RuntimeError):
    """Felles base for alle feil CLI-en rapporterer til terminalen."""

    exit_code = 1


class ConfigurationError(StravaError):
    exit_code = 2


class NetworkError(StravaError):
    pass


class AuthorizationError(StravaError):
    pass


class DeserializationError(StravaError):
    pass


_HINTS = {
    401: "401 means the token is invalid, expired, or lacks the required scopes "
         "(e.g. 'activity:read'). Regenerate it via OAuth with the correct scopes.",
    403: "403 means the application is not allowed to access this resource.",
}


class ApiError(StravaError):
    """Non-2xx svar fra Strava. Beholder status og rå body for diagnostikk."""

    def __init__(self, status: int, body: str, what: str = "Request") -> None:
        self.status = status
        self.body = body
        self.what = what
        super().__init__(self._format())

    @property
    def hint(self) -> Optional[str]:
        return _HINTS.get(self.status)

    def _format(self) -> str:
        msg = f"{self.what} failed: status={self.status} body={self.body}"
        if self.hint:
            msg += f"\nHint: {self.hint}"
        return msg
