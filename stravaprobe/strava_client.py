# stravaprobe/strava_client.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .errors import ApiError, DeserializationError
from .logs import log
from .transport import RequestsTransport, Transport

API_BASE = "https://www.strava.com/api/v3"
STREAM_KEYS = ("latlng", "time", "altitude")


class StravaClient:
    """
    Tynn, tilstandsløs klient mot Strava API v3.
    Bearer-headeren legges på hvert kall; transporten gjenbrukes.
    """

    def __init__(
        self,
        access_token: str,
        transport: Optional[Transport] = None,
        base_url: str = API_BASE,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.transport = transport or RequestsTransport()
        self._headers = {"Authorization": f"Bearer {access_token}"}

    def _get(self, path: str, what: str, params=None) -> Any:
        url = f"{self.base_url}{path}"
        resp = self.transport.request("GET", url, params=params, headers=dict(self._headers))
        if not resp.ok:
            log("ERROR", "api.error", url=url, status=resp.status)
            raise ApiError(resp.status, resp.text, what=what)
        return resp.json(what=what)

    def fetch_profile(self) -> Dict[str, Any]:
        data = self._get("/athlete", "Athlete request")
        if not isinstance(data, dict):
            raise DeserializationError(f"Athlete request: expected JSON object, got {type(data).__name__}")
        log("INFO", "api.athlete", athlete_id=data.get("id"))
        return data

    def fetch_activities(self, per_page: int = 5, page: int = 1) -> List[Dict[str, Any]]:
        if per_page < 1 or page < 1:
            raise ValueError("per_page and page must be positive integers")
        # Liste av tupler: rekkefølgen per_page, page beholdes i query-strengen
        params = [("per_page", per_page), ("page", page)]
        data = self._get("/athlete/activities", "Activities request", params=params)
        if not isinstance(data, list):
            raise DeserializationError(f"Activities request: expected JSON array, got {type(data).__name__}")
        log("INFO", "api.activities", count=len(data), per_page=per_page, page=page)
        return data

    def fetch_streams(self, activity_id: Any, keys: Iterable[str] = STREAM_KEYS) -> Dict[str, Any]:
        params = [("keys", ",".join(keys)), ("key_by_type", "true")]
        data = self._get(f"/activities/{activity_id}/streams", f"Streams request for {activity_id}", params=params)
        if not isinstance(data, dict):
            raise DeserializationError(f"Streams request for {activity_id}: expected JSON object")
        return data
