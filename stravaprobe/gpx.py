# stravaprobe/gpx.py
from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from .errors import ApiError
from .logs import log

GPX_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<gpx version="1.1" creator="stravaprobe" xmlns="http://www.topografix.com/GPX/1/1" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xsi:schemaLocation="http://www.topografix.com/GPX/1/1 http://www.topografix.com/GPX/1/1/gpx.xsd">\n'
)


def _stream(streams: Dict[str, Any], key: str) -> List[Any]:
    s = streams.get(key) or {}
    if not isinstance(s, dict):
        return []
    return s.get("data") or []


def _start_epoch(start_date: Optional[str]) -> Optional[int]:
    # Strava: "2024-05-01T06:30:00Z"
    if not isinstance(start_date, str) or not start_date.endswith("Z"):
        return None
    try:
        dt = datetime.datetime.strptime(start_date, "%Y-%m-%dT%H:%M:%SZ")
    except ValueError:
        return None
    return int(dt.replace(tzinfo=datetime.timezone.utc).timestamp())


def _iso(epoch: int, offset: Any) -> str:
    ts = datetime.datetime.fromtimestamp(epoch + int(offset), tz=datetime.timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%SZ")


def _num(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def build_gpx_xml(name: str, streams: Dict[str, Any], start_date: Optional[str] = None) -> str:
    latlng = _stream(streams, "latlng")
    alt = _stream(streams, "altitude")
    times = _stream(streams, "time")
    start = _start_epoch(start_date)

    out = [GPX_HEADER]
    if start_date:
        out.append(f"  <metadata>\n    <time>{escape(str(start_date))}</time>\n  </metadata>\n")
    out.append(f"  <trk>\n    <name>{escape(name or '')}</name>\n    <trkseg>\n")
    for i, pair in enumerate(latlng):
        # Hopp over punkter uten gyldige koordinater (null i latlng-stream)
        if not isinstance(pair, (list, tuple)) or len(pair) != 2 or not all(_num(c) for c in pair):
            continue
        lat, lon = pair
        out.append(f'      <trkpt lat="{float(lat):.7f}" lon="{float(lon):.7f}">\n')
        if i < len(alt) and _num(alt[i]):
            out.append(f"        <ele>{float(alt[i]):.2f}</ele>\n")
        if start is not None and i < len(times) and _num(times[i]):
            out.append(f"        <time>{_iso(start, times[i])}</time>\n")
        out.append("      </trkpt>\n")
    out.append("    </trkseg>\n  </trk>\n</gpx>\n")
    return "".join(out)


def export_activities(client, activities: List[Dict[str, Any]], out_dir: Path) -> List[Path]:
    """
    Hent streams for hver aktivitet og skriv activity_<id>.gpx.
    Aktiviteter uten latlng (innendørs) hoppes over; ApiError på streams
    logges og hoppes over, alle andre feil propagerer.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for act in activities:
        aid = act.get("id")
        if aid is None:
            continue
        title = act.get("name") or ""
        try:
            streams = client.fetch_streams(aid)
        except ApiError as e:
            log("WARNING", "gpx.streams_failed", activity_id=aid, status=e.status)
            continue
        if not _stream(streams, "latlng"):
            log("INFO", "gpx.skip_no_latlng", activity_id=aid)
            continue
        path = out_dir / f"activity_{aid}.gpx"
        path.write_text(build_gpx_xml(title, streams, act.get("start_date")), encoding="utf-8")
        log("INFO", "gpx.saved", activity_id=aid, path=str(path))
        written.append(path)
    return written
