# stravaprobe/logs.py
from __future__ import annotations

import json
import logging
import sys
from typing import Optional

LOGGER_NAME = "stravaprobe"

# Standardfelter på LogRecord; alt annet i __dict__ kommer fra extra=...
_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

_LOG = logging.getLogger(LOGGER_NAME)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {"level": record.levelname}
        msg = record.getMessage()
        if msg:
            payload["detail"] = msg
        for k, v in record.__dict__.items():
            if k not in _RESERVED:
                payload[k] = v
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None, stream=None) -> logging.Logger:
    """
    Sett opp JSON-logger på STDERR. Kalles én gang fra CLI-en;
    STDOUT er reservert for resultatene.
    """
    lvl = (level or "INFO").upper()
    for h in list(_LOG.handlers):
        _LOG.removeHandler(h)
    h = logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(JsonFormatter())
    _LOG.addHandler(h)
    _LOG.setLevel(getattr(logging, lvl, logging.INFO))
    _LOG.propagate = False
    return _LOG


def log(level: str, step: str, **kwargs) -> None:
    # NB: ikke bruk 'msg', 'message' eller 'name' i kwargs (reservert i LogRecord)
    _LOG.log(getattr(logging, level.upper(), logging.INFO), "", extra={"step": step, **kwargs})
