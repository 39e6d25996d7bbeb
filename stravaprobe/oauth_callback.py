# stravaprobe/oauth_callback.py
from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Optional
from urllib.parse import parse_qs, urlparse

from .errors import AuthorizationError
from .logs import log


class _Handler(BaseHTTPRequestHandler):
    server: "_CallbackHTTPServer"

    def do_GET(self):
        u = urlparse(self.path)
        if u.path != self.server.callback_path:
            self._reply(404, b"Not found")
            return
        q = parse_qs(u.query)
        code = q.get("code", [None])[0]
        error = q.get("error", [None])[0]

        if error:
            self.server.error = f"Authorization denied by Strava: {error}"
            self._reply(400, b"Authorization failed. You can close this tab.")
            self.server.done.set()
            return
        if not code:
            self._reply(400, b"Missing ?code= parameter")
            return

        self.server.code = code
        self._reply(200, b"You can close this tab. Code captured.")
        self.server.done.set()

    def _reply(self, status: int, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    # Query-strengen inneholder authorization code: logg bare path og status
    def log_request(self, code="-", size="-"):
        log("DEBUG", "oauth.callback_request", path=urlparse(self.path).path, status=code)

    def log_message(self, format, *args):
        log("DEBUG", "oauth.callback_error", path=urlparse(getattr(self, "path", "")).path)


class _CallbackHTTPServer(HTTPServer):
    def __init__(self, addr, callback_path: str):
        super().__init__(addr, _Handler)
        self.callback_path = callback_path
        self.code: Optional[str] = None
        self.error: Optional[str] = None
        self.done = threading.Event()


class CallbackServer:
    """
    Lokal HTTP-server som fanger ?code= fra Strava sin redirect.
    Kjører i en daemon-tråd til wait() returnerer eller close() kalles.
    """

    def __init__(self, host: str = "localhost", port: int = 8080, path: str = "/callback"):
        try:
            self._httpd = _CallbackHTTPServer((host, port), path or "/")
        except OSError as e:
            raise AuthorizationError(f"Cannot listen on {host}:{port} for OAuth callback: {e}") from e
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)

    @classmethod
    def from_redirect_uri(cls, redirect_uri: str) -> "CallbackServer":
        u = urlparse(redirect_uri)
        if u.scheme != "http" or not u.hostname:
            raise AuthorizationError(f"Redirect URI must be a local http:// URL, got {redirect_uri!r}")
        return cls(host=u.hostname, port=u.port or 80, path=u.path or "/")

    @property
    def port(self) -> int:
        return self._httpd.server_address[1]

    def start(self) -> "CallbackServer":
        self._thread.start()
        log("INFO", "oauth.listening", port=self.port, path=self._httpd.callback_path)
        return self

    def wait(self, timeout: float) -> str:
        if not self._httpd.done.wait(timeout):
            raise AuthorizationError(f"Timed out waiting for OAuth callback (no code received in {timeout:g}s).")
        if self._httpd.error:
            raise AuthorizationError(self._httpd.error)
        return self._httpd.code

    def close(self) -> None:
        if self._thread.is_alive():
            self._httpd.shutdown()
        self._httpd.server_close()

    def __enter__(self) -> "CallbackServer":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.close()
