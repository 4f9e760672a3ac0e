"""HTTP API: ``GET /gainers/YYYY-MM-DD``, ``GET /losers/YYYY-MM-DD`` and ``/health``."""

from __future__ import annotations

import json
import re
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from movers.dates import validate
from movers.errors import MoversError, ValidationError
from movers.orchestrator import MoverGetter
from movers.sources import MoverList
from movers.utils.logging import get_logger

log = get_logger(__name__)

_ROUTE = re.compile(
    r"^/(?P<list>gainers|losers)/"
    r"(?P<year>20[0-9]{2})-(?P<month>[01]?[0-9])-(?P<day>[0-3]?[0-9])/?$"
)


class MoversHandler(BaseHTTPRequestHandler):
    getter: MoverGetter

    def log_message(self, format: str, *args: object) -> None:
        # Suppress access logs to avoid polluting structlog JSON output
        pass

    def _send_json(self, status: HTTPStatus, payload: Any) -> None:
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:
        path = self.path.split("?", 1)[0]
        if path == "/health":
            self._send_json(HTTPStatus.OK, {"status": "ok", "cached_keys": len(self.getter.cache)})
            return

        m = _ROUTE.match(path)
        if m is None:
            self._send_json(HTTPStatus.NOT_FOUND, {"error": "not found"})
            return

        mover_list = MoverList(m["list"])
        try:
            trading_date = validate(
                int(m["year"]), int(m["month"]), int(m["day"]), clock=self.getter.clock
            )
            stocks = self.getter.get(mover_list, trading_date)
        except ValidationError as exc:
            log.info("request_rejected", path=path, error=str(exc))
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": str(exc)})
            return
        except MoversError as exc:
            log.error("request_failed", path=path, error=str(exc), error_type=type(exc).__name__)
            self._send_json(HTTPStatus.FAILED_DEPENDENCY, {"error": str(exc)})
            return

        self._send_json(HTTPStatus.OK, [s.to_dict() for s in stocks])
        log.info("request_served", path=path, count=len(stocks))


def make_server(getter: MoverGetter, host: str = "0.0.0.0", port: int = 8080) -> ThreadingHTTPServer:
    """Bind a threaded server whose handlers share *getter*."""
    handler = type("BoundMoversHandler", (MoversHandler,), {"getter": getter})
    server = ThreadingHTTPServer((host, port), handler)
    server.daemon_threads = True
    return server


def serve_forever(getter: MoverGetter, host: str = "0.0.0.0", port: int = 8080) -> None:
    server = make_server(getter, host, port)
    log.info("server_started", host=host, port=server.server_address[1])
    try:
        server.serve_forever()
    finally:
        server.server_close()
        getter.fetcher.close()
