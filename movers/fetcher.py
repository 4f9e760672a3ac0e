"""requests-backed retrieval of movers pages with a total-time deadline."""

from __future__ import annotations

import re
import socket
import threading
import time
from typing import Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Timeout

from movers.errors import BadStatus, NetworkError
from movers.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = "movers/1.0"
_CHUNK_SIZE = 4 * 1024
_CHARSET_PATTERN = re.compile(r"charset\s*=\s*[\"']?([\w.:-]+)", re.IGNORECASE)

# Text when the server names a charset, otherwise raw bytes for the HTML
# parser to sniff from <meta charset>.
Document = Union[str, bytes]


def _declared_charset(content_type: str) -> str | None:
    m = _CHARSET_PATTERN.search(content_type or "")
    return m.group(1) if m else None


class _Watchdog:
    """Shut the response socket down once the deadline passes.

    A blocked ``recv`` in the reading thread wakes up with EOF or an error,
    so a slow server cannot hold the request past the deadline.
    """

    def __init__(self, resp: requests.Response, remaining: float) -> None:
        self._resp = resp
        self.fired = False
        self._timer = threading.Timer(max(remaining, 0.0), self._fire)
        self._timer.daemon = True

    def _fire(self) -> None:
        self.fired = True
        conn = getattr(self._resp.raw, "connection", None)
        sock = getattr(conn, "sock", None)
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # already closed by the reader
                pass

    def __enter__(self) -> "_Watchdog":
        self._timer.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._timer.cancel()


class RemoteFetcher:
    """Fetch raw HTML for a URL in a single attempt.

    The underlying ``requests.Session`` pools connections and is shared by
    every call; each call is otherwise independent.  *timeout* bounds the
    whole request (connect, headers and body transfer), not each socket read.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        pool_size: int = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            }
        )
        self._session = session

    def fetch(self, url: str) -> Document:
        """Return the body of *url*.

        The body is decoded only when ``Content-Type`` names a charset;
        otherwise the raw bytes are returned.

        Raises:
            NetworkError: Connection failure, timeout, or the deadline expired
                          while reading the body.
            BadStatus:    Any final status other than 200.
        """
        start = time.monotonic()
        deadline = start + self.timeout
        try:
            # total= caps connect plus the wait for response headers
            resp = self._session.get(url, timeout=Timeout(total=self.timeout), stream=True)
        except requests.RequestException as exc:
            log.warning("fetch_failed", url=url, error=str(exc))
            raise NetworkError(f"GET {url} failed: {exc}") from exc

        try:
            if resp.status_code != 200:
                log.warning("fetch_bad_status", url=url, status=resp.status_code)
                raise BadStatus(resp.status_code, resp.reason or "")
            with _Watchdog(resp, deadline - time.monotonic()) as watchdog:
                body = self._read_body(resp, url, deadline, watchdog)
        finally:
            resp.close()

        log.info(
            "fetch_complete",
            url=url,
            bytes=len(body),
            elapsed_ms=round((time.monotonic() - start) * 1000),
        )

        charset = _declared_charset(resp.headers.get("Content-Type", ""))
        if charset is None:
            return body
        try:
            return body.decode(charset, errors="replace")
        except LookupError:
            log.warning("fetch_unknown_charset", url=url, charset=charset)
            return body

    def _read_body(
        self, resp: requests.Response, url: str, deadline: float, watchdog: _Watchdog
    ) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
                if watchdog.fired or time.monotonic() > deadline:
                    break
                chunks.append(chunk)
        except requests.RequestException as exc:
            if not watchdog.fired:
                log.warning("fetch_failed", url=url, error=str(exc))
                raise NetworkError(f"GET {url} failed while reading body: {exc}") from exc

        # A shut-down socket can also end the stream cleanly
        if watchdog.fired or time.monotonic() > deadline:
            log.warning("fetch_deadline_exceeded", url=url, timeout=self.timeout)
            raise NetworkError(f"GET {url} exceeded {self.timeout}s deadline")
        return b"".join(chunks)

    def close(self) -> None:
        self._session.close()
