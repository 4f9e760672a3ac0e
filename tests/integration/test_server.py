"""Integration tests for the HTTP API: real threaded server on an ephemeral port."""

from __future__ import annotations

import threading
from typing import Generator

import pytest
import requests

from movers.cache import FetchCache
from movers.orchestrator import MoverGetter
from movers.server import make_server
from tests.conftest import FakeFetcher, fixed_clock

# Talk to the local server directly, ignoring any proxy settings in the environment
_http = requests.Session()
_http.trust_env = False


class _Served:
    def __init__(self, base_url: str, fetcher: FakeFetcher) -> None:
        self.base_url = base_url
        self.fetcher = fetcher


def _serve(fetcher: FakeFetcher) -> Generator[_Served, None, None]:
    getter = MoverGetter(cache=FetchCache(), fetcher=fetcher, clock=fixed_clock)
    server = make_server(getter, host="127.0.0.1", port=0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield _Served(f"http://127.0.0.1:{server.server_address[1]}", fetcher)
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture()
def api() -> Generator[_Served, None, None]:
    yield from _serve(FakeFetcher())


@pytest.fixture()
def failing_api() -> Generator[_Served, None, None]:
    yield from _serve(FakeFetcher(fail_times=100))


def test_gainers_returns_json_records(api: _Served) -> None:
    resp = _http.get(f"{api.base_url}/gainers/2021-03-15", timeout=5)
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "application/json"
    body = resp.json()
    assert body[0] == {
        "ticker": "ACME",
        "instrument": "Acme Corp",
        "price": 12.34,
        "percentChange": 5.67,
        "volume": 1234,
    }
    assert len(body) == 3


def test_losers_route_and_single_digit_segments(api: _Served) -> None:
    resp = _http.get(f"{api.base_url}/losers/2021-3-5", timeout=5)
    assert resp.status_code == 200
    assert "losecomp-loser-20210305" in api.fetcher.calls[0]


def test_repeat_requests_hit_cache(api: _Served) -> None:
    for _ in range(3):
        assert _http.get(f"{api.base_url}/gainers/2021-03-15", timeout=5).status_code == 200
    assert len(api.fetcher.calls) == 1
    health = _http.get(f"{api.base_url}/health", timeout=5).json()
    assert health == {"status": "ok", "cached_keys": 1}


@pytest.mark.parametrize(
    "path",
    [
        "/gainers/2021-03-13",  # Saturday
        "/gainers/2021-02-30",  # no such day
        "/losers/2009-12-31",   # before the archive starts
        "/losers/2099-01-02",   # after the current year
    ],
)
def test_validation_errors_are_400(api: _Served, path: str) -> None:
    resp = _http.get(f"{api.base_url}{path}", timeout=5)
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert api.fetcher.calls == []


def test_downstream_failure_is_424(failing_api: _Served) -> None:
    resp = _http.get(f"{failing_api.base_url}/gainers/2021-03-15", timeout=5)
    assert resp.status_code == 424
    assert "simulated failure" in resp.json()["error"]


@pytest.mark.parametrize("path", ["/", "/gainers", "/gainers/1999-01-04", "/movers/2021-03-15", "/gainers/2021-003-15"])
def test_unknown_routes_are_404(api: _Served, path: str) -> None:
    assert _http.get(f"{api.base_url}{path}", timeout=5).status_code == 404
