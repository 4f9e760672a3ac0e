"""Shared pytest fixtures."""

from __future__ import annotations

import threading
from datetime import date
from pathlib import Path

import pytest

from movers.cache import FetchCache
from movers.errors import NetworkError
from movers.orchestrator import MoverGetter

_FIXTURES = Path(__file__).parent / "fixtures"

# Wednesday; every test date below is in or before 2024
FIXED_TODAY = date(2024, 3, 27)


def fixed_clock() -> date:
    return FIXED_TODAY


def load_fixture(name: str = "gainers_20210315.html") -> str:
    return (_FIXTURES / name).read_text(encoding="utf-8")


def make_table(rows: list[list[str]], header: list[str] | None = None) -> str:
    """Build a minimal movers page from cell strings."""
    header = header or ["", "Issue", "Price", "Chg", "% Chg", "Volume"]
    trs = [header, *rows]
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in tr) + "</tr>" for tr in trs
    )
    return f'<html><body><table class="mdcTable">{body}</table></body></html>'


class FakeFetcher:
    """Stands in for RemoteFetcher: counts calls, optionally fails or blocks."""

    def __init__(
        self,
        document: str | None = None,
        fail_times: int = 0,
        gate: threading.Event | None = None,
    ) -> None:
        self.document = document if document is not None else load_fixture()
        self.fail_times = fail_times
        self.gate = gate
        self.calls: list[str] = []
        self._lock = threading.Lock()
        self.closed = False

    def fetch(self, url: str) -> str:
        with self._lock:
            self.calls.append(url)
            n = len(self.calls)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if n <= self.fail_times:
            raise NetworkError(f"simulated failure #{n} for {url}")
        return self.document

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def clock():
    return fixed_clock


@pytest.fixture()
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture()
def getter(fake_fetcher: FakeFetcher) -> MoverGetter:
    """Isolated getter with its own cache and a fake fetcher."""
    return MoverGetter(cache=FetchCache(), fetcher=fake_fetcher, clock=fixed_clock)
