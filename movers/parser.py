"""Parse a movers HTML page into Stock records with BeautifulSoup.

The page carries a single ``<table class="mdcTable">``: one header row
followed by one row per security, six cells each::

    rank | Name (TICKER) | price | change | % change | volume

Parsing is all-or-nothing: the first bad row aborts the whole document.
"""

from __future__ import annotations

import re
from typing import Iterator

from bs4 import BeautifulSoup, Tag

from movers.errors import (
    ColumnCountMismatch,
    MalformedDocument,
    NameTickerFormat,
    NumericParseError,
)
from movers.models import Stock
from movers.utils.logging import get_logger

log = get_logger(__name__)

TABLE_TAG = "table"
TABLE_CLASS = "mdcTable"
EXPECTED_COLUMNS = 6

_COL_NAME = 1
_COL_PRICE = 2
_COL_PCT_CHANGE = 4
_COL_VOLUME = 5

_NAME_TICKER_PATTERN = re.compile(r"(.+)\s\((.+)\)")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def _iter_rows(document: str | bytes) -> Iterator[Tag]:
    """Yield the data rows of the movers table in document order, header skipped."""
    soup = BeautifulSoup(document, "html.parser")
    table = soup.find(TABLE_TAG, class_=TABLE_CLASS)
    if table is None:
        raise MalformedDocument(f"no <{TABLE_TAG} class={TABLE_CLASS!r}> in document")
    rows = iter(table.find_all("tr"))
    next(rows, None)
    yield from rows


def _numeric_text(raw: str) -> str:
    """Strip currency symbols, separators, percent signs and whitespace."""
    return _NON_NUMERIC.sub("", raw)


def _to_float(raw: str, column: str) -> float:
    text = _numeric_text(raw)
    try:
        return float(text)
    except ValueError as exc:
        raise NumericParseError(f"cannot parse {column} from {raw!r}") from exc


def _to_int(raw: str, column: str) -> int:
    text = _numeric_text(raw)
    try:
        return int(text)
    except ValueError as exc:
        raise NumericParseError(f"cannot parse {column} from {raw!r}") from exc


def _row_to_stock(cells: list[str]) -> Stock:
    if len(cells) != EXPECTED_COLUMNS:
        raise ColumnCountMismatch(f"expected {EXPECTED_COLUMNS} columns, got {len(cells)}")

    m = _NAME_TICKER_PATTERN.search(cells[_COL_NAME].strip())
    if m is None:
        raise NameTickerFormat(f"expected 'name (ticker)', got {cells[_COL_NAME]!r}")
    name, ticker = m.group(1), m.group(2)

    price = _to_float(cells[_COL_PRICE], "price")
    pct_change = _to_float(cells[_COL_PCT_CHANGE], "percent change")
    volume = _to_int(cells[_COL_VOLUME], "volume")

    if price < 0:
        raise NumericParseError(f"negative price {price} for {ticker}")
    if volume < 0:
        raise NumericParseError(f"negative volume {volume} for {ticker}")

    return Stock(ticker=ticker, name=name, price=price, pct_change=pct_change, volume=volume)


def parse(document: str | bytes) -> list[Stock]:
    """Return every Stock in *document*, in the order the page lists them.

    Bytes are decoded by BeautifulSoup, which honours the page's own
    ``<meta charset>`` declaration.

    Raises:
        MalformedDocument:   The movers table is missing.
        ColumnCountMismatch: A data row does not have exactly six cells.
        NameTickerFormat:    The name cell is not ``Name (TICKER)``.
        NumericParseError:   Price, percent change or volume is unparseable
                             or negative where it must not be.
    """
    stocks: list[Stock] = []
    for row in _iter_rows(document):
        cells = [td.get_text() for td in row.find_all("td")]
        stocks.append(_row_to_stock(cells))
    log.debug("parse_complete", rows=len(stocks))
    return stocks
