"""Calendar-date validation for movers requests: pure, no I/O."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable

from movers.errors import InvalidDate, WeekendUnavailable

Clock = Callable[[], date]

# First year the archive publishes movers lists for
MIN_YEAR = 2010

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def today() -> date:
    return date.today()


@dataclass(frozen=True)
class TradingDate:
    """A validated weekday between 2010-01-01 and the end of the current year."""

    year: int
    month: int
    day: int

    def as_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


def validate(year: int, month: int, day: int, clock: Clock = today) -> TradingDate:
    """Return a TradingDate for the triple, or raise.

    Raises:
        InvalidDate:        Not a real calendar date, or the year is before
                            2010 or after the current year per *clock*.
        WeekendUnavailable: The date falls on a Saturday or Sunday.
    """
    try:
        d = date(year, month, day)
    except (TypeError, ValueError) as exc:
        raise InvalidDate(f"invalid date {year}-{month}-{day}: {exc}") from exc

    if year < MIN_YEAR or year > clock().year:
        raise InvalidDate(f"invalid year {year}")

    if d.weekday() >= 5:
        raise WeekendUnavailable("Movers data is not available on weekends")

    return TradingDate(year=year, month=month, day=day)


def parse_date(text: str, clock: Clock = today) -> TradingDate:
    """Parse ``YYYY-MM-DD`` (one-digit month/day allowed) and validate it."""
    m = _DATE_PATTERN.match(text.strip())
    if m is None:
        raise InvalidDate(f"expected YYYY-MM-DD, got {text!r}")
    year, month, day = (int(g) for g in m.groups())
    return validate(year, month, day, clock=clock)
