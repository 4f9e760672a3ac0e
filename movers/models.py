"""Record types produced by the table parser."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Stock:
    """One row of a movers list: an equity and its move for the day."""

    ticker: str
    name: str
    price: float
    pct_change: float
    volume: int

    def to_dict(self) -> dict[str, Any]:
        """JSON shape served by the API."""
        return {
            "ticker": self.ticker,
            "instrument": self.name,
            "price": self.price,
            "percentChange": self.pct_change,
            "volume": self.volume,
        }
