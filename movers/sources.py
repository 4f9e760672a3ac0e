"""Map a movers list and trading date to the remote page that publishes it."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from movers.dates import Clock, TradingDate, today, validate


class MoverList(str, Enum):
    """Lists of securities with significant price moves published by the WSJ.

    Both cover common stock, closed-end funds, ETFs, ETNs and REITs across
    NYSE, NASDAQ and Arca with a prior close of $2 or more and volume of at
    least 2,000 shares.
    """

    GAINERS = "gainers"
    LOSERS = "losers"


DEFAULT_TEMPLATES: dict[MoverList, str] = {
    MoverList.GAINERS: (
        "http://www.wsj.com/mdc/public/page/"
        "2_3021-gaincomp-gainer-{year:04d}{month:02d}{day:02d}.html?mod=mdc_pastcalendar"
    ),
    MoverList.LOSERS: (
        "http://www.wsj.com/mdc/public/page/"
        "2_3021-losecomp-loser-{year:04d}{month:02d}{day:02d}.html?mod=mdc_pastcalendar"
    ),
}


def locate(
    mover_list: MoverList,
    trading_date: TradingDate,
    templates: Mapping[MoverList, str] | None = None,
    clock: Clock = today,
) -> str:
    """Return the URL of *mover_list* for *trading_date*.

    The date is re-validated first, so an invalid date never yields a URL.
    """
    d = validate(trading_date.year, trading_date.month, trading_date.day, clock=clock)
    template = (templates or DEFAULT_TEMPLATES)[MoverList(mover_list)]
    return template.format(year=d.year, month=d.month, day=d.day)
