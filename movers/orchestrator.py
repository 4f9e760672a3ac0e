"""Pipeline coordinator wiring together locate → fetch → parse → cache."""

from __future__ import annotations

from typing import Mapping

from movers.cache import FetchCache
from movers.config import Config
from movers.dates import Clock, TradingDate, today
from movers.fetcher import RemoteFetcher
from movers.models import Stock
from movers.parser import parse
from movers.sources import MoverList, locate
from movers.utils.logging import get_logger

log = get_logger(__name__)


class MoverGetter:
    """Serve movers lists by date, fetching each (list, date) at most once.

    The cache and fetcher are injected so a process builds them once at
    startup and tests can build isolated instances.
    """

    def __init__(
        self,
        cache: FetchCache,
        fetcher: RemoteFetcher,
        templates: Mapping[MoverList, str] | None = None,
        clock: Clock = today,
    ) -> None:
        self.cache = cache
        self.fetcher = fetcher
        self.templates = templates
        self.clock = clock

    def get(self, mover_list: MoverList, trading_date: TradingDate) -> tuple[Stock, ...]:
        """Return the stocks on *mover_list* for *trading_date*.

        Raises:
            ValidationError: The date cannot be served.
            FetchError:      The page could not be retrieved.
            ParseError:      The page did not contain a well-formed table.
        """
        url = locate(mover_list, trading_date, templates=self.templates, clock=self.clock)

        def _produce() -> list[Stock]:
            stocks = parse(self.fetcher.fetch(url))
            log.info(
                "movers_fetched",
                list=MoverList(mover_list).value,
                date=trading_date.isoformat(),
                count=len(stocks),
            )
            return stocks

        return self.cache.get_or_fetch(url, _produce)


def build_getter(config: Config) -> MoverGetter:
    """Construct the process-wide getter from *config*."""
    fetcher = RemoteFetcher(
        timeout=config.fetch_timeout,
        user_agent=config.user_agent,
        pool_size=config.pool_size,
    )
    return MoverGetter(cache=FetchCache(), fetcher=fetcher, templates=config.templates)
