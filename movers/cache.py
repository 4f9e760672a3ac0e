"""In-memory, append-only cache with single-flight fetches per key.

Published movers lists for a past date never change, so entries are
written once and kept for the life of the process.  Two levels of locking:

* a structural lock guarding the key → entry dict, held only for the
  get-or-create step and never across I/O;
* a per-entry lock held for the whole producer call, so concurrent callers
  for the same key wait for one fetch instead of starting their own.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable

from movers.models import Stock
from movers.utils.logging import get_logger

log = get_logger(__name__)

CacheKey = str
Producer = Callable[[], Iterable[Stock]]


@dataclass
class CacheEntry:
    """Per-key state.  ``completed`` is set only after a successful fetch."""

    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    completed: bool = False
    result: tuple[Stock, ...] = ()


class FetchCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[CacheKey, CacheEntry] = {}

    def _entry(self, key: CacheKey) -> CacheEntry:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = CacheEntry()
                self._entries[key] = entry
            return entry

    def get_or_fetch(self, key: CacheKey, producer: Producer) -> tuple[Stock, ...]:
        """Return the cached result for *key*, running *producer* on a miss.

        Failures from *producer* propagate unchanged and are not cached; the
        next caller for *key* runs the producer again.
        """
        entry = self._entry(key)
        with entry.lock:
            if entry.completed:
                log.debug("cache_hit", key=key)
                return entry.result

            log.info("cache_miss", key=key)
            result = tuple(producer())
            entry.result = result
            entry.completed = True
            log.info("cache_stored", key=key, rows=len(result))
            return result

    def __len__(self) -> int:
        """Number of keys with a completed fetch."""
        with self._lock:
            entries = list(self._entries.values())
        return sum(1 for e in entries if e.completed)
