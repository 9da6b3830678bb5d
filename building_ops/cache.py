"""
cache.py – In-process TTL cache in front of the sheet row source.

Cache key format:  {sheet_id}|{gid or "default"}
Cache value:       the full record list of that tab + the epoch time it was fetched

Entries are replaced wholesale once older than the TTL; expiry is checked
lazily on read and there is no eviction API.  There is no lock: two misses
for the same key racing each other both fetch and the last write wins, which
is harmless because both results come from the same sheet.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from building_ops.constants import DEFAULT_TAB_KEY
from building_ops.records import Record
from building_ops.row_source import fetch_rows, filter_by_month, resolve_sheet_id

logger = logging.getLogger(__name__)

Fetcher = Callable[..., list[Record]]


@dataclass
class CachedRows:
    """Result of one cache lookup."""

    records: list[Record]
    fetched_at: float      # epoch seconds of the fetch that produced records
    cached: bool


@dataclass
class _Entry:
    records: list[Record]
    fetched_at: float


class RowCache:
    """Per-(sheet, tab) memo of fetch_rows() with a fixed time-to-live."""

    def __init__(
        self,
        ttl_seconds: float,
        fetcher: Fetcher = fetch_rows,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._fetcher = fetcher
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._hits = 0
        self._misses = 0

    @staticmethod
    def cache_key(sheet_id: str, gid: str | int | None = None) -> str:
        return f"{sheet_id}|{gid or DEFAULT_TAB_KEY}"

    def get_rows(
        self,
        sheet_id: str | None = None,
        gid: str | int | None = None,
        month: int | str | None = None,
        year: int | str | None = None,
    ) -> CachedRows:
        """
        Return the records of one sheet tab, fetching when missing or stale.

        The whole tab is cached; *month*/*year* filtering is applied to the
        returned copy so a filtered request never narrows the shared entry.

        Raises
        ------
        SheetConfigError, SheetFetchError
            Propagated from the row source on a miss.
        """
        sid = resolve_sheet_id(sheet_id)
        key = self.cache_key(sid, gid)
        now = self._clock()

        entry = self._entries.get(key)
        if entry is not None and now - entry.fetched_at < self.ttl_seconds:
            self._hits += 1
            logger.debug("Cache hit for %s", key)
            return CachedRows(
                records=filter_by_month(entry.records, month, year),
                fetched_at=entry.fetched_at,
                cached=True,
            )

        self._misses += 1
        logger.info("Cache %s for %s, fetching", "expired" if entry else "miss", key)
        records = self._fetcher(sheet_id=sid, gid=gid)
        self._entries[key] = _Entry(records=records, fetched_at=now)
        return CachedRows(
            records=filter_by_month(records, month, year),
            fetched_at=now,
            cached=False,
        )

    @property
    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 4) if total > 0 else 0,
            "entries": len(self._entries),
        }
