"""
Unit tests for building_ops/cache.py

The fetcher and the clock are injected, so no HTTP request is made and time
is advanced by hand.
"""
import pytest

from building_ops.cache import RowCache
from building_ops.records import Record
from building_ops.row_source import SheetConfigError, SheetFetchError

DAY = 24 * 60 * 60
TTL = 30 * DAY


class FakeClock:

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeFetcher:
    """Records every call and returns a fresh list each time."""

    def __init__(self, records=None, error: Exception | None = None):
        self.records = records if records is not None else [
            Record(date="2025-06-15", floor="1", general_waste_kg=100),
            Record(date="2025-07-20", floor="2", general_waste_kg=50),
        ]
        self.error = error
        self.calls = []

    def __call__(self, sheet_id=None, gid=None):
        self.calls.append((sheet_id, gid))
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def cache(fetcher, clock):
    return RowCache(ttl_seconds=TTL, fetcher=fetcher, clock=clock)


# ─────────────────────────────────────────────────────────────────────────────
# 1. Key format
# ─────────────────────────────────────────────────────────────────────────────

class TestCacheKey:

    def test_with_gid(self):
        assert RowCache.cache_key("sheet", "42") == "sheet|42"

    @pytest.mark.parametrize("gid", [None, ""])
    def test_without_gid_uses_default(self, gid):
        assert RowCache.cache_key("sheet", gid) == "sheet|default"


# ─────────────────────────────────────────────────────────────────────────────
# 2. Hit / miss / expiry
# ─────────────────────────────────────────────────────────────────────────────

class TestGetRows:

    def test_first_call_fetches(self, cache, fetcher, clock):
        result = cache.get_rows(sheet_id="sheet")
        assert result.cached is False
        assert result.fetched_at == clock.now
        assert fetcher.calls == [("sheet", None)]

    def test_second_call_within_ttl_is_served_from_cache(self, cache, fetcher, clock):
        first = cache.get_rows(sheet_id="sheet", gid="1")
        clock.now += TTL - 1
        second = cache.get_rows(sheet_id="sheet", gid="1")

        assert second.cached is True
        assert second.records == first.records
        assert second.fetched_at == first.fetched_at
        assert len(fetcher.calls) == 1

    def test_entry_expires_at_ttl(self, cache, fetcher, clock):
        cache.get_rows(sheet_id="sheet")
        clock.now += TTL
        result = cache.get_rows(sheet_id="sheet")

        assert result.cached is False
        assert result.fetched_at == clock.now
        assert len(fetcher.calls) == 2

    def test_tabs_are_cached_separately(self, cache, fetcher):
        cache.get_rows(sheet_id="sheet", gid="1")
        cache.get_rows(sheet_id="sheet", gid="2")
        cache.get_rows(sheet_id="sheet")
        assert fetcher.calls == [("sheet", "1"), ("sheet", "2"), ("sheet", None)]

    def test_caller_edits_do_not_reach_cached_entry(self, cache):
        first = cache.get_rows(sheet_id="sheet")
        first.records.append(Record(date="2025-08-01", floor="3"))
        first.records.clear()

        assert len(cache.get_rows(sheet_id="sheet").records) == 2

    def test_sheet_id_falls_back_to_environment(self, cache, fetcher, monkeypatch):
        monkeypatch.setenv("SHEET_ID", "env-sheet")
        cache.get_rows()
        assert fetcher.calls == [("env-sheet", None)]

    def test_missing_sheet_id_raises_without_fetching(self, cache, fetcher, monkeypatch):
        monkeypatch.delenv("SHEET_ID", raising=False)
        with pytest.raises(SheetConfigError):
            cache.get_rows()
        assert fetcher.calls == []

    def test_fetch_error_is_not_cached(self, clock):
        failing = FakeFetcher(error=SheetFetchError(500))
        cache = RowCache(ttl_seconds=TTL, fetcher=failing, clock=clock)
        for _ in range(2):
            with pytest.raises(SheetFetchError):
                cache.get_rows(sheet_id="sheet")
        assert len(failing.calls) == 2
        assert cache.stats["entries"] == 0


# ─────────────────────────────────────────────────────────────────────────────
# 3. Month filter is applied after the cache
# ─────────────────────────────────────────────────────────────────────────────

class TestMonthFilter:

    def test_filtered_request_returns_only_that_month(self, cache):
        result = cache.get_rows(sheet_id="sheet", month=7, year=2025)
        assert [r.date for r in result.records] == ["2025-07-20"]

    def test_filtered_request_does_not_narrow_the_shared_entry(self, cache, fetcher):
        cache.get_rows(sheet_id="sheet", month=7, year=2025)
        result = cache.get_rows(sheet_id="sheet")

        assert result.cached is True
        assert len(result.records) == 2
        assert len(fetcher.calls) == 1


# ─────────────────────────────────────────────────────────────────────────────
# 4. Stats
# ─────────────────────────────────────────────────────────────────────────────

class TestStats:

    def test_counts_hits_and_misses(self, cache):
        cache.get_rows(sheet_id="sheet")
        cache.get_rows(sheet_id="sheet")
        cache.get_rows(sheet_id="sheet")
        assert cache.stats == {"hits": 2, "misses": 1, "hit_rate": 0.6667, "entries": 1}

    def test_empty_cache(self, cache):
        assert cache.stats == {"hits": 0, "misses": 0, "hit_rate": 0, "entries": 0}
