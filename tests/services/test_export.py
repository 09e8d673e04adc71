from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from mapchirp.services.export import cache_stats, export_locations

if TYPE_CHECKING:
    from mapchirp.cache.location_cache import LocationCache
    from mapchirp.cache.sqlite_store import SqliteKeyValueStore
    from tests.helpers import FakeClock


class TestCacheStats:
    def test_empty_store(self, store: SqliteKeyValueStore, cache: LocationCache) -> None:
        stats = cache_stats(store, cache)
        assert stats.cached_locations == 0
        assert stats.loaded_at is None
        assert stats.has_credential is False

    def test_counts_and_instrumentation(self, store: SqliteKeyValueStore, cache: LocationCache) -> None:
        cache.set("alice", "Paris")
        cache.set("bob", "Rome")
        store.set({"extension_loaded_time": 1_700_000_000_000, "x_bearer_token": "Bearer a"})
        stats = cache_stats(store, cache)
        assert stats.cached_locations == 2
        assert stats.loaded_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
        assert stats.has_credential is True


class TestExportLocations:
    def test_export_layout(self, cache: LocationCache, clock: FakeClock) -> None:
        clock.now = 1_700_000_000.0
        cache.set("alice", "Paris")
        data = export_locations(cache, now=datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC))
        assert data == {
            "export_date": "2024-01-02T03:04:05Z",
            "total_locations": 1,
            "locations": {"alice": {"location": "Paris", "cached_at": "2023-11-14T22:13:20Z"}},
        }

    def test_export_empty(self, cache: LocationCache) -> None:
        data = export_locations(cache)
        assert data["total_locations"] == 0
        assert data["locations"] == {}
