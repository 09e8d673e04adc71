"""Cache summaries for the popup and JSON export for the options view."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from mapchirp.cache.location_cache import LOADED_TIME_KEY, TOKEN_KEY

if TYPE_CHECKING:
    from mapchirp.cache.location_cache import LocationCache
    from mapchirp.cache.protocol import KeyValueStore


@dataclass(frozen=True)
class CacheStats:
    cached_locations: int
    loaded_at: datetime | None
    has_credential: bool


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, UTC).isoformat().replace("+00:00", "Z")


def cache_stats(store: KeyValueStore, cache: LocationCache) -> CacheStats:
    loaded = store.get(LOADED_TIME_KEY)
    loaded_at = None
    if isinstance(loaded, int | float) and not isinstance(loaded, bool):
        loaded_at = datetime.fromtimestamp(loaded / 1000, UTC)
    token = store.get(TOKEN_KEY)
    return CacheStats(
        cached_locations=cache.count(),
        loaded_at=loaded_at,
        has_credential=isinstance(token, str) and bool(token),
    )


def export_locations(cache: LocationCache, now: datetime | None = None) -> dict[str, Any]:
    """Every cached location (expired ones included, as stored) keyed by username."""
    exported_at = now or datetime.now(UTC)
    locations = {
        record.username: {"location": record.location, "cached_at": _isoformat(record.timestamp)}
        for record in cache.records(include_expired=True)
    }
    return {
        "export_date": exported_at.isoformat().replace("+00:00", "Z"),
        "total_locations": len(locations),
        "locations": locations,
    }
