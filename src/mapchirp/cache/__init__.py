from mapchirp.cache.location_cache import LocationCache
from mapchirp.cache.protocol import KeyValueStore
from mapchirp.cache.sqlite_store import SqliteKeyValueStore
from mapchirp.cache.sweeper import EvictionSweeper

__all__ = ["EvictionSweeper", "KeyValueStore", "LocationCache", "SqliteKeyValueStore"]
