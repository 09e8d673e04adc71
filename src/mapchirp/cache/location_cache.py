"""Location records on top of the flat key/value store.

Records live under ``loc_<username>`` as ``{"location": str, "timestamp": float}``.
Collaborators enumerate records by that prefix, so the key layout is part of
the public surface.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from mapchirp.domain.profile_record import ProfileRecord
from mapchirp.validation import is_valid_username, sanitize_location

if TYPE_CHECKING:
    from collections.abc import Callable

    from mapchirp.cache.protocol import KeyValueStore

logger = logging.getLogger(__name__)

LOCATION_KEY_PREFIX = "loc_"
TOKEN_KEY = "x_bearer_token"
LOADED_TIME_KEY = "extension_loaded_time"
SETTINGS_KEY = "settings"

DEFAULT_TTL_SECONDS = 24 * 60 * 60


def location_key(username: str) -> str:
    return f"{LOCATION_KEY_PREFIX}{username}"


def is_location_key(key: str) -> bool:
    return key.startswith(LOCATION_KEY_PREFIX)


def parse_record(key: str, value: Any) -> ProfileRecord | None:
    """Build a record from a stored entry, or None if the entry is malformed."""
    if not is_location_key(key) or not isinstance(value, dict):
        return None
    location = value.get("location")
    timestamp = value.get("timestamp")
    if not isinstance(location, str) or not location:
        return None
    if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
        return None
    return ProfileRecord(username=key[len(LOCATION_KEY_PREFIX) :], location=location, timestamp=float(timestamp))


class LocationCache:
    """TTL-bounded username → location cache.

    ``get`` never deletes; expired entries are left for the sweeper so the read
    path has no side effects.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, username: str) -> ProfileRecord | None:
        if not is_valid_username(username):
            return None
        key = location_key(username)
        # The sweeper may delete the entry at any point; absence is a miss.
        record = parse_record(key, self._store.get(key))
        if record is None:
            return None
        if not record.is_fresh(self._clock(), self._ttl_seconds):
            logger.debug("Cached location for %s has expired", username)
            return None
        return record

    def set(self, username: str, location: str) -> bool:
        """Write a record stamped with the current time.

        Returns False without writing when the username or location is invalid.
        """
        if not is_valid_username(username):
            logger.debug("Rejected cache write for invalid username %r", username)
            return False
        sanitized = sanitize_location(location)
        if sanitized is None:
            logger.debug("Rejected cache write for %s: unusable location %r", username, location)
            return False
        self._store.set({location_key(username): {"location": sanitized, "timestamp": self._clock()}})
        return True

    def clear(self, predicate: Callable[[str], bool] | None = None) -> int:
        """Remove location records whose key satisfies ``predicate``.

        Defaults to every key with the location prefix. Returns the number of
        keys removed.
        """
        keys = [key for key in self._store.keys(LOCATION_KEY_PREFIX) if predicate is None or predicate(key)]
        if keys:
            self._store.remove(keys)
            logger.info("Cleared %d cached locations", len(keys))
        return len(keys)

    def records(self, *, include_expired: bool = False) -> list[ProfileRecord]:
        now = self._clock()
        result: list[ProfileRecord] = []
        for key, value in self._store.items(LOCATION_KEY_PREFIX):
            record = parse_record(key, value)
            if record is None:
                continue
            if include_expired or record.is_fresh(now, self._ttl_seconds):
                result.append(record)
        return result

    def count(self) -> int:
        return len(self._store.keys(LOCATION_KEY_PREFIX))
