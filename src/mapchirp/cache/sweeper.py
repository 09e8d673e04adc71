"""Periodic eviction of expired location records."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from mapchirp.cache.location_cache import DEFAULT_TTL_SECONDS, LOCATION_KEY_PREFIX

if TYPE_CHECKING:
    from collections.abc import Callable

    from mapchirp.cache.protocol import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60


class EvictionSweeper:
    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._interval_seconds = interval_seconds
        self._clock = clock

    def sweep(self) -> int:
        """Remove location records older than the TTL.

        Entries without a numeric timestamp are left alone. Any failure ends
        the pass early and reports nothing removed; the next pass retries.
        """
        try:
            now = self._clock()
            expired: list[str] = []
            for key, value in self._store.items(LOCATION_KEY_PREFIX):
                if not isinstance(value, dict):
                    continue
                timestamp = value.get("timestamp")
                if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
                    continue
                if now - timestamp > self._ttl_seconds:
                    expired.append(key)
            if expired:
                self._store.remove(expired)
        except Exception:
            logger.warning("Cache sweep failed, will retry next interval", exc_info=True)
            return 0

        logger.debug("Cache sweep removed %d expired records", len(expired))
        return len(expired)

    async def run(self) -> None:
        """Sweep now, then every interval until cancelled."""
        while True:
            self.sweep()
            await asyncio.sleep(self._interval_seconds)
