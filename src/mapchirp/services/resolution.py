"""Cache-first username → location resolution."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from mapchirp.extractor import extract
from mapchirp.validation import is_valid_username

if TYPE_CHECKING:
    from collections.abc import Callable

    from mapchirp.cache.location_cache import LocationCache
    from mapchirp.fetcher import ProfileFetcher

logger = logging.getLogger(__name__)


class ResolutionService:
    """Single entry point for turning a username into a location.

    Steps run strictly in order: validate, cache lookup, fetch, extract, cache
    write. Misses are not remembered, so the next call for an unresolved
    username fetches again.

    With ``coalesce=False`` concurrent misses for one username each fetch
    independently and the last cache write wins. With ``coalesce=True`` they
    share one in-flight resolution.
    """

    def __init__(
        self,
        cache: LocationCache,
        fetcher: ProfileFetcher,
        *,
        extractor: Callable[[str], str | None] = extract,
        coalesce: bool = False,
    ) -> None:
        self._cache = cache
        self._fetcher = fetcher
        self._extractor = extractor
        self._coalesce = coalesce
        self._in_flight: dict[str, asyncio.Future[str | None]] = {}

    async def resolve(self, username: str) -> str | None:
        if not is_valid_username(username):
            return None

        cached = self._cache.get(username)
        if cached is not None:
            logger.debug("Cache hit for %s", username)
            return cached.location

        if not self._coalesce:
            return await self._fetch_and_store(username)

        pending = self._in_flight.get(username)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch_and_store(username))
            self._in_flight[username] = pending
            pending.add_done_callback(lambda _f: self._in_flight.pop(username, None))
        return await asyncio.shield(pending)

    async def _fetch_and_store(self, username: str) -> str | None:
        content = await self._fetcher.fetch(username)
        if content is None:
            return None

        location = self._extractor(content)
        if location is None:
            logger.debug("No location found for %s", username)
            return None

        self._cache.set(username, location)
        logger.debug("Resolved %s -> %s", username, location)
        return location
