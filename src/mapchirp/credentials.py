from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mapchirp.cache.location_cache import TOKEN_KEY

if TYPE_CHECKING:
    from mapchirp.cache.protocol import KeyValueStore

logger = logging.getLogger(__name__)


class CredentialHolder:
    """Owns the last observed authorization value.

    Last write wins. The value is mirrored to the store so the options view can
    display it; reads are served from memory.
    """

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self._store = store
        self._token: str | None = None

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        if token == self._token:
            return
        self._token = token
        logger.debug("Credential updated")
        if self._store is not None:
            self._store.set({TOKEN_KEY: token})
