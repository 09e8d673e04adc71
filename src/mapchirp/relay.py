"""One-way channel from the hosted page to the privileged side.

Anything on the page can post a message, so the receiver checks the source tag
and the message shape before acting on it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from mapchirp.cache.location_cache import LocationCache
    from mapchirp.credentials import CredentialHolder

logger = logging.getLogger(__name__)

PAGE_SOURCE = "x-location-display-page"


@dataclass(frozen=True)
class TokenMessage:
    token: str


@dataclass(frozen=True)
class LocationMessage:
    username: str
    location: str


RelayMessage: TypeAlias = TokenMessage | LocationMessage


def token_message(token: str) -> dict[str, Any]:
    return {"source": PAGE_SOURCE, "type": "token", "token": token}


def location_message(username: str, location: str) -> dict[str, Any]:
    return {"source": PAGE_SOURCE, "type": "location", "username": username, "location": location}


def parse_message(payload: object) -> RelayMessage | None:
    """Decode a raw page message, or None if it is foreign or malformed."""
    if not isinstance(payload, dict) or payload.get("source") != PAGE_SOURCE:
        return None
    kind = payload.get("type")
    if kind == "token":
        token = payload.get("token")
        if isinstance(token, str) and token:
            return TokenMessage(token=token)
    elif kind == "location":
        username = payload.get("username")
        location = payload.get("location")
        if isinstance(username, str) and isinstance(location, str):
            return LocationMessage(username=username, location=location)
    return None


class PageRelay:
    """Broadcast channel; each subscriber gets every message in post order."""

    def __init__(self) -> None:
        self._subscribers: list[asyncio.Queue[dict[str, Any]]] = []

    def post(self, payload: dict[str, Any]) -> None:
        for queue in self._subscribers:
            queue.put_nowait(payload)

    def subscribe(self) -> asyncio.Queue[dict[str, Any]]:
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)


class RelayReceiver:
    """Applies page messages: tokens to the credential, pairs to the cache.

    Each message is handled on its own; a location pair is never held back
    waiting for a token or the other way round.
    """

    def __init__(self, credentials: CredentialHolder, cache: LocationCache) -> None:
        self._credentials = credentials
        self._cache = cache

    def handle(self, payload: object) -> bool:
        """Apply one raw message. Returns True if it changed any state."""
        message = parse_message(payload)
        if message is None:
            return False
        if isinstance(message, TokenMessage):
            self._credentials.set(message.token)
            return True
        stored = self._cache.set(message.username, message.location)
        if stored:
            logger.debug("Stored observed location for %s", message.username)
        return stored

    async def run(self, relay: PageRelay) -> None:
        """Consume the relay until cancelled."""
        queue = relay.subscribe()
        try:
            while True:
                payload = await queue.get()
                try:
                    self.handle(payload)
                except Exception:
                    logger.warning("Failed to apply page message", exc_info=True)
        finally:
            relay.unsubscribe(queue)
