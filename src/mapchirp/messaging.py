"""Request/response surface for display collaborators.

A request looks like ``{"action": "fetchLocation", "username": "..."}`` and is
answered with ``{"location": str | None}`` through the ``respond`` callback.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from mapchirp.validation import is_valid_username

if TYPE_CHECKING:
    from collections.abc import Callable

    from mapchirp.services.resolution import ResolutionService

logger = logging.getLogger(__name__)

FETCH_LOCATION_ACTION = "fetchLocation"


class MessageRouter:
    def __init__(self, resolver: ResolutionService) -> None:
        self._resolver = resolver
        self._tasks: set[asyncio.Task[None]] = set()

    def handle(self, payload: object, respond: Callable[[dict[str, Any]], None]) -> bool:
        """Dispatch one request.

        Returns True when the answer will arrive later (the channel must stay
        open) and False when it was answered immediately or ignored.
        """
        if not isinstance(payload, dict):
            respond({"location": None})
            return False
        if payload.get("action") != FETCH_LOCATION_ACTION:
            return False

        username = payload.get("username")
        if not is_valid_username(username):
            respond({"location": None})
            return False

        task = asyncio.get_running_loop().create_task(self._answer(username, respond))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def request(self, payload: object) -> dict[str, Any]:
        """Awaitable form of ``handle`` for in-process callers."""
        loop = asyncio.get_running_loop()
        answer: asyncio.Future[dict[str, Any]] = loop.create_future()

        def respond(response: dict[str, Any]) -> None:
            if not answer.done():
                answer.set_result(response)

        if not self.handle(payload, respond) and not answer.done():
            return {"location": None}
        return await answer

    async def _answer(self, username: str, respond: Callable[[dict[str, Any]], None]) -> None:
        try:
            location = await self._resolver.resolve(username)
        except Exception:
            logger.warning("Resolution failed for %s", username, exc_info=True)
            location = None
        respond({"location": location})
