"""Long-running background process: sweeper, relay receiver and page watcher."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import TYPE_CHECKING

from playwright.async_api import async_playwright

from mapchirp.cache.location_cache import LOADED_TIME_KEY
from mapchirp.interceptor import CredentialInterceptor

if TYPE_CHECKING:
    from types import TracebackType

    from mapchirp.services.container import ServiceContainer

logger = logging.getLogger(__name__)


class BackgroundRuntime:
    """Async context manager owning the background tasks.

    On entry it records the start time, then starts the eviction sweeper
    (which sweeps immediately) and the relay receiver. On exit both are
    cancelled.
    """

    def __init__(self, container: ServiceContainer) -> None:
        self._container = container
        self._tasks: list[asyncio.Task[None]] = []

    async def __aenter__(self) -> BackgroundRuntime:
        try:
            self._container.store.set({LOADED_TIME_KEY: int(time.time() * 1000)})
        except Exception:
            logger.debug("Could not record start time", exc_info=True)

        self._tasks = [
            asyncio.create_task(self._container.sweeper.run(), name="mapchirp-sweeper"),
            asyncio.create_task(self._container.relay_receiver.run(self._container.relay), name="mapchirp-relay"),
        ]
        # Let the receiver subscribe before any page traffic is posted.
        await asyncio.sleep(0)
        logger.info("Background runtime started")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks = []
        logger.info("Background runtime stopped")

    def interceptor(self) -> CredentialInterceptor:
        return CredentialInterceptor(self._container.relay.post)


async def watch_page(container: ServiceContainer, url: str, *, headless: bool = False) -> None:
    """Open ``url`` in Chromium and observe its traffic until cancelled."""
    async with BackgroundRuntime(container) as runtime, async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            runtime.interceptor().attach(page)
            await page.goto(url, wait_until="domcontentloaded", timeout=60000)
            logger.info("Watching %s", url)
            await asyncio.Event().wait()
        finally:
            await browser.close()
