import asyncio
from collections.abc import Callable
from typing import Any

import httpx


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAsyncTransport(httpx.AsyncBaseTransport):
    """Serves every request from ``handler`` and records what was asked for."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response], delay: float = 0.0) -> None:
        self._handler = handler
        self._delay = delay
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._handler(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)


def html_response(body: str, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body)

    return handler


class FakeRequest:
    def __init__(self, url: str, headers: dict[str, str] | None = None) -> None:
        self.url = url
        self.headers = headers or {}


class FakeResponse:
    def __init__(self, url: str, body: bytes | Exception) -> None:
        self.request = FakeRequest(url)
        self._body = body

    async def body(self) -> bytes:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakePage:
    """Stands in for a Playwright page: collects handlers and lets tests fire events."""

    def __init__(self) -> None:
        self.handlers: dict[str, list[Callable[..., Any]]] = {}

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.handlers.setdefault(event, []).append(handler)

    async def emit(self, event: str, payload: object) -> None:
        for handler in self.handlers.get(event, []):
            result = handler(payload)
            if asyncio.iscoroutine(result):
                await result
