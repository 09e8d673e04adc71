"""Passive observation of the hosted page's network traffic.

The interceptor watches outgoing request headers for an authorization value and
reads the body of the profile "about" query to pick up username/location pairs
the page already fetched. It only ever reads: requests and responses reach the
page exactly as they would without it, and a failed observation is dropped.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from mapchirp.domain.result import Err, Ok
from mapchirp.relay import location_message, token_message

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    import httpx
    from playwright.async_api import Page, Request, Response

    from mapchirp.domain.result import Result

logger = logging.getLogger(__name__)

ABOUT_QUERY_MARKER = "AboutAccountQuery"

T = TypeVar("T")

_USER_RESULT_PATH = ("data", "user_result_by_screen_name", "result")


def _attempt(fn: Callable[..., T], *args: Any) -> Result[T, Exception]:
    try:
        return Ok(fn(*args))
    except Exception as e:
        logger.debug("Ignoring failed observation in %s: %s", getattr(fn, "__name__", fn), e)
        return Err(e)


def _walk(data: Any, path: tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def find_authorization(headers: Mapping[str, str]) -> str | None:
    """Case-insensitive lookup of the authorization header."""
    for name, value in headers.items():
        if isinstance(name, str) and name.lower() == "authorization":
            return value
    return None


def extract_observed_pair(body: str | bytes) -> tuple[str, str] | None:
    """Pull ``(screen_name, account_based_in)`` from an about-query response."""
    data = json.loads(body)
    result = _walk(data, _USER_RESULT_PATH)
    username = _walk(result, ("core", "screen_name"))
    location = _walk(result, ("about_profile", "account_based_in"))
    if isinstance(username, str) and username and isinstance(location, str) and location:
        return username, location
    return None


class CredentialInterceptor:
    """Turns observed traffic into relay messages passed to ``emit``."""

    def __init__(self, emit: Callable[[dict[str, Any]], None]) -> None:
        self._emit = emit
        self._last_token: str | None = None

    @property
    def last_token(self) -> str | None:
        return self._last_token

    def observe_headers(self, headers: Mapping[str, str]) -> None:
        """Entry point for a request issued with a full header mapping."""
        found = _attempt(find_authorization, headers)
        if isinstance(found, Ok) and found.value:
            _attempt(self._observe_token, found.value)

    def observe_header(self, name: str, value: str) -> None:
        """Entry point for requests that set headers one at a time."""
        if isinstance(name, str) and name.lower() == "authorization" and value:
            _attempt(self._observe_token, value)

    def observe_response(self, url: str, body: str | bytes) -> None:
        if ABOUT_QUERY_MARKER not in url:
            return
        pair = _attempt(extract_observed_pair, body)
        if isinstance(pair, Ok) and pair.value is not None:
            username, location = pair.value
            _attempt(self._emit, location_message(username, location))

    def _observe_token(self, token: str) -> None:
        # Exact comparison; the value itself is never normalized.
        if token == self._last_token:
            return
        self._last_token = token
        logger.debug("Observed new authorization credential")
        self._emit(token_message(token))

    # Playwright wiring

    def attach(self, page: Page) -> None:
        page.on("request", self._on_page_request)
        page.on("response", self._on_page_response)

    def _on_page_request(self, request: Request) -> None:
        self.observe_headers(request.headers)

    async def _on_page_response(self, response: Response) -> None:
        url = response.request.url
        if ABOUT_QUERY_MARKER not in url:
            return
        try:
            body = await response.body()
        except Exception as e:
            logger.debug("Could not read about-query response body: %s", e)
            return
        self.observe_response(url, body)

    # httpx wiring

    def event_hooks(self) -> dict[str, list[Callable[..., Any]]]:
        """Hooks for ``httpx.AsyncClient(event_hooks=...)``."""
        return {"request": [self._on_httpx_request], "response": [self._on_httpx_response]}

    async def _on_httpx_request(self, request: httpx.Request) -> None:
        self.observe_headers(request.headers)

    async def _on_httpx_response(self, response: httpx.Response) -> None:
        url = str(response.request.url)
        if ABOUT_QUERY_MARKER not in url:
            return
        try:
            body = await response.aread()
        except Exception as e:
            logger.debug("Could not read about-query response body: %s", e)
            return
        self.observe_response(url, body)
