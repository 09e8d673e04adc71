import httpx

from mapchirp.domain.errors import FetchError
from mapchirp.domain.result import Err, Ok
from mapchirp.fetcher import ProfileFetcher
from tests.helpers import FakeAsyncTransport, html_response


def _fetcher(transport: httpx.AsyncBaseTransport) -> ProfileFetcher:
    return ProfileFetcher(httpx.AsyncClient(transport=transport), base_url="https://example.test/", user_agent="ua/1")


class TestProfileFetcher:
    async def test_returns_page_text(self) -> None:
        transport = FakeAsyncTransport(html_response("<p>Based in: Berlin</p>"))
        fetcher = _fetcher(transport)
        assert await fetcher.fetch("alice") == "<p>Based in: Berlin</p>"

    async def test_requests_about_page_with_user_agent(self) -> None:
        transport = FakeAsyncTransport(html_response("ok"))
        await _fetcher(transport).fetch("alice")
        assert transport.call_count == 1
        request = transport.requests[0]
        assert str(request.url) == "https://example.test/alice/about"
        assert request.headers["user-agent"] == "ua/1"

    async def test_invalid_username_makes_no_request(self) -> None:
        transport = FakeAsyncTransport(html_response("ok"))
        fetcher = _fetcher(transport)
        assert await fetcher.fetch("bad name!") is None
        assert await fetcher.fetch("") is None
        assert transport.call_count == 0

    async def test_non_success_status(self) -> None:
        transport = FakeAsyncTransport(html_response("nope", status_code=404))
        fetcher = _fetcher(transport)
        assert await fetcher.fetch("alice") is None
        result = await fetcher.fetch_result("alice")
        assert isinstance(result, Err)
        assert result.error.status_code == 404

    async def test_transport_error_is_not_retried(self) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        transport = FakeAsyncTransport(fail)
        fetcher = _fetcher(transport)
        assert await fetcher.fetch("alice") is None
        assert transport.call_count == 1

    async def test_fetch_result_ok(self) -> None:
        fetcher = _fetcher(FakeAsyncTransport(html_response("body")))
        assert await fetcher.fetch_result("alice") == Ok("body")

    async def test_fetch_result_invalid_username(self) -> None:
        fetcher = _fetcher(FakeAsyncTransport(html_response("body")))
        result = await fetcher.fetch_result("x" * 16)
        assert isinstance(result, Err)
        assert isinstance(result.error, FetchError)
