import logging

import httpx

from mapchirp.domain.errors import FetchError
from mapchirp.domain.result import Err, Ok, Result
from mapchirp.validation import is_valid_username

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://x.com"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class ProfileFetcher:
    """Downloads a profile's public about page.

    Stateless: every call is one GET. Failures are not retried here; the next
    resolution simply tries again.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds), follow_redirects=True)
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent

    def about_url(self, username: str) -> str:
        return f"{self._base_url}/{username}/about"

    async def fetch(self, username: str) -> str | None:
        match await self.fetch_result(username):
            case Ok(value=content):
                return content
            case Err(error=error):
                logger.debug("Fetch for %s failed: %s", username, error.message)
                return None

    async def fetch_result(self, username: str) -> Result[str, FetchError]:
        if not is_valid_username(username):
            return Err(FetchError("invalid username", username=str(username)))

        try:
            response = await self._client.get(self.about_url(username), headers={"User-Agent": self._user_agent})
        except httpx.HTTPError as e:
            return Err(FetchError(f"transport error: {e}", username=username))

        if not response.is_success:
            return Err(FetchError(f"HTTP {response.status_code}", username=username, status_code=response.status_code))
        return Ok(response.text)

    async def aclose(self) -> None:
        await self._client.aclose()
