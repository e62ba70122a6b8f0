"""
Async HTTP client with browser-like headers and retries.

Built on httpx with:
- Browser user-agent and referer on every request (the source rejects bare clients)
- Exponential backoff retry on timeouts and network errors
- Injectable transport for offline tests
"""

from typing import Optional

import httpx
import structlog
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

logger = structlog.get_logger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36"
)


class HttpClient:
    """
    Async HTTP client with retries.

    Usage:
        async with HttpClient(referer="https://www.kaa.org.tw/") as client:
            html = await client.get_text("https://www.kaa.org.tw/law_list.php")
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        referer: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
            referer: Referer header sent with every request
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.referer = referer
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept-Language": "zh-TW,zh;q=0.9,en;q=0.8",
        }
        if self.referer:
            headers["Referer"] = self.referer

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers=headers,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _do_request(
        self,
        method: str,
        url: str,
        **kwargs,
    ) -> httpx.Response:
        """Execute HTTP request with retry."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()

        return response

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """
        GET request.

        Args:
            url: URL to fetch
            **kwargs: Additional httpx arguments (params, headers, ...)

        Returns:
            httpx.Response object

        Raises:
            httpx.HTTPStatusError: Non-2xx response
            httpx.HTTPError: Transport failure after retries
        """
        logger.debug("http_get", url=url)
        return await self._do_request("GET", url, **kwargs)

    async def get_text(self, url: str, **kwargs) -> str:
        """GET request returning text content."""
        response = await self.get(url, **kwargs)
        return response.text
