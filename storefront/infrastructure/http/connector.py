from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from storefront.core.exceptions import (
    SourceAuthenticationError,
    SourceMisconfigured,
    SourceTimeout,
    SourceUnavailable,
)
from storefront.core.logging import get_logger

logger = get_logger(__name__)


class RequestConfig:
    """Configuration for API requests including retry and timeout settings."""

    def __init__(
        self,
        max_retries: int = 2,
        timeout: float = 4.0,
        backoff_factor: float = 0.3,
        retry_status_codes: List[int] = None
    ):
        """
        Initialize RequestConfig with retry and timeout settings.

        Args:
            max_retries: Maximum number of retry attempts after the first call
            timeout: Request timeout in seconds
            backoff_factor: Backoff factor for exponential retry delay
            retry_status_codes: List of HTTP status codes to retry on
        """
        self.max_retries = max_retries
        self.timeout = timeout
        self.backoff_factor = backoff_factor
        self.retry_status_codes = retry_status_codes or [429, 502, 503, 504]

    @classmethod
    def from_settings(cls, settings) -> "RequestConfig":
        return cls(
            max_retries=settings.MAX_RETRIES,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            backoff_factor=settings.RETRY_BACKOFF_FACTOR,
        )


class _RetryableStatus(Exception):
    """Internal marker for responses whose status code is worth retrying."""

    def __init__(self, response: httpx.Response):
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


_RETRY_EXCEPTIONS = (httpx.ConnectError, httpx.RemoteProtocolError, httpx.TimeoutException, _RetryableStatus)


def validate_url(url: Optional[str]) -> bool:
    """
    Check that a base URL is an absolute http(s) URL.

    Args:
        url: URL to check

    Returns:
        bool: True if the URL has an http(s) scheme and a host
    """
    if not url:
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class HttpConnector:
    """
    Thin async HTTP client for one catalog source.

    Wraps ``httpx.AsyncClient`` with retries for transient failures and
    translates every transport or HTTP error into the ``SourceUnavailable``
    family so adaptors only deal with one error type.
    """

    def __init__(
        self,
        source: str,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the connector.

        Args:
            source: Name of the catalog source, used in errors and logs
            base_url: Base URL every request path is joined to
            headers: Default headers sent with every request
            config: Retry and timeout settings
            transport: Optional httpx transport, mainly for tests

        Raises:
            SourceMisconfigured: If the base URL is not an absolute http(s) URL
        """
        if not validate_url(base_url):
            raise SourceMisconfigured(
                source,
                detail=f"Catalog source '{source}' has an invalid base URL",
                context={"base_url": base_url},
            )
        self.source = source
        self.config = config or RequestConfig()
        self.base_url = base_url.strip().rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers or {},
            timeout=self.config.timeout,
            transport=transport,
        )

    async def _send(self, path: str, params: Optional[Dict[str, Any]]) -> httpx.Response:
        response = await self._client.get(path, params=params)
        if response.status_code in self.config.retry_status_codes:
            raise _RetryableStatus(response)
        return response

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
    ) -> Optional[Any]:
        """
        Send a GET request and decode the JSON body.

        Args:
            path: Path relative to the base URL
            params: Query parameters
            allow_not_found: Return None on 404 instead of raising

        Returns:
            The decoded JSON body, or None for an allowed 404

        Raises:
            SourceTimeout: If the source did not answer in time
            SourceAuthenticationError: If the source answered 401 or 403
            SourceUnavailable: For any other transport or HTTP failure
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=wait_exponential(multiplier=self.config.backoff_factor, max=2),
            retry=retry_if_exception_type(_RETRY_EXCEPTIONS),
            reraise=True,
        )

        try:
            response = await retrying(self._send, path, params)
        except httpx.TimeoutException as e:
            raise SourceTimeout(
                self.source,
                timeout=self.config.timeout,
                context={"path": path},
                original_exception=e,
            ) from e
        except _RetryableStatus as e:
            raise SourceUnavailable(
                self.source,
                detail=f"Catalog source '{self.source}' answered HTTP {e.response.status_code}",
                context={"path": path, "http_status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailable(
                self.source,
                context={"path": path},
                original_exception=e,
            ) from e

        if response.status_code == 404 and allow_not_found:
            logger.debug(f"{self.source}: {path} returned 404")
            return None

        if response.status_code in (401, 403):
            raise SourceAuthenticationError(
                self.source,
                context={"path": path, "http_status": response.status_code},
            )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailable(
                self.source,
                detail=f"Catalog source '{self.source}' answered HTTP {response.status_code}",
                context={"path": path, "http_status": response.status_code},
                original_exception=e,
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailable(
                self.source,
                detail=f"Catalog source '{self.source}' returned a non-JSON body",
                context={"path": path},
                original_exception=e,
            ) from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
