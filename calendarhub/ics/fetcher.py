"""HTTP client for downloading ICS calendar feeds."""

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import quote, urlparse

import httpx

from .exceptions import ICSFetchError
from .models import ICSResponse

logger = logging.getLogger(__name__)

DIRECT_STRATEGY = "{url}"


class ICSFetcher:
    """Async HTTP client for downloading ICS calendar feeds.

    Each fetch walks the configured transport strategies in order. A strategy
    is a URL template where ``{url}`` is the feed URL and ``{encoded_url}`` its
    percent-encoded form, so a relay can be configured as
    ``"https://relay.example/?target={encoded_url}"``.
    """

    def __init__(self, settings: Any):
        """Initialize ICS fetcher.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.client: Optional[httpx.AsyncClient] = None
        self.strategies: list[str] = list(
            getattr(settings, "transport_strategies", None) or [DIRECT_STRATEGY]
        )

        logger.debug(f"ICS fetcher initialized with {len(self.strategies)} transport strategies")

    async def __aenter__(self) -> "ICSFetcher":
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self._close_client()

    async def _ensure_client(self) -> None:
        """Ensure HTTP client exists."""
        if self.client is None or self.client.is_closed:
            timeout = httpx.Timeout(
                connect=10.0, read=self.settings.request_timeout, write=10.0, pool=30.0
            )

            self.client = httpx.AsyncClient(
                timeout=timeout,
                follow_redirects=True,
                verify=True,
                headers={
                    "User-Agent": f"{self.settings.app_name}/1.0.0 ICS-Client",
                    "Accept": "text/calendar, text/plain, */*",
                    "Accept-Charset": "utf-8",
                    "Cache-Control": "no-cache",
                },
            )

    async def _close_client(self) -> None:
        """Close HTTP client."""
        if self.client and not self.client.is_closed:
            await self.client.aclose()

    def build_request_urls(self, url: str) -> list[tuple[str, str]]:
        """Expand every transport strategy for ``url``.

        Returns:
            ``(strategy, request_url)`` pairs in configured order

        Raises:
            ICSFetchError: If ``url`` is not an http(s) URL
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ICSFetchError(f"Unsupported feed URL: {url}")

        encoded = quote(url, safe="")
        return [
            (strategy, strategy.replace("{encoded_url}", encoded).replace("{url}", url))
            for strategy in self.strategies
        ]

    async def fetch_ics(self, url: str) -> ICSResponse:
        """Download ICS content, falling back through the transport strategies.

        Args:
            url: Feed URL

        Returns:
            ICSResponse; ``success`` is False when every strategy failed

        Raises:
            ICSFetchError: If ``url`` is not an http(s) URL
        """
        request_urls = self.build_request_urls(url)
        await self._ensure_client()

        last_error = "No transport strategy configured"
        last_status: Optional[int] = None

        for strategy, request_url in request_urls:
            logger.debug(f"Fetching ICS from {url} via strategy {strategy!r}")
            try:
                http_response = await self._make_request_with_retry(request_url)
            except httpx.HTTPStatusError as e:
                last_status = e.response.status_code
                last_error = f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
                logger.warning(f"Strategy {strategy!r} failed for {url}: {last_error}")
                continue
            except httpx.TimeoutException as e:
                last_status = None
                last_error = f"Request timeout: {e}"
                logger.warning(f"Strategy {strategy!r} timed out for {url}")
                continue
            except httpx.HTTPError as e:
                last_status = None
                last_error = f"Network error: {e}"
                logger.warning(f"Strategy {strategy!r} failed for {url}: {e}")
                continue

            response = self._create_response(http_response, strategy)
            if response.success:
                return response

            last_status = response.status_code
            last_error = response.error_message or last_error

        logger.error(f"All transport strategies failed for {url}: {last_error}")
        return ICSResponse(success=False, status_code=last_status, error_message=last_error)

    async def _make_request_with_retry(self, url: str) -> httpx.Response:
        """Make HTTP request with retry logic.

        Args:
            url: URL to fetch

        Returns:
            HTTP response
        """
        last_exception: Optional[Exception] = None

        for attempt in range(self.settings.max_retries + 1):
            try:
                if self.client is None:
                    raise ICSFetchError("HTTP client not initialized")

                response = await self.client.get(url)
                response.raise_for_status()

                logger.debug(f"Successfully fetched {url} (attempt {attempt + 1})")
                return response

            except (httpx.TimeoutException, httpx.NetworkError) as e:
                last_exception = e

                if attempt < self.settings.max_retries:
                    backoff_time = self.settings.retry_backoff_factor**attempt
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.settings.max_retries + 1}), "
                        f"retrying in {backoff_time:.1f}s: {e}"
                    )
                    await asyncio.sleep(backoff_time)
                else:
                    logger.error(f"All retry attempts failed for {url}")
                    raise

        if last_exception:
            raise last_exception
        raise ICSFetchError("Maximum retries exceeded")

    def _create_response(self, http_response: httpx.Response, strategy: str) -> ICSResponse:
        """Create ICS response from HTTP response.

        Args:
            http_response: HTTP response object
            strategy: Transport strategy that produced the response

        Returns:
            ICS response object
        """
        content = http_response.text
        content_type = http_response.headers.get("content-type", "").lower()

        if content_type and not any(ct in content_type for ct in ["text/calendar", "text/plain"]):
            logger.warning(f"Unexpected content type: {content_type}")

        if not content or not content.strip():
            logger.error("Empty ICS content received")
            return ICSResponse(
                success=False,
                status_code=http_response.status_code,
                error_message="Empty content received",
                strategy=strategy,
            )

        if "BEGIN:VCALENDAR" not in content:
            logger.warning("Content does not appear to be valid ICS format")

        logger.debug(f"Successfully fetched ICS content ({len(content)} bytes)")

        return ICSResponse(
            success=True,
            content=content,
            status_code=http_response.status_code,
            strategy=strategy,
        )
