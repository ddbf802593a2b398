"""Transports and the page fetcher.

This module provides:

- Transport: the protocol the fetcher issues requests through. Anything with
  an ``issue(url, options)`` coroutine returning a TransportResponse works,
  which lets tests and alternative network stacks stand in for httpx.
- HttpxTransport: the default transport, backed by httpx.AsyncClient.
- PageFetcher: builds site URLs, classifies responses and retries transient
  server errors with exponential backoff.

The retry algorithm uses exponential backoff::

    delay_before_retry_n = retry_base_delay * 2^(n - 1)

With the defaults (base 2s, 6 retries) the delays are 2, 4, 8, 16, 32 and
64 seconds, about two minutes in the worst case. Client errors (4xx) are
never retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urljoin

import httpx

from fennec.common.error_classifier import (
    SOFT_ERROR_RULES,
    SoftErrorRule,
    classify,
)
from fennec.common.exceptions import SiteError
from fennec.common.normalizers import html_to_text
from fennec.data_types import (
    FORM_URLENCODED,
    FetchResult,
    RequestOptions,
    TransportOptions,
    TransportResponse,
)

logger = logging.getLogger(__name__)

SITE_ROOT = "https://www.furaffinity.net"

# Logical statuses reported when the network layer itself fails.
TIMEOUT_STATUS = 504
NETWORK_ERROR_STATUS = 503


@runtime_checkable
class Transport(Protocol):
    """Issues one HTTP request and returns the raw response."""

    async def issue(
        self, url: str, options: TransportOptions
    ) -> TransportResponse: ...


class HttpxTransport:
    """Transport backed by httpx.AsyncClient.

    Form-encoded bodies are sent with list values as repeated keys
    (``items[]=1&items[]=2``); any other body is sent as JSON. Cookies are
    passed through verbatim as the ``Cookie`` header.

    Timeouts and connection failures are reported as 504 and 503 responses
    so the fetcher retries them like any other server-side error.

    Example::

        async with HttpxTransport(timeout=30.0) as transport:
            response = await transport.issue(url, TransportOptions())
    """

    def __init__(
        self,
        timeout: float | None = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout: Request timeout in seconds. None means no timeout.
            client: Optional preconfigured client. The transport closes it
                in aclose() either way.
        """
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            timeout=timeout, follow_redirects=True
        )

    async def aclose(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def issue(
        self, url: str, options: TransportOptions
    ) -> TransportResponse:
        """Fetch ``url`` and return its status and text.

        Args:
            url: Absolute URL.
            options: Method, cookies and body.

        Returns:
            TransportResponse with the HTTP status and decoded body.
        """
        headers: dict[str, str] = {}
        if options.cookies:
            headers["Cookie"] = options.cookies

        data: dict[str, Any] | None = None
        json_body: dict[str, Any] | None = None
        if options.body is not None:
            if options.content_type == FORM_URLENCODED:
                data = dict(options.body)
            else:
                json_body = dict(options.body)

        try:
            http_response = await self._client.request(
                method=options.method.value,
                url=url,
                headers=headers,
                data=data,
                json=json_body,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Request to {url} timed out: {e}")
            return TransportResponse(status_code=TIMEOUT_STATUS, body="")
        except httpx.TransportError as e:
            logger.warning(f"Request to {url} failed: {e}")
            return TransportResponse(status_code=NETWORK_ERROR_STATUS, body="")

        return TransportResponse(
            status_code=http_response.status_code, body=http_response.text
        )


class PageFetcher:
    """Fetches site pages through a transport with classification and retry.

    Example::

        fetcher = PageFetcher(HttpxTransport(), cookies="a=...; b=...")
        result = await fetcher.fetch("/view/12345/")
    """

    def __init__(
        self,
        transport: Transport,
        cookies: str | None = None,
        site_root: str = SITE_ROOT,
        disable_retry: bool = False,
        max_retries: int = 6,
        retry_base_delay: float = 2.0,
        soft_error_rules: Sequence[SoftErrorRule] = SOFT_ERROR_RULES,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the fetcher.

        Args:
            transport: Issues the actual requests.
            cookies: Raw cookie header sent with every request.
            site_root: Origin that relative paths are resolved against.
            disable_retry: Surface server errors immediately.
            max_retries: Retries after the first attempt for 5xx statuses.
            retry_base_delay: Delay before the first retry, in seconds;
                doubled for every further retry.
            soft_error_rules: Ordered soft-error table for the classifier.
            sleep: Coroutine used to wait between attempts.
        """
        self.transport = transport
        self.cookies = cookies
        self.site_root = site_root.rstrip("/")
        self.disable_retry = disable_retry
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.soft_error_rules = tuple(soft_error_rules)
        self._sleep = sleep

    def build_url(self, path: str) -> str:
        """Resolve a site path (or absolute URL) against the site origin."""
        return urljoin(f"{self.site_root}/", path)

    def should_retry(self, status: int, attempt: int) -> bool:
        """Whether a response with ``status`` on ``attempt`` is retried."""
        return (
            not self.disable_retry
            and status >= 500
            and attempt <= self.max_retries
        )

    def retry_delay(self, attempt: int) -> float:
        """Seconds to wait after failed ``attempt`` (1-based)."""
        return self.retry_base_delay * (2 ** (attempt - 1))

    async def fetch(
        self, path: str, options: RequestOptions | None = None
    ) -> FetchResult:
        """Fetch one page.

        Args:
            path: Site path such as ``/view/123/``, or an absolute URL.
            options: Method and body for the request; GET when omitted.

        Returns:
            FetchResult with the body of a page that classified as 200.

        Raises:
            SiteError: On any other logical status, after retries for
                server errors are exhausted.
        """
        url = self.build_url(path)
        transport_options = TransportOptions.from_request(options, self.cookies)

        attempt = 1
        while True:
            logger.debug(
                f"Fetching {url} (attempt {attempt})",
                extra={"method": transport_options.method.value},
            )
            response = await self.transport.issue(url, transport_options)
            status = classify(response, self.soft_error_rules)
            if status == 200:
                return FetchResult(url=url, body=response.body, attempts=attempt)

            if not self.should_retry(status, attempt):
                logger.error(
                    f"Got HTTP error {status} at {url}, giving up",
                    extra={
                        "status": status,
                        "transport_status": response.status_code,
                        "attempts": attempt,
                    },
                )
                raise SiteError(status, url, html_to_text(response.body))

            delay = self.retry_delay(attempt)
            logger.warning(
                f"Got HTTP error {status} at {url}, "
                f"retry #{attempt} in {delay:.1f}s"
            )
            await self._sleep(delay)
            attempt += 1
