"""
HTTP client utilities for the proxy.
Provides a pooled async HTTP client with a long timeout and no retry logic:
failures are reported to the caller, never retried.
"""

from typing import Dict, Optional, Any

import httpx
from httpx import AsyncClient, Timeout, Limits
import structlog

from ..errors import UpstreamTransportError

logger = structlog.get_logger(__name__)


class HTTPClient:
    """Async HTTP client shared by every request the proxy serves."""

    def __init__(
        self,
        timeout: float = 300.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Overall timeout in seconds; completions can run for minutes
            headers: Default headers sent with every request
            transport: Alternative transport (tests use httpx.MockTransport)
        """
        self.timeout = timeout
        self.client = self._create_client(headers or {}, transport)

    def _create_client(
        self,
        headers: Dict[str, str],
        transport: Optional[httpx.AsyncBaseTransport],
    ) -> AsyncClient:
        """Create HTTP client with configured settings."""
        client_kwargs: Dict[str, Any] = {}
        if transport is not None:
            client_kwargs["transport"] = transport

        client = AsyncClient(
            **client_kwargs,
            timeout=Timeout(self.timeout),
            limits=Limits(
                max_connections=100,
                max_keepalive_connections=20,
                keepalive_expiry=30.0,
            ),
        )
        client.headers.update(headers)
        return client

    async def post(self, url: str, **kwargs) -> httpx.Response:
        """
        POST and read the whole response body.

        Raises:
            UpstreamTransportError: Connection, DNS or timeout failure
        """
        try:
            response = await self.client.post(url, **kwargs)
        except httpx.TransportError as e:
            logger.error("HTTP request failed", method="POST", url=url, error=repr(e))
            raise UpstreamTransportError(str(e) or type(e).__name__) from e

        logger.debug("HTTP request completed", method="POST", url=url, status_code=response.status_code)
        return response

    async def stream(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a request and return as soon as the response headers arrive.

        The body is left unread; the caller must close the response.

        Raises:
            UpstreamTransportError: Connection, DNS or timeout failure
        """
        request = self.client.build_request(method, url, **kwargs)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.TransportError as e:
            logger.error("HTTP stream request failed", method=method, url=url, error=repr(e))
            raise UpstreamTransportError(str(e) or type(e).__name__) from e

        logger.debug("HTTP stream opened", method=method, url=url, status_code=response.status_code)
        return response

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
