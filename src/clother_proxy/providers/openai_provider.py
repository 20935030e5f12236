"""
OpenAI-compatible upstream provider (OpenRouter and friends).
"""

from typing import Dict, Any, Optional

import httpx
import structlog

from .. import __version__
from ..errors import UpstreamResponseError
from ..utils.http_client import HTTPClient

logger = structlog.get_logger(__name__)

# Upstream error bodies can be large HTML pages; keep the useful part.
_MAX_ERROR_TEXT = 2000


class OpenAICompatibleProvider:
    """Sends chat completion requests to a fixed OpenAI-style endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str,
        referer: str,
        timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize provider.

        Args:
            url: Full chat completions URL
            api_key: Bearer token sent upstream
            referer: Value of the HTTP-Referer header
            timeout: Overall request timeout in seconds
            transport: Alternative httpx transport
        """
        self.url = url
        self.http_client = HTTPClient(
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "HTTP-Referer": referer,
                "User-Agent": f"clother-proxy/{__version__}",
            },
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: Any, transport: Optional[httpx.AsyncBaseTransport] = None) -> "OpenAICompatibleProvider":
        return cls(
            url=config.upstream_url,
            api_key=config.api_key,
            referer=config.referer,
            timeout=config.request_timeout,
            transport=transport,
        )

    async def chat_completion(self, request_body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a non-streaming chat completion.

        Args:
            request_body: OpenAI chat completion request

        Returns:
            Parsed response body

        Raises:
            UpstreamTransportError: Upstream unreachable
            UpstreamResponseError: Non-2xx status or a body that is not JSON
        """
        logger.info("Upstream request", model=request_body.get("model"), stream=False)
        response = await self.http_client.post(self.url, json=request_body)

        if not response.is_success:
            raise self._status_error(response.status_code, response.text)

        try:
            result = response.json()
        except ValueError:
            raise UpstreamResponseError(
                f"Upstream returned invalid JSON: {response.text[:_MAX_ERROR_TEXT]}",
                upstream_status=response.status_code,
            ) from None

        if not isinstance(result, dict):
            raise UpstreamResponseError(
                "Upstream returned an unexpected body", upstream_status=response.status_code
            )
        return result

    async def chat_completion_stream(self, request_body: Dict[str, Any]) -> httpx.Response:
        """
        Open a streaming chat completion.

        Args:
            request_body: OpenAI chat completion request with ``stream`` set

        Returns:
            Open response whose body has not been read; the caller closes it

        Raises:
            UpstreamTransportError: Upstream unreachable
            UpstreamResponseError: Non-2xx status
        """
        logger.info("Upstream request", model=request_body.get("model"), stream=True)
        response = await self.http_client.stream("POST", self.url, json=request_body)

        if not response.is_success:
            try:
                body = (await response.aread()).decode("utf-8", errors="replace")
            except httpx.HTTPError:
                body = ""
            finally:
                await response.aclose()
            raise self._status_error(response.status_code, body)

        return response

    def _status_error(self, status_code: int, text: str) -> UpstreamResponseError:
        logger.warning("Upstream returned error status", status_code=status_code)
        return UpstreamResponseError(
            f"Upstream API error: {status_code} - {text[:_MAX_ERROR_TEXT]}",
            upstream_status=status_code,
        )

    async def shutdown(self) -> None:
        """Release pooled connections."""
        await self.http_client.aclose()
