"""
Error definitions for the translation proxy.

Every failure surfaced to the caller is rendered in the primary wire format's
error envelope so the downstream CLI can display it.
"""

from typing import Any, Dict


class ProxyError(Exception):
    """Base class for errors reported back to the HTTP caller."""

    def __init__(
        self,
        message: str,
        error_type: str = "api_error",
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the error envelope returned to the caller."""
        return {
            "type": "error",
            "error": {
                "type": self.error_type,
                "message": self.message,
            },
        }


class InvalidRequestError(ProxyError):
    """Inbound request could not be parsed or translated."""

    def __init__(self, message: str):
        super().__init__(message, error_type="invalid_request_error", status_code=400)


class UpstreamTransportError(ProxyError):
    """Upstream could not be reached (connection refused, DNS, timeout)."""

    def __init__(self, message: str):
        super().__init__(f"Upstream error: {message}", error_type="api_error", status_code=502)


class UpstreamResponseError(ProxyError):
    """Upstream answered, but not with something usable."""

    def __init__(self, message: str, upstream_status: int = 0):
        super().__init__(message, error_type="api_error", status_code=500)
        self.upstream_status = upstream_status
