"""Exception taxonomy for backend failures.

The dispatcher catches these and turns them into failure events; nothing
above the dispatcher ever sees an exception from the network layer.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for every failure reported by the backend gateway."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NetworkError(GatewayError):
    """Connectivity problem or timeout; safe to retry."""


class RateLimitedError(GatewayError):
    """HTTP 429 with the server's hint and retry-after duration."""

    def __init__(self, hint: str = "", retry_after_seconds: int = 0) -> None:
        self.hint = hint
        self.retry_after_seconds = max(0, retry_after_seconds)
        message = "Rate limit exceeded"
        if hint:
            message += f": {hint}"
        message += f" (Retry after {self.retry_after_seconds} seconds)"
        super().__init__(message, status_code=429)


class AuthError(GatewayError):
    """Missing or rejected credential."""


class NotFoundError(GatewayError):
    """Requested resource does not exist."""


class ProtocolError(GatewayError):
    """Response body could not be parsed or lacked the expected payload."""


class ApiError(GatewayError):
    """Any other rejection reported by the service."""


__all__ = [
    "ApiError",
    "AuthError",
    "GatewayError",
    "NetworkError",
    "NotFoundError",
    "ProtocolError",
    "RateLimitedError",
]
