"""Backend gateway: HTTP client, response models, and error taxonomy."""

from __future__ import annotations

from .client import DEFAULT_BASE_URL, MoltbookClient
from .errors import (
    ApiError,
    AuthError,
    GatewayError,
    NetworkError,
    NotFoundError,
    ProtocolError,
    RateLimitedError,
)
from .models import Agent, Comment, Credential, Post

__all__ = [
    "Agent",
    "ApiError",
    "AuthError",
    "Comment",
    "Credential",
    "DEFAULT_BASE_URL",
    "GatewayError",
    "MoltbookClient",
    "NetworkError",
    "NotFoundError",
    "Post",
    "ProtocolError",
    "RateLimitedError",
]
