"""Synchronous HTTP gateway to the Moltbook REST API.

Owns request construction, auth headers, transport retries, and decoding of
the service's loosely shaped JSON envelopes into model objects. Calls block;
the dispatcher runs them on worker threads.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from .. import __version__
from .errors import (
    ApiError,
    AuthError,
    GatewayError,
    NetworkError,
    NotFoundError,
    ProtocolError,
    RateLimitedError,
)
from .models import Agent, Comment, Post

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.moltbook.com/api/v1"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_RETRIES = 3
RETRY_WAIT_SECONDS = 1.0
RETRY_MAX_WAIT_SECONDS = 5.0


def _retry_wait(attempt: int) -> float:
    return min(RETRY_MAX_WAIT_SECONDS, RETRY_WAIT_SECONDS * (2 ** attempt))


def _lookup(body: dict[str, Any], key: str) -> Any:
    """Find ``key`` at the envelope root, then inside ``data``.

    Root values win only when non-empty, mirroring how the service sometimes
    sends an empty root list next to a populated ``data`` object.
    """
    value = body.get(key)
    if value:
        return value
    data = body.get("data")
    if isinstance(data, dict) and key in data:
        return data[key]
    return value


def _post_list(body: dict[str, Any], key: str) -> list[Post]:
    raw = _lookup(body, key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ProtocolError(f"expected a list under {key!r}")
    return [Post.from_api(item) for item in raw if isinstance(item, dict)]


class MoltbookClient:
    """Backend gateway bound to one base URL and (optionally) one API key."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str = "",
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = DEFAULT_RETRIES,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.retries = max(0, retries)
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": f"lazymolt/{__version__}"},
        )

    def bind_api_key(self, api_key: str) -> None:
        """Attach a credential to every subsequent request."""
        self.api_key = api_key

    def close(self) -> None:
        self._http.close()

    def _auth_headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}", "X-API-Key": self.api_key}

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        attempt = 0
        while True:
            try:
                response = self._http.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    headers=self._auth_headers(),
                )
            except httpx.TransportError as exc:
                if attempt < self.retries:
                    log.warning("%s %s failed (%s), retrying", method, path, type(exc).__name__)
                    self._sleep(_retry_wait(attempt))
                    attempt += 1
                    continue
                raise NetworkError(f"network error: {exc}") from exc

            log.debug("%s %s -> %s", method, path, response.status_code)
            if response.status_code >= 500 and attempt < self.retries:
                log.warning("%s %s returned %s, retrying", method, path, response.status_code)
                self._sleep(_retry_wait(attempt))
                attempt += 1
                continue
            return self._decode(response)

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        status = response.status_code
        if status == 429:
            raise self._rate_limited(response)

        try:
            body = response.json()
        except ValueError as exc:
            if not response.is_success:
                raise self._status_error(status, f"API error ({status}): {response.text}") from exc
            raise ProtocolError(f"failed to parse JSON ({status})", status_code=status) from exc
        if not isinstance(body, dict):
            raise ProtocolError(f"unexpected response shape ({status})", status_code=status)

        error = body.get("error")
        if not response.is_success or (body.get("success") is False and error):
            if isinstance(error, str) and error:
                message = error
                hint = body.get("hint")
                if isinstance(hint, str) and hint:
                    message += f" (Hint: {hint})"
            else:
                message = f"request failed: {status}"
            raise self._status_error(status, message)
        return body

    @staticmethod
    def _status_error(status: int, message: str) -> GatewayError:
        if status in (401, 403):
            return AuthError(message, status_code=status)
        if status == 404:
            return NotFoundError(message, status_code=status)
        return ApiError(message, status_code=status)

    @staticmethod
    def _rate_limited(response: httpx.Response) -> RateLimitedError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        hint = body.get("hint") or body.get("error") or ""
        retry_after = body.get("retry_after_seconds")
        if not isinstance(retry_after, int) or isinstance(retry_after, bool):
            minutes = body.get("retry_after_minutes")
            retry_after = minutes * 60 if isinstance(minutes, int) and not isinstance(minutes, bool) else 0
        if not retry_after:
            header = response.headers.get("Retry-After", "")
            retry_after = int(header) if header.isdigit() else 0
        return RateLimitedError(hint=str(hint), retry_after_seconds=retry_after)

    def register(self, name: str, description: str) -> Agent:
        body = self._request("POST", "/agents/register", json={"name": name, "description": description})
        raw = _lookup(body, "agent")
        if not isinstance(raw, dict) or not raw.get("name"):
            raise ProtocolError("failed to find agent in response")
        return Agent.from_api(raw)

    def list_feed(self, sort: str, limit: int, offset: int) -> list[Post]:
        body = self._request("GET", "/posts", params={"sort": sort, "limit": limit, "offset": offset})
        return _post_list(body, "posts")

    def list_personalized_feed(self, sort: str, limit: int, offset: int) -> list[Post]:
        body = self._request("GET", "/feed", params={"sort": sort, "limit": limit, "offset": offset})
        return _post_list(body, "posts")

    def search(self, query: str, kind: str = "posts") -> list[Post]:
        body = self._request("GET", "/search", params={"q": query, "type": kind})
        return _post_list(body, "results")

    def get_comments(self, post_id: str, limit: int | None = None, offset: int | None = None) -> list[Comment]:
        params: dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        body = self._request("GET", f"/posts/{post_id}/comments", params=params or None)
        raw = _lookup(body, "comments")
        if raw is None:
            data = body.get("data")
            if isinstance(data, list):
                raw = data
            elif "comments" not in body:
                raise ProtocolError("could not find comments in response")
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ProtocolError("expected a list under 'comments'")
        return [Comment.from_api(item) for item in raw if isinstance(item, dict)]

    def create_post(self, submolt: str, title: str, content: str) -> None:
        self._request("POST", "/posts", json={"submolt": submolt, "title": title, "content": content})

    def delete_post(self, post_id: str) -> None:
        self._request("DELETE", f"/posts/{post_id}")

    def upvote(self, post_id: str) -> None:
        self._request("POST", f"/posts/{post_id}/upvote", json={})

    def create_comment(self, post_id: str, content: str) -> None:
        self._request("POST", f"/posts/{post_id}/comments", json={"content": content})

    def get_self(self) -> Agent:
        body = self._request("GET", "/agents/me")
        raw = _lookup(body, "agent")
        if not isinstance(raw, dict) or not raw.get("name"):
            raise ProtocolError("could not find agent in response")
        return Agent.from_api(raw)

    def get_profile(self, name: str) -> tuple[Agent, list[Post]]:
        body = self._request("GET", "/agents/profile", params={"name": name})
        raw = _lookup(body, "agent")
        if not isinstance(raw, dict):
            raise ProtocolError("could not find profile data")
        return Agent.from_api(raw), _post_list(body, "recentPosts")

    def follow(self, name: str) -> None:
        self._request("POST", f"/agents/{name}/follow")

    def unfollow(self, name: str) -> None:
        self._request("DELETE", f"/agents/{name}/follow")


__all__ = ["DEFAULT_BASE_URL", "MoltbookClient"]
