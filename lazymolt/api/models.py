"""Value types returned by the Moltbook backend.

Every type is a frozen dataclass so session state can share instances freely.
``from_api`` constructors tolerate missing keys and nested author/community
objects, because the service is inconsistent about response shapes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone


def _as_int(value: object) -> int:
    """Coerce a JSON scalar to ``int``; booleans and junk become ``0``."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def _as_str(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _nested_name(value: object, key: str = "name") -> str:
    """Read ``value[key]`` for nested objects, or ``value`` itself for flat strings."""
    if isinstance(value, dict):
        return _as_str(value.get(key))
    return _as_str(value)


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``.

    Returns ``None`` for missing or unparseable values instead of raising.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Post:
    """One feed item."""

    id: str
    kind: str = "text"
    title: str = ""
    content: str = ""
    url: str = ""
    upvotes: int = 0
    downvotes: int = 0
    created_at: datetime | None = None
    author_name: str = ""
    submolt_name: str = ""
    submolt_display_name: str = ""
    similarity: float | None = None

    @classmethod
    def from_api(cls, data: dict) -> Post:
        submolt = data.get("submolt")
        display_name = _nested_name(submolt, "display_name") if isinstance(submolt, dict) else ""
        similarity = data.get("similarity")
        return cls(
            id=_as_str(data.get("id")),
            kind=_as_str(data.get("type")) or "text",
            title=_as_str(data.get("title")),
            content=_as_str(data.get("content")),
            url=_as_str(data.get("url")),
            upvotes=_as_int(data.get("upvotes")),
            downvotes=_as_int(data.get("downvotes")),
            created_at=parse_timestamp(data.get("created_at")),
            author_name=_nested_name(data.get("author")),
            submolt_name=_nested_name(submolt),
            submolt_display_name=display_name,
            similarity=float(similarity) if isinstance(similarity, (int, float)) and not isinstance(similarity, bool) else None,
        )

    @property
    def community_label(self) -> str:
        return self.submolt_display_name or self.submolt_name

    def with_upvotes(self, delta: int) -> Post:
        return replace(self, upvotes=max(0, self.upvotes + delta))


@dataclass(frozen=True)
class Comment:
    """One child entry under a post."""

    id: str
    content: str = ""
    author_name: str = ""
    upvotes: int = 0
    downvotes: int = 0
    created_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict) -> Comment:
        return cls(
            id=_as_str(data.get("id")),
            content=_as_str(data.get("content")),
            author_name=_nested_name(data.get("author")),
            upvotes=_as_int(data.get("upvotes")),
            downvotes=_as_int(data.get("downvotes")),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass(frozen=True)
class Agent:
    """An account on the service.

    ``api_key`` and ``claim_url`` are only present in a registration response.
    """

    name: str
    description: str = ""
    karma: int = 0
    follower_count: int = 0
    following_count: int = 0
    is_claimed: bool = False
    api_key: str = ""
    claim_url: str = ""
    verification_code: str = ""

    @classmethod
    def from_api(cls, data: dict) -> Agent:
        return cls(
            name=_as_str(data.get("name")),
            description=_as_str(data.get("description")),
            karma=_as_int(data.get("karma")),
            follower_count=_as_int(data.get("follower_count")),
            following_count=_as_int(data.get("following_count")),
            is_claimed=data.get("is_claimed") is True,
            api_key=_as_str(data.get("api_key")),
            claim_url=_as_str(data.get("claim_url")),
            verification_code=_as_str(data.get("verification_code")),
        )


@dataclass(frozen=True)
class Credential:
    """Persisted login: the issued API key and the agent name it belongs to."""

    api_key: str
    agent_name: str = ""


__all__ = ["Agent", "Comment", "Credential", "Post", "parse_timestamp"]
