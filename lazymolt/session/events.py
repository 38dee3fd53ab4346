"""Closed set of events the session controller understands.

Input, timer ticks, and completions of background commands all arrive as one
of these. Completion events echo back the correlation token their command
was issued with, so relevance checks are a plain equality test.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..api.errors import GatewayError
from ..api.models import Agent, Comment, Credential, Post


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class Tick:
    """Periodic clock event; drives the spinner and message expiry."""

    now: float


@dataclass(frozen=True)
class CredentialLoaded:
    credential: Credential


@dataclass(frozen=True)
class CredentialMissing:
    pass


@dataclass(frozen=True)
class CredentialStored:
    error: Exception | None = None


@dataclass(frozen=True)
class FeedPageLoaded:
    token: int
    append: bool
    limit: int
    posts: tuple[Post, ...] = ()
    error: GatewayError | None = None


@dataclass(frozen=True)
class CommentsLoaded:
    token: int
    post_id: str
    append: bool
    limit: int
    comments: tuple[Comment, ...] = ()
    error: GatewayError | None = None


@dataclass(frozen=True)
class VoteCompleted:
    post_id: str
    error: GatewayError | None = None


@dataclass(frozen=True)
class PostCreated:
    token: int
    error: GatewayError | None = None


@dataclass(frozen=True)
class CommentCreated:
    token: int
    post_id: str
    error: GatewayError | None = None


@dataclass(frozen=True)
class Registered:
    token: int
    agent: Agent | None = None
    error: GatewayError | None = None


@dataclass(frozen=True)
class ProfileLoaded:
    token: int
    agent: Agent | None = None
    posts: tuple[Post, ...] = ()
    error: GatewayError | None = None


@dataclass(frozen=True)
class PostDeleted:
    token: int
    post_id: str
    error: GatewayError | None = None


@dataclass(frozen=True)
class FollowCompleted:
    name: str
    follow: bool
    error: GatewayError | None = None


Event = Union[
    KeyPressed,
    Resized,
    Tick,
    CredentialLoaded,
    CredentialMissing,
    CredentialStored,
    FeedPageLoaded,
    CommentsLoaded,
    VoteCompleted,
    PostCreated,
    CommentCreated,
    Registered,
    ProfileLoaded,
    PostDeleted,
    FollowCompleted,
]

__all__ = [
    "CommentCreated",
    "CommentsLoaded",
    "CredentialLoaded",
    "CredentialMissing",
    "CredentialStored",
    "Event",
    "FeedPageLoaded",
    "FollowCompleted",
    "KeyPressed",
    "PostCreated",
    "PostDeleted",
    "ProfileLoaded",
    "Registered",
    "Resized",
    "Tick",
    "VoteCompleted",
]
