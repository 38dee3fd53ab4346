"""Closed set of side effects the controller can request.

Commands are plain data. The runtime dispatcher executes them off the event
loop and answers each with exactly one completion event (``Quit`` and
``Delayed`` aside: ``Quit`` ends the loop, ``Delayed`` answers with whatever
its inner command answers).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..api.models import Credential
from .state import FeedSource


@dataclass(frozen=True)
class LoadCredential:
    pass


@dataclass(frozen=True)
class StoreCredential:
    credential: Credential


@dataclass(frozen=True)
class FetchFeedPage:
    token: int
    source: FeedSource
    limit: int
    offset: int
    append: bool


@dataclass(frozen=True)
class FetchComments:
    token: int
    post_id: str
    limit: int
    offset: int
    append: bool


@dataclass(frozen=True)
class Upvote:
    post_id: str


@dataclass(frozen=True)
class CreatePost:
    token: int
    submolt: str
    title: str
    content: str


@dataclass(frozen=True)
class CreateComment:
    token: int
    post_id: str
    content: str


@dataclass(frozen=True)
class Register:
    token: int
    name: str
    description: str


@dataclass(frozen=True)
class FetchProfile:
    token: int
    agent_name: str


@dataclass(frozen=True)
class DeletePost:
    token: int
    post_id: str


@dataclass(frozen=True)
class Follow:
    name: str
    follow: bool = True


@dataclass(frozen=True)
class Delayed:
    """Run ``command`` after ``seconds``; used for pagination auto-retry."""

    seconds: float
    command: Command


@dataclass(frozen=True)
class Quit:
    pass


Command = Union[
    LoadCredential,
    StoreCredential,
    FetchFeedPage,
    FetchComments,
    Upvote,
    CreatePost,
    CreateComment,
    Register,
    FetchProfile,
    DeletePost,
    Follow,
    Delayed,
    Quit,
]

__all__ = [
    "Command",
    "CreateComment",
    "CreatePost",
    "Delayed",
    "DeletePost",
    "FetchComments",
    "FetchFeedPage",
    "FetchProfile",
    "Follow",
    "LoadCredential",
    "Quit",
    "Register",
    "StoreCredential",
    "Upvote",
]
