"""Immutable session state.

Every value here is a frozen dataclass. The controller never mutates a
``Session``; it builds a new one with ``dataclasses.replace`` on every event,
so views and background work can hold references without locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from ..api.models import Agent, Comment, Credential, Post
from ..ui_theme import DEFAULT_THEME, UITheme

DEFAULT_PAGE_SIZE = 20
SORT_ORDERS: tuple[str, ...] = ("hot", "new", "top", "rising")


class Mode(Enum):
    LOADING = "loading"
    FEED = "feed"
    POST_DETAIL = "post_detail"
    CREATE_POST = "create_post"
    CREATE_COMMENT = "create_comment"
    REGISTER = "register"
    PROFILE = "profile"
    SEARCH = "search"


class RequestStatus(Enum):
    """Lifecycle of one class of outstanding request.

    ``IN_FLIGHT`` is the guard: a second request of the same class is never
    issued while it is set.
    """

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    ERROR = "error"


class FeedKind(Enum):
    GLOBAL = "global"
    PERSONALIZED = "personalized"
    SEARCH = "search"


@dataclass(frozen=True)
class FeedSource:
    """Which list the feed shows: global, personalized, or a search query."""

    kind: FeedKind = FeedKind.GLOBAL
    sort: str = "hot"
    query: str = ""

    @property
    def paginated(self) -> bool:
        return self.kind is not FeedKind.SEARCH

    @property
    def title(self) -> str:
        if self.kind is FeedKind.SEARCH:
            return f"SEARCH: {self.query}"
        if self.kind is FeedKind.PERSONALIZED:
            return f"PERSONALIZED FEED ({self.sort.upper()})"
        return f"{self.sort.upper()} FEED"

    def next_sort(self) -> FeedSource:
        if self.sort in SORT_ORDERS:
            idx = (SORT_ORDERS.index(self.sort) + 1) % len(SORT_ORDERS)
        else:
            idx = 0
        return replace(self, sort=SORT_ORDERS[idx])


@dataclass(frozen=True)
class Cursor:
    """Append-pagination bookkeeping for one list."""

    offset: int = 0
    status: RequestStatus = RequestStatus.IDLE
    all_loaded: bool = False
    last_error: str | None = None
    retries: int = 0

    @property
    def is_paginating(self) -> bool:
        return self.status is RequestStatus.IN_FLIGHT


@dataclass(frozen=True)
class ViewportState:
    """A laid-out scrollable region.

    ``offsets`` has one entry per selectable entry plus a trailing sentinel,
    so entry ``i`` spans ``lines[offsets[i]:offsets[i + 1]]``. ``synced_for``
    remembers the inputs of the last selection sync; free scrolling survives
    until one of them changes.
    """

    width: int = 0
    height: int = 0
    offset: int = 0
    lines: tuple[str, ...] = ()
    offsets: tuple[int, ...] = (0,)
    synced_for: tuple | None = None

    @property
    def total_lines(self) -> int:
        return len(self.lines)

    @property
    def max_offset(self) -> int:
        return max(0, self.total_lines - self.height)

    def visible(self) -> tuple[str, ...]:
        return self.lines[self.offset : self.offset + max(0, self.height)]


@dataclass(frozen=True)
class FeedState:
    source: FeedSource = field(default_factory=FeedSource)
    items: tuple[Post, ...] = ()
    selected: int = 0
    cursor: Cursor = field(default_factory=Cursor)
    load_status: RequestStatus = RequestStatus.IDLE
    generation: int = 0
    viewport: ViewportState = field(default_factory=ViewportState)

    @property
    def selected_item(self) -> Post | None:
        if 0 <= self.selected < len(self.items):
            return self.items[self.selected]
        return None


@dataclass(frozen=True)
class DetailState:
    post: Post
    origin: Mode = Mode.FEED
    comments: tuple[Comment, ...] = ()
    selected: int = 0
    cursor: Cursor = field(default_factory=Cursor)
    load_status: RequestStatus = RequestStatus.IDLE
    generation: int = 0
    viewport: ViewportState = field(default_factory=ViewportState)

    @property
    def loading_comments(self) -> bool:
        return self.load_status is RequestStatus.IN_FLIGHT or self.cursor.is_paginating


class ComposerKind(Enum):
    POST = "post"
    COMMENT = "comment"
    REGISTER = "register"
    SEARCH = "search"


@dataclass(frozen=True)
class ComposerStep:
    key: str
    prompt: str
    placeholder: str


@dataclass(frozen=True)
class ComposerState:
    """Linear multi-step text capture.

    ``values`` holds one slot per step; ``buffer`` is the text being edited
    for the current step.
    """

    kind: ComposerKind
    steps: tuple[ComposerStep, ...]
    origin: Mode = Mode.FEED
    step_index: int = 0
    values: tuple[str, ...] = ()
    buffer: str = ""
    status: RequestStatus = RequestStatus.IDLE
    generation: int = 0
    target_post_id: str = ""
    registered: Agent | None = None

    @property
    def current_step(self) -> ComposerStep:
        return self.steps[self.step_index]

    @property
    def is_last_step(self) -> bool:
        return self.step_index >= len(self.steps) - 1

    @property
    def is_submitting(self) -> bool:
        return self.status is RequestStatus.IN_FLIGHT

    def value(self, key: str) -> str:
        for step, value in zip(self.steps, self.values):
            if step.key == key:
                return value
        return ""


@dataclass(frozen=True)
class ProfileState:
    agent: Agent | None = None
    posts: tuple[Post, ...] = ()
    selected: int = 0
    load_status: RequestStatus = RequestStatus.IDLE
    delete_status: RequestStatus = RequestStatus.IDLE
    generation: int = 0
    delete_generation: int = 0
    viewport: ViewportState = field(default_factory=ViewportState)

    @property
    def selected_item(self) -> Post | None:
        if 0 <= self.selected < len(self.posts):
            return self.posts[self.selected]
        return None


@dataclass(frozen=True)
class Session:
    """Whole client state; replaced wholesale on every event."""

    mode: Mode = Mode.LOADING
    width: int = 0
    height: int = 0
    now: float = 0.0
    error: str | None = None
    message: str = ""
    message_until: float = 0.0
    feed: FeedState | None = None
    detail: DetailState | None = None
    composer: ComposerState | None = None
    profile: ProfileState | None = None
    credential: Credential | None = None
    agent: Agent | None = None
    upvoted: frozenset[str] = frozenset()
    followed: frozenset[str] = frozenset()
    follows_in_flight: frozenset[str] = frozenset()
    spinner_frame: int = 0
    token_seq: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    theme: UITheme = DEFAULT_THEME
    quitting: bool = False

    @property
    def is_submitting(self) -> bool:
        if self.composer is not None and self.composer.is_submitting:
            return True
        return self.profile is not None and self.profile.delete_status is RequestStatus.IN_FLIGHT

    @property
    def is_loading(self) -> bool:
        """True while any list-replacing request for a visible view is outstanding."""
        if self.mode is Mode.LOADING:
            return True
        if self.mode is Mode.FEED and self.feed is not None:
            return self.feed.load_status is RequestStatus.IN_FLIGHT
        if self.mode is Mode.POST_DETAIL and self.detail is not None:
            return self.detail.load_status is RequestStatus.IN_FLIGHT
        if self.mode is Mode.PROFILE and self.profile is not None:
            return self.profile.load_status is RequestStatus.IN_FLIGHT
        return False

    @property
    def is_busy(self) -> bool:
        """Whether a spinner should be animating."""
        if self.is_loading or self.is_submitting:
            return True
        if self.feed is not None and self.feed.cursor.is_paginating:
            return True
        return self.detail is not None and self.detail.loading_comments


def next_token(session: Session) -> tuple[Session, int]:
    """Allocate a fresh request-correlation token."""
    token = session.token_seq + 1
    return replace(session, token_seq=token), token


STATUS_MESSAGE_SECONDS = 4.0


def with_message(session: Session, message: str) -> Session:
    """Attach a transient, non-blocking message that expires on a later tick."""
    return replace(session, message=message, message_until=session.now + STATUS_MESSAGE_SECONDS)


def with_error(session: Session, message: str) -> Session:
    """Attach a blocking error; it intercepts keys until retried or cleared."""
    return replace(session, error=message)


__all__ = [
    "ComposerKind",
    "ComposerState",
    "ComposerStep",
    "Cursor",
    "DEFAULT_PAGE_SIZE",
    "DetailState",
    "FeedKind",
    "FeedSource",
    "FeedState",
    "Mode",
    "ProfileState",
    "RequestStatus",
    "SORT_ORDERS",
    "STATUS_MESSAGE_SECONDS",
    "Session",
    "ViewportState",
    "next_token",
    "with_error",
    "with_message",
]
