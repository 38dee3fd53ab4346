"""Feed list: reset/append pagination, infinite scroll, and merge policy.

A reset replaces the list and is the only request whose failure blocks the
screen, and it blocks only while the feed is on screen. Appends are issued as
a side effect of moving the selection near the end of the list; their
failures are retried quietly a bounded number of times.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .commands import Command, Delayed, FetchFeedPage
from .events import FeedPageLoaded
from .state import (
    Cursor,
    FeedSource,
    FeedState,
    Mode,
    RequestStatus,
    Session,
    next_token,
    with_error,
    with_message,
)
from .viewport import reset_scroll

log = logging.getLogger(__name__)

# Selection within this many rows of the end triggers the next page.
PAGINATION_THRESHOLD = 2
PAGINATION_RETRY_DELAY_SECONDS = 3.0
MAX_PAGINATION_RETRIES = 3


def reset_and_load(session: Session, source: FeedSource | None = None) -> tuple[Session, list[Command]]:
    """Clear the list, cursor, and selection, and request page one."""
    previous = session.feed or FeedState()
    source = source or previous.source
    session, token = next_token(session)
    feed = FeedState(
        source=source,
        load_status=RequestStatus.IN_FLIGHT,
        generation=token,
        viewport=reset_scroll(previous.viewport),
    )
    command = FetchFeedPage(token=token, source=source, limit=session.page_size, offset=0, append=False)
    return replace(session, feed=feed), [command]


def load_more(session: Session) -> tuple[Session, list[Command]]:
    """Request the next page unless one is in flight or the list is exhausted."""
    feed = session.feed
    if feed is None or not feed.source.paginated:
        return session, []
    if feed.load_status is RequestStatus.IN_FLIGHT or feed.cursor.is_paginating or feed.cursor.all_loaded:
        return session, []
    offset = len(feed.items)
    cursor = replace(feed.cursor, status=RequestStatus.IN_FLIGHT, retries=0, last_error=None)
    command = FetchFeedPage(
        token=feed.generation,
        source=feed.source,
        limit=session.page_size,
        offset=offset,
        append=True,
    )
    return replace(session, feed=replace(feed, cursor=cursor)), [command]


def move_selection(session: Session, delta: int) -> tuple[Session, list[Command]]:
    feed = session.feed
    if feed is None or not feed.items:
        return session, []
    selected = max(0, min(len(feed.items) - 1, feed.selected + delta))
    if selected == feed.selected:
        if delta > 0 and feed.cursor.status is RequestStatus.ERROR:
            # Pressing down on the last card re-arms a pagination that gave up.
            return load_more(session)
        return session, []
    cursor = feed.cursor
    if cursor.last_error is not None:
        cursor = replace(cursor, last_error=None)
    session = replace(session, feed=replace(feed, selected=selected, cursor=cursor))
    if delta > 0 and selected >= len(feed.items) - PAGINATION_THRESHOLD:
        return load_more(session)
    return session, []


def apply_page(session: Session, event: FeedPageLoaded) -> tuple[Session, list[Command]]:
    """Merge a page completion, dropping it when it belongs to an older reset."""
    feed = session.feed
    if feed is None or event.token != feed.generation:
        log.debug("dropping stale feed page (token %s)", event.token)
        return session, []
    if event.append:
        return _apply_append(session, feed, event)
    return _apply_reset(session, feed, event)


def _apply_reset(session: Session, feed: FeedState, event: FeedPageLoaded) -> tuple[Session, list[Command]]:
    if feed.load_status is not RequestStatus.IN_FLIGHT:
        return session, []
    if event.error is not None:
        feed = replace(feed, load_status=RequestStatus.ERROR)
        session = replace(session, feed=feed)
        if session.mode is not Mode.FEED:
            log.info("feed reload failed off-screen: %s", event.error.message)
            return session, []
        return with_error(session, event.error.message), []

    items = tuple(event.posts)
    cursor = Cursor(
        offset=len(items),
        all_loaded=len(items) < event.limit or not feed.source.paginated,
    )
    feed = replace(
        feed,
        items=items,
        selected=0,
        cursor=cursor,
        load_status=RequestStatus.IDLE,
        viewport=reset_scroll(feed.viewport),
    )
    session = replace(session, feed=feed)
    if session.mode is Mode.FEED:
        session = replace(session, error=None)
    return session, []


def _apply_append(session: Session, feed: FeedState, event: FeedPageLoaded) -> tuple[Session, list[Command]]:
    cursor = feed.cursor
    if not cursor.is_paginating:
        return session, []

    if event.error is not None:
        if cursor.retries < MAX_PAGINATION_RETRIES:
            log.info("feed page at offset %d failed (%s); retry %d", len(feed.items), event.error.message, cursor.retries + 1)
            cursor = replace(cursor, retries=cursor.retries + 1)
            retry = FetchFeedPage(
                token=feed.generation,
                source=feed.source,
                limit=event.limit,
                offset=len(feed.items),
                append=True,
            )
            session = replace(session, feed=replace(feed, cursor=cursor))
            return session, [Delayed(PAGINATION_RETRY_DELAY_SECONDS, retry)]
        log.info("giving up on feed page at offset %d: %s", len(feed.items), event.error.message)
        cursor = replace(cursor, status=RequestStatus.ERROR, last_error=event.error.message)
        session = replace(session, feed=replace(feed, cursor=cursor))
        return with_message(session, f"Could not load more posts: {event.error.message}"), []

    seen = {post.id for post in feed.items}
    fresh = tuple(post for post in event.posts if post.id not in seen)
    items = feed.items + fresh
    cursor = Cursor(
        offset=len(items),
        all_loaded=len(event.posts) < event.limit or not fresh,
    )
    return replace(session, feed=replace(feed, items=items, cursor=cursor)), []


def replace_item(feed: FeedState, post_id: str, delta: int) -> FeedState:
    """Adjust the upvote count of every copy of ``post_id`` in the list."""
    if not any(post.id == post_id for post in feed.items):
        return feed
    items = tuple(post.with_upvotes(delta) if post.id == post_id else post for post in feed.items)
    return replace(feed, items=items)


__all__ = [
    "MAX_PAGINATION_RETRIES",
    "PAGINATION_RETRY_DELAY_SECONDS",
    "PAGINATION_THRESHOLD",
    "apply_page",
    "load_more",
    "move_selection",
    "replace_item",
    "reset_and_load",
]
