"""Single-post view with a paginated comment list.

Pagination mirrors the feed (same end-of-list threshold and merge policy),
but every completion is correlated with the post it was requested for and
the detail generation that issued it; anything else is dropped unmerged.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..api.models import Post
from .commands import Command, FetchComments
from .events import CommentsLoaded
from .feed import PAGINATION_THRESHOLD
from .state import (
    Cursor,
    DetailState,
    Mode,
    RequestStatus,
    Session,
    next_token,
    with_error,
    with_message,
)
from .viewport import reset_scroll

log = logging.getLogger(__name__)


def open_post(session: Session, post: Post, origin: Mode) -> tuple[Session, list[Command]]:
    detail = DetailState(post=post, origin=origin)
    session = replace(session, mode=Mode.POST_DETAIL, detail=detail, message="")
    return reload_comments(session)


def reload_comments(session: Session) -> tuple[Session, list[Command]]:
    """Drop loaded comments and fetch the first page again."""
    detail = session.detail
    if detail is None:
        return session, []
    session, token = next_token(session)
    detail = replace(
        detail,
        comments=(),
        selected=0,
        cursor=Cursor(),
        load_status=RequestStatus.IN_FLIGHT,
        generation=token,
        viewport=reset_scroll(detail.viewport),
    )
    command = FetchComments(token=token, post_id=detail.post.id, limit=session.page_size, offset=0, append=False)
    return replace(session, detail=detail), [command]


def load_more(session: Session) -> tuple[Session, list[Command]]:
    detail = session.detail
    if detail is None or not detail.comments:
        return session, []
    if detail.loading_comments or detail.cursor.all_loaded:
        return session, []
    cursor = replace(detail.cursor, status=RequestStatus.IN_FLIGHT, last_error=None)
    command = FetchComments(
        token=detail.generation,
        post_id=detail.post.id,
        limit=session.page_size,
        offset=len(detail.comments),
        append=True,
    )
    return replace(session, detail=replace(detail, cursor=cursor)), [command]


def move_selection(session: Session, delta: int) -> tuple[Session, list[Command]]:
    detail = session.detail
    if detail is None or not detail.comments:
        return session, []
    selected = max(0, min(len(detail.comments) - 1, detail.selected + delta))
    if selected == detail.selected:
        return session, []
    session = replace(session, detail=replace(detail, selected=selected))
    if delta > 0 and selected >= len(detail.comments) - PAGINATION_THRESHOLD:
        return load_more(session)
    return session, []


def apply_comments(session: Session, event: CommentsLoaded) -> tuple[Session, list[Command]]:
    detail = session.detail
    if detail is None or event.post_id != detail.post.id or event.token != detail.generation:
        log.debug("dropping stale comments for post %s", event.post_id)
        return session, []

    if not event.append:
        if detail.load_status is not RequestStatus.IN_FLIGHT:
            return session, []
        if event.error is not None:
            session = replace(session, detail=replace(detail, load_status=RequestStatus.ERROR))
            if session.mode is not Mode.POST_DETAIL:
                log.info("comment reload failed off-screen: %s", event.error.message)
                return session, []
            return with_error(session, event.error.message), []
        comments = tuple(event.comments)
        detail = replace(
            detail,
            comments=comments,
            selected=0,
            cursor=Cursor(offset=len(comments), all_loaded=len(comments) < event.limit),
            load_status=RequestStatus.IDLE,
        )
        session = replace(session, detail=detail)
        if session.mode is Mode.POST_DETAIL:
            session = replace(session, error=None)
        return session, []

    if not detail.cursor.is_paginating:
        return session, []
    if event.error is not None:
        cursor = replace(detail.cursor, status=RequestStatus.IDLE, last_error=event.error.message)
        session = replace(session, detail=replace(detail, cursor=cursor))
        return with_message(session, f"Failed to load comments: {event.error.message}"), []

    seen = {comment.id for comment in detail.comments}
    fresh = tuple(comment for comment in event.comments if comment.id not in seen)
    comments = detail.comments + fresh
    cursor = Cursor(offset=len(comments), all_loaded=len(event.comments) < event.limit or not fresh)
    return replace(session, detail=replace(detail, comments=comments, cursor=cursor)), []


__all__ = ["apply_comments", "load_more", "move_selection", "open_post", "reload_comments"]
