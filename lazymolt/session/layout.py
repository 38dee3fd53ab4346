"""Content reflow for the scrollable views.

After every event the controller asks ``relayout`` to re-render the active
list view and fold the result into its viewport, so the line-offset table is
always current before the selection sync runs.
"""

from __future__ import annotations

from dataclasses import replace

from ..render.content import detail_content, feed_content, profile_content
from ..render.screen import content_height
from .state import Mode, Session, ViewportState
from .viewport import apply_layout, scroll_by


def relayout(session: Session) -> Session:
    """Rebuild the active view's content and re-sync its scroll offset."""
    width = max(1, session.width)
    height = content_height(session.height)
    theme = session.theme
    if session.mode is Mode.FEED and session.feed is not None:
        feed = session.feed
        lines, offsets = feed_content(feed, width, theme, session.upvoted)
        viewport = apply_layout(feed.viewport, lines, offsets, feed.selected, width, height)
        return replace(session, feed=replace(feed, viewport=viewport))
    if session.mode is Mode.POST_DETAIL and session.detail is not None:
        detail = session.detail
        lines, offsets = detail_content(detail, width, theme, session.upvoted)
        viewport = apply_layout(detail.viewport, lines, offsets, detail.selected, width, height)
        return replace(session, detail=replace(detail, viewport=viewport))
    if session.mode is Mode.PROFILE and session.profile is not None:
        profile = session.profile
        lines, offsets = profile_content(profile, width, theme, session.upvoted)
        viewport = apply_layout(profile.viewport, lines, offsets, profile.selected, width, height)
        return replace(session, profile=replace(profile, viewport=viewport))
    return session


def active_viewport(session: Session) -> ViewportState | None:
    if session.mode is Mode.FEED and session.feed is not None:
        return session.feed.viewport
    if session.mode is Mode.POST_DETAIL and session.detail is not None:
        return session.detail.viewport
    if session.mode is Mode.PROFILE and session.profile is not None:
        return session.profile.viewport
    return None


def scroll_active(session: Session, delta: int) -> Session:
    """Scroll the active view freely without moving its selection."""
    if session.mode is Mode.FEED and session.feed is not None:
        feed = session.feed
        return replace(session, feed=replace(feed, viewport=scroll_by(feed.viewport, delta)))
    if session.mode is Mode.POST_DETAIL and session.detail is not None:
        detail = session.detail
        return replace(session, detail=replace(detail, viewport=scroll_by(detail.viewport, delta)))
    if session.mode is Mode.PROFILE and session.profile is not None:
        profile = session.profile
        return replace(session, profile=replace(profile, viewport=scroll_by(profile.viewport, delta)))
    return session


__all__ = ["active_viewport", "relayout", "scroll_active"]
