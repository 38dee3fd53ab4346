"""Session controller: the single reducer behind the whole client.

``handle(session, event)`` returns the next session and the commands to run.
It is the only place state changes. Keys are routed by mode through small
per-mode tables; completions are routed by event type to the owning
component. After every event the active view is laid out again, so the
viewport always reflects the state that will be painted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from ..api.models import Credential
from . import composer as composer_ops
from . import detail as detail_ops
from . import feed as feed_ops
from . import profile as profile_ops
from . import votes
from .commands import Command, LoadCredential, Quit, StoreCredential
from .events import (
    CommentCreated,
    CommentsLoaded,
    CredentialLoaded,
    CredentialMissing,
    CredentialStored,
    Event,
    FeedPageLoaded,
    FollowCompleted,
    KeyPressed,
    PostCreated,
    PostDeleted,
    ProfileLoaded,
    Registered,
    Resized,
    Tick,
    VoteCompleted,
)
from .layout import active_viewport, relayout, scroll_active
from .state import (
    ComposerKind,
    FeedKind,
    FeedSource,
    Mode,
    RequestStatus,
    Session,
    next_token,
    with_error,
    with_message,
)

log = logging.getLogger(__name__)

Result = tuple[Session, list[Command]]

COMPOSER_MODES = frozenset({Mode.CREATE_POST, Mode.CREATE_COMMENT, Mode.REGISTER, Mode.SEARCH})
_COMPOSER_MODE_FOR_KIND = {
    ComposerKind.POST: Mode.CREATE_POST,
    ComposerKind.COMMENT: Mode.CREATE_COMMENT,
    ComposerKind.REGISTER: Mode.REGISTER,
    ComposerKind.SEARCH: Mode.SEARCH,
}

DOWN_KEYS = frozenset({"j", "DOWN"})
UP_KEYS = frozenset({"k", "UP"})
BACK_KEYS = frozenset({"ESC", "b"})


def initial_session(
    width: int = 80,
    height: int = 24,
    **overrides,
) -> Result:
    """Build the start-up session in ``LOADING`` mode plus its first command."""
    session = Session(mode=Mode.LOADING, width=width, height=height, **overrides)
    return session, [LoadCredential()]


def _quit(session: Session) -> Result:
    return replace(session, quitting=True), [Quit()]


def _page_rows(session: Session, half: bool = False) -> int:
    viewport = active_viewport(session)
    rows = viewport.height if viewport is not None else session.height
    return max(1, rows // 2 if half else rows)


def _scroll_key(session: Session, key: str) -> Result | None:
    if key == "PAGE_DOWN":
        return scroll_active(session, _page_rows(session)), []
    if key == "PAGE_UP":
        return scroll_active(session, -_page_rows(session)), []
    if key == "CTRL_D":
        return scroll_active(session, _page_rows(session, half=True)), []
    if key == "CTRL_U":
        return scroll_active(session, -_page_rows(session, half=True)), []
    return None


def _open_composer(session: Session, kind: ComposerKind, target_post_id: str = "") -> Result:
    composer = composer_ops.open_composer(kind, session.mode, target_post_id)
    return replace(session, mode=_COMPOSER_MODE_FOR_KIND[kind], composer=composer, message=""), []


def _switch_feed(session: Session, kind: FeedKind) -> Result:
    """Show the global or personalized feed, dropping any layered view."""
    sort = session.feed.source.sort if session.feed is not None else "hot"
    session = replace(session, mode=Mode.FEED, error=None, detail=None, composer=None, profile=None)
    return feed_ops.reset_and_load(session, FeedSource(kind=kind, sort=sort))


def _show_feed(session: Session) -> Result:
    """Return to the feed, loading it when nothing was loaded or the last reset failed."""
    session = replace(session, mode=Mode.FEED, detail=None, composer=None, profile=None)
    if session.feed is None:
        return feed_ops.reset_and_load(session, FeedSource())
    if session.feed.load_status is RequestStatus.ERROR:
        return feed_ops.reset_and_load(session)
    return session, []


def _resume_detail(session: Session) -> Result:
    session = replace(session, mode=Mode.POST_DETAIL, composer=None)
    if session.detail is not None and session.detail.load_status is RequestStatus.ERROR:
        return detail_ops.reload_comments(session)
    return session, []


def _resume_profile(session: Session) -> Result:
    session = replace(session, mode=Mode.PROFILE, detail=None, composer=None)
    if session.profile is not None and session.profile.load_status is RequestStatus.ERROR:
        return profile_ops.reload(session)
    return session, []


def _feed_key(session: Session, key: str) -> Result:
    feed = session.feed
    if key in DOWN_KEYS:
        return feed_ops.move_selection(session, 1)
    if key in UP_KEYS:
        return feed_ops.move_selection(session, -1)
    if key == "ENTER":
        post = feed.selected_item if feed is not None else None
        if post is None:
            return session, []
        return detail_ops.open_post(session, post, Mode.FEED)
    if key == "u":
        return votes.start_vote(session, feed.selected_item if feed is not None else None)
    if key == "n":
        return _open_composer(session, ComposerKind.POST)
    if key == "/":
        return _open_composer(session, ComposerKind.SEARCH)
    if key == "p":
        return profile_ops.open_profile(session)
    if key == "h":
        return _switch_feed(session, FeedKind.GLOBAL)
    if key == "f":
        return _switch_feed(session, FeedKind.PERSONALIZED)
    if key == "s":
        source = feed.source if feed is not None else FeedSource()
        if source.kind is FeedKind.SEARCH:
            source = FeedSource(sort=source.sort)
        return feed_ops.reset_and_load(session, source.next_sort())
    if key == "r":
        return feed_ops.reset_and_load(session)
    if key in BACK_KEYS and feed is not None and feed.source.kind is FeedKind.SEARCH:
        return feed_ops.reset_and_load(session, FeedSource(sort=feed.source.sort))
    if key == "q":
        return _quit(session)
    return _scroll_key(session, key) or (session, [])


def _leave_detail(session: Session) -> Result:
    detail = session.detail
    origin = detail.origin if detail is not None else Mode.FEED
    if origin is Mode.PROFILE and session.profile is not None:
        return _resume_profile(session)
    return _show_feed(session)


def _detail_key(session: Session, key: str) -> Result:
    detail = session.detail
    if detail is None:
        return _show_feed(session)
    if key in DOWN_KEYS:
        return detail_ops.move_selection(session, 1)
    if key in UP_KEYS:
        return detail_ops.move_selection(session, -1)
    if key in BACK_KEYS:
        return _leave_detail(session)
    if key == "u":
        return votes.start_vote(session, detail.post)
    if key == "c":
        return _open_composer(session, ComposerKind.COMMENT, detail.post.id)
    if key == "F":
        return votes.start_follow(session, detail.post.author_name)
    if key == "l":
        return detail_ops.load_more(session)
    if key == "r":
        return detail_ops.reload_comments(session)
    if key == "q":
        return _quit(session)
    return _scroll_key(session, key) or (session, [])


def _profile_key(session: Session, key: str) -> Result:
    profile = session.profile
    if profile is None:
        return _show_feed(session)
    if key in DOWN_KEYS:
        return profile_ops.move_selection(session, 1)
    if key in UP_KEYS:
        return profile_ops.move_selection(session, -1)
    if key in BACK_KEYS:
        return _show_feed(session)
    if key == "ENTER":
        post = profile.selected_item
        if post is None:
            return session, []
        return detail_ops.open_post(session, post, Mode.PROFILE)
    if key == "u":
        return votes.start_vote(session, profile.selected_item)
    if key == "x":
        return profile_ops.delete_selected(session)
    if key == "r":
        return profile_ops.reload(session)
    if key == "q":
        return _quit(session)
    return _scroll_key(session, key) or (session, [])


def _submit(session: Session) -> Result:
    """Issue the composer's one submission; a second request is never made."""
    composer = session.composer
    if composer is None or composer.is_submitting:
        return session, []
    if composer.kind is ComposerKind.SEARCH:
        query = composer.value("query")
        session = replace(session, mode=Mode.FEED, composer=None)
        return feed_ops.reset_and_load(session, FeedSource(kind=FeedKind.SEARCH, query=query))
    session, token = next_token(session)
    command = composer_ops.submission_command(composer, token)
    if command is None:
        return session, []
    return replace(session, composer=composer_ops.mark_submitting(composer, token)), [command]


def _cancel_composer(session: Session) -> Result:
    composer = session.composer
    if composer is None:
        return _show_feed(session)
    if composer.kind is ComposerKind.REGISTER:
        # Browsing anonymously; the global feed needs no credential.
        session = replace(session, composer=None, mode=Mode.FEED)
        return feed_ops.reset_and_load(session, FeedSource())
    if composer.origin is Mode.POST_DETAIL and session.detail is not None:
        return _resume_detail(session)
    if composer.origin is Mode.PROFILE and session.profile is not None:
        return _resume_profile(session)
    return _show_feed(session)


def _composer_key(session: Session, key: str) -> Result:
    composer = session.composer
    if composer is None:
        return _show_feed(session)
    if composer.registered is not None:
        if key == "ENTER":
            session = replace(session, mode=Mode.FEED, composer=None)
            return feed_ops.reset_and_load(session, FeedSource())
        return session, []
    if key == "ESC":
        if composer.is_submitting:
            return session, []
        return _cancel_composer(session)
    composer, outcome = composer_ops.handle_key(composer, key)
    session = replace(session, composer=composer)
    if outcome is composer_ops.ComposerOutcome.SUBMIT:
        return _submit(session)
    return session, []


def _retry(session: Session) -> Result:
    """Re-issue whatever failed in the current mode."""
    session = replace(session, error=None)
    mode = session.mode
    if mode is Mode.LOADING:
        return session, [LoadCredential()]
    if mode is Mode.FEED:
        return feed_ops.reset_and_load(session)
    if mode is Mode.POST_DETAIL:
        return detail_ops.reload_comments(session)
    if mode is Mode.PROFILE:
        profile = session.profile
        if profile is not None and profile.delete_status is RequestStatus.ERROR:
            return profile_ops.delete_selected(session)
        return profile_ops.reload(session)
    if mode in COMPOSER_MODES and session.composer is not None:
        if session.composer.status is RequestStatus.ERROR:
            return _submit(session)
    return session, []


def _error_key(session: Session, key: str) -> Result:
    """While an error is shown only retry, dismiss, feed switches, and quit act."""
    if key == "r":
        return _retry(session)
    if key == "q":
        return _quit(session)
    if key in BACK_KEYS:
        return replace(session, error=None), []
    if key == "h":
        return _switch_feed(session, FeedKind.GLOBAL)
    if key == "f":
        return _switch_feed(session, FeedKind.PERSONALIZED)
    return session, []


_MODE_KEYS: dict[Mode, Callable[[Session, str], Result]] = {
    Mode.FEED: _feed_key,
    Mode.POST_DETAIL: _detail_key,
    Mode.PROFILE: _profile_key,
    Mode.CREATE_POST: _composer_key,
    Mode.CREATE_COMMENT: _composer_key,
    Mode.REGISTER: _composer_key,
    Mode.SEARCH: _composer_key,
}


def _on_key(session: Session, event: KeyPressed) -> Result:
    key = event.key
    if key == "CTRL_C":
        return _quit(session)
    if session.error is not None:
        return _error_key(session, key)
    handler = _MODE_KEYS.get(session.mode)
    if handler is None:
        if key == "q":
            return _quit(session)
        return session, []
    return handler(session, key)


def _on_resize(session: Session, event: Resized) -> Result:
    return replace(session, width=max(1, event.width), height=max(1, event.height)), []


def _on_tick(session: Session, event: Tick) -> Result:
    session = replace(session, now=event.now)
    if session.message and event.now >= session.message_until:
        session = replace(session, message="")
    if session.is_busy:
        session = replace(session, spinner_frame=session.spinner_frame + 1)
    return session, []


def _on_credential_loaded(session: Session, event: CredentialLoaded) -> Result:
    session = replace(session, credential=event.credential, mode=Mode.FEED, error=None)
    return feed_ops.reset_and_load(session, FeedSource())


def _on_credential_missing(session: Session, event: CredentialMissing) -> Result:
    composer = composer_ops.open_composer(ComposerKind.REGISTER, Mode.LOADING)
    return replace(session, mode=Mode.REGISTER, composer=composer, error=None), []


def _on_credential_stored(session: Session, event: CredentialStored) -> Result:
    if event.error is None:
        return session, []
    return with_message(session, f"Could not save credentials: {event.error}"), []


def _owned_composer(session: Session, kind: ComposerKind, token: int):
    composer = session.composer
    if composer is None or composer.kind is not kind or composer.generation != token:
        return None
    if not composer.is_submitting:
        return None
    return composer


def _on_post_created(session: Session, event: PostCreated) -> Result:
    composer = _owned_composer(session, ComposerKind.POST, event.token)
    if composer is None:
        log.debug("dropping stale post completion (token %s)", event.token)
        return session, []
    if event.error is not None:
        return with_error(replace(session, composer=composer_ops.mark_failed(composer)), event.error.message), []
    session = with_message(replace(session, mode=Mode.FEED, composer=None), "Post created! 🦞")
    return feed_ops.reset_and_load(session)


def _on_comment_created(session: Session, event: CommentCreated) -> Result:
    composer = _owned_composer(session, ComposerKind.COMMENT, event.token)
    if composer is None or composer.target_post_id != event.post_id:
        log.debug("dropping stale comment completion (token %s)", event.token)
        return session, []
    if event.error is not None:
        return with_error(replace(session, composer=composer_ops.mark_failed(composer)), event.error.message), []
    session = with_message(replace(session, mode=Mode.POST_DETAIL, composer=None), "Comment posted!")
    if session.detail is None or session.detail.post.id != event.post_id:
        return _show_feed(session)
    return detail_ops.reload_comments(session)


def _on_registered(session: Session, event: Registered) -> Result:
    composer = _owned_composer(session, ComposerKind.REGISTER, event.token)
    if composer is None:
        return session, []
    if event.error is not None or event.agent is None:
        message = event.error.message if event.error is not None else "registration returned no agent"
        return with_error(replace(session, composer=composer_ops.mark_failed(composer)), message), []
    agent = event.agent
    credential = Credential(api_key=agent.api_key, agent_name=agent.name)
    composer = replace(composer, status=RequestStatus.IDLE, registered=agent)
    session = replace(session, composer=composer, credential=credential, agent=agent)
    return session, [StoreCredential(credential)]


def _on_feed_page(session: Session, event: FeedPageLoaded) -> Result:
    return feed_ops.apply_page(session, event)


def _on_comments(session: Session, event: CommentsLoaded) -> Result:
    return detail_ops.apply_comments(session, event)


def _on_vote(session: Session, event: VoteCompleted) -> Result:
    return votes.finish_vote(session, event)


def _on_follow(session: Session, event: FollowCompleted) -> Result:
    return votes.finish_follow(session, event)


def _on_profile(session: Session, event: ProfileLoaded) -> Result:
    return profile_ops.apply_profile(session, event)


def _on_deleted(session: Session, event: PostDeleted) -> Result:
    return profile_ops.apply_delete(session, event)


_HANDLERS: dict[type, Callable[[Session, Event], Result]] = {
    KeyPressed: _on_key,
    Resized: _on_resize,
    Tick: _on_tick,
    CredentialLoaded: _on_credential_loaded,
    CredentialMissing: _on_credential_missing,
    CredentialStored: _on_credential_stored,
    FeedPageLoaded: _on_feed_page,
    CommentsLoaded: _on_comments,
    VoteCompleted: _on_vote,
    FollowCompleted: _on_follow,
    PostCreated: _on_post_created,
    CommentCreated: _on_comment_created,
    Registered: _on_registered,
    ProfileLoaded: _on_profile,
    PostDeleted: _on_deleted,
}


def handle(session: Session, event: Event) -> Result:
    """Apply one event; return the next session and the commands to execute."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"unsupported event: {type(event).__name__}")
    session, commands = handler(session, event)
    return relayout(session), commands


__all__ = ["COMPOSER_MODES", "handle", "initial_session"]
