"""Own-profile view: agent details, recent posts, and post deletion."""

from __future__ import annotations

import logging
from dataclasses import replace

from .commands import Command, DeletePost, FetchProfile
from .events import PostDeleted, ProfileLoaded
from .state import Mode, ProfileState, RequestStatus, Session, next_token, with_error, with_message
from .viewport import reset_scroll

log = logging.getLogger(__name__)


def open_profile(session: Session) -> tuple[Session, list[Command]]:
    session = replace(session, mode=Mode.PROFILE, profile=ProfileState(agent=session.agent), message="")
    return reload(session)


def reload(session: Session) -> tuple[Session, list[Command]]:
    profile = session.profile or ProfileState(agent=session.agent)
    session, token = next_token(session)
    profile = replace(
        profile,
        load_status=RequestStatus.IN_FLIGHT,
        generation=token,
        viewport=reset_scroll(profile.viewport),
    )
    agent_name = session.credential.agent_name if session.credential is not None else ""
    return replace(session, profile=profile), [FetchProfile(token=token, agent_name=agent_name)]


def move_selection(session: Session, delta: int) -> tuple[Session, list[Command]]:
    profile = session.profile
    if profile is None or not profile.posts:
        return session, []
    selected = max(0, min(len(profile.posts) - 1, profile.selected + delta))
    return replace(session, profile=replace(profile, selected=selected)), []


def apply_profile(session: Session, event: ProfileLoaded) -> tuple[Session, list[Command]]:
    profile = session.profile
    if profile is None or event.token != profile.generation:
        return session, []
    if event.error is not None or event.agent is None:
        session = replace(session, profile=replace(profile, load_status=RequestStatus.ERROR))
        message = event.error.message if event.error is not None else "could not find profile data"
        if session.mode is not Mode.PROFILE:
            log.info("profile reload failed off-screen: %s", message)
            return session, []
        return with_error(session, message), []
    posts = tuple(event.posts)
    selected = min(profile.selected, max(0, len(posts) - 1))
    profile = replace(profile, agent=event.agent, posts=posts, selected=selected, load_status=RequestStatus.IDLE)
    session = replace(session, profile=profile, agent=event.agent)
    if session.mode is Mode.PROFILE:
        session = replace(session, error=None)
    return session, []


def delete_selected(session: Session) -> tuple[Session, list[Command]]:
    """Delete the selected post; guarded so only one delete is ever outstanding."""
    profile = session.profile
    if profile is None or profile.delete_status is RequestStatus.IN_FLIGHT:
        return session, []
    post = profile.selected_item
    if post is None:
        return session, []
    session, token = next_token(session)
    profile = replace(profile, delete_status=RequestStatus.IN_FLIGHT, delete_generation=token)
    return replace(session, profile=profile), [DeletePost(token=token, post_id=post.id)]


def apply_delete(session: Session, event: PostDeleted) -> tuple[Session, list[Command]]:
    profile = session.profile
    if profile is None or event.token != profile.delete_generation:
        return session, []
    if event.error is not None:
        if session.mode is not Mode.PROFILE:
            session = replace(session, profile=replace(profile, delete_status=RequestStatus.IDLE))
            return with_message(session, f"Delete failed: {event.error.message}"), []
        session = replace(session, profile=replace(profile, delete_status=RequestStatus.ERROR))
        return with_error(session, event.error.message), []
    profile = replace(profile, delete_status=RequestStatus.IDLE)
    session = with_message(replace(session, profile=profile), "Post deleted")
    return reload(session)


__all__ = [
    "apply_delete",
    "apply_profile",
    "delete_selected",
    "move_selection",
    "open_profile",
    "reload",
]
