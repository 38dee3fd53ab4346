"""Optimistic upvotes and author follows.

An upvote is applied locally the moment it is issued: the id joins the
upvoted set and every local copy of the post gains one vote. A failed vote
rolls both back. Because the set gates issuing, a post is never counted twice.
"""

from __future__ import annotations

from dataclasses import replace

from ..api.models import Post
from .commands import Command, Follow, Upvote
from .events import FollowCompleted, VoteCompleted
from .feed import replace_item
from .state import Session, with_message


def _adjust_everywhere(session: Session, post_id: str, delta: int) -> Session:
    feed = session.feed
    if feed is not None:
        feed = replace_item(feed, post_id, delta)
    detail = session.detail
    if detail is not None and detail.post.id == post_id:
        detail = replace(detail, post=detail.post.with_upvotes(delta))
    profile = session.profile
    if profile is not None and any(post.id == post_id for post in profile.posts):
        posts = tuple(post.with_upvotes(delta) if post.id == post_id else post for post in profile.posts)
        profile = replace(profile, posts=posts)
    return replace(session, feed=feed, detail=detail, profile=profile)


def start_vote(session: Session, post: Post | None) -> tuple[Session, list[Command]]:
    if post is None or not post.id:
        return session, []
    if post.id in session.upvoted:
        return with_message(session, "Already upvoted"), []
    session = replace(session, upvoted=session.upvoted | {post.id})
    return _adjust_everywhere(session, post.id, 1), [Upvote(post_id=post.id)]


def finish_vote(session: Session, event: VoteCompleted) -> tuple[Session, list[Command]]:
    if event.error is None:
        return session, []
    if event.post_id not in session.upvoted:
        return session, []
    session = replace(session, upvoted=session.upvoted - {event.post_id})
    session = _adjust_everywhere(session, event.post_id, -1)
    return with_message(session, f"Upvote failed: {event.error.message}"), []


def start_follow(session: Session, name: str) -> tuple[Session, list[Command]]:
    if not name or name in session.follows_in_flight:
        return session, []
    follow = name not in session.followed
    session = replace(session, follows_in_flight=session.follows_in_flight | {name})
    return session, [Follow(name=name, follow=follow)]


def finish_follow(session: Session, event: FollowCompleted) -> tuple[Session, list[Command]]:
    session = replace(session, follows_in_flight=session.follows_in_flight - {event.name})
    if event.error is not None:
        verb = "Follow" if event.follow else "Unfollow"
        return with_message(session, f"{verb} failed: {event.error.message}"), []
    if event.follow:
        session = replace(session, followed=session.followed | {event.name})
        return with_message(session, f"Following {event.name}! 🦞"), []
    session = replace(session, followed=session.followed - {event.name})
    return with_message(session, f"Unfollowed {event.name}"), []


__all__ = ["finish_follow", "finish_vote", "start_follow", "start_vote"]
