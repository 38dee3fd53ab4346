"""Scrollable content builders for the feed, post detail, and profile views.

Each builder returns ``(lines, offsets)``: the full rendered content and the
line index where every selectable entry starts, followed by one sentinel
offset marking the end of the entry region. A status line (loading, end of
list, or blank) always follows the sentinel so the last entry keeps one line
of breathing room when it is scrolled into view.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..ansi import pad_ansi_line, truncate_text, wrap_text
from ..api.models import Comment, Post
from ..session.state import DetailState, FeedState, ProfileState, RequestStatus
from ..ui_theme import UITheme, paint

CONTENT_PREVIEW_CHARS = 100

_ROUNDED = ("╭", "╮", "╰", "╯", "─", "│")
_HEAVY = ("┏", "┓", "┗", "┛", "━", "┃")


def _upvote_badge(theme: UITheme, upvoted: bool) -> str:
    return " " + paint(theme.upvoted, "[UPVOTED]", theme) if upvoted else ""


def post_card(post: Post, width: int, theme: UITheme, *, selected: bool, upvoted: bool) -> list[str]:
    """Render one post as a bordered card exactly ``width`` columns wide.

    The selected card uses a heavy border so selection stays visible even
    with the plain theme.
    """
    inner = max(1, width - 4)
    top_left, top_right, bottom_left, bottom_right, horizontal, vertical = _HEAVY if selected else _ROUNDED
    border = theme.card_border_selected if selected else theme.card_border

    body: list[str] = [paint(theme.bold, row, theme) for row in wrap_text(post.title or "Post", inner)]
    if post.content:
        body.extend(wrap_text(truncate_text(post.content, CONTENT_PREVIEW_CHARS), inner))
    elif post.url:
        body.append(paint(theme.accent, post.url, theme))
    body.append("")

    meta = [paint(theme.author, post.author_name or "unknown", theme)]
    if post.community_label:
        meta.append(paint(theme.community, f"m/{post.community_label}", theme))
    meta.append(f"{post.upvotes} 🦞")
    body.append(" · ".join(meta) + _upvote_badge(theme, upvoted))

    side = paint(border, vertical, theme)
    lines = [paint(border, top_left + horizontal * (inner + 2) + top_right, theme)]
    lines.extend(f"{side} {pad_ansi_line(row, inner)} {side}" for row in body)
    lines.append(paint(border, bottom_left + horizontal * (inner + 2) + bottom_right, theme))
    return lines


def _append_cards(
    lines: list[str],
    offsets: list[int],
    posts: Iterable[Post],
    selected: int,
    width: int,
    theme: UITheme,
    upvoted: frozenset[str],
) -> None:
    for idx, post in enumerate(posts):
        offsets.append(len(lines))
        lines.extend(post_card(post, width, theme, selected=idx == selected, upvoted=post.id in upvoted))
        lines.append("")


def feed_content(
    feed: FeedState,
    width: int,
    theme: UITheme,
    upvoted: frozenset[str] = frozenset(),
) -> tuple[list[str], list[int]]:
    if not feed.items:
        if feed.load_status is RequestStatus.IN_FLIGHT:
            return ["", " Fetching posts..."], [0]
        return ["", " No posts found. Press 'r' to refresh."], [0]

    lines: list[str] = []
    offsets: list[int] = []
    _append_cards(lines, offsets, feed.items, feed.selected, width, theme, upvoted)
    offsets.append(len(lines))

    cursor = feed.cursor
    if cursor.is_paginating:
        footer = paint(theme.muted, " Loading more...", theme)
    elif cursor.last_error is not None:
        footer = paint(theme.error_text, " Could not load more posts. Move down to try again.", theme)
    elif cursor.all_loaded:
        footer = paint(theme.muted, " No more posts.", theme)
    else:
        footer = ""
    lines.append(footer)
    return lines, offsets


def _comment_block(comment: Comment, width: int, theme: UITheme, *, selected: bool) -> list[str]:
    bar = paint(theme.card_border_selected if selected else theme.card_border, "┃" if selected else "│", theme)
    rows = wrap_text(comment.content, max(1, width - 5))
    meta = paint(theme.author, comment.author_name or "unknown", theme) + f" · {comment.upvotes} 🦞"
    return [f"  {bar} {row}" for row in rows] + [f"  {bar} {meta}"]


def detail_content(
    detail: DetailState,
    width: int,
    theme: UITheme,
    upvoted: frozenset[str] = frozenset(),
) -> tuple[list[str], list[int]]:
    """Lay out the post body followed by its comment thread.

    The post body sits above the first comment, so it is only reachable
    because selecting comment 0 scrolls to the very top.
    """
    post = detail.post
    text_width = max(1, width - 2)
    lines: list[str] = [" " + paint(theme.bold, row, theme) for row in wrap_text(post.title or "Post", text_width)]
    by_line = paint(theme.author, post.author_name or "unknown", theme) + f" · {post.upvotes} Upvotes"
    lines.append(" " + by_line + _upvote_badge(theme, post.id in upvoted))
    lines.append("")
    if post.content:
        lines.extend("  " + row for row in wrap_text(post.content, max(1, width - 4)))
    if post.url:
        lines.append("  " + paint(theme.accent, post.url, theme))
    lines.append("")
    lines.append(" " + paint(theme.header, f"COMMENTS ({len(detail.comments)})", theme))
    lines.append("")

    offsets: list[int] = []
    if not detail.comments:
        offsets.append(len(lines))
        if detail.load_status is RequestStatus.IN_FLIGHT:
            lines.append(paint(theme.muted, "  Loading discussion...", theme))
        else:
            lines.append(paint(theme.muted, "  No comments yet. Be the first!", theme))
        return lines, offsets

    for idx, comment in enumerate(detail.comments):
        offsets.append(len(lines))
        lines.extend(_comment_block(comment, width, theme, selected=idx == detail.selected))
        lines.append("")
    offsets.append(len(lines))

    if detail.cursor.is_paginating:
        lines.append(paint(theme.muted, "  Loading more...", theme))
    elif detail.cursor.all_loaded:
        lines.append(paint(theme.muted, "  End of discussion.", theme))
    else:
        lines.append(paint(theme.muted, "  l: load more comments", theme))
    return lines, offsets


def profile_content(
    profile: ProfileState,
    width: int,
    theme: UITheme,
    upvoted: frozenset[str] = frozenset(),
) -> tuple[list[str], list[int]]:
    agent = profile.agent
    if agent is None:
        text = " Loading profile..." if profile.load_status is RequestStatus.IN_FLIGHT else " Profile unavailable."
        return ["", paint(theme.muted, text, theme)], [0]

    lines: list[str] = []
    if agent.description:
        lines.append(" " + paint(theme.header, "Description", theme))
        lines.extend("  " + row for row in wrap_text(agent.description, max(1, width - 4)))
        lines.append("")
    lines.append(
        f" {agent.karma} Karma · {agent.follower_count} Followers · {agent.following_count} Following"
    )
    status = "Claimed ✅" if agent.is_claimed else "Pending Claim ⏳"
    lines.append(f" Status: {status}")
    lines.append("")
    lines.append(" " + paint(theme.header, "MY RECENT POSTS", theme))
    lines.append("")

    offsets: list[int] = []
    _append_cards(lines, offsets, profile.posts, profile.selected, width, theme, upvoted)
    offsets.append(len(lines))
    lines.append(paint(theme.muted, " No posts yet." if not profile.posts else "", theme))
    return lines, offsets


__all__ = ["CONTENT_PREVIEW_CHARS", "detail_content", "feed_content", "post_card", "profile_content"]
