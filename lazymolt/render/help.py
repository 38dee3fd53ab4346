"""Contextual key-binding hints shown in the footer of every screen."""

from __future__ import annotations

from ..session.state import ComposerKind, ComposerState, Mode, Session
from ..ui_theme import paint

SEPARATOR = " • "

FEED_HELP: tuple[str, ...] = (
    "j/k: select",
    "pgup/pgdn: scroll",
    "enter: view",
    "u: upvote",
    "p: profile",
    "f/h: feeds",
    "s: sort",
    "/: search",
    "n: new",
    "r: refresh",
    "q: quit",
)

DETAIL_HELP: tuple[str, ...] = (
    "esc: back",
    "j/k: select comment",
    "pgup/pgdn: scroll",
    "u: upvote post",
    "c: comment",
    "F: follow author",
    "l: more comments",
    "r: reload",
)

PROFILE_HELP: tuple[str, ...] = (
    "esc: back",
    "j/k: select",
    "enter: view",
    "u: upvote",
    "x: delete post",
    "r: reload",
    "q: quit",
)

ERROR_HELP: tuple[str, ...] = ("r: retry", "esc: dismiss", "f/h: feeds", "q: quit")

_COMPOSER_HELP: dict[ComposerKind, tuple[str, ...]] = {
    ComposerKind.POST: ("enter: next/submit", "esc: cancel"),
    ComposerKind.COMMENT: ("enter: post", "esc: cancel"),
    ComposerKind.REGISTER: ("enter: next/submit", "esc: browse without an account"),
    ComposerKind.SEARCH: ("enter: search", "esc: cancel"),
}


def composer_help(composer: ComposerState) -> tuple[str, ...]:
    if composer.registered is not None:
        return ("enter: start browsing",)
    if composer.is_submitting:
        return ("please wait...",)
    return _COMPOSER_HELP[composer.kind]


def help_items(session: Session) -> tuple[str, ...]:
    """Return the binding hints for whatever screen ``session`` shows."""
    if session.error is not None:
        return ERROR_HELP
    if session.composer is not None and session.mode in {
        Mode.CREATE_POST,
        Mode.CREATE_COMMENT,
        Mode.REGISTER,
        Mode.SEARCH,
    }:
        return composer_help(session.composer)
    if session.mode is Mode.FEED:
        return FEED_HELP
    if session.mode is Mode.POST_DETAIL:
        return DETAIL_HELP
    if session.mode is Mode.PROFILE:
        return PROFILE_HELP
    return ("ctrl+c: quit",)


def help_line(session: Session) -> str:
    return paint(session.theme.help, " " + SEPARATOR.join(help_items(session)), session.theme)


__all__ = [
    "DETAIL_HELP",
    "ERROR_HELP",
    "FEED_HELP",
    "PROFILE_HELP",
    "composer_help",
    "help_items",
    "help_line",
]
