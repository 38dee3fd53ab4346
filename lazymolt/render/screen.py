"""Whole-screen composition for every session mode.

``render_screen`` is a pure function from session state to exactly
``session.height`` rows of styled text, each clipped to ``session.width``
display columns. Scrollable views only slice the viewport content that the
controller laid out; nothing here changes state.
"""

from __future__ import annotations

from ..ansi import clip_ansi_line, wrap_text
from ..session.composer import DEFAULT_SUBMOLT
from ..session.state import ComposerKind, ComposerState, Mode, Session, ViewportState
from ..ui_theme import paint
from .help import help_line

HEADER_ROWS = 2
FOOTER_ROWS = 2
SPINNER_FRAMES: tuple[str, ...] = ("⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷")

_COMPOSER_TITLES: dict[ComposerKind, str] = {
    ComposerKind.POST: " NEW POST ",
    ComposerKind.COMMENT: " ADD COMMENT ",
    ComposerKind.REGISTER: " WELCOME TO MOLTBOOK ",
    ComposerKind.SEARCH: " SEARCH ",
}
_COMPOSER_MODES = frozenset({Mode.CREATE_POST, Mode.CREATE_COMMENT, Mode.REGISTER, Mode.SEARCH})


def content_height(height: int) -> int:
    """Rows left for scrollable content once header and footer are drawn."""
    return max(1, height - HEADER_ROWS - FOOTER_ROWS)


def spinner_glyph(session: Session) -> str:
    return SPINNER_FRAMES[session.spinner_frame % len(SPINNER_FRAMES)]


def _fit(rows: list[str], width: int, height: int) -> list[str]:
    out = [clip_ansi_line(row, width) for row in rows[: max(0, height)]]
    out.extend("" for _ in range(max(0, height) - len(out)))
    return out


def _busy_suffix(session: Session) -> str:
    if not session.is_busy:
        return ""
    return " " + paint(session.theme.accent, spinner_glyph(session), session.theme)


def _status_row(session: Session) -> str:
    theme = session.theme
    if session.message:
        return paint(theme.accent, f" • {session.message}", theme)
    name = session.agent.name if session.agent is not None else ""
    if not name and session.credential is not None:
        name = session.credential.agent_name
    return paint(theme.muted, f" @{name}", theme) if name else ""


def _viewport_rows(viewport: ViewportState, rows: int) -> list[str]:
    visible = list(viewport.lines[viewport.offset : viewport.offset + rows])
    visible.extend("" for _ in range(rows - len(visible)))
    return visible


def _scroll_screen(session: Session, title: str, viewport: ViewportState, width: int, height: int) -> list[str]:
    theme = session.theme
    header = [
        title + _busy_suffix(session),
        paint(theme.muted, "─" * width, theme),
    ]
    body = _viewport_rows(viewport, content_height(height))
    footer = [_status_row(session), help_line(session)]
    return header + body + footer


def _feed_title(session: Session) -> str:
    theme = session.theme
    source = session.feed.source if session.feed is not None else None
    label = paint(theme.title, " MOLTBOOK ", theme)
    if source is None:
        return label
    return f"{label} {paint(theme.header, source.title, theme)}"


def _detail_title(session: Session) -> str:
    theme = session.theme
    community = session.detail.post.community_label if session.detail is not None else ""
    return paint(theme.title, f" m/{community} " if community else " POST ", theme)


def _profile_title(session: Session) -> str:
    profile = session.profile
    name = ""
    if profile is not None and profile.agent is not None:
        name = profile.agent.name
    elif session.credential is not None:
        name = session.credential.agent_name
    return paint(session.theme.title, f" PROFILE: {name} " if name else " PROFILE ", session.theme)


def _error_rows(session: Session, width: int) -> list[str]:
    theme = session.theme
    rows = ["", " " + paint(theme.error_title, " ERROR ", theme), ""]
    rows.extend(" " + paint(theme.error_text, row, theme) for row in wrap_text(session.error or "", max(1, width - 2)))
    rows.append("")
    rows.append(help_line(session))
    return rows


def _loading_rows(session: Session) -> list[str]:
    theme = session.theme
    return [
        "",
        f" {paint(theme.accent, spinner_glyph(session), theme)} {paint(theme.bold, 'Loading Moltbook...', theme)}",
        paint(theme.muted, " Please wait, AI swarms are busy...", theme),
    ]


def _composer_subtitle(session: Session, composer: ComposerState) -> str:
    if composer.kind is ComposerKind.POST:
        return f"Posting to m/{DEFAULT_SUBMOLT}"
    if composer.kind is ComposerKind.COMMENT and session.detail is not None:
        return f"Replying to: {session.detail.post.title or 'Post'}"
    if composer.kind is ComposerKind.REGISTER:
        return "Register a new AI agent to start posting."
    return ""


def _registered_rows(session: Session, composer: ComposerState) -> list[str]:
    theme = session.theme
    agent = composer.registered
    if agent is None:
        return []
    rows = [
        paint(theme.title, _COMPOSER_TITLES[ComposerKind.REGISTER], theme),
        "",
        f" Registration successful! Welcome, {paint(theme.bold, agent.name, theme)}.",
        "",
        " Your API key:",
        "   " + paint(theme.accent, agent.api_key, theme),
        "",
        " " + paint(theme.error_text, "IMPORTANT: SAVE YOUR API KEY!", theme),
    ]
    if agent.claim_url:
        rows.extend(["", " Claim your agent:", "   " + paint(theme.accent, agent.claim_url, theme)])
    if agent.verification_code:
        rows.append(f" Verification code: {agent.verification_code}")
    return rows


def _composer_rows(session: Session, composer: ComposerState, width: int) -> list[str]:
    if composer.registered is not None:
        return _registered_rows(session, composer)
    theme = session.theme
    rows = [paint(theme.title, _COMPOSER_TITLES[composer.kind], theme), ""]
    subtitle = _composer_subtitle(session, composer)
    if subtitle:
        rows.extend([paint(theme.muted, " " + subtitle, theme), ""])

    for idx, step in enumerate(composer.steps[: composer.step_index]):
        rows.append(" " + paint(theme.header, step.prompt, theme))
        rows.extend("   " + row for row in wrap_text(composer.values[idx], max(1, width - 4)))
        rows.append("")

    step = composer.current_step
    rows.append(" " + paint(theme.header, step.prompt, theme))
    if composer.buffer:
        text_rows = wrap_text(composer.buffer + ("" if composer.is_submitting else "█"), max(1, width - 4))
        rows.append(" > " + text_rows[0])
        rows.extend("   " + row for row in text_rows[1:])
    else:
        rows.append(" > " + paint(theme.input_placeholder, step.placeholder, theme))

    if composer.is_submitting:
        rows.extend(["", f" {paint(theme.accent, spinner_glyph(session), theme)} Submitting..."])
    return rows


def render_screen(session: Session) -> list[str]:
    """Return the full frame for ``session``: ``height`` rows clipped to ``width``."""
    width = max(1, session.width)
    height = max(1, session.height)

    if session.error is not None:
        return _fit(_error_rows(session, width), width, height)
    if session.mode in _COMPOSER_MODES and session.composer is not None:
        rows = _composer_rows(session, session.composer, width)
        return _fit(rows, width, height - 1) + [clip_ansi_line(help_line(session), width)]
    if session.mode is Mode.FEED and session.feed is not None:
        rows = _scroll_screen(session, _feed_title(session), session.feed.viewport, width, height)
    elif session.mode is Mode.POST_DETAIL and session.detail is not None:
        rows = _scroll_screen(session, _detail_title(session), session.detail.viewport, width, height)
    elif session.mode is Mode.PROFILE and session.profile is not None:
        rows = _scroll_screen(session, _profile_title(session), session.profile.viewport, width, height)
    else:
        rows = _loading_rows(session)
    return _fit(rows, width, height)


__all__ = [
    "FOOTER_ROWS",
    "HEADER_ROWS",
    "SPINNER_FRAMES",
    "content_height",
    "render_screen",
    "spinner_glyph",
]
