"""Generic multi-step text entry used for posts, comments, sign-up and search.

The composer itself knows nothing about the network. ``handle_key`` edits the
buffer and reports when the final step was confirmed; the controller then asks
``submission_command`` for the effect to issue and marks the composer busy.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum

from .commands import Command, CreateComment, CreatePost, Register
from .state import ComposerKind, ComposerState, ComposerStep, Mode, RequestStatus

DEFAULT_SUBMOLT = "general"

STEPS: dict[ComposerKind, tuple[ComposerStep, ...]] = {
    ComposerKind.POST: (
        ComposerStep("title", "Title:", "Title"),
        ComposerStep("content", "Content:", "Write your content..."),
    ),
    ComposerKind.COMMENT: (
        ComposerStep("content", "Comment:", "Write a comment..."),
    ),
    ComposerKind.REGISTER: (
        ComposerStep("name", "First, let's name your AI agent:", "Agent Name"),
        ComposerStep("description", "Now, give it a short description:", "What does your agent do?"),
    ),
    ComposerKind.SEARCH: (
        ComposerStep("query", "Search posts:", "Search Moltbook..."),
    ),
}


class ComposerOutcome(Enum):
    NONE = "none"
    SUBMIT = "submit"


def open_composer(kind: ComposerKind, origin: Mode, target_post_id: str = "") -> ComposerState:
    steps = STEPS[kind]
    return ComposerState(
        kind=kind,
        steps=steps,
        origin=origin,
        values=("",) * len(steps),
        target_post_id=target_post_id,
    )


def _is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def handle_key(composer: ComposerState, key: str) -> tuple[ComposerState, ComposerOutcome]:
    """Apply one key press to the composer.

    Enter on blank input is a no-op. Enter on the last step yields
    ``SUBMIT`` once; while a submission is in flight every key is ignored.
    """
    if composer.is_submitting or composer.registered is not None:
        return composer, ComposerOutcome.NONE

    if key == "ENTER":
        value = composer.buffer.strip()
        if not value:
            return composer, ComposerOutcome.NONE
        values = list(composer.values)
        values[composer.step_index] = value
        composer = replace(composer, values=tuple(values))
        if composer.is_last_step:
            return composer, ComposerOutcome.SUBMIT
        next_index = composer.step_index + 1
        return replace(composer, step_index=next_index, buffer=composer.values[next_index]), ComposerOutcome.NONE

    if key == "BACKSPACE":
        return replace(composer, buffer=composer.buffer[:-1]), ComposerOutcome.NONE
    if key == "CTRL_U":
        return replace(composer, buffer=""), ComposerOutcome.NONE
    if key == "CTRL_W":
        trimmed = composer.buffer.rstrip()
        cut = trimmed.rfind(" ")
        return replace(composer, buffer=trimmed[: cut + 1] if cut >= 0 else ""), ComposerOutcome.NONE
    if key == "TAB":
        key = " "
    if _is_text_key(key):
        return replace(composer, buffer=composer.buffer + key), ComposerOutcome.NONE
    return composer, ComposerOutcome.NONE


def submission_command(composer: ComposerState, token: int) -> Command | None:
    """Return the effect that submits ``composer``; search has none."""
    if composer.kind is ComposerKind.POST:
        return CreatePost(
            token=token,
            submolt=DEFAULT_SUBMOLT,
            title=composer.value("title"),
            content=composer.value("content"),
        )
    if composer.kind is ComposerKind.COMMENT:
        return CreateComment(token=token, post_id=composer.target_post_id, content=composer.value("content"))
    if composer.kind is ComposerKind.REGISTER:
        return Register(token=token, name=composer.value("name"), description=composer.value("description"))
    return None


def mark_submitting(composer: ComposerState, token: int) -> ComposerState:
    return replace(composer, status=RequestStatus.IN_FLIGHT, generation=token)


def mark_failed(composer: ComposerState) -> ComposerState:
    """Keep every entered value so a retry needs no retyping."""
    return replace(composer, status=RequestStatus.ERROR)


__all__ = [
    "ComposerOutcome",
    "DEFAULT_SUBMOLT",
    "STEPS",
    "handle_key",
    "mark_failed",
    "mark_submitting",
    "open_composer",
    "submission_command",
]
