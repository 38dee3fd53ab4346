"""Main interactive event loop for the terminal UI.

Feeds key presses, resize notices, clock ticks, and command completions into
the session reducer one at a time, hands the commands it returns to the
dispatcher, and repaints only when the rendered frame changed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from ..render import render_screen
from ..session.commands import Command, Quit
from ..session.controller import handle
from ..session.events import Event, KeyPressed, Resized, Tick
from ..session.state import Session
from .dispatcher import CommandDispatcher
from .terminal import TerminalController

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_timeout_ms: int = 50
    tick_seconds: float = 0.1


def run_main_loop(
    session: Session,
    initial_commands: list[Command],
    terminal: TerminalController,
    dispatcher: CommandDispatcher,
    stdin_fd: int,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
    *,
    read_key_fn: Callable[..., str] = read_key,
    clock: Callable[[], float] = time.monotonic,
) -> Session:
    """Run the TUI until the session asks to quit; return the final session.

    Exactly one event is applied at a time, so the reducer never races with
    itself even though commands complete on worker threads.
    """
    current = session
    last_frame: list[str] | None = None
    last_tick = float("-inf")

    def apply(event: Event) -> None:
        nonlocal current
        current, commands = handle(current, event)
        for command in commands:
            if isinstance(command, Quit):
                log.info("quit requested")
                continue
            dispatcher.dispatch(command)

    dispatcher.dispatch_all(initial_commands)
    with terminal.raw_mode():
        while not current.quitting:
            width, height = terminal.size()
            if (width, height) != (current.width, current.height):
                apply(Resized(width=width, height=height))

            now = clock()
            if now - last_tick >= timing.tick_seconds:
                last_tick = now
                apply(Tick(now=now))

            for event in dispatcher.drain_results():
                apply(event)
                if current.quitting:
                    break
            if current.quitting:
                break

            frame = render_screen(current)
            if frame != last_frame:
                terminal.paint(frame)
                last_frame = frame

            key = read_key_fn(stdin_fd, timeout_ms=timing.key_timeout_ms)
            if key:
                apply(KeyPressed(key=key))
    return current


__all__ = ["RuntimeLoopTiming", "run_main_loop"]
