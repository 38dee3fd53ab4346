"""Event loop tests with a fake terminal, fake dispatcher, and scripted keys."""

from __future__ import annotations

from contextlib import contextmanager
import unittest

from lazymolt.api.models import Credential
from lazymolt.runtime.loop import RuntimeLoopTiming, run_main_loop
from lazymolt.session.commands import FetchFeedPage, LoadCredential, Quit
from lazymolt.session.controller import initial_session
from lazymolt.session.events import CredentialLoaded
from lazymolt.session.state import Mode
from lazymolt.ui_theme import PLAIN_THEME


class _FakeTerminal:
    def __init__(self, size: tuple[int, int] = (80, 24)) -> None:
        self._size = size
        self.frames: list[list[str]] = []
        self.raw_entered = 0

    @contextmanager
    def raw_mode(self):
        self.raw_entered += 1
        yield

    def size(self) -> tuple[int, int]:
        return self._size

    def paint(self, rows: list[str]) -> None:
        self.frames.append(list(rows))


class _FakeDispatcher:
    def __init__(self, *batches) -> None:
        self.batches = list(batches)
        self.dispatched: list = []

    def dispatch(self, command) -> None:
        self.dispatched.append(command)

    def dispatch_all(self, commands) -> None:
        for command in commands:
            self.dispatch(command)

    def drain_results(self) -> list:
        return self.batches.pop(0) if self.batches else []


def _keys(*keys: str):
    script = list(keys)
    calls: list[tuple] = []

    def read_key(fd: int, timeout_ms: int = 0) -> str:
        calls.append((fd, timeout_ms))
        return script.pop(0) if script else "q"

    return read_key, calls


def _run(terminal: _FakeTerminal, dispatcher: _FakeDispatcher, *keys: str):
    session, commands = initial_session(80, 24, theme=PLAIN_THEME)
    read_key, calls = _keys(*keys)
    final = run_main_loop(
        session,
        commands,
        terminal,
        dispatcher,
        stdin_fd=7,
        timing=RuntimeLoopTiming(key_timeout_ms=25),
        read_key_fn=read_key,
        clock=lambda: 0.0,
    )
    return final, calls


class RuntimeLoopTests(unittest.TestCase):
    def test_quit_from_loading_screen_dispatches_startup_command_only(self) -> None:
        terminal = _FakeTerminal()
        dispatcher = _FakeDispatcher()

        final, calls = _run(terminal, dispatcher, "", "", "q")

        self.assertTrue(final.quitting)
        self.assertEqual(dispatcher.dispatched, [LoadCredential()])
        self.assertEqual(calls, [(7, 25)] * 3)
        self.assertEqual(terminal.raw_entered, 1)

    def test_unchanged_frame_is_painted_once(self) -> None:
        terminal = _FakeTerminal()

        _run(terminal, _FakeDispatcher(), "", "", "", "q")

        self.assertEqual(len(terminal.frames), 1)
        self.assertEqual(len(terminal.frames[0]), 24)

    def test_terminal_size_change_is_applied_before_painting(self) -> None:
        terminal = _FakeTerminal(size=(100, 30))

        final, _ = _run(terminal, _FakeDispatcher(), "q")

        self.assertEqual((final.width, final.height), (100, 30))
        self.assertEqual(len(terminal.frames[0]), 30)

    def test_completions_are_applied_and_follow_up_commands_dispatched(self) -> None:
        terminal = _FakeTerminal()
        dispatcher = _FakeDispatcher([CredentialLoaded(Credential(api_key="k"))])

        final, _ = _run(terminal, dispatcher, "q")

        self.assertIs(final.mode, Mode.FEED)
        self.assertTrue(final.quitting)
        self.assertEqual(dispatcher.dispatched[0], LoadCredential())
        self.assertIsInstance(dispatcher.dispatched[1], FetchFeedPage)
        self.assertNotIn(Quit(), dispatcher.dispatched)


if __name__ == "__main__":
    unittest.main()
