"""Runtime bootstrap: wire gateway, store, dispatcher, and session together."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

from ..api.client import MoltbookClient
from ..session.controller import initial_session
from ..ui_theme import resolve_theme
from .config import CredentialStore, Settings
from .dispatcher import CommandDispatcher
from .loop import RuntimeLoopTiming, run_main_loop
from .terminal import TerminalController

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientOptions:
    """Resolved start-up options after config, environment, and CLI merge."""

    settings: Settings
    theme_name: str | None = None
    no_color: bool = False


def run_client(options: ClientOptions) -> None:
    """Run the interactive client until the user quits."""
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("lazymolt needs an interactive terminal.")

    settings = options.settings
    theme = resolve_theme(options.theme_name or settings.theme, no_color=options.no_color)
    gateway = MoltbookClient(settings.base_url, timeout=settings.request_timeout)
    dispatcher = CommandDispatcher(gateway, CredentialStore())
    terminal = TerminalController(sys.stdin.fileno(), sys.stdout.fileno())
    width, height = terminal.size()
    session, commands = initial_session(width, height, page_size=settings.page_size, theme=theme)

    log.info("starting against %s (page size %d, theme %s)", settings.base_url, settings.page_size, theme.name)
    try:
        run_main_loop(
            session,
            commands,
            terminal,
            dispatcher,
            sys.stdin.fileno(),
            RuntimeLoopTiming(),
        )
    finally:
        dispatcher.shutdown()
        log.info("stopped")


__all__ = ["ClientOptions", "run_client"]
