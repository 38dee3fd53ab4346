"""Logging setup for the interactive client.

The TUI owns the terminal, so records go to a file instead of stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / f"{APP_NAME}.log"
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_file: Path | None = None, *, debug: bool = False) -> Path | None:
    """Route package logging to ``log_file`` (or the default log path).

    Returns the path actually used, or ``None`` when the log file cannot be
    opened; logging is then discarded rather than written over the screen.
    """
    target = log_file if log_file is not None else DEFAULT_LOG_PATH
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(target, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
        target = None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return target


__all__ = ["DEFAULT_LOG_PATH", "setup_logging"]
