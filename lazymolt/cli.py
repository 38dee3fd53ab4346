"""Command-line front door for lazymolt.

Parses CLI options, merges them over the settings file and environment,
sets up file logging, then dispatches into the interactive runtime.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

from . import __version__
from .runtime import ClientOptions, run_client
from .runtime.config import MAX_PAGE_SIZE, load_settings
from .runtime.logs import setup_logging
from .ui_theme import PLAIN_THEME, available_theme_names


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    if parsed > MAX_PAGE_SIZE:
        raise argparse.ArgumentTypeError(f"value must be <= {MAX_PAGE_SIZE}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazymolt",
        description="Browse, vote, and post on Moltbook from the terminal.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--base-url", default=None, help="API base URL (default: config, then built-in).")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names() + (PLAIN_THEME.name,))}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--page-size", type=_positive_int, default=None, help="Posts and comments per page.")
    parser.add_argument("--log-file", type=Path, default=None, help="Write the log here instead of the default.")
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level.")
    return parser


def parse_options(argv: list[str] | None = None) -> tuple[ClientOptions, argparse.Namespace]:
    """Resolve start-up options; CLI flags win over environment and config."""
    args = build_parser().parse_args(argv)
    settings = load_settings()
    if args.base_url:
        settings = replace(settings, base_url=args.base_url.rstrip("/"))
    if args.page_size is not None:
        settings = replace(settings, page_size=args.page_size)
    options = ClientOptions(settings=settings, theme_name=args.theme, no_color=args.no_color)
    return options, args


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch the interactive client."""
    options, args = parse_options(argv)
    setup_logging(args.log_file, debug=args.debug)
    run_client(options)


__all__ = ["build_parser", "main", "parse_options"]
