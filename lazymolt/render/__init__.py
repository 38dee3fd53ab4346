"""Pure renderers from session state to styled terminal rows."""

from __future__ import annotations

from .content import detail_content, feed_content, post_card, profile_content
from .help import help_items, help_line
from .screen import SPINNER_FRAMES, content_height, render_screen

__all__ = [
    "SPINNER_FRAMES",
    "content_height",
    "detail_content",
    "feed_content",
    "help_items",
    "help_line",
    "post_card",
    "profile_content",
    "render_screen",
]
