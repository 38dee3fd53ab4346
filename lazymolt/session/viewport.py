"""Selection-following scroll for variable-height content.

``sync`` is pure: it maps a selected entry to a scroll offset using the
line-offset table produced when the content was laid out. ``apply_layout``
folds freshly rendered content into a ``ViewportState`` and re-syncs only
when the inputs that matter for scrolling actually changed, so free
scrolling with page keys is not undone by a spinner tick.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from .state import ViewportState

# One blank line below the selected entry stays visible when snapping down.
TRAILING_PADDING_LINES = 1


def sync(
    offsets: Sequence[int],
    selected_index: int,
    current_offset: int,
    viewport_height: int,
    total_lines: int,
) -> int:
    """Return the scroll offset that keeps ``selected_index`` in view.

    The first entry snaps to line 0 so anything laid out above it stays
    reachable. Entries taller than the viewport show their top. The result is
    clamped to ``[0, max(0, total_lines - viewport_height)]``; content should
    carry at least one line after the last entry so its padding fits.
    """
    height = max(0, viewport_height)
    new_offset = current_offset
    if 0 <= selected_index < len(offsets) - 1:
        start = 0 if selected_index == 0 else offsets[selected_index]
        end = offsets[selected_index + 1] + TRAILING_PADDING_LINES
        if start < new_offset:
            new_offset = start
        elif end > new_offset + height:
            new_offset = end - height
        if start < new_offset:
            new_offset = start
    max_offset = max(0, total_lines - height)
    return max(0, min(new_offset, max_offset))


def apply_layout(
    viewport: ViewportState,
    lines: Sequence[str],
    offsets: Sequence[int],
    selected_index: int,
    width: int,
    height: int,
) -> ViewportState:
    """Install new content and re-sync scroll when layout inputs changed."""
    lines = tuple(lines)
    offsets = tuple(offsets)
    height = max(0, height)
    key = (selected_index, offsets, width, height, len(lines))
    if key == viewport.synced_for:
        offset = max(0, min(viewport.offset, max(0, len(lines) - height)))
    else:
        offset = sync(offsets, selected_index, viewport.offset, height, len(lines))
    return replace(
        viewport,
        width=width,
        height=height,
        offset=offset,
        lines=lines,
        offsets=offsets,
        synced_for=key,
    )


def scroll_by(viewport: ViewportState, delta: int) -> ViewportState:
    """Scroll freely, independent of selection, within content bounds."""
    offset = max(0, min(viewport.offset + delta, viewport.max_offset))
    if offset == viewport.offset:
        return viewport
    return replace(viewport, offset=offset)


def reset_scroll(viewport: ViewportState) -> ViewportState:
    return replace(viewport, offset=0, synced_for=None)


__all__ = ["TRAILING_PADDING_LINES", "apply_layout", "reset_scroll", "scroll_by", "sync"]
