"""ANSI-aware text measurement and line shaping utilities.

Provides width measurement, clipping, padding, and wrapping that ignore escape
sequences and count wide characters (emoji, CJK) as two columns.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    """Return the number of terminal columns ``text`` occupies."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if ch == "\t":
            if col + w > max_cols:
                break
            out.append(" " * w)
            col += w
            i += 1
            continue
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    # Keep trailing escape codes (usually a reset) that follow the clip point.
    while i < n:
        match = ANSI_ESCAPE_RE.match(text, i)
        if match is None:
            i += 1
            continue
        out.append(match.group(0))
        i = match.end()
    return "".join(out)


def pad_ansi_line(text: str, width: int) -> str:
    """Clip or right-pad a styled line to exactly ``width`` columns."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))


def wrap_ansi_line(text: str, width: int) -> list[str]:
    """Wrap a styled line into chunks that fit ``width`` display columns.

    Escape sequences remain attached to their surrounding chunk, and tab
    expansion respects terminal tab-stop alignment for each wrapped segment.
    """
    if width <= 0:
        return [""]
    if not text:
        return [""]

    wrapped: list[str] = []
    chunk: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                chunk.append(match.group(0))
                i = match.end()
                continue

        if col >= width:
            wrapped.append("".join(chunk))
            chunk = []
            col = 0

        ch = text[i]
        w = char_display_width(ch, col)
        if ch == "\t":
            if col + w > width and chunk:
                wrapped.append("".join(chunk))
                chunk = []
                col = 0
                w = TAB_STOP
            chunk.append(" " * w)
            col += w
            i += 1
            continue
        if col + w > width and chunk:
            wrapped.append("".join(chunk))
            chunk = []
            col = 0
        chunk.append(ch)
        col += char_display_width(ch, col)
        i += 1

    wrapped.append("".join(chunk))
    return wrapped


def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap plain text to ``width`` columns, one list entry per screen row.

    Explicit newlines are kept, runs of spaces collapse at wrap points, and
    words wider than ``width`` are split with :func:`wrap_ansi_line`.
    """
    if width <= 0:
        return [""]
    rows: list[str] = []
    for paragraph in text.replace("\r\n", "\n").split("\n"):
        words = paragraph.expandtabs(TAB_STOP).split(" ")
        current = ""
        current_width = 0
        for word in words:
            if not word:
                continue
            word_width = display_width(word)
            if word_width > width:
                if current:
                    rows.append(current)
                pieces = wrap_ansi_line(word, width)
                rows.extend(pieces[:-1])
                current = pieces[-1]
                current_width = display_width(current)
                continue
            if not current:
                current, current_width = word, word_width
            elif current_width + 1 + word_width <= width:
                current += " " + word
                current_width += 1 + word_width
            else:
                rows.append(current)
                current, current_width = word, word_width
        rows.append(current)
    return rows


def truncate_text(text: str, limit: int) -> str:
    """Shorten ``text`` to ``limit`` characters, ending with ``...`` when cut."""
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 3)] + "..."
