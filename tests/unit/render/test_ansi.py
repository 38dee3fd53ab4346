"""ANSI-aware width, clipping, and wrapping tests."""

from __future__ import annotations

import unittest

from lazymolt.ansi import clip_ansi_line, display_width, pad_ansi_line, truncate_text, wrap_text


class AnsiWidthTests(unittest.TestCase):
    def test_escape_codes_and_wide_characters(self) -> None:
        self.assertEqual(display_width("\x1b[1mhi\x1b[0m"), 2)
        self.assertEqual(display_width("🦞"), 2)
        self.assertEqual(display_width("é"), 1)

    def test_clip_keeps_trailing_reset(self) -> None:
        self.assertEqual(clip_ansi_line("\x1b[31mhello\x1b[0m", 3), "\x1b[31mhel\x1b[0m")
        self.assertEqual(clip_ansi_line("a🦞b", 2), "a")

    def test_pad_reaches_exact_width(self) -> None:
        self.assertEqual(pad_ansi_line("ab", 4), "ab  ")
        self.assertEqual(pad_ansi_line("🦞🦞🦞", 5), "🦞🦞 ")


class WrapTextTests(unittest.TestCase):
    def test_words_wrap_at_width(self) -> None:
        self.assertEqual(wrap_text("the quick brown fox", 9), ["the quick", "brown fox"])

    def test_newlines_and_empty_paragraphs_are_kept(self) -> None:
        self.assertEqual(wrap_text("one\n\ntwo", 10), ["one", "", "two"])
        self.assertEqual(wrap_text("", 10), [""])

    def test_long_word_is_split(self) -> None:
        self.assertEqual(wrap_text("abcdefghij xy", 4), ["abcd", "efgh", "ij", "xy"])

    def test_truncate_text(self) -> None:
        self.assertEqual(truncate_text("short", 100), "short")
        self.assertEqual(truncate_text("x" * 150, 100), "x" * 97 + "...")


if __name__ == "__main__":
    unittest.main()
