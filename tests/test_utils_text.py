"""Tests for text helpers."""

from __future__ import annotations

from docanswer.utils.text import normalize_whitespace, truncate


class TestNormalizeWhitespace:
    """Test normalize_whitespace function."""

    def test_strips_and_drops_blank_lines(self) -> None:
        assert normalize_whitespace(["  a ", "", "   ", "b"]) == "a\nb"

    def test_empty(self) -> None:
        assert normalize_whitespace([]) == ""


class TestTruncate:
    """Test truncate function."""

    def test_short_text_unchanged(self) -> None:
        assert truncate("料金", 10) == "料金"

    def test_long_text(self) -> None:
        assert truncate("abcdef", 4) == "abc…"
        assert len(truncate("abcdef", 4)) == 4
