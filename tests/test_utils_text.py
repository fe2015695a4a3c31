"""Tests for text helpers."""

from __future__ import annotations

from stylereview.utils.text import (
    collapse_whitespace,
    is_substantial,
    snippet,
)


class TestCollapseWhitespace:
    """Test collapse_whitespace."""

    def test_collapses_runs(self) -> None:
        assert collapse_whitespace("  a \n\t b   c ") == "a b c"

    def test_empty(self) -> None:
        assert collapse_whitespace("   ") == ""


class TestIsSubstantial:
    """Test is_substantial threshold."""

    def test_boundary(self) -> None:
        assert is_substantial("x" * 30, min_chars=30)
        assert not is_substantial("x" * 29, min_chars=30)


class TestSnippet:
    """Test snippet previews."""

    def test_short_text_unchanged(self) -> None:
        assert snippet("line one\nline two") == "line one line two"

    def test_long_text_truncated(self) -> None:
        result = snippet("word " * 100, width=20)
        assert len(result) <= 20
        assert result.endswith("...")
