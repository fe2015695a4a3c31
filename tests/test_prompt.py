"""Tests for prompt assembly."""

from __future__ import annotations

import pytest

from stylereview.errors import InsufficientContextError
from stylereview.prompt.assembler import (
    CODE_HEADER,
    STYLE_GUIDE_HEADER,
    build_prompt,
    build_ungrounded_prompt,
)


class TestBuildPrompt:
    """Test build_prompt."""

    def test_contains_all_parts(self) -> None:
        """Base prompt, every passage and the diff appear in the prompt."""
        prompt = build_prompt("Review this", ["A", "B", "C"], "diff-text")

        for part in ("Review this", "A", "B", "C", "diff-text"):
            assert part in prompt

    def test_passages_before_diff(self) -> None:
        """Passages come before the code section, in the given order."""
        prompt = build_prompt("Review this", ["AAA", "BBB", "CCC"], "diff-text")

        positions = [prompt.index(part) for part in ("Review this", "AAA", "BBB", "CCC", "diff-text")]
        assert positions == sorted(positions)

    def test_layout(self) -> None:
        """Sections are labelled and passages separated by blank lines."""
        prompt = build_prompt("Review this", ["A", "B"], "diff-text")

        assert prompt == (
            f"Review this\n\n{STYLE_GUIDE_HEADER}\n\nA\n\nB\n\n{CODE_HEADER}\n\ndiff-text"
        )

    def test_no_passages(self) -> None:
        """Grounding without passages is an error."""
        with pytest.raises(InsufficientContextError):
            build_prompt("Review this", [], "diff-text")


class TestBuildUngroundedPrompt:
    """Test the explicit ungrounded variant."""

    def test_has_no_style_guide_section(self) -> None:
        """Should contain the base prompt and diff only."""
        prompt = build_ungrounded_prompt("Review this", "diff-text")

        assert STYLE_GUIDE_HEADER not in prompt
        assert prompt == f"Review this\n\n{CODE_HEADER}\n\ndiff-text"
