"""Text helpers for passage extraction and display."""

from __future__ import annotations


def collapse_whitespace(text: str) -> str:
    """Trim text and collapse internal runs of whitespace to single spaces."""
    return " ".join(text.split())


def is_substantial(text: str, *, min_chars: int) -> bool:
    """Return True when text is long enough to stand as a passage."""
    return len(text) >= min_chars


def snippet(text: str, *, width: int = 180) -> str:
    """Single-line preview of text, cut at ``width`` characters."""
    flat = text.replace("\n", " ")
    if len(flat) <= width:
        return flat
    return flat[: width - 3].rstrip() + "..."
