"""Prompt assembly for grounded reviews."""

from __future__ import annotations

from typing import Sequence

from stylereview.errors import InsufficientContextError

STYLE_GUIDE_HEADER = "Relevant style guide excerpts:"
CODE_HEADER = "Code to review:"


def build_prompt(base: str, chunk_texts: Sequence[str], diff: str) -> str:
    """Merge instruction, style-guide passages and the diff into one prompt.

    Raises InsufficientContextError when there is nothing to ground on. Use
    :func:`build_ungrounded_prompt` to opt out of grounding explicitly.
    """
    if not chunk_texts:
        raise InsufficientContextError("No style guide passages available to ground the review")

    excerpts = "\n\n".join(chunk_texts)
    return f"{base}\n\n{STYLE_GUIDE_HEADER}\n\n{excerpts}\n\n{CODE_HEADER}\n\n{diff}"


def build_ungrounded_prompt(base: str, diff: str) -> str:
    return f"{base}\n\n{CODE_HEADER}\n\n{diff}"
