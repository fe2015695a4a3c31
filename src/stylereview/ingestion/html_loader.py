"""Style guide loading and passage extraction.

Passages are the text of paragraph, list-item and heading elements, in document
order. Text shorter than ``min_chars`` is noise (labels, nav links) and dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser
from pathlib import Path
from typing import List

import requests

from stylereview.errors import DocumentLoadError, ParseError
from stylereview.models import Chunk
from stylereview.utils.text import collapse_whitespace, is_substantial

LOGGER = logging.getLogger(__name__)

MIN_CHUNK_CHARS = 30

PASSAGE_TAGS = frozenset({"p", "li", "h1", "h2", "h3", "h4", "h5", "h6"})

VOID_TAGS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)

# Elements whose end tag HTML allows to be omitted.
OPTIONAL_END_TAGS = frozenset(
    {
        "html", "head", "body", "p", "li", "dt", "dd", "option", "optgroup",
        "thead", "tbody", "tfoot", "tr", "td", "th", "colgroup", "caption",
    }
)

# Opening any of these closes an open <p>.
P_CLOSERS = frozenset(
    {
        "address", "article", "aside", "blockquote", "details", "div", "dl",
        "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
        "h4", "h5", "h6", "header", "hr", "main", "nav", "ol", "p", "pre",
        "section", "table", "ul",
    }
)


@dataclass(slots=True)
class _OpenElement:
    tag: str
    slot: int | None = None
    parts: List[str] = field(default_factory=list)


class _PassageParser(HTMLParser):
    """Tracks the open-element stack and collects passage text per element."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._stack: List[_OpenElement] = []
        self._passages: List[str | None] = []

    @property
    def passages(self) -> List[str]:
        return [text for text in self._passages if text is not None]

    def handle_starttag(self, tag: str, attrs) -> None:
        if tag in VOID_TAGS:
            return
        if tag in P_CLOSERS:
            self._close_implicit("p")
        if tag == "li":
            self._close_implicit("li")
        slot = None
        if tag in PASSAGE_TAGS:
            slot = len(self._passages)
            self._passages.append(None)
        self._stack.append(_OpenElement(tag=tag, slot=slot))

    def handle_startendtag(self, tag: str, attrs) -> None:
        if tag in VOID_TAGS:
            return
        self.handle_starttag(tag, attrs)
        self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        if tag in VOID_TAGS:
            return
        if not any(element.tag == tag for element in self._stack):
            line, column = self.getpos()
            raise ParseError(f"Unexpected </{tag}> at line {line}, column {column}")
        while self._stack:
            element = self._stack[-1]
            if element.tag == tag:
                self._pop()
                return
            if element.tag not in OPTIONAL_END_TAGS:
                line, column = self.getpos()
                raise ParseError(
                    f"</{tag}> at line {line}, column {column} closes unclosed <{element.tag}>"
                )
            self._pop()

    def handle_data(self, data: str) -> None:
        for element in reversed(self._stack):
            if element.slot is not None:
                element.parts.append(data)
                return

    def close(self) -> None:
        super().close()
        unclosed = [e.tag for e in self._stack if e.tag not in OPTIONAL_END_TAGS]
        if unclosed:
            raise ParseError(f"Unclosed elements at end of document: {', '.join(unclosed)}")
        while self._stack:
            self._pop()

    def _close_implicit(self, tag: str) -> None:
        if self._stack and self._stack[-1].tag == tag:
            self._pop()

    def _pop(self) -> None:
        element = self._stack.pop()
        if element.slot is not None:
            self._passages[element.slot] = collapse_whitespace("".join(element.parts))


def extract_chunks(content: str, *, min_chars: int = MIN_CHUNK_CHARS) -> List[Chunk]:
    """Split a structured document into passages, in document order."""
    if not isinstance(content, str):
        raise ParseError(f"Expected document text, got {type(content).__name__}")

    parser = _PassageParser()
    parser.feed(content)
    parser.close()

    chunks = [
        Chunk(text=text)
        for text in parser.passages
        if is_substantial(text, min_chars=min_chars)
    ]
    LOGGER.debug(
        "Extracted %d passages (%d below %d chars dropped)",
        len(chunks),
        len(parser.passages) - len(chunks),
        min_chars,
    )
    return chunks


def load_document(source: str | Path, *, timeout: float = 30.0) -> str:
    """Read a style guide from a local path or an http(s) URL."""
    text = str(source)
    if text.startswith(("http://", "https://")):
        LOGGER.info("Fetching style guide from %s", text)
        try:
            response = requests.get(text, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DocumentLoadError(f"Failed to fetch style guide {text}: {exc}") from exc
        return response.text

    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(f"Failed to read style guide {path}: {exc}") from exc
