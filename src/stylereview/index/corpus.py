"""Corpus construction: style guide to an embedded, read-only index."""

from __future__ import annotations

import logging

from stylereview.embedding.encoder import EmbeddingProvider
from stylereview.embedding.pool import EMBED_WORKERS, EmbeddingPool
from stylereview.ingestion.html_loader import MIN_CHUNK_CHARS, extract_chunks
from stylereview.models import CorpusIndex

LOGGER = logging.getLogger(__name__)


def build_corpus_index(
    content: str,
    provider: EmbeddingProvider,
    *,
    min_chars: int = MIN_CHUNK_CHARS,
    max_workers: int = EMBED_WORKERS,
) -> CorpusIndex:
    """Extract passages from ``content`` and embed every one of them.

    Raises ParseError or EmbeddingError; no partial index is ever returned.
    """
    chunks = extract_chunks(content, min_chars=min_chars)
    if not chunks:
        LOGGER.warning("Style guide produced no passages; reviews cannot be grounded")

    pool = EmbeddingPool(provider, max_workers=max_workers)
    vectors = pool.embed_all([chunk.text for chunk in chunks])

    corpus = CorpusIndex(chunks=chunks, vectors=vectors)
    LOGGER.info("Built corpus index with %d passages", len(corpus))
    return corpus
