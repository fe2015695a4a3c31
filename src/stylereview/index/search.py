"""Relevance ranking of style-guide passages against a query vector."""

from __future__ import annotations

from typing import List

import numpy as np

from stylereview.models import CorpusIndex, ScoredChunk

TOP_K = 3


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``; NaN when either vector is zero."""
    a = np.asarray(a, dtype="float64")
    b = np.asarray(b, dtype="float64")
    if a.shape != b.shape:
        raise ValueError(f"Cannot compare vectors of shape {a.shape} and {b.shape}")
    denominator = np.linalg.norm(a) * np.linalg.norm(b)
    if denominator == 0.0:
        return float("nan")
    return float(np.dot(a, b) / denominator)


class RelevanceRanker:
    """Scores every corpus vector against a query and keeps the best ``top_k``."""

    def __init__(self, top_k: int = TOP_K) -> None:
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        self.top_k = top_k

    def score(self, query: np.ndarray, corpus: CorpusIndex) -> np.ndarray:
        return np.array(
            [cosine_similarity(query, vector) for vector in corpus.vectors],
            dtype="float64",
        )

    def rank(self, query: np.ndarray, corpus: CorpusIndex) -> List[ScoredChunk]:
        if len(corpus) == 0:
            return []

        scores = self.score(query, corpus)
        # NaN sorts below every real score; stable sort keeps corpus order on ties.
        keys = np.where(np.isnan(scores), np.inf, -scores)
        order = np.argsort(keys, kind="stable")[: min(self.top_k, len(corpus))]

        return [
            ScoredChunk(chunk=corpus.chunks[idx], score=float(scores[idx]))
            for idx in order
        ]
