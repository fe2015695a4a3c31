"""Tests for bounded-concurrency embedding."""

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock

import numpy as np
import pytest

from stylereview.embedding.pool import EMBED_WORKERS, EmbeddingPool
from stylereview.errors import EmbeddingError


def length_vector(text: str) -> np.ndarray:
    return np.array([len(text), 1.0], dtype="float32")


class TestEmbeddingPool:
    """Test EmbeddingPool fan-out and fan-in."""

    def test_default_worker_limit(self) -> None:
        """Should default to ten workers."""
        assert EmbeddingPool(MagicMock()).max_workers == EMBED_WORKERS == 10

    def test_invalid_worker_limit(self) -> None:
        """Should reject a non-positive worker count."""
        with pytest.raises(ValueError):
            EmbeddingPool(MagicMock(), max_workers=0)

    def test_empty_input(self) -> None:
        """Should return [] without calling the provider."""
        provider = MagicMock()

        assert EmbeddingPool(provider).embed_all([]) == []
        provider.embed.assert_not_called()

    def test_results_index_aligned(self) -> None:
        """Each vector lands in the slot of its input text."""
        provider = MagicMock()
        provider.embed.side_effect = length_vector
        texts = ["a" * n for n in range(1, 26)]

        vectors = EmbeddingPool(provider, max_workers=4).embed_all(texts)

        assert len(vectors) == len(texts)
        for text, vector in zip(texts, vectors):
            assert vector[0] == len(text)
            assert vector.dtype == np.float32

    def test_concurrency_bounded(self) -> None:
        """No more than max_workers calls are in flight at once."""
        lock = threading.Lock()
        state = {"active": 0, "peak": 0}

        def slow_embed(text: str) -> np.ndarray:
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.01)
            with lock:
                state["active"] -= 1
            return length_vector(text)

        provider = MagicMock()
        provider.embed.side_effect = slow_embed

        vectors = EmbeddingPool(provider, max_workers=3).embed_all([f"text {i}" for i in range(20)])

        assert len(vectors) == 20
        assert 1 <= state["peak"] <= 3

    def test_failure_is_all_or_nothing(self) -> None:
        """One failing chunk yields an error and no vectors."""
        boom = RuntimeError("quota exceeded")

        def flaky(text: str) -> np.ndarray:
            if text == "text 7":
                raise boom
            return length_vector(text)

        provider = MagicMock()
        provider.embed.side_effect = flaky

        with pytest.raises(EmbeddingError, match="chunk 7 of 12") as excinfo:
            EmbeddingPool(provider, max_workers=4).embed_all([f"text {i}" for i in range(12)])

        assert excinfo.value.__cause__ is boom

    def test_failure_still_drains_all_work(self) -> None:
        """Every submitted chunk runs even after the first failure."""
        provider = MagicMock()
        provider.embed.side_effect = EmbeddingError("offline")

        with pytest.raises(EmbeddingError):
            EmbeddingPool(provider, max_workers=2).embed_all(["one", "two", "three"])

        assert provider.embed.call_count == 3
