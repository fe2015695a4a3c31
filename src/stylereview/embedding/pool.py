"""Bounded-concurrency embedding of many texts."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Dict, List, Sequence

import numpy as np

from stylereview.embedding.encoder import EmbeddingProvider
from stylereview.errors import EmbeddingError

LOGGER = logging.getLogger(__name__)

EMBED_WORKERS = 10


class EmbeddingPool:
    """Embeds texts concurrently with at most ``max_workers`` calls in flight.

    Results are all-or-nothing: either one vector per input, index-aligned, or
    an :class:`EmbeddingError` carrying the first failure observed.
    """

    def __init__(self, provider: EmbeddingProvider, *, max_workers: int = EMBED_WORKERS) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.provider = provider
        self.max_workers = max_workers

    def embed_all(self, texts: Sequence[str]) -> List[np.ndarray]:
        if not texts:
            return []

        slots: List[np.ndarray | None] = [None] * len(texts)
        first_error: BaseException | None = None
        first_index = -1

        def work(index: int) -> None:
            # Each worker owns exactly one slot.
            slots[index] = np.asarray(self.provider.embed(texts[index]), dtype="float32")

        workers = min(self.max_workers, len(texts))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="embed") as executor:
            futures: Dict[Future[None], int] = {
                executor.submit(work, index): index for index in range(len(texts))
            }
            # Drain every completion, even after a failure.
            for future in as_completed(futures):
                error = future.exception()
                if error is None or first_error is not None:
                    continue
                first_error = error
                first_index = futures[future]
                LOGGER.error("Embedding failed for chunk %d: %s", first_index, error)

        if first_error is not None:
            raise EmbeddingError(
                f"Failed to embed chunk {first_index} of {len(texts)}: {first_error}"
            ) from first_error

        LOGGER.info("Embedded %d chunks with %d workers", len(texts), workers)
        return list(slots)  # type: ignore[arg-type]
