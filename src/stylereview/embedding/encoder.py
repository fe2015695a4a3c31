"""Embedding providers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

import numpy as np
from sentence_transformers import SentenceTransformer

from stylereview.errors import EmbeddingError

DEFAULT_MODEL = "sentence-transformers/all-mpnet-base-v2"

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    """Converts text into a fixed-length vector.

    Implementations raise :class:`EmbeddingError` on failure.
    """

    def embed(self, text: str) -> np.ndarray: ...


def detect_device() -> str:
    """Pick the torch device for local inference.

    Returns:
        "cuda" for NVIDIA (or ROCm builds, which expose the CUDA API),
        "mps" for Apple Silicon, "cpu" otherwise.
    """
    try:
        import torch

        if torch.cuda.is_available():
            logger.debug(f"CUDA device detected: {torch.cuda.get_device_name(0)}")
            return "cuda"
        if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
            logger.debug("Apple MPS device detected")
            return "mps"
    except ImportError:
        logger.debug("PyTorch not available for device detection")
    except Exception as e:
        logger.debug(f"Device detection failed: {e}")
    return "cpu"


@dataclass(slots=True)
class EmbeddingConfig:
    model_name: str = DEFAULT_MODEL
    batch_size: int = 16
    normalize: bool = True
    device: str | None = None


class EmbeddingModel:
    """Local `SentenceTransformer` embedding provider.

    The model is loaded on first use so that constructing the provider is cheap
    and a broken model surfaces as an :class:`EmbeddingError` at embed time.
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self.config = config or EmbeddingConfig()
        self._model: SentenceTransformer | None = None

    @property
    def model(self) -> SentenceTransformer:
        if self._model is None:
            device = self.config.device or detect_device()
            try:
                self._model = SentenceTransformer(self.config.model_name, device=device)
            except Exception as exc:
                raise EmbeddingError(
                    f"Failed to load embedding model {self.config.model_name}: {exc}"
                ) from exc
            logger.info(f"Loaded embedding model {self.config.model_name} on {device}")
        return self._model

    def embed_many(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray:
        """Return float32 embeddings for input texts, one row per text."""
        sentences = list(texts)
        try:
            embeddings = self.model.encode(
                sentences,
                batch_size=self.config.batch_size,
                show_progress_bar=False,
                convert_to_numpy=True,
                normalize_embeddings=self.config.normalize,
            )
        except EmbeddingError:
            raise
        except Exception as exc:
            raise EmbeddingError(f"Local embedding failed: {exc}") from exc
        return embeddings.astype("float32", copy=False)

    def embed(self, text: str) -> np.ndarray:
        """Convenience wrapper for single-text embedding."""
        return self.embed_many([text])[0]
