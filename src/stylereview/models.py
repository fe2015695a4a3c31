"""Core StyleReview data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence

import numpy as np


@dataclass(frozen=True, slots=True)
class Chunk:
    """Short passage of reference text, retrievable on its own."""

    text: str


@dataclass(frozen=True, slots=True)
class ScoredChunk:
    """Chunk paired with its cosine similarity to a query.

    ``score`` is NaN when similarity is undefined (zero-magnitude vector).
    """

    chunk: Chunk
    score: float


@dataclass(frozen=True, slots=True, eq=False)
class CorpusIndex:
    """Chunks and their embeddings, index-aligned and read-only."""

    chunks: Sequence[Chunk]
    vectors: Sequence[np.ndarray]

    def __post_init__(self) -> None:
        chunks = tuple(self.chunks)
        vectors = tuple(self.vectors)
        if len(chunks) != len(vectors):
            raise ValueError(
                f"Corpus mismatch: {len(chunks)} chunks but {len(vectors)} vectors"
            )
        object.__setattr__(self, "chunks", chunks)
        object.__setattr__(self, "vectors", vectors)

    def __len__(self) -> int:
        return len(self.chunks)


@dataclass(slots=True)
class ChangedFile:
    """One entry of a pull request's changed-file listing."""

    filename: str
    patch: str
    contents_url: str
    status: str = ""
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    sha: str = ""
    blob_url: str = ""
    raw_url: str = ""

    @classmethod
    def from_github(cls, payload: Dict[str, Any]) -> "ChangedFile":
        return cls(
            filename=payload.get("filename", ""),
            patch=payload.get("patch") or "",
            contents_url=payload.get("contents_url", ""),
            status=payload.get("status", ""),
            additions=int(payload.get("additions", 0)),
            deletions=int(payload.get("deletions", 0)),
            changes=int(payload.get("changes", 0)),
            sha=payload.get("sha", ""),
            blob_url=payload.get("blob_url", ""),
            raw_url=payload.get("raw_url", ""),
        )


@dataclass(slots=True)
class ReviewRequest:
    """Unit of work for the orchestrator: one file against the shared corpus."""

    changed_file: ChangedFile
    corpus: CorpusIndex
    prompt_template: str


class ReviewStage(str, Enum):
    PENDING = "pending"
    METADATA_EXTRACTED = "metadata_extracted"
    EMBEDDED = "embedded"
    RANKED = "ranked"
    PROMPT_BUILT = "prompt_built"
    GENERATED = "generated"
    PUBLISHED = "published"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    posted: bool
    reason: str | None = None

    @classmethod
    def success(cls) -> "PublishOutcome":
        return cls(posted=True)

    @classmethod
    def failure(cls, reason: str) -> "PublishOutcome":
        return cls(posted=False, reason=reason)


@dataclass(slots=True)
class ReviewResult:
    """Final per-file artifact of a review run."""

    filename: str
    generated_text: str
    outcome: PublishOutcome
    commit_ref: str = ""
    prompt: str = ""
    stage: ReviewStage = ReviewStage.PENDING
    failed_at: ReviewStage | None = None
    sources: List[ScoredChunk] = field(default_factory=list)

    @property
    def posted(self) -> bool:
        return self.outcome.posted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "commit_ref": self.commit_ref,
            "generated_text": self.generated_text,
            "posted": self.outcome.posted,
            "reason": self.outcome.reason,
            "stage": self.stage.value,
            "failed_at": self.failed_at.value if self.failed_at else None,
            "sources": [source.chunk.text for source in self.sources],
        }


@dataclass(slots=True)
class ReviewReport:
    """Per-file outcomes of one pull request review run.

    Callers derive their own aggregate status; ``all_posted`` is offered as the
    strict variant.
    """

    results: List[ReviewResult] = field(default_factory=list)

    @property
    def posted(self) -> List[ReviewResult]:
        return [result for result in self.results if result.outcome.posted]

    @property
    def failed(self) -> List[ReviewResult]:
        return [result for result in self.results if not result.outcome.posted]

    @property
    def all_posted(self) -> bool:
        return bool(self.results) and not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "posted": [result.filename for result in self.posted],
            "failed": [result.filename for result in self.failed],
        }
