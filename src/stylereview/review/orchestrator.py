"""Per-file review pipeline: metadata, retrieval, prompt, generation, posting."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Protocol, Sequence
from urllib.parse import parse_qs, urlparse

from stylereview.embedding.encoder import EmbeddingProvider
from stylereview.errors import (
    EmbeddingError,
    EmptyGenerationError,
    MetadataParseError,
    PublishError,
    ReviewError,
)
from stylereview.index.search import RelevanceRanker
from stylereview.models import (
    ChangedFile,
    CorpusIndex,
    PublishOutcome,
    ReviewReport,
    ReviewRequest,
    ReviewResult,
    ReviewStage,
    ScoredChunk,
)
from stylereview.prompt.assembler import build_prompt, build_ungrounded_prompt

LOGGER = logging.getLogger(__name__)

DEFAULT_POSITION = 1


class ChatProvider(Protocol):
    def generate(self, prompt: str) -> str: ...


class CommentPublisher(Protocol):
    """Posts one comment; reports failure as an outcome rather than raising."""

    def publish(
        self, filename: str, commit_ref: str, body: str, position: int
    ) -> PublishOutcome: ...


def parse_commit_ref(contents_url: str) -> str:
    """Return the ``ref`` query parameter of a file's contents URL."""
    query = parse_qs(urlparse(contents_url or "").query)
    refs = [ref for ref in query.get("ref", []) if ref.strip()]
    if not refs:
        raise MetadataParseError(f"No commit ref in contents URL: {contents_url!r}")
    return refs[0]


class ReviewOrchestrator:
    """Generates and posts one review comment per changed file.

    A failure in one file is recorded on that file's result and never stops the
    others. Only programming errors (e.g. mismatched vector sizes) propagate.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        chat: ChatProvider,
        publisher: CommentPublisher,
        *,
        ranker: RelevanceRanker | None = None,
        max_workers: int = 1,
        allow_ungrounded: bool = False,
        position: int = DEFAULT_POSITION,
    ) -> None:
        self.embedder = embedder
        self.chat = chat
        self.publisher = publisher
        self.ranker = ranker or RelevanceRanker()
        self.max_workers = max(1, max_workers)
        self.allow_ungrounded = allow_ungrounded
        self.position = position

    def review_changed_files(
        self,
        files: Sequence[ChangedFile],
        corpus: CorpusIndex,
        prompt_template: str,
    ) -> ReviewReport:
        work = [ReviewRequest(changed, corpus, prompt_template) for changed in files]
        if self.max_workers == 1 or len(work) <= 1:
            results = [self.review_file(request) for request in work]
        else:
            with ThreadPoolExecutor(
                max_workers=min(self.max_workers, len(work)),
                thread_name_prefix="review",
            ) as executor:
                results = list(executor.map(self.review_file, work))

        report = ReviewReport(results=results)
        LOGGER.info(
            "Reviewed %d files: %d posted, %d failed",
            len(results),
            len(report.posted),
            len(report.failed),
        )
        return report

    def review_file(self, request: ReviewRequest) -> ReviewResult:
        changed = request.changed_file
        result = ReviewResult(
            filename=changed.filename,
            generated_text="",
            outcome=PublishOutcome.failure("not processed"),
        )
        try:
            result.commit_ref = parse_commit_ref(changed.contents_url)
            result.stage = ReviewStage.METADATA_EXTRACTED

            query = self._embed_diff(changed)
            result.stage = ReviewStage.EMBEDDED

            result.sources = self.ranker.rank(query, request.corpus)
            result.stage = ReviewStage.RANKED

            result.prompt = self._assemble(request.prompt_template, result.sources, changed.patch)
            result.stage = ReviewStage.PROMPT_BUILT

            result.generated_text = self._generate(result.prompt)
            result.stage = ReviewStage.GENERATED

            outcome = self.publisher.publish(
                changed.filename, result.commit_ref, result.generated_text, self.position
            )
            if not outcome.posted:
                raise PublishError(outcome.reason or "publisher reported failure")
            result.outcome = outcome
            result.stage = ReviewStage.PUBLISHED
            LOGGER.info("Comment posted for %s", changed.filename)
        except (ReviewError, EmbeddingError) as exc:
            LOGGER.warning(
                "Review of %s failed after %s: %s", changed.filename, result.stage.value, exc
            )
            self._mark_failed(result, exc)
        except ValueError:
            raise
        except Exception as exc:
            LOGGER.exception(
                "Unexpected error reviewing %s after %s", changed.filename, result.stage.value
            )
            self._mark_failed(result, exc)
        return result

    @staticmethod
    def _mark_failed(result: ReviewResult, exc: Exception) -> None:
        result.failed_at = result.stage
        result.stage = ReviewStage.FAILED
        result.outcome = PublishOutcome.failure(f"{type(exc).__name__}: {exc}")

    def _embed_diff(self, changed: ChangedFile):
        if not changed.patch.strip():
            raise ReviewError(f"{changed.filename} has no textual diff")
        return self.embedder.embed(changed.patch)

    def _assemble(self, template: str, sources: List[ScoredChunk], diff: str) -> str:
        if not sources and self.allow_ungrounded:
            LOGGER.warning("No style guide passages available; sending ungrounded prompt")
            return build_ungrounded_prompt(template, diff)
        return build_prompt(template, [source.chunk.text for source in sources], diff)

    def _generate(self, prompt: str) -> str:
        text = self.chat.generate(prompt)
        if not text or not text.strip():
            raise EmptyGenerationError("Language model returned no text")
        return text.strip()


def review_changed_files(
    files: Sequence[ChangedFile],
    corpus: CorpusIndex,
    prompt_template: str,
    *,
    embedder: EmbeddingProvider,
    chat: ChatProvider,
    publisher: CommentPublisher,
    max_workers: int = 1,
) -> ReviewReport:
    """Review every changed file against ``corpus`` and post the comments."""
    orchestrator = ReviewOrchestrator(embedder, chat, publisher, max_workers=max_workers)
    return orchestrator.review_changed_files(files, corpus, prompt_template)
