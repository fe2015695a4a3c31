"""Wiring of collaborators into a ready-to-use review pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stylereview.clients.github import GitHubClient
from stylereview.clients.llm import OpenAIChatProvider, OpenAIEmbeddingProvider
from stylereview.config import AppConfig
from stylereview.embedding.encoder import EmbeddingConfig, EmbeddingModel, EmbeddingProvider
from stylereview.index.corpus import build_corpus_index
from stylereview.ingestion.html_loader import load_document
from stylereview.models import CorpusIndex, ReviewReport
from stylereview.review.orchestrator import ChatProvider, ReviewOrchestrator

LOGGER = logging.getLogger(__name__)


def make_embedder(config: AppConfig) -> EmbeddingProvider:
    """Select the embedding backend named by ``config.embedding_backend``."""
    if config.embedding_backend == "local":
        return EmbeddingModel(EmbeddingConfig(model_name=config.local_embedding_model))
    if config.embedding_backend == "openai":
        return OpenAIEmbeddingProvider(
            model=config.embedding_model,
            api_key=config.llm_api_key,
            base_url=config.llm_base_url,
        )
    raise ValueError(f"Unknown embedding backend: {config.embedding_backend!r}")


@dataclass(slots=True)
class ReviewPipeline:
    """Corpus plus collaborators, built once and reused for every pull request."""

    config: AppConfig
    corpus: CorpusIndex
    embedder: EmbeddingProvider
    chat: ChatProvider
    github: GitHubClient

    @classmethod
    def from_config(cls, config: AppConfig) -> "ReviewPipeline":
        """Load the style guide and embed it; raises on any corpus failure."""
        embedder = make_embedder(config)
        chat = OpenAIChatProvider(
            model=config.llm_model,
            api_key=config.llm_api_key,
            base_url=config.llm_base_url,
        )
        github = GitHubClient(config.github_token, base_url=config.github_base_url)

        content = load_document(config.style_guide)
        corpus = build_corpus_index(content, embedder)
        return cls(config=config, corpus=corpus, embedder=embedder, chat=chat, github=github)

    def review_pull_request(self, owner: str, repo: str, number: str | int) -> ReviewReport:
        files = self.github.fetch_changed_files(
            owner, repo, number, suffixes=self.config.file_suffixes or None
        )
        if not files:
            LOGGER.warning("No matching changed files in %s/%s#%s", owner, repo, number)

        orchestrator = ReviewOrchestrator(
            self.embedder,
            self.chat,
            self.github.for_pull_request(owner, repo, number),
            max_workers=self.config.max_workers,
        )
        return orchestrator.review_changed_files(
            files, self.corpus, self.config.llm_analyze_pr_prompt
        )
