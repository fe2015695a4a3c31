"""OpenAI-compatible chat and embedding providers."""

from __future__ import annotations

import logging

import numpy as np
import openai

from stylereview.errors import (
    EmbeddingError,
    EmptyGenerationError,
    GenerationError,
    StyleReviewError,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CHAT_MODEL = "gpt-4"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
SYSTEM_PROMPT = "You're a senior software engineer reviewing pull requests."


def _make_client(api_key: str | None, base_url: str | None, timeout: float) -> openai.OpenAI:
    kwargs = {"timeout": timeout}
    if api_key:
        kwargs["api_key"] = api_key
    if base_url:
        kwargs["base_url"] = base_url
    try:
        return openai.OpenAI(**kwargs)
    except openai.OpenAIError as exc:
        raise StyleReviewError(f"LLM client is not configured: {exc}") from exc


class OpenAIChatProvider:
    """Generates review text with the chat completions API."""

    def __init__(
        self,
        *,
        model: str = DEFAULT_CHAT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        system_prompt: str = SYSTEM_PROMPT,
        max_tokens: int | None = None,
        temperature: float = 0.7,
        timeout: float = 60.0,
        client: openai.OpenAI | None = None,
    ) -> None:
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client or _make_client(api_key, base_url, timeout)

    def generate(self, prompt: str) -> str:
        kwargs = {}
        if self.max_tokens is not None:
            kwargs["max_tokens"] = self.max_tokens
        LOGGER.debug("Requesting review from %s (%d prompt chars)", self.model, len(prompt))
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                **kwargs,
            )
        except openai.OpenAIError as exc:
            raise GenerationError(f"Chat completion failed: {exc}") from exc

        if not completion.choices:
            raise EmptyGenerationError("No choices returned from LLM")
        content = completion.choices[0].message.content
        if not content or not content.strip():
            raise EmptyGenerationError("LLM returned an empty message")
        return content


class OpenAIEmbeddingProvider:
    """Embeds one text per call with the embeddings API."""

    def __init__(
        self,
        *,
        model: str = DEFAULT_EMBEDDING_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        client: openai.OpenAI | None = None,
    ) -> None:
        self.model = model
        self._client = client or _make_client(api_key, base_url, timeout)

    def embed(self, text: str) -> np.ndarray:
        try:
            response = self._client.embeddings.create(model=self.model, input=text)
        except openai.OpenAIError as exc:
            raise EmbeddingError(f"Embedding request failed: {exc}") from exc

        if not response.data:
            raise EmbeddingError("Embedding response contained no vectors")
        return np.asarray(response.data[0].embedding, dtype="float32")
