"""Application configuration defaults and environment loading."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from stylereview.clients.github import DEFAULT_BASE_URL
from stylereview.clients.llm import DEFAULT_CHAT_MODEL, DEFAULT_EMBEDDING_MODEL
from stylereview.embedding.encoder import DEFAULT_MODEL as DEFAULT_LOCAL_MODEL

ENV_PREFIX = "AI_CHECKER_"
ENV_FILE = ".env"

DEFAULT_STYLE_GUIDE = "https://go.dev/doc/effective_go"

DEFAULT_PROMPT = (
    "Review the following code change. Point out violations of the style guide "
    "excerpts below, cite the excerpt you rely on, and suggest concrete fixes. "
    "Keep the feedback short."
)


class AppConfig(BaseSettings):
    """Service settings read from ``AI_CHECKER_*`` variables and a ``.env`` file.

    Environment variables take precedence over the ``.env`` file; unset names
    keep their defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    github_token: str = ""
    github_base_url: str = DEFAULT_BASE_URL
    llm_base_url: Optional[str] = None
    llm_api_key: Optional[str] = None
    llm_model: str = DEFAULT_CHAT_MODEL
    llm_analyze_pr_prompt: str = DEFAULT_PROMPT
    embedding_backend: str = "openai"
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    local_embedding_model: str = DEFAULT_LOCAL_MODEL
    style_guide: str = DEFAULT_STYLE_GUIDE
    file_suffixes: Annotated[Tuple[str, ...], NoDecode] = (".go",)
    max_workers: int = Field(default=1, ge=1)

    @field_validator("file_suffixes", mode="before")
    @classmethod
    def _split_suffixes(cls, value: Any) -> Any:
        """Accept a comma separated string; empty means no filter."""
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    @classmethod
    def from_env(
        cls, *, prefix: str = ENV_PREFIX, env_file: str | Path | None = ENV_FILE
    ) -> "AppConfig":
        """Build a config from ``<prefix><field>`` variables and ``env_file``.

        Invalid values raise ``pydantic.ValidationError`` (a ``ValueError``).
        """
        return cls(_env_prefix=prefix, _env_file=env_file)
