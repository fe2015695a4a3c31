"""FastAPI application exposing the pull request review service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from stylereview.config import AppConfig
from stylereview.errors import GitHubError, StyleReviewError
from stylereview.review.pipeline import ReviewPipeline

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="StyleReview", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.pipeline = None
app.state.startup_error = None


def _load_pipeline(config: AppConfig) -> None:
    """Build the corpus once; a failure leaves the service unable to review."""
    try:
        app.state.pipeline = ReviewPipeline.from_config(config)
        app.state.startup_error = None
    except (StyleReviewError, ValueError) as exc:
        LOGGER.error("Failed to build style guide corpus: %s", exc)
        app.state.pipeline = None
        app.state.startup_error = str(exc)


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    await asyncio.to_thread(_load_pipeline, AppConfig.from_env())


@app.get("/health")
async def health() -> dict[str, Any]:
    pipeline = app.state.pipeline
    return {
        "status": "ok" if pipeline is not None else "unavailable",
        "corpus_size": len(pipeline.corpus) if pipeline is not None else 0,
        "error": app.state.startup_error,
    }


@app.post("/pullrequest/{owner}/{repo}/{id}")
async def analyze_pull_request(owner: str, repo: str, id: str) -> dict[str, Any]:
    pipeline: ReviewPipeline | None = app.state.pipeline
    if pipeline is None:
        raise HTTPException(
            status_code=503,
            detail=f"Style guide corpus unavailable: {app.state.startup_error or 'not loaded'}",
        )

    try:
        report = await asyncio.to_thread(pipeline.review_pull_request, owner, repo, id)
    except GitHubError as exc:
        raise HTTPException(status_code=400, detail=f"Error fetching PR changes: {exc}") from exc

    return {"message": "PR review", **report.to_dict()}
