"""GitHub REST client for pull request files and review comments."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

import requests

from stylereview.errors import GitHubError
from stylereview.models import ChangedFile, PublishOutcome

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"
API_VERSION = "2022-11-28"


class GitHubClient:
    """Thin wrapper over the pulls endpoints used by the review pipeline."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self, accept: str) -> Dict[str, str]:
        headers = {"Accept": accept, "X-GitHub-Api-Version": API_VERSION}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def fetch_changed_files(
        self,
        owner: str,
        repo: str,
        number: str | int,
        *,
        suffixes: Sequence[str] | None = None,
    ) -> List[ChangedFile]:
        """List a pull request's changed files, following pagination.

        When ``suffixes`` is given, only filenames ending with one of them are kept.
        """
        url: str | None = f"{self.base_url}/repos/{owner}/{repo}/pulls/{number}/files"
        params: Dict[str, Any] | None = {"per_page": 100}
        files: List[ChangedFile] = []

        while url:
            try:
                response = self.session.get(
                    url,
                    headers=self._headers("application/vnd.github.full+json"),
                    params=params,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise GitHubError(f"Failed to fetch PR files from GitHub: {exc}") from exc

            if response.status_code != 200:
                raise GitHubError(
                    f"Received non-OK response from GitHub: {response.status_code} {response.reason}"
                )

            try:
                entries = response.json()
            except ValueError as exc:
                raise GitHubError(f"Failed to decode PR files response: {exc}") from exc
            files.extend(ChangedFile.from_github(entry) for entry in entries)
            url = response.links.get("next", {}).get("url")
            params = None  # the next link already carries the query

        if suffixes:
            wanted = tuple(suffixes)
            files = [changed for changed in files if changed.filename.endswith(wanted)]

        LOGGER.info("Fetched %d changed files for %s/%s#%s", len(files), owner, repo, number)
        return files

    def post_review_comment(
        self,
        owner: str,
        repo: str,
        number: str | int,
        *,
        filename: str,
        commit_ref: str,
        body: str,
        position: int,
    ) -> PublishOutcome:
        url = f"{self.base_url}/repos/{owner}/{repo}/pulls/{number}/comments"
        payload = {
            "body": body,
            "commit_id": commit_ref,
            "path": filename,
            "position": position,
        }
        try:
            response = self.session.post(
                url,
                json=payload,
                headers=self._headers("application/vnd.github+json"),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            LOGGER.error("Error posting PR comment for %s: %s", filename, exc)
            return PublishOutcome.failure(f"request failed: {exc}")

        if response.status_code != 201:
            LOGGER.error(
                "Error posting PR comment for %s: %s %s",
                filename,
                response.status_code,
                response.text[:200],
            )
            return PublishOutcome.failure(f"{response.status_code} {response.reason}")
        return PublishOutcome.success()

    def for_pull_request(self, owner: str, repo: str, number: str | int) -> "PullRequestCommenter":
        return PullRequestCommenter(self, owner, repo, number)


class PullRequestCommenter:
    """Comment publisher bound to a single pull request."""

    def __init__(self, client: GitHubClient, owner: str, repo: str, number: str | int) -> None:
        self.client = client
        self.owner = owner
        self.repo = repo
        self.number = number

    def publish(self, filename: str, commit_ref: str, body: str, position: int) -> PublishOutcome:
        return self.client.post_review_comment(
            self.owner,
            self.repo,
            self.number,
            filename=filename,
            commit_ref=commit_ref,
            body=body,
            position=position,
        )
