"""GitHub commit fetching.

Fetches recent commits (with per-file change stats) from one or more
repositories and merges them newest first. A repository that fails is
skipped so the others still come through.
"""

from datetime import datetime
from typing import List, Optional

import httpx

from ..config import get_settings
from ..errors import AuthFailedError, FetchFailedError, NotFoundError
from ..log import get_logger
from ..schemas.commit import Commit, FileChange

settings = get_settings()
logger = get_logger("github")

API_URL = "https://api.github.com"
SHORT_SHA_LENGTH = 7


def _parse_date(value: str) -> datetime:
    # GitHub sends ISO 8601 with a trailing Z
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _to_commit(raw: dict, repo: str, files: Optional[List[FileChange]]) -> Commit:
    return Commit(
        sha=raw["sha"][:SHORT_SHA_LENGTH],
        message=raw["commit"]["message"].split("\n")[0],
        authored_at=_parse_date(raw["commit"]["author"]["date"]),
        url=raw["html_url"],
        repo=repo,
        files=files,
    )


def _to_files(detail: dict) -> List[FileChange]:
    return [
        FileChange(
            path=f["filename"],
            status=f.get("status", "modified"),
            additions=f.get("additions", 0),
            deletions=f.get("deletions", 0),
        )
        for f in detail.get("files") or []
    ]


class GitHubClient:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        # transport is only swapped in tests (httpx.MockTransport)
        self.transport = transport

    def _client(self, token: Optional[str]) -> httpx.AsyncClient:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            headers["Authorization"] = f"token {token}"
        return httpx.AsyncClient(
            base_url=API_URL,
            headers=headers,
            timeout=15.0,
            transport=self.transport,
        )

    async def get_recent_commits(
        self, owner: str, repo: str, token: Optional[str] = None, count: int = 5
    ) -> List[Commit]:
        """
        Fetch the `count` most recent commits of one repository.
        Raises NotFoundError / AuthFailedError / FetchFailedError.
        """
        full_name = f"{owner}/{repo}"
        async with self._client(token) as client:
            try:
                resp = await client.get(f"/repos/{full_name}/commits", params={"per_page": count})
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"GitHub API error for {full_name}: {e.response.status_code}")
                if e.response.status_code == 404:
                    raise NotFoundError("Repository not found. Please check the owner and repository name.") from e
                if e.response.status_code == 401:
                    raise AuthFailedError("GitHub authentication failed. Please check your token.") from e
                raise FetchFailedError("Failed to fetch GitHub commits") from e
            except httpx.RequestError as e:
                logger.error(f"GitHub request error for {full_name}: {e}")
                raise FetchFailedError("Failed to fetch GitHub commits") from e

            commits = []
            for raw in resp.json():
                # Detail is best effort: keep the commit even without file stats
                files = None
                try:
                    detail = await client.get(f"/repos/{full_name}/commits/{raw['sha']}")
                    detail.raise_for_status()
                    files = _to_files(detail.json())
                except (httpx.HTTPError, ValueError) as e:
                    logger.warning(f"No file details for {full_name}@{raw['sha'][:SHORT_SHA_LENGTH]}: {e}")
                commits.append(_to_commit(raw, full_name, files))
            return commits

    async def _collect(self, repos: List[str], token: Optional[str], count: int) -> List[Commit]:
        all_commits: List[Commit] = []
        for repo in repos:
            owner, _, name = repo.partition("/")
            if not owner or not name:
                logger.warning(f"Skipping malformed repository identifier {repo!r}")
                continue
            try:
                all_commits.extend(await self.get_recent_commits(owner, name, token, count))
            except Exception:
                logger.exception(f"Error fetching commits from {repo}, continuing with the rest")
        return all_commits

    async def fetch_recent(self, repos: List[str], token: Optional[str] = None, count: int = 5) -> List[Commit]:
        """
        Fetch `count` commits per repository, merge, and keep the newest `count` overall.
        """
        all_commits = await self._collect(repos, token, count)
        all_commits.sort(key=lambda c: c.authored_at, reverse=True)
        return all_commits[:count]

    async def fetch_latest(self, repos: List[str], token: Optional[str] = None) -> List[Commit]:
        """One commit per repository (repositories that fail are absent)."""
        return await self._collect(repos, token, 1)

    async def list_repos(self, username: str, token: Optional[str] = None) -> List[str]:
        async with self._client(token) as client:
            try:
                resp = await client.get(
                    f"/users/{username}/repos",
                    params={
                        "per_page": settings.GITHUB_REPOS_PER_PAGE,
                        "sort": settings.GITHUB_REPOS_SORT,
                    },
                )
                resp.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"GitHub API error listing repos for {username}: {e}")
                raise FetchFailedError("Failed to fetch repositories") from e
            return [r["full_name"] for r in resp.json()]

github_client = GitHubClient()
