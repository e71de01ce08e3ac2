"""GitHub API client for filling in missing commit data.

Events such as pull_request, schedule or workflow_dispatch carry no
commit in their payload, so the Commit and Workflow fields would link
nowhere. When that happens the notifier asks the GitHub REST API for the
commit the workflow ran on.

Design notes:
- Uses httpx for async HTTP requests
- Uses a Protocol so the notifier doesn't depend on the concrete client
  (tests pass the mock instead)
- Errors propagate; the caller decides that a failed lookup only costs
  the commit link, never the notification

GitHub API docs: https://docs.github.com/en/rest/commits/commits
"""

from __future__ import annotations

import os
from typing import Protocol

import httpx

from workflow_notifier.schemas import CommitInfo

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class CommitLookupProtocol(Protocol):
    """Protocol for anything that can resolve a commit by SHA."""

    async def get_commit(self, repo: str, sha: str) -> CommitInfo:
        """Fetch a single commit.

        Args:
            repo: Repository in "owner/name" format
            sha: Full commit SHA

        Returns:
            The commit's browsable URL and message
        """
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubClient:
    """Real GitHub API client using httpx.

    Usage:
        client = GitHubClient(token="ghp_...")
        commit = await client.get_commit("myorg/api", "4f2a...")
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub token. Falls back to the GITHUB_TOKEN
                   environment variable if not provided.
            base_url: API root; GitHub Enterprise runners set GITHUB_API_URL.
            transport: Optional httpx transport (tests use MockTransport)
        """
        self._token = token or os.environ.get("GITHUB_TOKEN", "")
        self._base_url = base_url or os.environ.get("GITHUB_API_URL") or self.BASE_URL
        self._transport = transport
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"

    async def get_commit(self, repo: str, sha: str) -> CommitInfo:
        """Fetch a commit via GET /repos/{repo}/commits/{sha}.

        Raises:
            httpx.HTTPStatusError: If the API call fails
            KeyError: If the response lacks the commit message
        """
        async with httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=30.0,
            transport=self._transport,
        ) as client:
            resp = await client.get(f"/repos/{repo}/commits/{sha}")
            resp.raise_for_status()
            data = resp.json()

        return CommitInfo(
            url=data.get("html_url"),
            message=data["commit"]["message"],
        )


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockGitHubClient:
    """Mock GitHub client that returns predefined commits.

    Usage:
        client = MockGitHubClient(commits={"abc123": CommitInfo(...)})
        commit = await client.get_commit("myorg/api", "abc123")
    """

    def __init__(self, commits: dict[str, CommitInfo] | None = None) -> None:
        self._commits = commits or {}
        self.calls: list[tuple[str, str]] = []

    async def get_commit(self, repo: str, sha: str) -> CommitInfo:
        """Return the predefined commit for `sha`.

        Raises:
            KeyError: If no commit was registered for this SHA
        """
        self.calls.append((repo, sha))
        return self._commits[sha]
