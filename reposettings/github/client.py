"""Async GitHub REST client.

Only the repository endpoints the sync plugins need are wrapped. Every
mutating call also has an ``*_endpoint`` twin that describes the request
without sending it, so dry runs can report exactly what would be called.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"

REPO_PATH = "/repos/{owner}/{repo}"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class GitHubAPIError(Exception):
    """A non-2xx response from the GitHub API."""

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        self.message = message
        super().__init__(f"GitHub API error {status}: {message}" if message else f"GitHub API error {status}")


class NotFoundError(GitHubAPIError):
    """The requested resource does not exist (HTTP 404)."""

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(404, message)


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RepoRef:
    """Identity of a repository: owner login plus repository name."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def parse(cls, value: str) -> "RepoRef":
        """Parse an ``owner/name`` string."""
        owner, sep, repo = value.strip().partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Expected OWNER/REPO, got: {value!r}")
        return cls(owner=owner, repo=repo)

    def to_dict(self) -> dict[str, str]:
        return {"owner": self.owner, "repo": self.repo}


@dataclass(frozen=True)
class Endpoint:
    """Descriptor of a REST call: method, URL template, expanded path and body."""

    method: str
    url: str
    path: str
    body: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "path": self.path,
            "body": dict(self.body),
        }


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = ""
    try:
        payload = response.json()
        if isinstance(payload, dict):
            message = str(payload.get("message", ""))
    except ValueError:
        message = response.text
    if response.status_code == 404:
        raise NotFoundError(message or "Not Found")
    raise GitHubAPIError(response.status_code, message)


class ReposAPI:
    """The ``/repos`` endpoints."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def get(self, owner: str, repo: str) -> dict[str, Any]:
        """Fetch a repository. Raises ``NotFoundError`` when it does not exist."""
        response = await self._http.get(REPO_PATH.format(owner=owner, repo=repo))
        _raise_for_status(response)
        return response.json()

    def update_endpoint(self, owner: str, repo: str, **attributes: Any) -> Endpoint:
        """Describe the PATCH that ``update`` would send, without sending it."""
        return Endpoint(
            method="PATCH",
            url=REPO_PATH,
            path=REPO_PATH.format(owner=owner, repo=repo),
            body=dict(attributes),
        )

    async def update(self, owner: str, repo: str, **attributes: Any) -> dict[str, Any]:
        """Update repository attributes and return the updated repository."""
        endpoint = self.update_endpoint(owner, repo, **attributes)
        response = await self._http.request(endpoint.method, endpoint.path, json=endpoint.body)
        _raise_for_status(response)
        return response.json()


class GitHubClient:
    """Async GitHub REST client backed by ``httpx.AsyncClient``.

    Parameters
    ----------
    token:
        Personal access or installation token. Requests are anonymous when empty.
    base_url:
        API root; override for GitHub Enterprise Server.
    transport:
        Optional httpx transport, mainly for tests (``httpx.MockTransport``).
    """

    def __init__(
        self,
        token: str = "",
        base_url: str = DEFAULT_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            transport=transport,
        )
        self.repos = ReposAPI(self._http)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
