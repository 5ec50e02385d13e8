"""Thin async GitHub REST access used by the sync plugins."""

from reposettings.github.client import (
    Endpoint,
    GitHubAPIError,
    GitHubClient,
    NotFoundError,
    RepoRef,
)

__all__ = ["Endpoint", "GitHubAPIError", "GitHubClient", "NotFoundError", "RepoRef"]
