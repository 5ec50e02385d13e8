"""Git operations — resolve the GitHub repository behind a local checkout."""

from __future__ import annotations

import re
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from reposettings.github.client import RepoRef

_REMOTE_RE = re.compile(
    r"^(?:https?://[^/]+/|git@[^:]+:|ssh://git@[^/]+/|git://[^/]+/)"
    r"(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)


def parse_remote_url(url: str) -> RepoRef:
    """Extract owner and name from an HTTPS, SSH or git:// remote URL.

    Raises:
        ValueError: If the URL does not point at an ``owner/name`` repository.
    """
    match = _REMOTE_RE.match(url.strip())
    if not match:
        raise ValueError(f"Not a recognised GitHub remote URL: {url}")
    return RepoRef(owner=match.group("owner"), repo=match.group("repo"))


def repo_ref_from_checkout(repo_path: str | Path, remote: str = "origin") -> RepoRef:
    """Return the repository identity of a local checkout's remote.

    Falls back to the first remote when ``remote`` does not exist.

    Raises:
        ValueError: If the path is not a Git repo or has no usable remote.
    """
    try:
        repo = Repo(repo_path)
    except (InvalidGitRepositoryError, NoSuchPathError):
        raise ValueError(f"Not a Git repo: {repo_path}")

    if not repo.remotes:
        raise ValueError(f"Git repo has no remotes: {repo_path}")

    names = [r.name for r in repo.remotes]
    chosen = repo.remotes[names.index(remote)] if remote in names else repo.remotes[0]
    return parse_remote_url(chosen.url)
