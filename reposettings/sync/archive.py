"""Archive plugin — keep a repository's archived flag in line with its settings.

The settings document may carry ``archived: true|false`` (or the strings
``"true"``/``"false"``) in its ``repository`` section. When the key is
absent nothing is done. Otherwise the repository is fetched and archived
or unarchived as needed, or, in nop mode, the change is only described.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Union

from reposettings.github.client import Endpoint, NotFoundError, RepoRef
from reposettings.sync.nop import ChangeRecord, PreviewArtifact

logger = logging.getLogger(__name__)


class DesiredState(Enum):
    """Archive policy from the settings: no policy, archived, or unarchived."""

    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_settings(cls, settings: Optional[Mapping[str, Any]]) -> "DesiredState":
        if not settings or "archived" not in settings:
            return cls.UNSET
        return normalize_desired_state(settings["archived"])


class ReconciliationAction(Enum):
    NONE = "none"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"


class NotFound(Enum):
    """Marker returned by the fetcher when the repository does not exist."""

    NOT_FOUND = "not_found"


NOT_FOUND = NotFound.NOT_FOUND

Observed = Union[Mapping[str, Any], NotFound]


class ReposCapability(Protocol):
    async def get(self, owner: str, repo: str) -> dict[str, Any]: ...

    async def update(self, owner: str, repo: str, **attributes: Any) -> dict[str, Any]: ...

    def update_endpoint(self, owner: str, repo: str, **attributes: Any) -> Endpoint: ...


# ---------------------------------------------------------------------------
# Desired state and decision
# ---------------------------------------------------------------------------


def normalize_desired_state(raw: Any) -> DesiredState:
    """Turn a raw ``archived`` setting into a ``DesiredState``.

    Booleans pass through and the exact string ``"true"`` means archived.
    Any other value, including ``"TRUE"`` or ``"1"``, means unarchived.
    """
    if raw is None:
        return DesiredState.UNSET
    if isinstance(raw, bool):
        return DesiredState.TRUE if raw else DesiredState.FALSE
    return DesiredState.TRUE if raw == "true" else DesiredState.FALSE


def should_archive(observed: Mapping[str, Any], desired: DesiredState) -> bool:
    return desired is DesiredState.TRUE and not observed.get("archived")


def should_unarchive(observed: Mapping[str, Any], desired: DesiredState) -> bool:
    return desired is DesiredState.FALSE and bool(observed.get("archived"))


def decide(observed: Mapping[str, Any], desired: DesiredState) -> ReconciliationAction:
    """Pick the single action that brings ``observed`` to ``desired``."""
    if should_archive(observed, desired):
        return ReconciliationAction.ARCHIVE
    if should_unarchive(observed, desired):
        return ReconciliationAction.UNARCHIVE
    return ReconciliationAction.NONE


# ---------------------------------------------------------------------------
# Executors
# ---------------------------------------------------------------------------


def update_params(repo: RepoRef, action: ReconciliationAction) -> dict[str, Any]:
    """Arguments of the repository update call for ``action``."""
    if action is ReconciliationAction.NONE:
        raise ValueError("No update parameters for ReconciliationAction.NONE")
    return {
        "owner": repo.owner,
        "repo": repo.repo,
        "archived": action is ReconciliationAction.ARCHIVE,
    }


class ApplyExecutor:
    """Performs the update against the API."""

    def __init__(self, repos: ReposCapability, log: Any) -> None:
        self.repos = repos
        self.log = log

    async def execute(
        self, action: ReconciliationAction, repo: RepoRef, change: ChangeRecord
    ) -> dict[str, Any]:
        params = update_params(repo, action)
        data = await self.repos.update(**params)
        self.log.debug("Repo %s %sd", repo.full_name, action.value, extra={"result": data})
        return data


class PreviewExecutor:
    """Describes the update without performing it."""

    def __init__(self, repos: ReposCapability, source: str) -> None:
        self.repos = repos
        self.source = source

    async def execute(
        self, action: ReconciliationAction, repo: RepoRef, change: ChangeRecord
    ) -> PreviewArtifact:
        params = update_params(repo, action)
        return PreviewArtifact(
            source=self.source,
            resource=repo,
            endpoint=self.repos.update_endpoint(**params),
            change=change,
            level="INFO",
        )


# ---------------------------------------------------------------------------
# Reconciler
# ---------------------------------------------------------------------------


@dataclass
class ArchiveState:
    """Snapshot of the archive state of a repository against its settings."""

    is_archived: bool
    should_archive: bool
    should_unarchive: bool


class ArchiveReconciler:
    """Reconciles the ``archived`` flag of one repository.

    Parameters
    ----------
    nop:
        When true, ``sync`` returns previews and never mutates the repository.
    repos:
        Repository API (normally ``GitHubClient.repos``).
    repo:
        The repository to reconcile.
    settings:
        The ``repository`` section of the settings document.
    log:
        Logger-like object with ``debug`` and ``warning``.
    """

    def __init__(
        self,
        nop: bool,
        repos: ReposCapability,
        repo: RepoRef,
        settings: Optional[Mapping[str, Any]],
        log: Any = None,
    ) -> None:
        self.nop = nop
        self.repos = repos
        self.repo = repo
        self.settings = settings or {}
        self.log = log or logger
        if nop:
            self.executor = PreviewExecutor(repos, type(self).__name__)
        else:
            self.executor = ApplyExecutor(repos, self.log)

    async def fetch(self) -> Observed:
        """Fetch the repository, or ``NOT_FOUND`` if it does not exist."""
        try:
            return await self.repos.get(owner=self.repo.owner, repo=self.repo.repo)
        except NotFoundError:
            return NOT_FOUND

    def desired_state(self) -> DesiredState:
        return DesiredState.from_settings(self.settings)

    async def get_state(self) -> ArchiveState:
        observed = await self.fetch()
        if observed is NOT_FOUND:
            return ArchiveState(is_archived=False, should_archive=False, should_unarchive=False)
        desired = self.desired_state()
        return ArchiveState(
            is_archived=bool(observed.get("archived")),
            should_archive=should_archive(observed, desired),
            should_unarchive=should_unarchive(observed, desired),
        )

    async def sync(self) -> list:
        """Run one reconciliation. Returns zero or one results."""
        results: list = []

        observed = await self.fetch()
        if observed is NOT_FOUND:
            self.log.warning("Repo %s not found, skipping archive sync", self.repo.full_name)
            return results

        action = decide(observed, self.desired_state())
        if action is ReconciliationAction.NONE:
            self.log.debug("No archive changes needed for %s", self.repo.full_name)
            return results

        change = ChangeRecord.for_archive(action.value)
        results.append(await self.executor.execute(action, self.repo, change))
        return results
