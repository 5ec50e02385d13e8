"""Change records and preview artifacts produced by the sync plugins.

In nop (dry-run) mode a plugin returns a ``PreviewArtifact`` instead of
calling the API. The artifact is inert: it only describes the request that
would have been made and the change it would have caused.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from reposettings.github.client import Endpoint, RepoRef


@dataclass(frozen=True)
class ChangeRecord:
    """One intended or completed mutation."""

    msg: str = "Change found"
    additions: dict[str, Any] = field(default_factory=dict)
    modifications: dict[str, Any] = field(default_factory=dict)
    deletions: dict[str, Any] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def for_archive(cls, action: str) -> "ChangeRecord":
        return cls(modifications={"archived": action})

    def to_dict(self) -> dict[str, Any]:
        return {
            "msg": self.msg,
            "additions": dict(self.additions),
            "modifications": dict(self.modifications),
            "deletions": dict(self.deletions),
        }


@dataclass(frozen=True)
class PreviewArtifact:
    """Non-executing description of a mutation a plugin would perform.

    Fields cannot be reassigned. The change mappings are plain dicts, so
    artifacts compare by value but are not hashable.
    """

    source: str
    resource: RepoRef
    endpoint: Endpoint
    change: ChangeRecord
    level: str = "INFO"

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "resource": self.resource.to_dict(),
            "endpoint": self.endpoint.to_dict(),
            "change": self.change.to_dict(),
            "level": self.level,
        }


# Name used by reporting layers for dry-run results.
NopCommand = PreviewArtifact
