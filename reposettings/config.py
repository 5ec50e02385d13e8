"""Configuration — settings documents and environment.

Settings documents are YAML, in the layout of a ``.github/settings.yml``::

    repository:
      archived: true

Runtime options come from the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from reposettings.github.client import DEFAULT_API_URL


class ConfigError(Exception):
    """A settings document could not be used."""


def load_settings(path: str | Path) -> dict[str, Any]:
    """Load a settings YAML file and return its ``repository`` section."""
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Settings document must be a mapping: {path}")

    repository = data.get("repository") or {}
    if not isinstance(repository, dict):
        raise ConfigError(f"'repository' section must be a mapping: {path}")
    return repository


@dataclass
class Config:
    """Runtime options."""

    github_token: str = ""
    api_url: str = DEFAULT_API_URL
    log_level: str = "INFO"
    nop: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        log_level = os.environ.get("REPOSETTINGS_LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"Unknown REPOSETTINGS_LOG_LEVEL: {log_level}")
        return cls(
            github_token=os.environ.get("GITHUB_TOKEN", ""),
            api_url=os.environ.get("GITHUB_API_URL", DEFAULT_API_URL),
            log_level=log_level,
            nop=os.environ.get("REPOSETTINGS_NOP", "").lower() == "true",
        )
