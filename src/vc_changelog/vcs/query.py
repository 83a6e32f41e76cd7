"""
The querier capability: where commits and repository metadata come from.

A :class:`Querier` supplies raw ``(hash, message)`` pairs together with
the origin URL, the latest tag and the optional ``.clog.toml`` content.
Two variants exist, selected explicitly through :class:`Provider`: the
local ``git`` process and the GitHub REST API.
"""

from __future__ import annotations

import abc
import datetime
from enum import Enum
from typing import List, Optional, Tuple


RawCommit = Tuple[str, str]


class QueryError(Exception):
    """Raised when commits or repository metadata cannot be retrieved."""

    pass


class Provider(str, Enum):
    """Supported sources of repository data."""

    LOCAL = "local"
    GITHUB = "github"

    @classmethod
    def parse(cls, name: str) -> "Provider":
        try:
            return cls(name.lower())
        except ValueError:
            supported = ", ".join(provider.value for provider in cls)
            raise ValueError(f"Provider '{name}' not found! Must be one of {supported}") from None


class Querier(abc.ABC):
    """Source of the commits and metadata needed to build a changelog."""

    @abc.abstractmethod
    def get_commits(self, from_ref: str = "", to_ref: str = "HEAD") -> List[RawCommit]:
        """Return the commits after ``from_ref`` up to and including ``to_ref``."""

    @abc.abstractmethod
    def get_commit_range(self, since: datetime.datetime, until: datetime.datetime) -> List[RawCommit]:
        """Return the commits made between ``since`` and ``until``."""

    @abc.abstractmethod
    def get_origin(self) -> str:
        """Return the browsable URL of the repository."""

    @abc.abstractmethod
    def get_latest_commit(self) -> str:
        """Return the hash of the most recent commit."""

    @abc.abstractmethod
    def get_latest_tag(self) -> str:
        """Return the commit hash the most recent tag points at."""

    @abc.abstractmethod
    def get_latest_tag_version(self) -> str:
        """Return the name of the most recent tag."""

    @abc.abstractmethod
    def get_config(self) -> Optional[bytes]:
        """Return the ``.clog.toml`` content, or ``None`` if the repository has none."""