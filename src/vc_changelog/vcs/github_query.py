"""
Querier backed by the GitHub REST API.

Used when the repository is not checked out locally, and by the webhook
to read a repository's ``.clog.toml``.
"""

from __future__ import annotations

import base64
import binascii
import datetime
import logging
from typing import Any, Dict, List, Optional

from vc_changelog.config.loader import CONFIG_FILE_NAME
from vc_changelog.vcs.github_api import GithubAPI, owner_repo
from vc_changelog.vcs.query import Querier, QueryError, RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# GitHub truncates comparisons at this many commits.
COMPARE_LIMIT = 250


def _raw_commits(items: List[Dict[str, Any]]) -> List[RawCommit]:
    return [(item["sha"], item["commit"]["message"]) for item in items]


class GithubQuerier(Querier):
    """Querier for a repository hosted on GitHub.

    Parameters
    ----------
    repo : str
        Repository URL, e.g. ``https://github.com/owner/project``.
    token : str
        API token used to authenticate requests.
    api : GithubAPI, optional
        Preconfigured API client.
    """

    def __init__(self, repo: str, token: str = "", api: Optional[GithubAPI] = None) -> None:
        self.repo = repo
        self.api = api or GithubAPI(token)
        self.owner, self.name = owner_repo(repo)

    def _path(self, suffix: str = "") -> str:
        if not self.owner or not self.name:
            raise QueryError(f"Cannot determine owner and repository from '{self.repo}'")
        return f"/repos/{self.owner}/{self.name}{suffix}"

    def get_origin(self) -> str:
        return self.repo

    def _default_branch(self) -> str:
        return self.api.get_json(self._path())["default_branch"]

    def get_commits(self, from_ref: str = "", to_ref: str = "HEAD") -> List[RawCommit]:
        if from_ref:
            head = self._default_branch() if to_ref == "HEAD" else to_ref
            comparison = self.api.get_json(self._path(f"/compare/{from_ref}...{head}"))
            if comparison.get("total_commits", 0) >= COMPARE_LIMIT:
                logger.warning(
                    "GitHub limits commit comparison to %d commits! Result may be truncated",
                    COMPARE_LIMIT,
                )
            # Comparisons list commits oldest first.
            return _raw_commits(list(reversed(comparison.get("commits", []))))

        params: Dict[str, Any] = {}
        if to_ref != "HEAD":
            params["sha"] = to_ref
        return _raw_commits(self.api.get_paginated(self._path("/commits"), params))

    def get_commit_range(self, since: datetime.datetime, until: datetime.datetime) -> List[RawCommit]:
        params = {"since": since.isoformat(), "until": until.isoformat()}
        return _raw_commits(self.api.get_paginated(self._path("/commits"), params))

    def get_latest_commit(self) -> str:
        commits = self.api.get_json(self._path("/commits"), params={"per_page": 1})
        if not commits:
            raise QueryError("No commits in response")
        return commits[0]["sha"]

    def _latest_tag(self) -> Dict[str, Any]:
        tags = self.api.get_json(self._path("/tags"), params={"per_page": 1})
        if not tags:
            raise QueryError("No tags in response")
        return tags[0]

    def get_latest_tag(self) -> str:
        return self._latest_tag()["commit"]["sha"]

    def get_latest_tag_version(self) -> str:
        return self._latest_tag()["name"]

    def get_config(self) -> Optional[bytes]:
        content = self.api.get_json(self._path(f"/contents/{CONFIG_FILE_NAME}"), allow_missing=True)
        if content is None:
            logger.debug("No %s found in %s", CONFIG_FILE_NAME, self.repo)
            return None
        try:
            return base64.b64decode(content.get("content", ""))
        except (binascii.Error, ValueError) as exc:
            raise QueryError(f"Failed to decode {CONFIG_FILE_NAME}: {exc}") from exc
