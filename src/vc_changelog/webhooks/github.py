"""
GitHub pull request validation.

Handles ``pull_request`` webhook events: lists the pull request's
commits, reads the repository's ``.clog.toml`` and posts commit statuses
under the ``changelog/pull-request`` context.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from vc_changelog.config.loader import parse_config
from vc_changelog.grouping.alias_map import SectionAliasMap
from vc_changelog.vcs.github_api import GithubAPI
from vc_changelog.vcs.github_query import GithubQuerier
from vc_changelog.vcs.query import QueryError, RawCommit
from vc_changelog.webhooks.validator import (
    CommitStatus,
    PullRequestValidator,
    StatusError,
    ValidationResult,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PULL_REQUEST_CONTEXT = "changelog/pull-request"

HANDLED_ACTIONS = frozenset({"opened", "reopened", "synchronize"})


class GithubStatusClient:
    """Pull request commits and commit statuses of one GitHub repository."""

    def __init__(self, api: GithubAPI, owner: str, name: str, context: str = PULL_REQUEST_CONTEXT) -> None:
        self.api = api
        self.owner = owner
        self.name = name
        self.context = context

    def list_pr_commits(self, number: int) -> List[RawCommit]:
        items = self.api.get_paginated(f"/repos/{self.owner}/{self.name}/pulls/{number}/commits")
        return [(item["sha"], item["commit"]["message"]) for item in items]

    def create_status(self, sha: str, status: CommitStatus) -> None:
        """Post ``status`` on commit ``sha``.

        Raises
        ------
        StatusError
            If GitHub rejects the status.
        """
        payload = {
            "state": status.value,
            "description": status.description,
            "context": self.context,
        }
        try:
            self.api.post_json(f"/repos/{self.owner}/{self.name}/statuses/{sha}", payload)
        except QueryError as exc:
            raise StatusError(str(exc)) from exc


def handle_pull_request_event(
    event: Dict[str, Any],
    api_token: str,
    api: Optional[GithubAPI] = None,
) -> Optional[ValidationResult]:
    """Validate the commits of the pull request in ``event``.

    Only the ``opened``, ``reopened`` and ``synchronize`` actions are
    handled; for any other action nothing happens and ``None`` is returned.
    """
    action = event.get("action")
    if action not in HANDLED_ACTIONS:
        logger.debug("Ignoring pull request action '%s'", action)
        return None

    repository = event["repository"]
    pull_request = event["pull_request"]
    number = pull_request["number"]
    sha = pull_request["head"]["sha"]

    api = api or GithubAPI(api_token)
    client = GithubStatusClient(api, repository["owner"]["login"], repository["name"])
    querier = GithubQuerier(repository["html_url"], api=api)

    def load_alias_map() -> SectionAliasMap:
        try:
            content = querier.get_config()
        except QueryError as exc:
            logger.warning("Could not read repository configuration: %s", exc)
            content = None
        return parse_config(content).alias_map()

    logger.info("validating commit format for pull request %s", number)
    result = PullRequestValidator(client.create_status).run(
        sha,
        pull_request.get("commits", 0),
        lambda: client.list_pr_commits(number),
        load_alias_map,
    )
    if result is ValidationResult.VALID:
        logger.info("validated commit format for pull request %s", number)
    else:
        logger.info("failed to validate commit format for pull request %s (%s)", number, result.value)
    return result
