"""
Validation of the commit messages on a pull request.

A pull request is valid when every one of its commits follows the
``type(component): subject`` convention with a type tag known to the
repository's alias map. :func:`validate_pull_request` computes the
verdict; :class:`PullRequestValidator` wraps it with the commit status
reporting (pending, then success, failure or error).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Sequence

from vc_changelog.config.loader import ConfigError
from vc_changelog.grouping.alias_map import SectionAliasMap
from vc_changelog.grouping.classifier import classify, filter_commits
from vc_changelog.parsing.commit import parse_commits
from vc_changelog.vcs.query import QueryError, RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class StatusError(Exception):
    """Raised when a commit status cannot be reported."""

    pass


class CommitStatus(str, Enum):
    """States of the commit status posted for a pull request."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: Dict[CommitStatus, str] = {
    CommitStatus.PENDING: "beginning commit format validation",
    CommitStatus.SUCCESS: "commit looks good",
    CommitStatus.FAILURE: "commit was improperly formatted",
    CommitStatus.ERROR: "there was a problem validating commit format",
}


class ValidationResult(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"


STATUS_FOR_RESULT: Dict[ValidationResult, CommitStatus] = {
    ValidationResult.VALID: CommitStatus.SUCCESS,
    ValidationResult.INVALID: CommitStatus.FAILURE,
    ValidationResult.ERROR: CommitStatus.ERROR,
}

StatusSink = Callable[[str, CommitStatus], None]


def validate_pull_request(
    raw_commits: Sequence[RawCommit],
    reported_count: int,
    alias_map: Optional[SectionAliasMap] = None,
) -> ValidationResult:
    """Decide whether every commit of a pull request is well formed.

    Parameters
    ----------
    raw_commits : Sequence[RawCommit]
        ``(hash, message)`` pairs of the pull request's commits.
    reported_count : int
        Number of commits the hosting service reports for the pull request.
    alias_map : SectionAliasMap, optional
        The repository's sections. Defaults to the built-in map.

    Returns
    -------
    ValidationResult
        ``ERROR`` when there are no commits, ``INVALID`` when fewer commits
        survive parsing and filtering than were reported, ``VALID`` otherwise.
    """
    if not raw_commits:
        logger.error("No commits found for pull request")
        return ValidationResult.ERROR
    if alias_map is None:
        alias_map = SectionAliasMap.default()

    commits = parse_commits(raw_commits)
    commits = classify(filter_commits(commits, alias_map.grep(), False), alias_map)
    logger.debug("%d of %d commit(s) are well formed", len(commits), reported_count)
    if len(commits) < reported_count:
        return ValidationResult.INVALID
    return ValidationResult.VALID


class PullRequestValidator:
    """Runs a pull request validation and reports its progress to a status sink.

    Parameters
    ----------
    status_sink : StatusSink
        Called with the commit hash and the :class:`CommitStatus` to post.
        It raises :class:`StatusError` when the status cannot be posted.
    """

    def __init__(self, status_sink: StatusSink) -> None:
        self.status_sink = status_sink

    def _report(self, sha: str, status: CommitStatus) -> bool:
        try:
            self.status_sink(sha, status)
        except StatusError as exc:
            logger.error("Failed to set %s status on %s: %s", status.value, sha, exc)
            return False
        return True

    def run(
        self,
        sha: str,
        reported_count: int,
        get_commits: Callable[[], Sequence[RawCommit]],
        get_alias_map: Callable[[], SectionAliasMap] = SectionAliasMap.default,
    ) -> ValidationResult:
        """Validate a pull request whose head commit is ``sha``.

        A pending status is posted first. Commits and the alias map are
        then retrieved and the final status is posted. Any failure while retrieving
        or validating, and a failed pending post, end the run with an error
        status.
        """
        if not self._report(sha, CommitStatus.PENDING):
            self._report(sha, CommitStatus.ERROR)
            return ValidationResult.ERROR

        try:
            raw_commits = get_commits()
            alias_map = get_alias_map()
            result = validate_pull_request(raw_commits, reported_count, alias_map)
        except (QueryError, ConfigError) as exc:
            logger.error("Could not retrieve pull request data: %s", exc)
            self._report(sha, CommitStatus.ERROR)
            return ValidationResult.ERROR
        except Exception as exc:
            # The pending status must never be left behind.
            logger.error("Unexpected error validating %s: %s", sha, exc, exc_info=exc)
            self._report(sha, CommitStatus.ERROR)
            return ValidationResult.ERROR

        if not self._report(sha, STATUS_FOR_RESULT[result]):
            return ValidationResult.ERROR
        return result
