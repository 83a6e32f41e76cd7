"""
Webhook support for validating pull request commit messages.

:mod:`vc_changelog.webhooks.validator` decides whether a pull request's
commits are well formed, :mod:`vc_changelog.webhooks.github` handles
GitHub ``pull_request`` events and :mod:`vc_changelog.webhooks.server`
serves the HTTP endpoint.
"""

from .validator import (  # noqa: F401
    CommitStatus,
    PullRequestValidator,
    StatusError,
    ValidationResult,
    validate_pull_request,
)
