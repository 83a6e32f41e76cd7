"""
Version control system (VCS) integrations.

This package contains the :class:`Querier` capability and its two
variants: :class:`LocalQuerier`, which runs ``git`` in a local checkout,
and :class:`GithubQuerier`, which uses the GitHub REST API.
"""

from .github_query import GithubQuerier  # noqa: F401
from .local_query import LocalQuerier  # noqa: F401
from .query import Provider, Querier, QueryError, RawCommit  # noqa: F401


def create_querier(
    provider: Provider,
    repo: str = "",
    token: str = "",
    git_dir: str = "",
    work_tree: str = "",
) -> Querier:
    """Instantiate the querier for ``provider``."""
    if provider is Provider.GITHUB:
        return GithubQuerier(repo, token)
    return LocalQuerier(git_dir=git_dir, work_tree=work_tree)
