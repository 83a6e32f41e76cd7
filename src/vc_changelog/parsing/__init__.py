"""
Commit message parsing.

See :mod:`vc_changelog.parsing.commit` for the ``type(component): subject``
parser and the :class:`Commit` record it produces.
"""

from .commit import UNKNOWN, Commit, parse_commit, parse_commits  # noqa: F401
