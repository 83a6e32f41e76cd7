"""
Assignment of changelog sections to parsed commits.

:func:`filter_commits` drops commits whose type tag is not recognised,
:func:`classify` resolves each remaining commit's section through a
:class:`SectionAliasMap`, and :func:`classify_all` does the same while
keeping unrecognised tags as sections of their own.
"""

from __future__ import annotations

import re
from typing import List

from vc_changelog.grouping.alias_map import SectionAliasMap, title_case
from vc_changelog.parsing.commit import UNKNOWN, Commit


def filter_commits(commits: List[Commit], pattern: str, include_all: bool) -> List[Commit]:
    """Keep only commits whose raw type matches ``pattern``.

    Parameters
    ----------
    commits : List[Commit]
        Parsed commits.
    pattern : str
        Regular expression as produced by :meth:`SectionAliasMap.grep`.
    include_all : bool
        If True, every commit is kept.

    Returns
    -------
    List[Commit]
        A new list with the kept commits, in input order.
    """
    if include_all:
        return list(commits)
    regex = re.compile(pattern)
    return [commit for commit in commits if regex.search(commit.raw_type)]


def classify(commits: List[Commit], alias_map: SectionAliasMap) -> List[Commit]:
    """Set ``display_section`` on each commit from ``alias_map``.

    The commits are updated in place and the same list is returned.
    """
    for commit in commits:
        commit.display_section = alias_map.section_for(commit.raw_type)
    return commits


def classify_all(commits: List[Commit], alias_map: SectionAliasMap) -> List[Commit]:
    """Like :func:`classify`, but unknown tags become their own title-cased section."""
    for commit in commits:
        section = alias_map.section_for(commit.raw_type)
        if section == UNKNOWN:
            section = title_case(commit.raw_type)
        commit.display_section = section
    return commits
