"""
End-to-end changelog generation.

:func:`build_changelog` chains the steps: filter the parsed commits,
classify them, group them into sections, apply a custom section order,
and render the Markdown document.
"""

from __future__ import annotations

import datetime
import logging
from typing import List, Optional, Sequence

from vc_changelog.grouping.alias_map import SectionAliasMap
from vc_changelog.grouping.classifier import classify, classify_all, filter_commits
from vc_changelog.grouping.section_map import SectionMap, aggregate
from vc_changelog.parsing.commit import Commit
from vc_changelog.render.link_style import LinkStyle
from vc_changelog.render.markdown import ChangeLog, render_markdown


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def group_commits(
    commits: List[Commit],
    alias_map: SectionAliasMap,
    order: Optional[Sequence[str]] = None,
    include_all: bool = False,
) -> SectionMap:
    """Filter, classify and group ``commits`` into a :class:`SectionMap`."""
    if include_all:
        commits = classify_all(list(commits), alias_map)
    else:
        commits = classify(filter_commits(commits, alias_map.grep(), False), alias_map)
    logger.debug("Grouping %d commit(s) into sections", len(commits))

    section_map = aggregate(commits)
    if order:
        section_map.set_order(order)
    return section_map


def build_changelog(
    header: ChangeLog,
    commits: List[Commit],
    alias_map: Optional[SectionAliasMap] = None,
    order: Optional[Sequence[str]] = None,
    style: Optional[LinkStyle] = LinkStyle.GITHUB,
    include_all: bool = False,
    date: Optional[datetime.date] = None,
) -> str:
    """Produce the Markdown changelog for ``commits``.

    Parameters
    ----------
    header : ChangeLog
        Repository URL, version and subtitle.
    commits : List[Commit]
        Parsed commits; their ``display_section`` is overwritten.
    alias_map : SectionAliasMap, optional
        Sections and their type tags. Defaults to the built-in map.
    order : Sequence[str], optional
        Custom section order.
    style : LinkStyle, optional
        Link layout used for commit and issue links.
    include_all : bool
        Keep commits whose type tag is not recognised, each under a
        section named after its tag.
    date : datetime.date, optional
        Release date; defaults to today.

    Raises
    ------
    RenderError
        If the document cannot be rendered.
    """
    if alias_map is None:
        alias_map = SectionAliasMap.default()
    section_map = group_commits(commits, alias_map, order=order, include_all=include_all)
    return render_markdown(header, style, section_map, date=date)
