"""
Markdown rendering of a grouped changelog.

The document starts with an anchor and a version heading, followed by
one ``###`` heading per populated section in the section map's order.
Each component of a section becomes a bullet listing its commits with
links to the commits and the issues they close or break.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from typing import List, Optional

from vc_changelog.grouping.section_map import SectionMap
from vc_changelog.parsing.commit import Commit
from vc_changelog.render.link_style import LinkStyle, commit_link, issue_link


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class RenderError(Exception):
    """Raised when the changelog document cannot be rendered."""

    pass


@dataclass
class ChangeLog:
    """Header information for one changelog entry.

    Attributes
    ----------
    repo : str
        Repository URL used as the base of every link.
    version : str
        The version being released.
    subtitle : str
        Optional release subtitle shown in the version heading.
    patch_version : bool
        If True, the version heading is one level deeper.
    """

    repo: str
    version: str
    subtitle: str = ""
    patch_version: bool = False


def _links(refs: List[str], repo: str, style: Optional[LinkStyle]) -> str:
    return " ".join(f"[#{ref}]({issue_link(style, ref, repo)})" for ref in refs)


def commit_summary(commit: Commit, repo: str, style: Optional[LinkStyle]) -> str:
    """Return the one-line summary of ``commit`` used in the changelog."""
    summary = f"{commit.subject} ([{commit.short_hash}]({commit_link(style, commit.hash, repo)}))"
    if commit.closes:
        summary += f", closes {_links(commit.closes, repo, style)}"
    if commit.breaks:
        summary += f", breaks {_links(commit.breaks, repo, style)}"
    return summary


def format_commits(commits: List[Commit], repo: str, style: Optional[LinkStyle]) -> str:
    """Format the commits of one component.

    A single commit is rendered inline; several commits become a nested
    bullet list starting on the next line.
    """
    if len(commits) == 1:
        return commit_summary(commits[0], repo, style)
    return "\n" + "\n".join(f"  * {commit_summary(commit, repo, style)}" for commit in commits)


def render_markdown(
    changelog: ChangeLog,
    style: Optional[LinkStyle],
    section_map: SectionMap,
    date: Optional[datetime.date] = None,
) -> str:
    """Render the changelog document as a string.

    Parameters
    ----------
    changelog : ChangeLog
        Header information.
    style : LinkStyle, optional
        Link layout; ``None`` makes every link the bare repository URL.
    section_map : SectionMap
        The grouped commits and their section order.
    date : datetime.date, optional
        Release date shown in the heading. Defaults to today.

    Returns
    -------
    str
        The complete Markdown document.

    Raises
    ------
    RenderError
        If any part of the document cannot be formatted.
    """
    date = date or datetime.date.today()
    try:
        level = "###" if changelog.patch_version else "##"
        title = changelog.version
        if changelog.subtitle:
            title += f" {changelog.subtitle}"
        parts = [
            f'<a name="{changelog.version}"></a>\n',
            f"{level} {title} ({date.strftime('%Y-%m-%d')})",
        ]
        for section in section_map.order():
            components = section_map.sections.get(section) or {}
            if not components:
                continue
            parts.append(f"\n\n### {section}\n")
            for component in sorted(components):
                rendered = format_commits(components[component], changelog.repo, style)
                parts.append(f"\n* **{component}:** {rendered}")
        parts.append("\n")
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        logger.error("Failed to render changelog: %s", exc)
        raise RenderError(f"Failed to render changelog: {exc}") from exc
    return "".join(parts)
