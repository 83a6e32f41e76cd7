"""
Parsing of raw commit messages into structured commit records.

A commit message is expected to follow the ``type(component): subject``
convention on its first line. Every line of the message is also scanned
for issue references (``Closes #1, #2``) and breaking-change markers
(``Breaks #3`` or a bare ``BREAKING CHANGE``). Messages that do not
follow the convention are still parsed; their type and component fall
back to ``"Unknown"``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


UNKNOWN = "Unknown"

# type(component): subject
COMMIT_REGEX = re.compile(r"^([^:(]+?)(?:\(([^)]*)?\))?:(.*)")
# Closes #1, #2
CLOSES_REGEX = re.compile(r"(?:Closes|Fixes|Resolves)\s((?:#\d+(?:,\s)?)+)")
# Breaks #1, #2
BREAKS_REGEX = re.compile(r"(?:Breaks|Broke)\s((?:#\d+(?:,\s)?)+)")
BREAKING_REGEX = re.compile(r"breaking", re.IGNORECASE)
_ISSUE_REGEX = re.compile(r"#(\d+)")


@dataclass
class Commit:
    """Representation of a single version-control commit.

    Attributes
    ----------
    hash : str
        Full commit identifier.
    subject : str
        First line of the message with the ``type(component):`` prefix removed.
    component : str
        Scope taken from the prefix, ``"Unknown"`` if there is none.
    raw_type : str
        Type tag taken from the prefix, e.g. ``feat``.
    closes : List[str]
        Issue numbers closed by this commit.
    breaks : List[str]
        Issue numbers broken by this commit. A bare breaking-change marker
        contributes an empty string.
    display_section : str
        Section name assigned by the classifier; empty until classified.
    """

    hash: str
    subject: str
    component: str = UNKNOWN
    raw_type: str = UNKNOWN
    closes: List[str] = field(default_factory=list)
    breaks: List[str] = field(default_factory=list)
    display_section: str = ""

    @property
    def short_hash(self) -> str:
        return self.hash[:8]


def _issue_ids(references: str) -> List[str]:
    return _ISSUE_REGEX.findall(references)


def parse_commit(hash: str, message: str) -> Optional[Commit]:
    """Parse a raw ``(hash, message)`` pair into a :class:`Commit`.

    Parameters
    ----------
    hash : str
        The commit identifier.
    message : str
        The full commit message, subject line first.

    Returns
    -------
    Optional[Commit]
        The parsed commit, or ``None`` when the message has no lines.
        A message whose first line is blank (``"\\nbody"``) still parses;
        its ``subject`` is then empty and its type and component are
        ``"Unknown"``, so the commit is filtered out unless all commits
        are included.
    """
    lines = message.splitlines()
    if not lines:
        logger.debug("Dropping commit %s with an empty message", hash)
        return None

    match = COMMIT_REGEX.match(lines[0])
    if match is None:
        raw_type = UNKNOWN
        component = UNKNOWN
        subject = lines[0]
    else:
        raw_type = match.group(1)
        component = match.group(2) or UNKNOWN
        subject = match.group(3)

    closes: List[str] = []
    breaks: List[str] = []
    for line in lines:
        closes_match = CLOSES_REGEX.search(line)
        if closes_match:
            closes.extend(_issue_ids(closes_match.group(1)))
            continue
        breaks_match = BREAKS_REGEX.search(line)
        if breaks_match:
            breaks.extend(_issue_ids(breaks_match.group(1)))
            continue
        if BREAKING_REGEX.search(line):
            breaks.append("")

    return Commit(
        hash=hash,
        subject=subject.strip(),
        component=component,
        raw_type=raw_type,
        closes=closes,
        breaks=breaks,
    )


def parse_commits(raw_commits) -> List[Commit]:
    """Parse an iterable of ``(hash, message)`` pairs, dropping empty messages."""
    commits: List[Commit] = []
    for hash, message in raw_commits:
        commit = parse_commit(hash, message)
        if commit is not None:
            commits.append(commit)
    return commits
