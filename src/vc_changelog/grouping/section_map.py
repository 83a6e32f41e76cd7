"""
Grouping of classified commits into changelog sections.

A :class:`SectionMap` is a two-level structure: section title, then
component, then the commits in the order they were encountered. It also
carries the order in which sections are rendered.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from vc_changelog.parsing.commit import UNKNOWN, Commit


BREAKING_CHANGES = "Breaking Changes"

DEFAULT_ORDER: List[str] = [
    "Features",
    "Bug Fixes",
    "Performance",
    BREAKING_CHANGES,
    UNKNOWN,
]

ComponentMap = Dict[str, List[Commit]]


class SectionMap:
    """Commits grouped by section and component.

    Attributes
    ----------
    sections : Dict[str, ComponentMap]
        Section title to component to commits.
    """

    def __init__(self, sections: Dict[str, ComponentMap] | None = None) -> None:
        self.sections: Dict[str, ComponentMap] = sections if sections is not None else {}
        self._order: List[str] = []
        self.set_order(DEFAULT_ORDER)

    @classmethod
    def from_commits(cls, commits: Iterable[Commit]) -> "SectionMap":
        """Group ``commits`` by their ``display_section`` and ``component``.

        A commit with any ``breaks`` entries is also filed under
        ``"Breaking Changes"``, so it may appear in two sections.
        """
        sections: Dict[str, ComponentMap] = {}
        for commit in commits:
            if commit.breaks:
                sections.setdefault(BREAKING_CHANGES, {}).setdefault(commit.component, []).append(commit)
            sections.setdefault(commit.display_section, {}).setdefault(commit.component, []).append(commit)
        return cls(sections)

    def order(self) -> List[str]:
        """Return the order in which sections appear in the changelog."""
        return list(self._order)

    def set_order(self, order: Iterable[str]) -> None:
        """Set the section order.

        Listed sections that do not exist are dropped. Sections present but
        not listed are appended alphabetically. ``"Unknown"`` always comes
        last when present, wherever it was listed.
        """
        new_order: List[str] = []
        for section in order:
            if section == UNKNOWN or section not in self.sections or section in new_order:
                continue
            new_order.append(section)

        remaining = sorted(
            section for section in self.sections if section not in new_order and section != UNKNOWN
        )
        new_order.extend(remaining)
        if UNKNOWN in self.sections:
            new_order.append(UNKNOWN)
        self._order = new_order


def aggregate(commits: Iterable[Commit]) -> SectionMap:
    """Build a :class:`SectionMap` from classified commits."""
    return SectionMap.from_commits(commits)
