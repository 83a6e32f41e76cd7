"""
Mapping of changelog section titles to the commit type tags they collect.

A :class:`SectionAliasMap` associates each section of the changelog,
such as ``"Features"``, with the raw type tags (``ft``, ``feat``) whose
commits belong in it. Maps can be combined with :func:`merge_alias_maps`,
which unions the tags per section and never mutates its inputs.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

from vc_changelog.parsing.commit import UNKNOWN


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


BREAKING_PATTERN = "BREAKING"

DEFAULT_SECTIONS: Dict[str, Tuple[str, ...]] = {
    "Features": ("ft", "feat"),
    "Bug Fixes": ("fx", "fix"),
    "Performance": ("perf",),
    "Breaking Changes": ("breaks",),
    UNKNOWN: ("unk",),
}

_WORD_START = re.compile(r"\b(\w)")


def title_case(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest untouched.

    Unlike :meth:`str.title`, acronyms survive: ``"API changes"`` becomes
    ``"API Changes"``.
    """
    return _WORD_START.sub(lambda m: m.group(1).upper(), text)


class SectionAliasMap:
    """Immutable mapping from section title to its set of type tags.

    Section titles are stored title-cased and tags are stored sorted and
    de-duplicated. Iteration follows insertion order, which makes
    :meth:`section_for` deterministic: when a tag is registered under two
    sections, the section registered first wins.
    """

    def __init__(self, sections: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        merged: Dict[str, Tuple[str, ...]] = {}
        for title, tags in (sections or {}).items():
            title = title_case(title)
            merged[title] = tuple(sorted(set(merged.get(title, ())) | set(tags)))
        self._sections = merged

    @classmethod
    def default(cls) -> "SectionAliasMap":
        """Return the built-in map of sections."""
        return cls(DEFAULT_SECTIONS)

    def __getitem__(self, title: str) -> Tuple[str, ...]:
        return self._sections[title]

    def __contains__(self, title: object) -> bool:
        return title in self._sections

    def __iter__(self) -> Iterator[str]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SectionAliasMap):
            return NotImplemented
        return self._sections == other._sections

    def __repr__(self) -> str:
        return f"SectionAliasMap({self._sections!r})"

    def items(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        return iter(self._sections.items())

    def to_dict(self) -> Dict[str, list]:
        return {title: list(tags) for title, tags in self._sections.items()}

    def section_for(self, tag: str) -> str:
        """Return the section title for a raw type tag, ``"Unknown"`` if unmapped."""
        for title, tags in self._sections.items():
            if tag in tags:
                return title
        return UNKNOWN

    def grep(self) -> str:
        """Build a regular expression matching any known type tag.

        Each tag becomes a ``^tag`` alternative. A literal ``BREAKING``
        alternative is always present. Alternatives are sorted.
        """
        prefixes = {BREAKING_PATTERN}
        for tags in self._sections.values():
            prefixes.update(f"^{tag}" for tag in tags if tag)
        return "|".join(sorted(prefixes))

    def merge(self, *others: Mapping[str, Iterable[str]]) -> "SectionAliasMap":
        return merge_alias_maps(self, *others)


def merge_alias_maps(
    base: Mapping[str, Iterable[str]] | SectionAliasMap,
    *others: Mapping[str, Iterable[str]] | SectionAliasMap,
) -> SectionAliasMap:
    """Merge alias maps into a new :class:`SectionAliasMap`.

    Section titles are title-cased before merging. A section missing from
    the result so far is added; an existing one has its tags unioned with
    the incoming ones. None of the arguments are modified.

    Parameters
    ----------
    base : Mapping[str, Iterable[str]] or SectionAliasMap
        The map whose sections come first in iteration order.
    *others : Mapping[str, Iterable[str]] or SectionAliasMap
        Maps merged into ``base`` from left to right.

    Returns
    -------
    SectionAliasMap
        The merged map.
    """
    merged: Dict[str, set] = {}
    for source in (base, *others):
        for title, tags in source.items():
            title = title_case(title)
            merged.setdefault(title, set()).update(tags)

    owners: Dict[str, str] = {}
    for title, tags in merged.items():
        for tag in sorted(tags):
            if tag in owners and owners[tag] != title:
                logger.warning(
                    "Tag '%s' is registered under both '%s' and '%s'; '%s' wins",
                    tag,
                    owners[tag],
                    title,
                    owners[tag],
                )
                continue
            owners[tag] = title

    return SectionAliasMap(merged)
