"""
Grouping logic for parsed commits.

This package maps commit type tags to changelog sections
(:mod:`vc_changelog.grouping.alias_map`), classifies and filters commits
(:mod:`vc_changelog.grouping.classifier`) and groups them by section and
component (:mod:`vc_changelog.grouping.section_map`).
"""

from .alias_map import SectionAliasMap, merge_alias_maps  # noqa: F401
from .classifier import classify, classify_all, filter_commits  # noqa: F401
from .section_map import DEFAULT_ORDER, SectionMap, aggregate  # noqa: F401
