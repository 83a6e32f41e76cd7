"""
Top-level package for vc_changelog.

This package turns conventional commit messages into a Markdown
changelog and validates pull request commits. The command line entry
point lives in :mod:`vc_changelog.cli`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
