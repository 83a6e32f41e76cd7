"""
Link styles for commit and issue hyperlinks.

Each hosting service lays out its commit and issue pages differently.
:class:`LinkStyle` enumerates the supported layouts and builds the URLs;
a style without a template for a link kind yields the repository URL
unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class LinkStyle(str, Enum):
    """Supported hyperlink layouts."""

    GITHUB = "github"
    GITLAB = "gitlab"
    STASH = "stash"
    BITBUCKET = "bitbucket"
    CGIT = "cgit"

    @classmethod
    def parse(cls, name: str) -> "LinkStyle":
        """Return the style called ``name``.

        Raises
        ------
        ValueError
            If ``name`` is not a supported style.
        """
        try:
            return cls(name.lower())
        except ValueError:
            raise ValueError(
                f"Link style '{name}' is not supported. Must be one of {supported_styles()}"
            ) from None

    def commit_link(self, hash: str, repo: str) -> str:
        return commit_link(self, hash, repo)

    def issue_link(self, issue: str, repo: str) -> str:
        return issue_link(self, issue, repo)


_COMMIT_TEMPLATES: Dict[LinkStyle, str] = {
    LinkStyle.GITHUB: "{repo}/commit/{ref}",
    LinkStyle.GITLAB: "{repo}/commit/{ref}",
    LinkStyle.STASH: "{repo}/commits/{ref}",
    LinkStyle.BITBUCKET: "{repo}/commits/{ref}",
    LinkStyle.CGIT: "{repo}/commit/?id={ref}",
}

_ISSUE_TEMPLATES: Dict[LinkStyle, str] = {
    LinkStyle.GITHUB: "{repo}/issues/{ref}",
    LinkStyle.GITLAB: "{repo}/issues/{ref}",
    LinkStyle.BITBUCKET: "{repo}/issues/{ref}",
}

_HOSTS = (
    ("github.com", LinkStyle.GITHUB),
    ("gitlab.com", LinkStyle.GITLAB),
    ("bitbucket.org", LinkStyle.BITBUCKET),
)


def _format(templates: Dict[LinkStyle, str], style: Optional[LinkStyle], ref: str, repo: str) -> str:
    template = templates.get(style) if style is not None else None
    if template is None:
        return repo
    return template.format(repo=repo, ref=ref)


def commit_link(style: Optional[LinkStyle], hash: str, repo: str) -> str:
    """Return the URL of commit ``hash`` in ``repo``."""
    return _format(_COMMIT_TEMPLATES, style, hash, repo)


def issue_link(style: Optional[LinkStyle], issue: str, repo: str) -> str:
    """Return the URL of issue ``issue`` in ``repo``."""
    return _format(_ISSUE_TEMPLATES, style, issue, repo)


def infer_style(repo_url: str) -> LinkStyle:
    """Guess the link style from a repository URL, defaulting to GitHub."""
    for host, style in _HOSTS:
        if host in repo_url:
            return style
    return LinkStyle.GITHUB


def supported_styles() -> str:
    """Return the supported style names as a sorted, comma-separated string."""
    return ", ".join(sorted(style.value for style in LinkStyle))
