"""
Configuration loader for vc_changelog.

A repository may carry a ``.clog.toml`` file at its root. It declares
extra changelog sections and their type tags, a custom section order,
and defaults for the changelog header::

    repo = "https://github.com/owner/project"
    subtitle = "Codename"
    patch_ver = false
    order = ["Features", "Bug Fixes"]

    [sections]
    "Documentation" = ["docs", "doc"]

The file is obtained through a querier, so this module only parses its
content. Malformed content or values of the wrong type raise a
:class:`ConfigError`.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from vc_changelog.grouping.alias_map import SectionAliasMap


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = ".clog.toml"


class ConfigError(Exception):
    """Raised when the ``.clog.toml`` configuration is malformed or invalid."""

    pass


@dataclass
class ClogConfig:
    """Validated content of a ``.clog.toml`` file.

    Header fields are ``None`` when the file does not set them.
    """

    sections: Dict[str, List[str]] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)
    repo: Optional[str] = None
    version: Optional[str] = None
    subtitle: Optional[str] = None
    patch_ver: Optional[bool] = None

    def alias_map(self) -> SectionAliasMap:
        """Return the built-in alias map merged with the declared sections."""
        return SectionAliasMap.default().merge(self.sections)


def _check_string_list(value: Any, name: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{name}' must be a list of strings")
    return list(value)


def parse_config(content: Union[bytes, str, None]) -> ClogConfig:
    """Parse and validate ``.clog.toml`` content.

    Parameters
    ----------
    content : bytes, str or None
        Raw file content. ``None`` yields an empty configuration.

    Returns
    -------
    ClogConfig
        The validated configuration.

    Raises
    ------
    ConfigError
        If the content is not valid TOML or a key has the wrong type.
    """
    if content is None:
        return ClogConfig()

    try:
        text = content.decode("utf-8") if isinstance(content, bytes) else content
        data: Dict[str, Any] = tomllib.loads(text)
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        logger.error("Failed to parse %s: %s", CONFIG_FILE_NAME, exc)
        raise ConfigError(f"Invalid TOML in {CONFIG_FILE_NAME}: {exc}") from exc

    sections_raw = data.get("sections", {})
    if not isinstance(sections_raw, dict):
        raise ConfigError("'sections' must be a table of section name to list of tags")
    sections = {
        str(title): _check_string_list(tags, f"sections.{title}")
        for title, tags in sections_raw.items()
    }

    order = _check_string_list(data.get("order", []), "order")

    for key in ("repo", "version", "subtitle"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    if "patch_ver" in data and not isinstance(data["patch_ver"], bool):
        raise ConfigError("'patch_ver' must be a boolean")

    config = ClogConfig(
        sections=sections,
        order=order,
        repo=data.get("repo"),
        version=data.get("version"),
        subtitle=data.get("subtitle"),
        patch_ver=data.get("patch_ver"),
    )
    logger.debug("Loaded %s: %s", CONFIG_FILE_NAME, config)
    return config
