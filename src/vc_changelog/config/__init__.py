"""
Configuration loading for vc_changelog.

Parses the optional ``.clog.toml`` file found at a repository root. See
:mod:`vc_changelog.config.loader` for implementation details.
"""

from .loader import CONFIG_FILE_NAME, ClogConfig, ConfigError, parse_config  # noqa: F401
