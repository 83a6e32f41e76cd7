"""
Rendering of changelog documents.

:mod:`vc_changelog.render.link_style` builds commit and issue URLs for
the supported hosting services, and :mod:`vc_changelog.render.markdown`
turns a grouped changelog into Markdown.
"""

from .link_style import LinkStyle, infer_style, supported_styles  # noqa: F401
from .markdown import ChangeLog, RenderError, render_markdown  # noqa: F401
