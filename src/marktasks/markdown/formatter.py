"""Canonical formatting of rendered Markdown."""

from __future__ import annotations

import re

import mdformat

from marktasks.logging import get_logger
from marktasks.markdown.renderer import render_markdown
from marktasks.models.nodes import Root

logger = get_logger(__name__)

# a box the formatter escaped right after a heading or list item marker
_ESCAPED_BOX_RE = re.compile(
    r"^(?P<lead>[ \t>]*(?:#{1,6}|[-*+]|\d{1,9}[.)])[ \t]+)\\\[(?P<box>[ xX…])\\?\]",
    re.MULTILINE,
)


def unescape_boxes(text: str) -> str:
    """Turn ``\\[ \\]`` after a heading or list marker back into ``[ ]``."""

    return _ESCAPED_BOX_RE.sub(r"\g<lead>[\g<box>]", text)


def format_markdown(text: str) -> str:
    """Format Markdown with mdformat and keep task boxes readable.

    Args:
        text: Rendered Markdown.

    Returns:
        str: Canonical Markdown, ending with a newline when non-empty.
    """

    if not text.strip():
        return ""
    formatted = mdformat.text(text, options={"number": True})
    if formatted != text:
        logger.debug("mdformat changed %d of %d characters", abs(len(formatted) - len(text)), len(text))
    return unescape_boxes(formatted)


def render_document(tree: Root, *, format_output: bool = True) -> str:
    """Serialize *tree*, formatting the result unless disabled."""

    rendered = render_markdown(tree)
    return format_markdown(rendered) if format_output else rendered
