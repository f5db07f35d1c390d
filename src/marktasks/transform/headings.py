"""Document titles and heading box states."""

from __future__ import annotations

from marktasks.models.nodes import Heading, Node, Text, to_plain_text, walk
from marktasks.models.task import BoxState
from marktasks.utils.patterns import box_pattern


def first_top_level_heading(tree: Node) -> Heading | None:
    """Return the first depth-1 heading in document order, if any."""

    for node in walk(tree):
        if isinstance(node, Heading) and node.depth == 1:
            return node
    return None


def heading_box_state(heading: Heading | None) -> BoxState | None:
    """Box written at the start of the heading text, or None."""

    if heading is None or not heading.children or not isinstance(heading.children[0], Text):
        return None
    found = box_pattern().match_start(heading.children[0])
    return BoxState(found.group("box")) if found else None


def extract_title(tree: Node) -> str | None:
    """Plain text of the first top-level heading without its box.

    Formatting contributes only its text; an empty title counts as no title.
    """

    heading = first_top_level_heading(tree)
    if heading is None:
        return None
    text = to_plain_text(heading)
    found = box_pattern().match_start(text)
    if found:
        text = text[found.end():]
    return text.strip() or None
