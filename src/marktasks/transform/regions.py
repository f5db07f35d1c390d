"""Sentinel-delimited regions whose content is generated rather than authored.

A region starts with an HTML comment such as ``<!-- index -->`` and ends with the matching
``<!-- /index -->`` among the same siblings. The body between them is replaced wholesale.
"""

from __future__ import annotations

from typing import Callable, Iterable, Mapping, Sequence

from marktasks.models.nodes import Html, Node, is_parent, with_children

INDEX = "index"
TOC = "toc"
REGION_NAMES = (INDEX, TOC)

RegionBuilder = Callable[[list[Node]], list[Node]]


def begin_marker(name: str) -> str:
    return f"<!-- {name} -->"


def end_marker(name: str) -> str:
    return f"<!-- /{name} -->"


def region_begin(node: Node, names: Iterable[str] = REGION_NAMES) -> str | None:
    """Return the region name if *node* opens one of *names*."""

    if not isinstance(node, Html):
        return None
    value = node.value.strip()
    for name in names:
        if value == begin_marker(name):
            return name
    return None


def is_region_end(node: Node, name: str) -> bool:
    return isinstance(node, Html) and node.value.strip() == end_marker(name)


def contains_region(node: Node, name: str) -> bool:
    if region_begin(node, (name,)) is not None:
        return True
    return is_parent(node) and any(contains_region(child, name) for child in node.children)


def map_children(
    children: Sequence[Node],
    on_child: Callable[[Node], Node],
    on_region: Callable[[str, list[Node]], list[Node]],
    names: Iterable[str] = REGION_NAMES,
) -> list[Node]:
    """Map *children*, handing each region body to *on_region* and every other child to *on_child*.

    The begin marker is kept. The end marker is re-emitted even when the document lacks one,
    in which case the region body is empty and the following siblings are mapped as usual.
    Region bodies never reach *on_child*.
    """

    names = tuple(names)
    out: list[Node] = []
    index = 0
    while index < len(children):
        child = children[index]
        name = region_begin(child, names)
        if name is None:
            out.append(on_child(child))
            index += 1
            continue

        end = next(
            (pos for pos in range(index + 1, len(children)) if is_region_end(children[pos], name)),
            None,
        )
        body = list(children[index + 1 : end]) if end is not None else []
        out.append(child)
        out.extend(on_region(name, body))
        out.append(Html(value=end_marker(name)))
        index = end + 1 if end is not None else index + 1
    return out


def replace_regions(node: Node, builders: Mapping[str, RegionBuilder]) -> Node:
    """Rebuild every region named in *builders*, anywhere in the tree.

    Args:
        node: Tree to rewrite.
        builders: Region name to a function that receives the old body and returns the new one.
    """

    if not is_parent(node):
        return node
    children = map_children(
        node.children,
        lambda child: replace_regions(child, builders),
        lambda name, body: builders[name](body),
        names=builders.keys(),
    )
    return with_children(node, children)
