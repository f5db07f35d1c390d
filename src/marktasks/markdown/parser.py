"""Markdown text to document tree, on top of markdown-it-py."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable

from markdown_it import MarkdownIt
from markdown_it.token import Token

from marktasks.logging import get_logger
from marktasks.models.nodes import (
    Blockquote,
    Break,
    Code,
    Delete,
    Emphasis,
    Heading,
    Html,
    Image,
    InlineCode,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Root,
    Strong,
    Text,
    ThematicBreak,
)

logger = get_logger(__name__)

# GFM task list item marker at the start of an item's first paragraph
_TASK_MARKER_RE = re.compile(r"^\[(?P<mark>[ xX])\](?P<gap>[ \t]+|\n)")


def _create_parser() -> MarkdownIt:
    return MarkdownIt("commonmark").enable("strikethrough")


_md = _create_parser()


@dataclass
class _Frame:
    """An open container while folding the flat token stream into a tree."""

    build: Callable[[list[Node]], Node]
    children: list[Node] = field(default_factory=list)
    kind: str = ""
    loose: bool = False
    # the item's first paragraph starts with an unescaped task marker in the source
    task_marker: bool = False


def parse_markdown(text: str) -> Root:
    """Parse Markdown into a :class:`Root` tree.

    Args:
        text: Markdown source.

    Returns:
        Root: The document tree.
    """

    tokens = _md.parse(text)
    root = _Frame(build=lambda children: Root(children=children), kind="root")
    stack: list[_Frame] = [root]

    for token in tokens:
        if token.nesting == 1:
            stack.append(_open_block(token, stack))
        elif token.nesting == -1:
            frame = stack.pop()
            stack[-1].children.append(frame.build(frame.children))
        elif token.type == "inline":
            _note_task_marker(token, stack)
            stack[-1].children.extend(_inline(token.children or []))
        else:
            leaf = _block_leaf(token)
            if leaf is not None:
                stack[-1].children.append(leaf)

    tree = root.build(root.children)
    logger.debug("Parsed %d tokens into %d top-level nodes", len(tokens), len(tree.children))
    return tree


def _open_block(token: Token, stack: list[_Frame]) -> _Frame:
    if token.type == "heading_open":
        depth = int(token.tag[1:])
        return _Frame(build=lambda children: Heading(depth=depth, children=children), kind="heading")
    if token.type == "paragraph_open":
        parent = stack[-1]
        if parent.kind == "list_item" and not token.hidden:
            parent.loose = True
        return _Frame(build=lambda children: Paragraph(children=children), kind="paragraph")
    if token.type == "blockquote_open":
        return _Frame(build=lambda children: Blockquote(children=children), kind="blockquote")
    if token.type in ("bullet_list_open", "ordered_list_open"):
        return _list_frame(token)
    if token.type == "list_item_open":
        return _list_item_frame(stack)

    logger.debug("Unsupported container token %s, keeping its children", token.type)
    return _Frame(build=lambda children: Paragraph(children=children), kind=token.type)


def _list_frame(token: Token) -> _Frame:
    ordered = token.type == "ordered_list_open"
    start_attr = token.attrGet("start")
    start = int(start_attr) if start_attr is not None else (1 if ordered else None)

    frame = _Frame(build=lambda children: children[0], kind="list")

    def build(children: list[Node]) -> Node:
        spread = frame.loose or any(isinstance(c, ListItem) and c.spread for c in children)
        return List(ordered=ordered, start=start, spread=spread, children=children)

    frame.build = build
    return frame


def _list_item_frame(stack: list[_Frame]) -> _Frame:
    frame = _Frame(build=lambda children: children[0], kind="list_item")

    def build(children: list[Node]) -> Node:
        checked = None
        if frame.task_marker:
            checked, children = _split_task_marker(children)
        if frame.loose:
            stack[-1].loose = True
        return ListItem(checked=checked, spread=frame.loose, children=children)

    frame.build = build
    return frame


def _note_task_marker(token: Token, stack: list[_Frame]) -> None:
    if len(stack) < 3 or stack[-1].kind != "paragraph" or stack[-2].kind != "list_item":
        return
    item = stack[-2]
    if not item.children:
        item.task_marker = _TASK_MARKER_RE.match(token.content) is not None


def _split_task_marker(children: list[Node]) -> tuple[bool | None, list[Node]]:
    """Detect a leading ``[ ]``/``[x]`` marker and move it into ``checked``."""

    if not children or not isinstance(children[0], Paragraph):
        return None, children
    paragraph = children[0]
    if not paragraph.children or not isinstance(paragraph.children[0], Text):
        return None, children

    first = paragraph.children[0]
    found = _TASK_MARKER_RE.match(first.value)
    if found is None:
        return None, children
    rest = first.value[found.end():]
    if not rest and len(paragraph.children) == 1:
        return None, children

    phrasing = ([Text(value=rest)] if rest else []) + list(paragraph.children[1:])
    checked = found.group("mark") in "xX"
    return checked, [Paragraph(children=phrasing), *children[1:]]


def _block_leaf(token: Token) -> Node | None:
    if token.type in ("fence", "code_block"):
        lang = token.info.strip() or None
        return Code(lang=lang, value=_strip_final_newline(token.content))
    if token.type == "html_block":
        return Html(value=token.content.rstrip("\n"))
    if token.type == "hr":
        return ThematicBreak()
    logger.debug("Skipping block token %s", token.type)
    return None


def _strip_final_newline(value: str) -> str:
    return value[:-1] if value.endswith("\n") else value


_INLINE_CONTAINERS: dict[str, Callable[[Token], Callable[[list[Node]], Node]]] = {
    "em_open": lambda _t: lambda ch: Emphasis(children=ch),
    "strong_open": lambda _t: lambda ch: Strong(children=ch),
    "s_open": lambda _t: lambda ch: Delete(children=ch),
    "link_open": lambda t: lambda ch: Link(
        url=str(t.attrGet("href") or ""),
        title=_optional_str(t.attrGet("title")),
        children=ch,
    ),
}


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _inline(tokens: list[Token]) -> list[Node]:
    stack: list[list[Node]] = [[]]
    builders: list[Callable[[list[Node]], Node]] = []

    for token in tokens:
        if token.nesting == 1:
            factory = _INLINE_CONTAINERS.get(token.type)
            builders.append(factory(token) if factory else (lambda ch: Emphasis(children=ch)))
            stack.append([])
        elif token.nesting == -1:
            children = stack.pop()
            stack[-1].append(builders.pop()(children))
        else:
            _append_inline_leaf(stack[-1], token)

    return stack[0]


def _append_inline_leaf(out: list[Node], token: Token) -> None:
    if token.type in ("text", "text_special", "entity"):
        _append_text(out, token.content)
    elif token.type == "softbreak":
        _append_text(out, "\n")
    elif token.type == "hardbreak":
        out.append(Break())
    elif token.type == "code_inline":
        out.append(InlineCode(value=token.content))
    elif token.type == "html_inline":
        out.append(Html(value=token.content))
    elif token.type == "image":
        out.append(
            Image(
                url=str(token.attrGet("src") or ""),
                title=_optional_str(token.attrGet("title")),
                alt=token.content,
            )
        )
    else:
        _append_text(out, token.content)


def _append_text(out: list[Node], value: str) -> None:
    if not value:
        return
    if out and isinstance(out[-1], Text):
        out[-1] = Text(value=out[-1].value + value)
    else:
        out.append(Text(value=value))
