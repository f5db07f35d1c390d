"""Document tree to Markdown text."""

from __future__ import annotations

import re
from typing import Sequence

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
    is_phrasing,
)

_TASK_MARKER_LOOKALIKE_RE = re.compile(r"^\[[ xX]\](?:[ \t]|$)")

_ESCAPE_ANYWHERE_RE = re.compile(
    r"\\(?=[!-/:-@\[-`{-~])"  # backslash that would escape punctuation
    r"|[*`]"
    r"|~(?=~)|(?<=~)~"
    r"|<(?=[A-Za-z/!?])"
    r"|&(?=#?[A-Za-z0-9]+;)"
    r"|\](?=[(:])"
)
_UNDERSCORE_RE = re.compile(r"_")

_LINE_START_RES = (
    re.compile(r"^(#{1,6})(?=[ \t]|$)"),
    re.compile(r"^(>)"),
    re.compile(r"^([-+])(?=[ \t]|$)"),
    re.compile(r"^(=+)(?=[ \t]*$)"),
)
_ORDERED_MARKER_RE = re.compile(r"^(\d{1,9})([.)])(?=[ \t]|$)")


def render_markdown(tree: Root) -> str:
    """Serialize a tree to Markdown.

    Output is deterministic and always ends with a single newline (empty documents render as
    an empty string).
    """

    body = _blocks(tree.children, "\n\n")
    return body.strip("\n") + "\n" if body.strip() else ""


def _blocks(children: Sequence[Node], separator: str) -> str:
    rendered: list[str] = []
    phrasing: list[Node] = []
    previous: Node | None = None
    alternate = False

    def flush() -> None:
        if phrasing:
            rendered.append(_phrasing_block(phrasing))
            phrasing.clear()

    for child in children:
        if is_phrasing(child):
            phrasing.append(child)
            continue
        flush()
        if isinstance(child, List):
            # adjacent lists of the same kind would merge unless their markers differ
            consecutive = isinstance(previous, List) and previous.ordered == child.ordered
            alternate = not alternate if consecutive else False
            rendered.append(_list(child, alternate))
        else:
            rendered.append(_block(child))
        previous = child
    flush()
    return separator.join(block for block in rendered if block)


def _block(node: Node) -> str:
    if isinstance(node, Paragraph):
        return _phrasing_block(node.children)
    if isinstance(node, Heading):
        content = _phrasing_block(node.children, line_start=False).replace("\n", " ")
        marker = "#" * node.depth
        return f"{marker} {content}" if content else marker
    if isinstance(node, Blockquote):
        content = _blocks(node.children, "\n\n")
        return "\n".join(f"> {line}" if line else ">" for line in content.split("\n"))
    if isinstance(node, Code):
        return _code(node)
    if isinstance(node, Html):
        return node.value
    if isinstance(node, ThematicBreak):
        return "***"
    if isinstance(node, ListItem):
        return _list_item(node, "- ")
    if isinstance(node, Root):
        return _blocks(node.children, "\n\n")
    return ""


def _list(node: List, alternate: bool) -> str:
    separator = "\n\n" if node.spread else "\n"
    items = []
    for offset, item in enumerate(node.children):
        if node.ordered:
            number = (node.start if node.start is not None else 1) + offset
            marker = f"{number}{')' if alternate else '.'} "
        else:
            marker = "* " if alternate else "- "
        if isinstance(item, ListItem):
            items.append(_list_item(item, marker))
        else:
            items.append(_indent(marker, _blocks([item], separator)))
    return separator.join(items)


def _list_item(item: ListItem, marker: str) -> str:
    content = _blocks(item.children, "\n\n" if item.spread else "\n")
    if item.checked is None:
        if _TASK_MARKER_LOOKALIKE_RE.match(content):
            content = "\\" + content
    else:
        box = "[x]" if item.checked else "[ ]"
        content = f"{box} {content}" if content else box
    return _indent(marker, content)


def _indent(marker: str, content: str) -> str:
    if not content:
        return marker.rstrip()
    padding = " " * len(marker)
    lines = content.split("\n")
    head = marker + lines[0]
    tail = [padding + line if line else "" for line in lines[1:]]
    return "\n".join([head, *tail])


def _code(node: Code) -> str:
    longest = max((len(run) for run in re.findall(r"`+", node.value)), default=0)
    lang = node.lang or ""
    fence = "`" * max(3, longest + 1)
    if "`" in lang:
        longest_tilde = max((len(run) for run in re.findall(r"~+", node.value)), default=0)
        fence = "~" * max(3, longest_tilde + 1)
    if node.value:
        return f"{fence}{lang}\n{node.value}\n{fence}"
    return f"{fence}{lang}\n{fence}"


def _phrasing_block(children: Sequence[Node], line_start: bool = True) -> str:
    text = _phrasing(children, line_start)
    return "\n".join(line.rstrip() for line in text.split("\n")).strip("\n")


def _phrasing(children: Sequence[Node], line_start: bool = True) -> str:
    parts: list[str] = []
    at_line_start = line_start
    for child in children:
        rendered = _inline(child, at_line_start)
        parts.append(rendered)
        if rendered:
            at_line_start = rendered.endswith("\n")
    return "".join(parts)


def _inline(node: Node, line_start: bool) -> str:
    if isinstance(node, Text):
        return escape_text(node.value, line_start)
    if isinstance(node, Emphasis):
        return f"*{_phrasing(node.children, False)}*"
    if isinstance(node, Strong):
        return f"**{_phrasing(node.children, False)}**"
    if isinstance(node, Delete):
        return f"~~{_phrasing(node.children, False)}~~"
    if isinstance(node, InlineCode):
        return _inline_code(node.value)
    if isinstance(node, Link):
        return _link(node)
    if isinstance(node, Image):
        return f"![{escape_text(node.alt, False)}]({_destination(node.url)}{_title(node.title)})"
    if isinstance(node, Break):
        return "\\\n"
    if isinstance(node, Html):
        return node.value
    return ""


def _link(node: Link) -> str:
    label = _phrasing(node.children, False)
    if node.title is None and len(node.children) == 1 and isinstance(node.children[0], Text):
        shown = node.children[0].value
        if re.match(r"^[A-Za-z][A-Za-z0-9+.-]{1,31}:[^\s<>]*$", node.url) and shown == node.url:
            return f"<{node.url}>"
        if node.url == f"mailto:{shown}" and "@" in shown:
            return f"<{shown}>"
    return f"[{label}]({_destination(node.url)}{_title(node.title)})"


def _destination(url: str) -> str:
    if not url:
        return "<>"
    balanced = url.count("(") == url.count(")")
    if re.search(r"[\s<>]", url) or not balanced:
        return "<" + url.replace("<", "\\<").replace(">", "\\>") + ">"
    return url


def _title(title: str | None) -> str:
    if title is None:
        return ""
    return ' "' + title.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _inline_code(value: str) -> str:
    longest = max((len(run) for run in re.findall(r"`+", value)), default=0)
    fence = "`" * (longest + 1)
    padded = value
    if value.startswith("`") or value.endswith("`") or (
        value.startswith(" ") and value.endswith(" ") and value.strip(" ")
    ):
        padded = f" {value} "
    return f"{fence}{padded}{fence}"


def escape_text(value: str, line_start: bool) -> str:
    """Escape characters that would otherwise change meaning when re-parsed."""

    escaped = _ESCAPE_ANYWHERE_RE.sub(lambda m: "\\" + m.group(0), value)
    escaped = _UNDERSCORE_RE.sub(lambda m: _escape_underscore(m, escaped), escaped)

    lines = escaped.split("\n")
    for number, line in enumerate(lines):
        if number == 0 and not line_start:
            continue
        lines[number] = _escape_line_start(line)
    return "\n".join(lines)


def _escape_underscore(match: re.Match[str], text: str) -> str:
    before = text[match.start() - 1] if match.start() > 0 else ""
    after = text[match.end()] if match.end() < len(text) else ""
    if before.isalnum() and after.isalnum():
        return "_"
    return "\\_"


def _escape_line_start(line: str) -> str:
    for pattern in _LINE_START_RES:
        if pattern.match(line):
            return "\\" + line
    found = _ORDERED_MARKER_RE.match(line)
    if found:
        return f"{found.group(1)}\\{line[found.end(1):]}"
    return line
