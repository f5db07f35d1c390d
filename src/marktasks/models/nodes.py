"""Markdown document tree.

Nodes mirror the mdast vocabulary and carry semantic fields only (no source positions).
Trees are values: transformations build new nodes with ``model_copy`` and never mutate a
node that may be shared.
"""

from __future__ import annotations

from typing import Annotated, Iterator, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


# Block content


class Root(_Node):
    type: Literal["root"] = "root"
    children: list[Node] = Field(default_factory=list)


class Heading(_Node):
    type: Literal["heading"] = "heading"
    depth: int = Field(ge=1, le=6)
    children: list[Node] = Field(default_factory=list)


class Paragraph(_Node):
    type: Literal["paragraph"] = "paragraph"
    children: list[Node] = Field(default_factory=list)


class Blockquote(_Node):
    type: Literal["blockquote"] = "blockquote"
    children: list[Node] = Field(default_factory=list)


class List(_Node):
    type: Literal["list"] = "list"
    ordered: bool = False
    start: Optional[int] = None
    spread: bool = False
    children: list[Node] = Field(default_factory=list)


class ListItem(_Node):
    """List item; ``checked`` is the box (``None`` means the item has no box)."""

    type: Literal["listItem"] = "listItem"
    checked: Optional[bool] = None
    spread: bool = False
    children: list[Node] = Field(default_factory=list)


class Code(_Node):
    type: Literal["code"] = "code"
    lang: Optional[str] = None
    value: str = ""


class Html(_Node):
    """Raw HTML, block or inline. Region sentinels are comments of this kind."""

    type: Literal["html"] = "html"
    value: str


class ThematicBreak(_Node):
    type: Literal["thematicBreak"] = "thematicBreak"


# Phrasing content


class Text(_Node):
    type: Literal["text"] = "text"
    value: str


class Emphasis(_Node):
    type: Literal["emphasis"] = "emphasis"
    children: list[Node] = Field(default_factory=list)


class Strong(_Node):
    type: Literal["strong"] = "strong"
    children: list[Node] = Field(default_factory=list)


class Delete(_Node):
    type: Literal["delete"] = "delete"
    children: list[Node] = Field(default_factory=list)


class InlineCode(_Node):
    type: Literal["inlineCode"] = "inlineCode"
    value: str


class Link(_Node):
    type: Literal["link"] = "link"
    url: str
    title: Optional[str] = None
    children: list[Node] = Field(default_factory=list)


class Image(_Node):
    type: Literal["image"] = "image"
    url: str
    title: Optional[str] = None
    alt: str = ""


class Break(_Node):
    type: Literal["break"] = "break"


Node = Annotated[
    Union[
        Root,
        Heading,
        Paragraph,
        Blockquote,
        List,
        ListItem,
        Code,
        Html,
        ThematicBreak,
        Text,
        Emphasis,
        Strong,
        Delete,
        InlineCode,
        Link,
        Image,
        Break,
    ],
    Field(discriminator="type"),
]

Parent = Union[Root, Heading, Paragraph, Blockquote, List, ListItem, Emphasis, Strong, Delete, Link]

PARENT_TYPES = (Root, Heading, Paragraph, Blockquote, List, ListItem, Emphasis, Strong, Delete, Link)
PHRASING_TYPES = (Text, Emphasis, Strong, Delete, InlineCode, Link, Image, Break)

for _model in (Root, Heading, Paragraph, Blockquote, List, ListItem, Emphasis, Strong, Delete, Link):
    _model.model_rebuild()

node_adapter: TypeAdapter[Node] = TypeAdapter(Node)


def is_parent(node: object) -> bool:
    return isinstance(node, PARENT_TYPES)


def is_phrasing(node: object) -> bool:
    """Inline content other than raw HTML, which may be either block or inline."""

    return isinstance(node, PHRASING_TYPES)


def with_children(node: Parent, children: Sequence[Node]) -> Parent:
    """Return a copy of *node* holding *children*."""

    return node.model_copy(update={"children": list(children)})


def walk(node: Node) -> Iterator[Node]:
    """Yield *node* and all of its descendants in document (pre-)order."""

    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if is_parent(current):
            stack.extend(reversed(current.children))


def text_nodes(node: Node) -> Iterator[Text]:
    for found in walk(node):
        if isinstance(found, Text):
            yield found


def to_plain_text(node: Node) -> str:
    """Concatenate the textual content of *node*, dropping all formatting."""

    if isinstance(node, (Text, InlineCode, Code, Html)):
        return node.value
    if isinstance(node, Image):
        return node.alt
    if is_parent(node):
        return "".join(to_plain_text(child) for child in node.children)
    return ""
