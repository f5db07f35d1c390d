"""Task detection and numbering over a document tree."""

from __future__ import annotations

from typing import Mapping, Optional

from marktasks.logging import get_logger
from marktasks.models.nodes import (
    Heading,
    ListItem,
    Node,
    Paragraph,
    Root,
    Text,
    is_parent,
    with_children,
)
from marktasks.transform.allocator import IdentifierAllocator
from marktasks.transform.regions import REGION_NAMES, RegionBuilder, map_children
from marktasks.utils.patterns import (
    box_and_placeholder_pattern,
    box_and_task_id_pattern,
    box_pattern,
    placeholder_pattern,
    task_id_pattern,
)

logger = get_logger(__name__)

UNCHECKED_BOX = "[ ]"


class TaskTransformer:
    """Give every task in a tree a box and a literal identifier.

    Headings carry their box as text (``# [ ] TODO-1 Title``); list items carry it in
    ``checked``. Nodes that are not tasks come back unchanged. Children are visited after
    their parent's own rewrite, in document order, so numbering is reproducible.

    Args:
        project_id: Project id used for identifiers and placeholders.
        allocator: Shared source of new numbers.
        region_builders: Region name to body builder. Regions without a builder keep their
            old body. Region bodies are never scanned for tasks.
    """

    def __init__(
        self,
        project_id: str,
        allocator: IdentifierAllocator,
        region_builders: Optional[Mapping[str, RegionBuilder]] = None,
    ) -> None:
        self.project_id = project_id
        self.allocator = allocator
        self.region_builders = dict(region_builders or {})

        self._task_id = task_id_pattern(project_id)
        self._placeholder = placeholder_pattern(project_id)
        self._box = box_pattern()
        self._box_and_task_id = box_and_task_id_pattern(project_id)
        self._box_and_placeholder = box_and_placeholder_pattern(project_id)

    def transform(self, node: Node) -> Node:
        if isinstance(node, Heading):
            node = self._heading(node)
        elif isinstance(node, ListItem):
            node = self._list_item(node)
        if not is_parent(node):
            return node
        children = map_children(node.children, self.transform, self._region, REGION_NAMES)
        return with_children(node, children)

    def transform_tree(self, tree: Root) -> Root:
        return self.transform(tree)  # type: ignore[return-value]

    def _region(self, name: str, body: list[Node]) -> list[Node]:
        builder = self.region_builders.get(name)
        return builder(body) if builder else body

    # Headings

    def _heading(self, heading: Heading) -> Heading:
        if not heading.children or not isinstance(heading.children[0], Text):
            return heading
        value = heading.children[0].value

        if self._box_and_task_id.starts(value):
            return heading

        found = self._box_and_placeholder.match_start(value)
        if found:
            new_value = self._swap_placeholder(value, found.start("placeholder"), found.end("placeholder"))
        elif self._task_id.starts(value):
            new_value = f"{UNCHECKED_BOX} {value}"
        else:
            found = self._placeholder.match_start(value)
            if found:
                new_value = f"{UNCHECKED_BOX} {self._swap_placeholder(value, 0, found.end())}"
            else:
                found = self._box.match_start(value)
                if not found:
                    return heading
                rest = value[found.end():]
                new_value = f"{found.group(0)} {self._allocate('heading')}"
                if rest:
                    new_value += " " + rest.lstrip(" \t")

        return with_children(heading, [Text(value=new_value), *heading.children[1:]])

    # List items

    def _list_item(self, item: ListItem) -> ListItem:
        text = _first_item_text(item)

        if item.checked is None:
            if text is None:
                return item
            if self._task_id.starts(text):
                return item.model_copy(update={"checked": False})
            found = self._placeholder.match_start(text)
            if not found:
                return item
            promoted = item.model_copy(update={"checked": False})
            return _replace_item_text(promoted, self._swap_placeholder(text, 0, found.end()))

        if text is None:
            return self._inject_id(item)
        if self._task_id.starts(text):
            return item
        found = self._placeholder.match_start(text)
        if found:
            return _replace_item_text(item, self._swap_placeholder(text, 0, found.end()))
        return _replace_item_text(item, f"{self._allocate('list item')} {text}")

    def _inject_id(self, item: ListItem) -> ListItem:
        leading = Text(value=f"{self._allocate('list item')} ")
        first = item.children[0] if item.children else None
        if isinstance(first, Paragraph):
            paragraph = with_children(first, [leading, *first.children])
            return with_children(item, [paragraph, *item.children[1:]])
        return with_children(item, [leading, *item.children])

    # Allocation

    def _swap_placeholder(self, value: str, start: int, end: int) -> str:
        return value[:start] + self._allocate("placeholder") + value[end:]

    def _allocate(self, kind: str) -> str:
        task_id = self.allocator.next_id()
        logger.debug("Allocated %s for %s", task_id, kind)
        return task_id


def _first_item_text(item: ListItem) -> str | None:
    """Text value of the item's leading text, directly or inside a first paragraph."""

    if not item.children:
        return None
    first = item.children[0]
    if isinstance(first, Text):
        return first.value
    if isinstance(first, Paragraph) and first.children and isinstance(first.children[0], Text):
        return first.children[0].value
    return None


def _replace_item_text(item: ListItem, value: str) -> ListItem:
    first = item.children[0]
    if isinstance(first, Text):
        return with_children(item, [Text(value=value), *item.children[1:]])
    paragraph = with_children(first, [Text(value=value), *first.children[1:]])
    return with_children(item, [paragraph, *item.children[1:]])


def transform_tree(
    project_id: str,
    tree: Root,
    allocator: Optional[IdentifierAllocator] = None,
    region_builders: Optional[Mapping[str, RegionBuilder]] = None,
) -> Root:
    """Transform a single tree, seeding a fresh allocator from it when none is given."""

    if allocator is None:
        allocator = IdentifierAllocator(project_id, [tree])
    return TaskTransformer(project_id, allocator, region_builders).transform_tree(tree)
