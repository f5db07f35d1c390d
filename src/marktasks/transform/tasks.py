"""Read-only query over the tasks of a transformed tree."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Optional

from marktasks.models.nodes import Heading, ListItem, Node, Paragraph, Text, to_plain_text, walk
from marktasks.models.task import BoxState, TaskRecord
from marktasks.transform.headings import heading_box_state
from marktasks.transform.regions import REGION_NAMES, replace_regions
from marktasks.utils.patterns import box_pattern, task_id_pattern


def collect_tasks(tree: Node, project_id: str, path: Optional[Path] = None) -> list[TaskRecord]:
    """List every heading or list item that carries both a box and a literal identifier.

    Args:
        tree: Document tree, usually after transformation.
        project_id: Only identifiers of this project are reported.
        path: File the tree belongs to, copied into each record.
    """

    authored = replace_regions(tree, {name: _drop_body for name in REGION_NAMES})
    return list(_iter_tasks(authored, project_id, path))


def _drop_body(_body: list[Node]) -> list[Node]:
    # generated listings repeat tasks that live in other documents
    return []


def collect_corpus_tasks(documents: Iterable[tuple[Path, Node]], project_id: str) -> list[TaskRecord]:
    records: list[TaskRecord] = []
    for path, tree in documents:
        records.extend(collect_tasks(tree, project_id, path))
    return records


def _iter_tasks(tree: Node, project_id: str, path: Optional[Path]) -> Iterator[TaskRecord]:
    task_id = task_id_pattern(project_id)
    for node in walk(tree):
        if isinstance(node, Heading):
            state = heading_box_state(node)
            if state is None:
                continue
            text = to_plain_text(node)
            text = text[box_pattern().match_start(text).end():].lstrip()  # type: ignore[union-attr]
            found = task_id.match_start(text)
            if found:
                yield TaskRecord(
                    task_id=found.group("task_id"),
                    title=text[found.end():].strip(),
                    state=state,
                    kind="heading",
                    path=path,
                )
        elif isinstance(node, ListItem) and node.checked is not None:
            text = _item_text(node)
            found = task_id.match_start(text)
            if found:
                yield TaskRecord(
                    task_id=found.group("task_id"),
                    title=text[found.end():].strip(),
                    state=BoxState.from_checked(node.checked),
                    kind="listItem",
                    path=path,
                )


def _item_text(item: ListItem) -> str:
    if not item.children:
        return ""
    first = item.children[0]
    if isinstance(first, (Paragraph, Text)):
        return to_plain_text(first)
    return ""
