"""Task identifier allocation."""

from __future__ import annotations

import itertools
from typing import Iterable

from marktasks.logging import get_logger
from marktasks.models.nodes import Node, text_nodes
from marktasks.utils.patterns import extract_task_number, format_task_id

logger = get_logger(__name__)


def max_task_number(project_id: str, trees: Iterable[Node]) -> int:
    """Return the highest task number used for *project_id* in any text node, or 0.

    Args:
        project_id: Project id whose identifiers are counted.
        trees: Documents to scan.
    """

    highest = 0
    for tree in trees:
        for text in text_nodes(tree):
            number = extract_task_number(text, project_id)
            if number is not None and number > highest:
                highest = number
    return highest


class IdentifierAllocator:
    """Hands out ``max+1, max+2, ...`` for one project id.

    One instance is shared by every document of a run. Each call draws from a single
    ``itertools.count``, so no number is handed out twice.
    """

    def __init__(self, project_id: str, trees: Iterable[Node] = ()) -> None:
        self.project_id = project_id
        self.seed = max_task_number(project_id, trees)
        self._counter = itertools.count(self.seed + 1)
        self._last = self.seed
        logger.debug("Allocator for %s seeded at %d", project_id, self.seed)

    def next_number(self) -> int:
        self._last = next(self._counter)
        return self._last

    def next_id(self) -> str:
        return format_task_id(self.project_id, self.next_number())

    @property
    def last_number(self) -> int:
        return self._last

    @property
    def allocated(self) -> int:
        """Number of identifiers handed out so far."""

        return self._last - self.seed
