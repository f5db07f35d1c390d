"""Tests for identifier allocation."""

from __future__ import annotations

from marktasks.markdown.parser import parse_markdown
from marktasks.transform.allocator import IdentifierAllocator, max_task_number


def test_max_task_number_scans_all_text() -> None:
    """It should find the highest id in any text node of any tree, or 0."""

    trees = [
        parse_markdown("- [ ] TODO-3 a\n"),
        parse_markdown("Mentions *TODO-11* in passing.\n"),
        parse_markdown("# Nothing\n"),
    ]

    assert max_task_number("TODO", trees) == 11
    assert max_task_number("TODO", [parse_markdown("# Nothing\n")]) == 0


def test_allocator_is_monotonic_and_shared() -> None:
    """It should hand out consecutive numbers above the corpus maximum."""

    allocator = IdentifierAllocator("TODO", [parse_markdown("- [ ] TODO-3 done\n")])

    assert allocator.seed == 3
    assert [allocator.next_id() for _ in range(3)] == ["TODO-4", "TODO-5", "TODO-6"]
    assert allocator.last_number == 6
    assert allocator.allocated == 3


def test_allocator_without_trees_starts_at_one() -> None:
    """It should start at 1 for an empty corpus."""

    allocator = IdentifierAllocator("ABC")

    assert allocator.next_number() == 1
    assert allocator.next_id() == "ABC-2"
