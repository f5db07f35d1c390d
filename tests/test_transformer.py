"""Tests for task numbering over document trees."""

from __future__ import annotations

from marktasks.markdown.parser import parse_markdown
from marktasks.markdown.renderer import render_markdown
from marktasks.models.nodes import Html, List, ListItem, Paragraph, Root, Text
from marktasks.orchestrator.file_driver import transform_markdown
from marktasks.transform.allocator import IdentifierAllocator, max_task_number
from marktasks.transform.regions import INDEX
from marktasks.transform.transformer import TaskTransformer, transform_tree


def _transform(markdown: str, project_id: str = "TODO") -> str:
    return transform_markdown(project_id, markdown, format_output=False)


def test_list_items_get_identifiers_in_document_order() -> None:
    """It should keep existing ids, fill placeholders and number bare boxes."""

    source = "- [ ] TODO-1 A\n- [ ] TODO-? B\n- [ ] C\n"

    assert _transform(source) == "- [ ] TODO-1 A\n- [ ] TODO-2 B\n- [ ] TODO-3 C\n"


def test_heading_with_bare_box_gets_next_identifier() -> None:
    """It should insert an id after a heading box, above the existing maximum."""

    source = "# [ ] Do the thing\n\n- [x] TODO-5 Done already\n"

    assert _transform(source) == "# [ ] TODO-6 Do the thing\n\n- [x] TODO-5 Done already\n"


def test_heading_rules() -> None:
    """It should normalise every heading task shape."""

    source = (
        "# [x] TODO-1 Kept\n\n"
        "## [ ] TODO-?? Placeholder with box\n\n"
        "## TODO-1 Id without box\n\n"
        "## TODO-xx Placeholder without box\n\n"
        "## […] In progress\n\n"
        "## Not a task\n"
    )

    assert _transform(source) == (
        "# [x] TODO-1 Kept\n\n"
        "## [ ] TODO-2 Placeholder with box\n\n"
        "## [ ] TODO-1 Id without box\n\n"
        "## [ ] TODO-3 Placeholder without box\n\n"
        "## […] TODO-4 In progress\n\n"
        "## Not a task\n"
    )


def test_list_items_without_box() -> None:
    """It should promote items with an id or placeholder and leave the rest alone."""

    source = "- TODO-7 has id\n- TODO-nn has placeholder\n- plain item\n"

    assert _transform(source) == "- [ ] TODO-7 has id\n- [ ] TODO-8 has placeholder\n- plain item\n"


def test_nested_items_are_numbered_independently() -> None:
    """It should number a parent item before its children."""

    source = "- [ ] parent\n  - [ ] child\n  - not a task\n"

    assert _transform(source) == "- [ ] TODO-1 parent\n  - [ ] TODO-2 child\n  - not a task\n"


def test_item_starting_with_formatting() -> None:
    """It should prepend the id inside a paragraph that does not start with text."""

    assert _transform("- [ ] *urgent* fix\n") == "- [ ] TODO-1 *urgent* fix\n"


def test_item_without_text_gets_leading_text_node() -> None:
    """It should inject a text node when a boxed item starts with a nested list."""

    nested = List(children=[ListItem(children=[Paragraph(children=[Text(value="x")])])])
    tree = Root(children=[List(children=[ListItem(checked=False, children=[nested])])])

    result = transform_tree("TODO", tree)

    item = result.children[0].children[0]  # type: ignore[union-attr]
    assert item.children[0] == Text(value="TODO-1 ")
    assert item.children[1] == nested


def test_transformation_is_idempotent() -> None:
    """It should change nothing and allocate nothing on a second pass."""

    once = _transform("# [ ] Plan\n\n- [ ] a\n- [x] TODO-? b\n  - [ ] c\n- d\n")
    tree = parse_markdown(once)
    allocator = IdentifierAllocator("TODO", [tree])

    again = TaskTransformer("TODO", allocator).transform_tree(tree)

    assert again == tree
    assert allocator.allocated == 0
    assert render_markdown(again) == once


def test_non_task_documents_are_unchanged() -> None:
    """It should leave documents without tasks node-for-node identical."""

    source = "# Notes\n\n- one\n- two\n\nSome [link](x.md) and *text*.\n"
    tree = parse_markdown(source)

    assert transform_tree("TODO", tree) == tree


def test_other_project_ids_are_ignored() -> None:
    """It should only count and replace identifiers of its own project."""

    source = "- [ ] ABC-9 foreign\n- [ ] ABC-? foreign placeholder\n"

    assert _transform(source, "ABC") == "- [ ] ABC-9 foreign\n- [ ] ABC-10 foreign placeholder\n"
    assert max_task_number("TODO", [parse_markdown(source)]) == 0


def test_region_bodies_are_not_numbered() -> None:
    """It should keep region bodies out of task numbering in single-file mode."""

    source = "# Notes\n\n<!-- toc -->\n\n- [ ] stale\n\n<!-- /toc -->\n\n- [ ] real\n"

    result = _transform(source)

    assert "- [ ] stale\n" in result
    assert "- [ ] TODO-1 real\n" in result


def test_region_builder_replaces_body() -> None:
    """It should regenerate a region body and add a missing end marker."""

    tree = parse_markdown("<!-- index -->\n\n- [ ] old\n\n<!-- /index -->\n\n<!-- index -->\n")
    fresh = [Paragraph(children=[Text(value="fresh")])]
    allocator = IdentifierAllocator("TODO")

    result = TaskTransformer("TODO", allocator, {INDEX: lambda _old: fresh}).transform_tree(tree)

    assert result.children == [
        Html(value="<!-- index -->"),
        *fresh,
        Html(value="<!-- /index -->"),
        Html(value="<!-- index -->"),
        *fresh,
        Html(value="<!-- /index -->"),
    ]
    assert allocator.allocated == 0
