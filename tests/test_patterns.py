"""Tests for box, task id and placeholder matchers."""

from __future__ import annotations

import pytest

from marktasks.models.nodes import Text
from marktasks.utils.patterns import (
    InvalidProjectIdError,
    box_and_placeholder_pattern,
    box_and_task_id_pattern,
    box_pattern,
    extract_task_number,
    is_project_id,
    placeholder_pattern,
    task_id_pattern,
)


def test_project_id_grammar() -> None:
    """It should accept 2-5 uppercase letters only."""

    assert is_project_id("TODO")
    assert is_project_id("AB")
    assert is_project_id("ABCDE")
    assert not is_project_id("A")
    assert not is_project_id("ABCDEF")
    assert not is_project_id("todo")
    assert not is_project_id("TO1")


def test_invalid_project_id_is_rejected() -> None:
    """It should raise a ValueError subclass for an injected invalid id."""

    with pytest.raises(InvalidProjectIdError):
        task_id_pattern("nope")
    with pytest.raises(ValueError):
        placeholder_pattern("X")


def test_starts_is_only_and_contains_are_distinct() -> None:
    """It should answer the three questions differently for the same text."""

    pattern = task_id_pattern("TODO")

    assert pattern.starts("TODO-12 write tests")
    assert not pattern.is_only("TODO-12 write tests")
    assert pattern.is_only("TODO-12")
    assert not pattern.starts("see TODO-12")
    assert pattern.contains("see TODO-12")
    assert pattern.extract("see TODO-12 and TODO-13") == "TODO-12"


def test_default_matchers_accept_any_project_id() -> None:
    """It should match any 2-5 letter project when none is injected."""

    assert task_id_pattern().starts("ABC-7 thing")
    assert placeholder_pattern().starts("XY-??? thing")
    assert not task_id_pattern("TODO").starts("ABC-7 thing")


def test_placeholder_runs() -> None:
    """It should accept a run of one repeated placeholder character."""

    pattern = placeholder_pattern("TODO")
    for text in ("TODO-?", "TODO-???", "TODO-xx", "TODO-XXX", "TODO-n", "TODO-NN"):
        assert pattern.is_only(text), text
    assert not pattern.starts("TODO-xn")
    assert not pattern.starts("TODO-next steps")
    assert pattern.starts("TODO-nn steps")


def test_box_matchers() -> None:
    """It should recognise the three box states and box+id combinations."""

    assert box_pattern().match_start("[ ] a").group("box") == " "
    assert box_pattern().match_start("[x] a").group("box") == "x"
    assert box_pattern().match_start("[…] a").group("box") == "…"
    assert box_pattern().match_start("[-] a") is None

    assert box_and_task_id_pattern("TODO").starts("[x] TODO-4 done")
    assert not box_and_task_id_pattern("TODO").starts("[x] TODO-? done")
    found = box_and_placeholder_pattern("TODO").match_start("[ ] TODO-?? later")
    assert found is not None
    assert found.group("placeholder") == "TODO-??"


def test_matchers_accept_text_nodes() -> None:
    """It should read the value of a text node."""

    assert task_id_pattern("TODO").starts(Text(value="TODO-1 x"))
    assert extract_task_number(Text(value="done: TODO-41"), "TODO") == 41
    assert extract_task_number("nothing here", "TODO") is None
