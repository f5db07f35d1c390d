"""Tests for URL and ordering helpers."""

from __future__ import annotations

from marktasks.utils.paths import natural_key, split_suffix


def test_split_suffix() -> None:
    """It should cut at the first query or fragment delimiter."""

    assert split_suffix("a.md") == ("a.md", "")
    assert split_suffix("a.md#top") == ("a.md", "#top")
    assert split_suffix("a.md?x=1#top") == ("a.md", "?x=1#top")


def test_natural_key_orders_numbers_case_and_accents() -> None:
    """It should compare digit runs by value and ignore case and accents."""

    names = ["zeta.md", "Élan.md", "item 10.md", "item 9.md", "apple.md", "eagle.md"]

    assert sorted(names, key=natural_key) == [
        "apple.md",
        "eagle.md",
        "Élan.md",
        "item 9.md",
        "item 10.md",
        "zeta.md",
    ]
