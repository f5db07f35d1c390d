"""Tests for link maintenance across renames."""

from __future__ import annotations

from pathlib import Path

from marktasks.markdown.parser import parse_markdown
from marktasks.models.commands import DeleteFile, UpdateLinksToFile, WriteFile
from marktasks.orchestrator.links import link_stem, update_link_url, update_links_in_commands

ROOT = Path("/notes")
RENAMES = {ROOT / "a.md": ROOT / "TODO-4 Write docs.md"}


def _write(path: Path, markdown: str, source_path: Path | None = None) -> WriteFile:
    return WriteFile(path=path, content=markdown, tree=parse_markdown(markdown), source_path=source_path)


def test_link_stem() -> None:
    """It should name index files after their directory."""

    assert link_stem(ROOT / "a.md") == "a"
    assert link_stem(ROOT / "Topic" / "index.md") == "Topic"


def test_renamed_target_is_rewritten_and_encoded() -> None:
    """It should point at the new file and percent-encode the new name."""

    url, renamed_from = update_link_url("a.md#part", ROOT, ROOT, RENAMES)

    assert url == "TODO-4%20Write%20docs.md#part"
    assert renamed_from == ROOT / "a.md"


def test_untouched_urls() -> None:
    """It should leave external, fragment, unrelated and undecodable links alone."""

    for url in ("https://example.com/a.md", "mailto:me@example.com", "#top", "other.md", "%FF.md", ""):
        assert update_link_url(url, ROOT, ROOT, RENAMES) == (url, None)


def test_links_in_moved_document_are_relativized() -> None:
    """It should keep links to unchanged files valid when their document moves."""

    url, renamed_from = update_link_url("other.md", ROOT / "old", ROOT / "New", {})

    assert url == "../old/other.md"
    assert renamed_from is None


def test_absolute_links_are_kept_in_moved_documents() -> None:
    """It should not relativize absolute paths."""

    assert update_link_url("/static/a.md", ROOT / "old", ROOT / "New", {}) == ("/static/a.md", None)


def test_label_follows_rename_only_when_it_was_the_stem() -> None:
    """It should rename ``[a](a.md)`` labels and keep custom ones."""

    commands = [
        _write(ROOT / "b.md", "See [a](a.md) and [the docs](a.md).\n"),
        DeleteFile(path=ROOT / "a.md"),
        UpdateLinksToFile(from_path=ROOT / "a.md", to_path=RENAMES[ROOT / "a.md"]),
    ]

    result = update_links_in_commands(commands, format_output=False)

    assert [type(command) for command in result] == [WriteFile, DeleteFile]
    assert result[0].content == (  # type: ignore[union-attr]
        "See [TODO-4 Write docs](TODO-4%20Write%20docs.md) and [the docs](TODO-4%20Write%20docs.md).\n"
    )


def test_unchanged_writes_are_passed_through() -> None:
    """It should reuse the very same command when no link changed."""

    write = _write(ROOT / "b.md", "No links here.\n")

    assert update_links_in_commands([write], format_output=False)[0] is write


def test_links_in_renamed_document_use_its_source_directory() -> None:
    """It should resolve links against the old location and write them for the new one."""

    write = _write(ROOT / "Topic" / "index.md", "[c](c.md)\n", source_path=ROOT / "old" / "index.md")

    (result,) = update_links_in_commands([write], format_output=False)

    assert result.content == "[c](../old/c.md)\n"  # type: ignore[union-attr]


def test_query_and_fragment_survive_a_move() -> None:
    """It should relativize only the path and keep the query and fragment verbatim."""

    assert update_link_url("c.md?x=1", ROOT / "old", ROOT / "New", {}) == ("../old/c.md?x=1", None)
    assert update_link_url("c.md?x=1#top", ROOT / "old", ROOT / "New", {}) == ("../old/c.md?x=1#top", None)


def test_renamed_target_keeps_its_query() -> None:
    """It should re-attach the query after the encoded new name."""

    url, renamed_from = update_link_url("a.md?v=2", ROOT, ROOT, RENAMES)

    assert url == "TODO-4%20Write%20docs.md?v=2"
    assert renamed_from == ROOT / "a.md"
