"""Tests for directory indexes and tables of contents."""

from __future__ import annotations

from pathlib import Path

from marktasks.markdown.parser import parse_markdown
from marktasks.markdown.renderer import render_markdown
from marktasks.models.commands import DeleteFile, WriteFile
from marktasks.models.index import DirectoryEntry, FileEntry, TaskEntry
from marktasks.models.nodes import Root
from marktasks.models.task import BoxState
from marktasks.orchestrator.index import (
    add_missing_index_files,
    create_index,
    index_entries,
    index_file_content,
    update_index_in_commands,
)
from marktasks.orchestrator.toc import create_table_of_contents, update_toc_in_commands

ROOT = Path("/notes")


def _write(path: Path, markdown: str) -> WriteFile:
    return WriteFile(path=path, content=markdown, tree=parse_markdown(markdown))


def _corpus() -> list[WriteFile]:
    return [
        _write(ROOT / "index.md", "# Notes\n\n<!-- index -->\n<!-- /index -->\n"),
        _write(ROOT / "task 10.md", "# [x] TODO-10 Later\n"),
        _write(ROOT / "task 9.md", "# [ ] TODO-9 Sooner\n"),
        _write(ROOT / "busy.md", "# […] TODO-11 Busy\n"),
        _write(ROOT / "notes.md", "Plain notes.\n"),
        _write(ROOT / "Topic" / "index.md", "# Topic\n"),
        _write(ROOT / "Topic" / "deep.md", "Not listed at the root.\n"),
    ]


def test_index_file_content() -> None:
    """It should title a synthesized index after its directory."""

    assert index_file_content(ROOT / "Topic") == "# Topic\n\n<!-- index -->\n\n<!-- /index -->\n"


def test_index_entries_are_classified_and_naturally_sorted() -> None:
    """It should list siblings and subdirectory indexes, never itself or deeper files."""

    entries = index_entries(ROOT / "index.md", _corpus())

    assert entries == [
        TaskEntry(name="busy", path="busy.md", state=BoxState.IN_PROGRESS),
        FileEntry(name="notes", path="notes.md"),
        TaskEntry(name="task 9", path="task 9.md", state=BoxState.UNCHECKED),
        TaskEntry(name="task 10", path="task 10.md", state=BoxState.CHECKED),
        DirectoryEntry(name="Topic", path="Topic/index.md"),
    ]


def test_create_index_renders_tasks_then_other_files() -> None:
    """It should render a checklist followed by directory and file lines."""

    body = create_index(ROOT / "index.md", _corpus())

    assert render_markdown(Root(children=body)) == (
        "## Tasks\n\n"
        "- […] [busy](busy.md)\n"
        "- [ ] [task 9](task%209.md)\n"
        "- [x] [task 10](task%2010.md)\n\n"
        "### Other files\n\n"
        "[📁 Topic](Topic/index.md) /\n\n"
        "[📄 notes](notes.md)\n"
    )


def test_create_index_without_tasks_has_no_headings() -> None:
    """It should only list files when there are no tasks."""

    writes = [_write(ROOT / "a.md", "a\n"), _write(ROOT / "b.md", "b\n")]

    body = create_index(ROOT / "index.md", writes)

    assert render_markdown(Root(children=body)) == "[📄 a](a.md)\\\n[📄 b](b.md)\n"


def test_update_index_in_commands() -> None:
    """It should regenerate only documents with an index region."""

    commands = [*_corpus(), DeleteFile(path=ROOT / "old.md")]

    result = update_index_in_commands(commands, format_output=False)

    assert result[1:] == commands[1:]
    assert result[0].content.startswith("# Notes\n\n<!-- index -->\n\n## Tasks\n")  # type: ignore[union-attr]
    assert result[0].content.endswith("[📄 notes](notes.md)\n\n<!-- /index -->\n")  # type: ignore[union-attr]


def test_add_missing_index_files() -> None:
    """It should synthesize indexes for the root and every directory below it."""

    commands = [_write(ROOT / "a" / "b" / "c.md", "c\n"), _write(ROOT / "a" / "index.md", "# a\n")]

    result = add_missing_index_files(ROOT, commands)

    assert result[:2] == commands
    assert [command.path for command in result[2:]] == [ROOT / "index.md", ROOT / "a" / "b" / "index.md"]
    assert result[3].content == index_file_content(ROOT / "a" / "b")  # type: ignore[union-attr]


def test_table_of_contents() -> None:
    """It should link every document relative to the file holding the table."""

    writes = [
        _write(ROOT / "sub" / "b.md", "b\n"),
        _write(ROOT / "a.md", "a\n"),
        _write(ROOT / "sub" / "toc.md", "<!-- toc -->\n"),
    ]

    table = create_table_of_contents(ROOT, ROOT / "sub" / "toc.md", writes)

    assert render_markdown(Root(children=[table])) == (
        "- [a](../a.md)\n- [sub/b](b.md)\n- [sub/toc](toc.md) *(this file)*\n"
    )


def test_update_toc_in_commands() -> None:
    """It should fill the toc region and add its end marker."""

    commands = [_write(ROOT / "toc.md", "# Contents\n\n<!-- toc -->\n")]

    (result,) = update_toc_in_commands(ROOT, commands, format_output=False)

    assert result.content == (  # type: ignore[union-attr]
        "# Contents\n\n<!-- toc -->\n\n- [toc](toc.md) *(this file)*\n\n<!-- /toc -->\n"
    )
