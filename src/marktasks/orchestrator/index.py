"""Directory index files: synthesis of missing ones and regeneration of index regions."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from marktasks.logging import get_logger
from marktasks.markdown.formatter import render_document
from marktasks.markdown.parser import parse_markdown
from marktasks.models.commands import DeleteOrWriteFile, WriteFile
from marktasks.models.index import DirectoryEntry, FileEntry, IndexEntry, TaskEntry
from marktasks.models.nodes import (
    Break,
    Heading,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Text,
)
from marktasks.models.task import BoxState
from marktasks.transform.headings import first_top_level_heading, heading_box_state
from marktasks.transform.regions import INDEX, begin_marker, contains_region, end_marker, replace_regions
from marktasks.utils.paths import encode_path, is_within, natural_key, relative_to_dir

logger = get_logger(__name__)

INDEX_FILE = "index.md"

_ENTRY_NAME_SUFFIX_RE = re.compile(r"((^|/)index)?\.md$")


def index_file_content(directory: Path) -> str:
    """Content of a synthesized index: a title and an empty index region."""

    return f"# {directory.name}\n\n{begin_marker(INDEX)}\n\n{end_marker(INDEX)}\n"


def add_missing_index_files(root: Path, commands: Sequence[DeleteOrWriteFile]) -> list[DeleteOrWriteFile]:
    """Add an ``index.md`` write for every directory that will hold files but has no index.

    Only *root* and directories below it are considered.
    """

    write_paths = [command.path for command in commands if isinstance(command, WriteFile)]
    directories: set[Path] = set()
    for path in write_paths:
        directories.update(parent for parent in path.parents if is_within(parent, root))

    existing = {path for path in write_paths if path.name == INDEX_FILE}
    missing = sorted(
        (directory for directory in directories if directory / INDEX_FILE not in existing),
        key=lambda directory: natural_key(str(directory)),
    )

    added: list[DeleteOrWriteFile] = []
    for directory in missing:
        content = index_file_content(directory)
        added.append(WriteFile(path=directory / INDEX_FILE, content=content, tree=parse_markdown(content)))
        logger.debug("Synthesized %s", directory / INDEX_FILE)
    if added:
        logger.info("Added %d missing index file(s)", len(added))
    return [*commands, *added]


def _listed_in(index_path: Path, candidate: Path) -> bool:
    """Siblings of the index, and ``index.md`` files of its immediate subdirectories."""

    if candidate == index_path:
        return False
    relative = relative_to_dir(candidate, index_path.parent)
    parts = relative.split("/")
    if parts[0] == "..":
        return False
    if len(parts) == 1:
        return True
    return len(parts) == 2 and parts[1] == INDEX_FILE


def index_entries(index_path: Path, writes: Sequence[WriteFile]) -> list[IndexEntry]:
    entries: list[IndexEntry] = []
    for write in writes:
        if not _listed_in(index_path, write.path):
            continue
        relative = relative_to_dir(write.path, index_path.parent)
        name = _ENTRY_NAME_SUFFIX_RE.sub("", relative)
        state = heading_box_state(first_top_level_heading(write.tree))
        if state is not None:
            entries.append(TaskEntry(name=name, path=relative, state=state))
        elif relative.endswith("/" + INDEX_FILE):
            entries.append(DirectoryEntry(name=name, path=relative))
        else:
            entries.append(FileEntry(name=name, path=relative))
    return sorted(entries, key=lambda entry: natural_key(entry.path))


def _task_item(entry: TaskEntry) -> ListItem:
    link = Link(url=encode_path(entry.path), children=[Text(value=entry.name)])
    if entry.state is BoxState.IN_PROGRESS:
        phrasing: list[Node] = [Text(value=f"{BoxState.IN_PROGRESS.marker} "), link]
        checked = None
    else:
        phrasing = [link]
        checked = entry.state is BoxState.CHECKED
    return ListItem(checked=checked, spread=False, children=[Paragraph(children=phrasing)])


def _lines(groups: list[list[Node]]) -> Paragraph:
    children: list[Node] = []
    for position, group in enumerate(groups):
        if position:
            children.append(Break())
        children.extend(group)
    return Paragraph(children=children)


def create_index(index_path: Path, writes: Sequence[WriteFile]) -> list[Node]:
    """Build the body of the index region of *index_path*.

    Tasks come first as a checklist under "Tasks"; directories and plain files follow, one
    link per line, under "Other files" when there are tasks too.
    """

    entries = index_entries(index_path, writes)
    tasks = [entry for entry in entries if isinstance(entry, TaskEntry)]
    directories = [entry for entry in entries if isinstance(entry, DirectoryEntry)]
    files = [entry for entry in entries if isinstance(entry, FileEntry)]

    body: list[Node] = []
    if tasks:
        body.append(Heading(depth=2, children=[Text(value="Tasks")]))
        body.append(List(ordered=False, spread=False, children=[_task_item(entry) for entry in tasks]))

    others: list[Node] = []
    if directories:
        others.append(
            _lines(
                [
                    [Link(url=encode_path(entry.path), children=[Text(value=f"📁 {entry.name}")]), Text(value=" /")]
                    for entry in directories
                ]
            )
        )
    if files:
        others.append(
            _lines([[Link(url=encode_path(entry.path), children=[Text(value=f"📄 {entry.name}")])] for entry in files])
        )

    if tasks and others:
        body.append(Heading(depth=3, children=[Text(value="Other files")]))
    body.extend(others)
    return body


def update_index_in_commands(
    commands: Sequence[DeleteOrWriteFile],
    *,
    format_output: bool = True,
) -> list[DeleteOrWriteFile]:
    """Regenerate the index region of every write that has one."""

    writes = [command for command in commands if isinstance(command, WriteFile)]
    out: list[DeleteOrWriteFile] = []
    regenerated = 0
    for command in commands:
        if not isinstance(command, WriteFile) or not contains_region(command.tree, INDEX):
            out.append(command)
            continue
        tree = replace_regions(command.tree, {INDEX: lambda _old, path=command.path: create_index(path, writes)})
        out.append(
            command.model_copy(update={"tree": tree, "content": render_document(tree, format_output=format_output)})
        )
        regenerated += 1
    logger.info("Regenerated %d index region(s)", regenerated)
    return out
