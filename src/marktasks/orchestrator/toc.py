"""Tables of contents listing every document of a run."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from marktasks.logging import get_logger
from marktasks.markdown.formatter import render_document
from marktasks.models.commands import DeleteOrWriteFile, WriteFile
from marktasks.models.nodes import Emphasis, Link, List, ListItem, Node, Paragraph, Text
from marktasks.transform.regions import TOC, contains_region, replace_regions
from marktasks.utils.paths import encode_path, natural_key, relative_to_dir

logger = get_logger(__name__)


def create_table_of_contents(root: Path, toc_path: Path, writes: Sequence[WriteFile]) -> List:
    """A tight list linking to every write, labelled by its path below *root* without ``.md``."""

    items: list[tuple[str, ListItem]] = []
    for write in writes:
        label = relative_to_dir(write.path, root)
        if label.endswith(".md"):
            label = label[: -len(".md")]
        url = encode_path(relative_to_dir(write.path, toc_path.parent))
        phrasing: list[Node] = [Link(url=url, children=[Text(value=label)])]
        if write.path == toc_path:
            phrasing += [Text(value=" "), Emphasis(children=[Text(value="(this file)")])]
        items.append((url, ListItem(checked=None, spread=False, children=[Paragraph(children=phrasing)])))

    items.sort(key=lambda pair: natural_key(pair[0]))
    return List(ordered=False, spread=False, children=[item for _, item in items])


def update_toc_in_commands(
    root: Path,
    commands: Sequence[DeleteOrWriteFile],
    *,
    format_output: bool = True,
) -> list[DeleteOrWriteFile]:
    writes = [command for command in commands if isinstance(command, WriteFile)]
    out: list[DeleteOrWriteFile] = []
    regenerated = 0
    for command in commands:
        if not isinstance(command, WriteFile) or not contains_region(command.tree, TOC):
            out.append(command)
            continue
        tree = replace_regions(
            command.tree,
            {TOC: lambda _old, path=command.path: [create_table_of_contents(root, path, writes)]},
        )
        out.append(
            command.model_copy(update={"tree": tree, "content": render_document(tree, format_output=format_output)})
        )
        regenerated += 1
    logger.info("Regenerated %d table(s) of contents", regenerated)
    return out
