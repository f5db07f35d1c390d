"""Keep relative links pointing at documents that were renamed or moved."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Sequence

from marktasks.logging import get_logger
from marktasks.markdown.formatter import render_document
from marktasks.models.commands import (
    DeleteFile,
    DeleteOrWriteFile,
    OutputCommand,
    UpdateLinksToFile,
    WriteFile,
)
from marktasks.models.nodes import Link, Node, Text, is_parent, with_children
from marktasks.utils.paths import (
    decode_url,
    encode_path,
    has_protocol,
    is_fragment,
    relative_to_dir,
    split_suffix,
)

logger = get_logger(__name__)

INDEX_FILE = "index.md"


def rename_map(commands: Sequence[OutputCommand]) -> dict[Path, Path]:
    return {c.from_path: c.to_path for c in commands if isinstance(c, UpdateLinksToFile)}


def link_stem(path: Path) -> str:
    """Name a link label would use for *path*: the file stem, or the directory of an index."""

    if path.name == INDEX_FILE:
        return path.parent.name
    return path.stem


def update_link_url(
    url: str,
    source_dir: Path,
    output_dir: Path,
    renames: Mapping[Path, Path],
) -> tuple[str, Path | None]:
    """Return the link URL as it should read from *output_dir*.

    Args:
        url: Link destination as written in the document.
        source_dir: Directory the document was authored in.
        output_dir: Directory the document is written to.
        renames: Old absolute path to new absolute path.

    Returns:
        tuple: The (possibly unchanged) URL and the old target when that target was renamed.
    """

    if not url or has_protocol(url) or is_fragment(url):
        return url, None
    head, suffix = split_suffix(url)
    if not head:
        return url, None
    try:
        decoded = decode_url(head)
    except UnicodeDecodeError:
        logger.debug("Leaving undecodable link %r", url)
        return url, None

    target = Path(os.path.normpath(source_dir / decoded))
    new_target = renames.get(target)
    if new_target is None and (source_dir == output_dir or decoded.startswith("/")):
        return url, None

    relative = relative_to_dir(new_target or target, output_dir)
    if new_target is None and relative == decoded:
        return url, None
    return encode_path(relative) + suffix, target if new_target is not None else None


def update_links_in_tree(
    node: Node,
    source_dir: Path,
    output_dir: Path,
    renames: Mapping[Path, Path],
) -> Node:
    """Rewrite every link in *node*; labels equal to the old file stem follow the rename."""

    if isinstance(node, Link):
        return _update_link_node(node, source_dir, output_dir, renames)
    if not is_parent(node):
        return node
    children = [update_links_in_tree(child, source_dir, output_dir, renames) for child in node.children]
    if all(new is old for new, old in zip(children, node.children)):
        return node
    return with_children(node, children)


def _update_link_node(
    node: Link,
    source_dir: Path,
    output_dir: Path,
    renames: Mapping[Path, Path],
) -> Link:
    url, renamed_from = update_link_url(node.url, source_dir, output_dir, renames)
    if url == node.url:
        return node

    children = node.children
    if renamed_from is not None and len(children) == 1 and isinstance(children[0], Text):
        if children[0].value == link_stem(renamed_from):
            children = [Text(value=link_stem(renames[renamed_from]))]
    return node.model_copy(update={"url": url, "children": list(children)})


def update_links_in_commands(
    commands: Sequence[OutputCommand],
    *,
    format_output: bool = True,
) -> list[DeleteOrWriteFile]:
    """Apply every update-links intent to the writes and drop the intents.

    Returns:
        list[DeleteOrWriteFile]: Writes (re-rendered where a link changed) followed by deletes.
    """

    renames = rename_map(commands)
    writes: list[DeleteOrWriteFile] = []
    changed = 0
    for command in commands:
        if not isinstance(command, WriteFile):
            continue
        tree = update_links_in_tree(command.tree, command.origin.parent, command.path.parent, renames)
        if tree is command.tree:
            writes.append(command)
            continue
        changed += 1
        writes.append(
            command.model_copy(
                update={"tree": tree, "content": render_document(tree, format_output=format_output)}
            )
        )
    logger.info("Updated links in %d document(s) for %d rename(s)", changed, len(renames))
    deletes = [command for command in commands if isinstance(command, DeleteFile)]
    return [*writes, *deletes]
