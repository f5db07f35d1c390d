"""Per-file driver: transform one document and decide where it should live."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from marktasks.logging import get_logger
from marktasks.markdown.formatter import render_document
from marktasks.markdown.parser import parse_markdown
from marktasks.models.commands import DeleteFile, OutputCommand, UpdateLinksToFile, WriteFile
from marktasks.models.nodes import Root
from marktasks.transform.allocator import IdentifierAllocator
from marktasks.transform.headings import extract_title
from marktasks.transform.regions import RegionBuilder
from marktasks.transform.transformer import TaskTransformer

logger = get_logger(__name__)

INDEX_FILE = "index.md"


def file_name_for_title(title: str) -> str | None:
    """File name stem derived from a title; path separators become ``-``."""

    name = title.replace("/", "-").replace("\\", "-").replace("\x00", "").strip()
    if not name or set(name) == {"."}:
        return None
    return name


def output_path_for(root: Path, input_path: Path, title: str | None) -> Path:
    """Compute where a document with *title* should be written.

    Args:
        root: Root directory of the run. ``<root>/index.md`` is never renamed.
        input_path: Current location of the document.
        title: Title from the first top-level heading, or None.

    Returns:
        Path: ``<dir>/<title>.md``, or ``<parent>/<title>/index.md`` for an ``index.md``.
    """

    name = file_name_for_title(title) if title is not None else None
    if name is None:
        return input_path
    if input_path.name == INDEX_FILE:
        if input_path.parent == root:
            return input_path
        return input_path.parent.parent / name / INDEX_FILE
    return input_path.parent / f"{name}.md"


def transform_document(
    project_id: str,
    allocator: IdentifierAllocator,
    root: Path,
    input_path: Path,
    tree: Root,
    *,
    format_output: bool = True,
    region_builders: Optional[Mapping[str, RegionBuilder]] = None,
) -> list[OutputCommand]:
    """Transform one document and emit the commands that realise the result.

    Returns:
        list[OutputCommand]: ``[write]`` when the document stays put, otherwise
        ``[delete(input), write(output), update-links(input -> output)]``.
    """

    transformed = TaskTransformer(project_id, allocator, region_builders).transform_tree(tree)
    output_path = output_path_for(root, input_path, extract_title(transformed))
    content = render_document(transformed, format_output=format_output)

    if output_path == input_path:
        return [WriteFile(path=input_path, content=content, tree=transformed)]

    logger.info("Renaming %s -> %s", input_path, output_path)
    return [
        DeleteFile(path=input_path),
        WriteFile(path=output_path, content=content, tree=transformed, source_path=input_path),
        UpdateLinksToFile(from_path=input_path, to_path=output_path),
    ]


def transform_markdown(project_id: str, markdown: str, *, format_output: bool = True) -> str:
    """Number the tasks of a single Markdown document and return the new text.

    Region bodies are left as they are; only a directory run can regenerate them.
    """

    tree = parse_markdown(markdown)
    allocator = IdentifierAllocator(project_id, [tree])
    transformed = TaskTransformer(project_id, allocator).transform_tree(tree)
    logger.info("Allocated %d identifier(s) starting after %s-%d", allocator.allocated, project_id, allocator.seed)
    return render_document(transformed, format_output=format_output)
