"""Collapse commands that target the same path."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from marktasks.logging import get_logger
from marktasks.markdown.parser import parse_markdown
from marktasks.models.commands import DeleteOrWriteFile, WriteFile
from marktasks.utils.paths import sort_unique

logger = get_logger(__name__)


def deconflict_commands(commands: Sequence[DeleteOrWriteFile]) -> list[DeleteOrWriteFile]:
    """Leave at most one command per path.

    - One command for a path is kept as is.
    - Only deletes: the first one is kept.
    - Writes win over deletes. Writes with equal content collapse to one; differing contents
      are joined in sorted order, one per line, and re-parsed. This avoids losing text, it
      does not merge documents semantically.
    """

    groups: dict[Path, list[DeleteOrWriteFile]] = {}
    for command in commands:
        groups.setdefault(command.path, []).append(command)

    out: list[DeleteOrWriteFile] = []
    for path, group in groups.items():
        if len(group) == 1:
            out.append(group[0])
            continue

        writes = [command for command in group if isinstance(command, WriteFile)]
        if not writes:
            out.append(group[0])
            continue

        contents = sort_unique(write.content for write in writes)
        if len(contents) == 1:
            out.append(writes[0])
            continue

        logger.warning("%d different documents target %s, concatenating them", len(contents), path)
        content = "\n".join(contents)
        out.append(WriteFile(path=path, content=content, tree=parse_markdown(content)))

    dropped = len(commands) - len(out)
    if dropped:
        logger.info("Deconflicted %d command(s)", dropped)
    return out
