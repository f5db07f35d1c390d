"""Output commands produced by the per-file driver and reconciled by the orchestrator."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from marktasks.models.nodes import Root


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True)


class WriteFile(_Command):
    """Write rendered Markdown to ``path``.

    ``source_path`` is the file the content was read from, when it differs from ``path``;
    relative links inside the content were authored against that location.
    """

    action: Literal["write"] = "write"
    path: Path
    content: str
    tree: Root
    source_path: Optional[Path] = None

    @property
    def origin(self) -> Path:
        return self.source_path or self.path


class DeleteFile(_Command):
    action: Literal["delete"] = "delete"
    path: Path


class UpdateLinksToFile(_Command):
    """Transient intent: links that pointed at ``from_path`` must point at ``to_path``."""

    action: Literal["update-links"] = "update-links"
    from_path: Path
    to_path: Path


OutputCommand = Union[WriteFile, DeleteFile, UpdateLinksToFile]
DeleteOrWriteFile = Union[WriteFile, DeleteFile]


def describe(command: OutputCommand) -> tuple[str, str]:
    """Return an ``(action, target)`` pair for display."""

    if isinstance(command, UpdateLinksToFile):
        return command.action, f"{command.from_path} -> {command.to_path}"
    return command.action, str(command.path)
