"""Pydantic models used across the project."""

from __future__ import annotations

from marktasks.models.commands import (
    DeleteFile,
    DeleteOrWriteFile,
    OutputCommand,
    UpdateLinksToFile,
    WriteFile,
)
from marktasks.models.index import DirectoryEntry, FileEntry, IndexEntry, TaskEntry
from marktasks.models.nodes import Node, Root
from marktasks.models.task import BoxState, TaskRecord

__all__ = [
    "BoxState",
    "DeleteFile",
    "DeleteOrWriteFile",
    "DirectoryEntry",
    "FileEntry",
    "IndexEntry",
    "Node",
    "OutputCommand",
    "Root",
    "TaskEntry",
    "TaskRecord",
    "UpdateLinksToFile",
    "WriteFile",
]
