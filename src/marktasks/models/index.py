"""Entries listed inside a generated directory index."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from marktasks.models.task import BoxState


class _Entry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    # relative to the directory of the index file, ``/``-separated
    path: str


class DirectoryEntry(_Entry):
    kind: Literal["directory"] = "directory"


class FileEntry(_Entry):
    kind: Literal["file"] = "file"


class TaskEntry(_Entry):
    kind: Literal["task"] = "task"
    state: BoxState


IndexEntry = Union[DirectoryEntry, FileEntry, TaskEntry]
