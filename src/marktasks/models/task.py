"""Task records: a read-only view of the tasks found in a document tree."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class BoxState(str, Enum):
    """Box marker states, valued by the character between the brackets."""

    UNCHECKED = " "
    CHECKED = "x"
    IN_PROGRESS = "…"

    @classmethod
    def from_checked(cls, checked: bool) -> "BoxState":
        return cls.CHECKED if checked else cls.UNCHECKED

    @property
    def marker(self) -> str:
        return f"[{self.value}]"


class TaskRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    task_id: str
    title: str
    state: BoxState
    kind: Literal["heading", "listItem"]
    path: Optional[Path] = None
