"""Matchers for boxes, task identifiers and placeholders.

Every matcher exposes three distinct questions about a string: does it *start* with the
pattern, *is it only* the pattern, or does it *contain* the pattern anywhere. Call sites must
pick one explicitly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Union

from marktasks.models.nodes import Text

DEFAULT_PROJECT_ID = "TODO"

PROJECT_ID_PATTERN = r"[A-Z]{2,5}"
BOX_CHARACTERS = " x…"
PLACEHOLDER_RUNS = r"\?+|x+|X+|n+|N+"

Subject = Union[str, Text]


class InvalidProjectIdError(ValueError):
    """Raised when a project id is not 2-5 uppercase ASCII letters."""


def is_project_id(value: str) -> bool:
    """Return True when *value* is a valid project id."""

    return project_id_pattern().is_only(value)


def _project(project_id: str | None) -> str:
    if project_id is None:
        return PROJECT_ID_PATTERN
    if not is_project_id(project_id):
        raise InvalidProjectIdError(f"invalid project id: {project_id!r}")
    return re.escape(project_id)


def _value(subject: Subject) -> str:
    return subject.value if isinstance(subject, Text) else subject


@dataclass(frozen=True)
class Pattern:
    """A compiled grammar with explicitly named match operations."""

    regex: re.Pattern[str]

    def starts(self, subject: Subject) -> bool:
        return self.regex.match(_value(subject)) is not None

    def is_only(self, subject: Subject) -> bool:
        return self.regex.fullmatch(_value(subject)) is not None

    def contains(self, subject: Subject) -> bool:
        return self.regex.search(_value(subject)) is not None

    def match_start(self, subject: Subject) -> re.Match[str] | None:
        """Return the match anchored at the start of the subject, if any."""

        return self.regex.match(_value(subject))

    def extract(self, subject: Subject) -> str | None:
        """Return the first occurrence anywhere in the subject, if any."""

        found = self.regex.search(_value(subject))
        return found.group(0) if found else None

    def search(self, subject: Subject) -> re.Match[str] | None:
        return self.regex.search(_value(subject))


def _box() -> str:
    return rf"\[(?P<box>[{BOX_CHARACTERS}])\]"


def _task_id(project_id: str | None) -> str:
    return rf"(?P<task_id>{_project(project_id)}-(?P<number>\d+))(?!\d)"


def _placeholder(project_id: str | None) -> str:
    # the run must end the word so ``TODO-next`` is not read as ``TODO-n``
    return rf"(?P<placeholder>{_project(project_id)}-(?:{PLACEHOLDER_RUNS}))(?![\w?])"


@lru_cache(maxsize=None)
def project_id_pattern() -> Pattern:
    return Pattern(re.compile(PROJECT_ID_PATTERN))


@lru_cache(maxsize=None)
def box_pattern() -> Pattern:
    """Box marker: ``[ ]``, ``[x]`` or ``[…]``."""

    return Pattern(re.compile(_box()))


@lru_cache(maxsize=None)
def task_id_pattern(project_id: str | None = None) -> Pattern:
    """Literal task identifier such as ``TODO-12``."""

    return Pattern(re.compile(_task_id(project_id)))


@lru_cache(maxsize=None)
def placeholder_pattern(project_id: str | None = None) -> Pattern:
    """Allocation request such as ``TODO-???`` or ``TODO-xx``."""

    return Pattern(re.compile(_placeholder(project_id)))


@lru_cache(maxsize=None)
def box_and_task_id_pattern(project_id: str | None = None) -> Pattern:
    return Pattern(re.compile(rf"{_box()} {_task_id(project_id)}"))


@lru_cache(maxsize=None)
def box_and_placeholder_pattern(project_id: str | None = None) -> Pattern:
    return Pattern(re.compile(rf"{_box()} {_placeholder(project_id)}"))


def format_task_id(project_id: str, number: int) -> str:
    return f"{project_id}-{number}"


def extract_task_number(subject: Subject, project_id: str | None = None) -> int | None:
    """Return the number of the first task identifier found anywhere in the subject."""

    found = task_id_pattern(project_id).search(subject)
    return int(found.group("number")) if found else None
