"""Path, URL and ordering helpers."""

from __future__ import annotations

import os
import re
import unicodedata
from pathlib import Path
from typing import Iterable
from urllib.parse import quote, unquote

_PROTOCOL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_CHUNK_RE = re.compile(r"(\d+)")
_SUFFIX_RE = re.compile(r"[?#]")

# characters encodeURIComponent leaves alone besides alphanumerics and "-_.~"
_SEGMENT_SAFE = "!*'()"


def has_protocol(url: str) -> bool:
    return _PROTOCOL_RE.match(url) is not None


def is_fragment(url: str) -> bool:
    return url.startswith("#")


def split_suffix(url: str) -> tuple[str, str]:
    """Split ``a.md?x=1#top`` into ``("a.md", "?x=1#top")``.

    The suffix is the query and fragment, kept verbatim.
    """

    found = _SUFFIX_RE.search(url)
    if found is None:
        return url, ""
    return url[: found.start()], url[found.start() :]


def decode_url(url: str) -> str:
    return unquote(url, errors="strict")


def encode_path(path: str) -> str:
    """Percent-encode each segment of a ``/``-separated relative path."""

    return "/".join(quote(segment, safe=_SEGMENT_SAFE) for segment in path.split("/"))


def relative_to_dir(target: Path, directory: Path) -> str:
    """Return *target* relative to *directory* as a ``/``-separated string."""

    return Path(os.path.relpath(target, directory)).as_posix()


def is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def natural_key(value: str) -> tuple:
    """Sort key comparing digit runs by value and letters without case or accents.

    Ties fall back to the case-folded value with accents, then to the raw value.
    """

    chunks = []
    for part in _CHUNK_RE.split(value):
        if not part:
            continue
        if part.isdecimal():
            chunks.append((0, int(part), ""))
        else:
            chunks.append((1, 0, _fold(part)))
    return (tuple(chunks), value.casefold(), value)


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def sort_unique(values: Iterable[str]) -> list[str]:
    """Sorted distinct values, in code point order."""

    return sorted(set(values))
