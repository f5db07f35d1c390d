"""Storage backends for marktasks."""

from __future__ import annotations

from marktasks.backends.filesystem import FilesystemBackend

__all__ = ["FilesystemBackend"]
