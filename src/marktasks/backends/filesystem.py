"""FilesystemBackend: read, write and delete Markdown files on disk."""

from __future__ import annotations

import asyncio
from pathlib import Path

from marktasks.logging import get_logger

logger = get_logger(__name__)


class FilesystemBackend:
    """Backend that reads and writes files directly from the filesystem.

    "Not found" is reported as absence (``None``/``False``); every other ``OSError`` is
    raised to the caller.
    """

    def __init__(self, root_dir: str | Path | None = None) -> None:
        """Initialize filesystem backend.

        Args:
            root_dir: Directory relative paths are resolved against.
        """
        self.cwd = Path(root_dir).resolve() if root_dir else Path.cwd()

    def _resolve_path(self, key: str | Path) -> Path:
        path = Path(key)
        if path.is_absolute():
            return path
        return (self.cwd / path).resolve()

    def list_markdown_files(self, directory: str | Path = ".") -> list[Path]:
        """All ``*.md`` files below *directory*, as absolute paths."""
        base = self._resolve_path(directory)
        return sorted(path for path in base.rglob("*.md") if path.is_file())

    def read_text(self, file_path: str | Path) -> str:
        return self._resolve_path(file_path).read_text(encoding="utf-8")

    def read_text_or_none(self, file_path: str | Path) -> str | None:
        """Read a file, returning None when it does not exist."""
        try:
            return self.read_text(file_path)
        except FileNotFoundError:
            return None

    def exists(self, file_path: str | Path) -> bool:
        try:
            self._resolve_path(file_path).stat()
        except FileNotFoundError:
            return False
        return True

    def write_text(self, file_path: str | Path, content: str) -> Path:
        """Write content, creating parent directories."""
        resolved_path = self._resolve_path(file_path)
        resolved_path.parent.mkdir(parents=True, exist_ok=True)
        resolved_path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", resolved_path)
        return resolved_path

    def delete(self, file_path: str | Path) -> bool:
        """Delete a file. Returns False when it was already absent."""
        resolved_path = self._resolve_path(file_path)
        try:
            resolved_path.unlink()
        except FileNotFoundError:
            return False
        logger.debug("Deleted %s", resolved_path)
        return True

    # Async variants

    async def aread_text_or_none(self, file_path: str | Path) -> str | None:
        return await asyncio.to_thread(self.read_text_or_none, file_path)

    async def aexists(self, file_path: str | Path) -> bool:
        return await asyncio.to_thread(self.exists, file_path)

    async def awrite_text(self, file_path: str | Path, content: str) -> Path:
        return await asyncio.to_thread(self.write_text, file_path, content)

    async def adelete(self, file_path: str | Path) -> bool:
        return await asyncio.to_thread(self.delete, file_path)
