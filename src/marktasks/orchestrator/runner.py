"""Directory runs: transform every document under a root and reconcile the results."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from marktasks.backends.filesystem import FilesystemBackend
from marktasks.config import Settings
from marktasks.core.concurrency import gather_limited
from marktasks.logging import get_logger, run_context, set_step
from marktasks.markdown.parser import parse_markdown
from marktasks.models.commands import DeleteFile, DeleteOrWriteFile, OutputCommand, WriteFile
from marktasks.models.task import TaskRecord
from marktasks.orchestrator.deconflict import deconflict_commands
from marktasks.orchestrator.file_driver import transform_document
from marktasks.orchestrator.index import add_missing_index_files, update_index_in_commands
from marktasks.orchestrator.links import update_links_in_commands
from marktasks.orchestrator.toc import update_toc_in_commands
from marktasks.transform.allocator import IdentifierAllocator
from marktasks.transform.tasks import collect_corpus_tasks
from marktasks.utils.paths import natural_key

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Outcome of planning (and possibly applying) a directory run."""

    root: Path
    commands: list[DeleteOrWriteFile]
    tasks: list[TaskRecord] = field(default_factory=list)
    allocated: int = 0
    applied: bool = False

    @property
    def writes(self) -> list[WriteFile]:
        return [c for c in self.commands if isinstance(c, WriteFile)]

    @property
    def deletes(self) -> list[DeleteFile]:
        return [c for c in self.commands if isinstance(c, DeleteFile)]


async def read_documents(
    backend: FilesystemBackend,
    root: Path,
    max_concurrent: int,
) -> list[tuple[Path, str]]:
    """Read every Markdown file under *root*; files that vanish meanwhile are skipped."""

    paths = sorted(backend.list_markdown_files(root), key=lambda p: natural_key(str(p)))
    texts = await gather_limited(backend.aread_text_or_none, paths, max_concurrent)
    return [(path, text) for path, text in zip(paths, texts) if text is not None]


def plan_commands(
    project_id: str,
    root: Path,
    documents: Sequence[tuple[Path, str]],
    settings: Settings,
) -> tuple[list[DeleteOrWriteFile], IdentifierAllocator]:
    """Run every pure pass over the documents and return the resulting commands.

    Args:
        project_id: Project id for identifiers.
        root: Root directory of the run.
        documents: ``(path, markdown)`` pairs.
        settings: Output and index options.

    Returns:
        tuple: The commands (before on-disk diffing) and the shared allocator.
    """

    fmt = settings.format_output
    trees = [(path, parse_markdown(text)) for path, text in documents]

    set_step("transform")
    allocator = IdentifierAllocator(project_id, [tree for _, tree in trees])
    commands: list[OutputCommand] = []
    for path, tree in trees:
        commands.extend(transform_document(project_id, allocator, root, path, tree, format_output=fmt))
    logger.info(
        "Transformed %d document(s), allocated %d identifier(s) after %s-%d",
        len(trees),
        allocator.allocated,
        project_id,
        allocator.seed,
    )

    set_step("links")
    planned = update_links_in_commands(commands, format_output=fmt)

    set_step("deconflict")
    planned = deconflict_commands(planned)

    set_step("index")
    if settings.synthesize_missing_indexes:
        planned = add_missing_index_files(root, planned)
    planned = update_index_in_commands(planned, format_output=fmt)

    set_step("toc")
    planned = update_toc_in_commands(root, planned, format_output=fmt)
    return planned, allocator


async def only_changed(
    commands: Sequence[DeleteOrWriteFile],
    backend: FilesystemBackend,
    max_concurrent: int,
) -> list[DeleteOrWriteFile]:
    """Drop writes that match the file on disk and deletes of files that are already gone."""

    async def needed(command: DeleteOrWriteFile) -> bool:
        if isinstance(command, WriteFile):
            return await backend.aread_text_or_none(command.path) != command.content
        return await backend.aexists(command.path)

    keep = await gather_limited(needed, commands, max_concurrent)
    return [command for command, flag in zip(commands, keep) if flag]


async def apply_commands(
    commands: Sequence[DeleteOrWriteFile],
    backend: FilesystemBackend,
    max_concurrent: int,
) -> None:
    """Issue every write and delete concurrently and wait for all of them."""

    async def run(command: DeleteOrWriteFile) -> None:
        if isinstance(command, WriteFile):
            await backend.awrite_text(command.path, command.content)
        else:
            await backend.adelete(command.path)

    await gather_limited(run, commands, max_concurrent)


async def run_directory_async(
    root: Path,
    *,
    project_id: str,
    settings: Settings,
    dry_run: bool = False,
    backend: FilesystemBackend | None = None,
) -> RunResult:
    """Plan a directory run and, unless *dry_run*, apply it.

    Args:
        root: Directory holding the Markdown corpus.
        project_id: Project id for identifiers.
        settings: Application settings.
        dry_run: Only compute the commands.
        backend: File access; defaults to the local filesystem.

    Returns:
        RunResult: The surviving commands and the tasks found.
    """

    root = Path(root).resolve()
    backend = backend or FilesystemBackend(root)
    limit = settings.max_concurrent_io
    run_id = uuid.uuid4().hex[:8]

    with run_context(run_id=run_id, step="read"):
        logger.info("Processing %s with project id %s", root, project_id)
        documents = await read_documents(backend, root, limit)
        planned, allocator = plan_commands(project_id, root, documents, settings)

        tasks = collect_corpus_tasks(
            ((c.path, c.tree) for c in planned if isinstance(c, WriteFile)),
            project_id,
        )

        set_step("diff")
        commands = await only_changed(planned, backend, limit)
        logger.info("%d of %d command(s) change the disk", len(commands), len(planned))

        if not dry_run and commands:
            set_step("apply")
            await apply_commands(commands, backend, limit)

    return RunResult(
        root=root,
        commands=commands,
        tasks=tasks,
        allocated=allocator.allocated,
        applied=not dry_run,
    )


def run_directory(
    root: Path,
    *,
    project_id: str,
    settings: Settings,
    dry_run: bool = False,
) -> RunResult:
    """Synchronous wrapper around :func:`run_directory_async`."""

    return asyncio.run(
        run_directory_async(root, project_id=project_id, settings=settings, dry_run=dry_run)
    )
