"""CLI entrypoints for marktasks."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from marktasks.config import Settings, load_settings
from marktasks.logging import configure_logging, get_logger, log_exception
from marktasks.markdown.parser import parse_markdown
from marktasks.models.commands import describe
from marktasks.orchestrator.file_driver import transform_markdown
from marktasks.orchestrator.runner import RunResult, run_directory
from marktasks.utils.patterns import is_project_id

app = typer.Typer(
    add_completion=False,
    help="Number Markdown tasks, rename files after their headings, keep links and indexes current.",
)
logger = get_logger(__name__)

STDIN = "-"


def split_arguments(args: list[str]) -> tuple[Optional[str], Optional[str]]:
    """Tell the project id from the path, in either order.

    Returns:
        tuple: ``(project_id, path)``, each None when not given.
    """

    project_id: Optional[str] = None
    path: Optional[str] = None
    for arg in args:
        if project_id is None and is_project_id(arg):
            project_id = arg
        elif path is None:
            path = arg
        else:
            raise typer.BadParameter(f"unexpected argument {arg!r}: give at most a project id and a path")
    return project_id, path


def _read_input(path: Optional[str]) -> str:
    if path is None or path == STDIN:
        return typer.get_text_stream("stdin").read()
    file_path = Path(path)
    if not file_path.is_file():
        raise typer.BadParameter(f"no such file or directory: {path}")
    return file_path.read_text(encoding="utf-8")


def _print_plan(result: RunResult) -> None:
    table = Table(title=f"Planned changes in {result.root}")
    table.add_column("Action")
    table.add_column("Path")
    for command in result.commands:
        action, target = describe(command)
        table.add_row(action, target)
    console = Console()
    console.print(table)
    console.print(f"{len(result.tasks)} task(s), {result.allocated} new identifier(s)")


def _run_directory(root: Path, project_id: str, settings: Settings, dry_run: bool) -> None:
    try:
        result = run_directory(root, project_id=project_id, settings=settings, dry_run=dry_run)
    except OSError:
        log_exception(logger, "Directory run failed", root=str(root))
        raise typer.Exit(code=1)

    if dry_run:
        _print_plan(result)
        return
    typer.echo(f"{len(result.writes)} file(s) written, {len(result.deletes)} file(s) deleted")


@app.command()
def run(
    args: Optional[list[str]] = typer.Argument(
        None,
        metavar="[PROJECT_ID] [PATH]",
        help="Project id (2-5 uppercase letters, default TODO) and a Markdown file, a directory, "
        "or '-' for stdin. Either order.",
        show_default=False,
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Directory mode: show the planned changes only"),
    ast: bool = typer.Option(False, "--ast", help="File mode: print the parsed document tree as JSON"),
    format_output: Optional[bool] = typer.Option(
        None,
        "--format/--no-format",
        help="Format the output with mdformat (overrides MARKTASKS_FORMAT_OUTPUT)",
        show_default=False,
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (overrides MARKTASKS_LOG_LEVEL)",
    ),
) -> None:
    """Number the tasks of a Markdown file, stdin, or a whole directory."""

    project_id, path = split_arguments(args or [])

    settings = load_settings()
    if format_output is not None:
        settings.format_output = format_output
    if log_level is not None:
        settings.log_level = log_level
    project_id = project_id or settings.project_id

    configure_logging(settings.log_level)

    if path is not None and path != STDIN and Path(path).is_dir():
        logger.info("Directory run requested for %s", path)
        _run_directory(Path(path), project_id, settings, dry_run)
        return

    markdown = _read_input(path)
    if ast:
        typer.echo(parse_markdown(markdown).model_dump_json(indent=2))
        return
    typer.echo(transform_markdown(project_id, markdown, format_output=settings.format_output), nl=False)


if __name__ == "__main__":
    app()
