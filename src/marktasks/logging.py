"""Logging utilities."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


_run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("marktasks_run_id", default="-")
_step_var: contextvars.ContextVar[str] = contextvars.ContextVar("marktasks_step", default="-")


class _ContextFilter(logging.Filter):
    """Inject run context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.run_id = _run_id_var.get()  # type: ignore[attr-defined]
        record.step = _step_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def run_context(*, run_id: str, step: str | None = None) -> Any:
    """Temporarily bind run context for structured logging.

    Args:
        run_id: Run identifier, usually the processed root directory.
        step: Optional pipeline pass name.
    """

    token_run = _run_id_var.set(run_id)
    token_step = _step_var.set(step or _step_var.get())
    try:
        yield
    finally:
        _run_id_var.reset(token_run)
        _step_var.reset(token_step)


def set_step(step: str) -> None:
    """Update current pipeline pass in context."""

    _step_var.set(step)


def configure_logging(level: str = "WARNING") -> None:
    """Configure application logging.

    Records go to stderr; stdout carries the rendered Markdown in file mode.

    Args:
        level: Logging level name.
    """

    formatter = logging.Formatter(
        fmt="run=%(run_id)s step=%(step)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level.upper())
    existing = [h for h in root.handlers if isinstance(h, RichHandler)]
    if not existing:
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=True,
            show_level=True,
        )
        handler.addFilter(_ContextFilter())
        handler.setFormatter(formatter)
        root.addHandler(handler)
        return

    # Re-configuration keeps a single handler
    for h in existing:
        if not any(isinstance(f, _ContextFilter) for f in h.filters):
            h.addFilter(_ContextFilter())
        h.setFormatter(formatter)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log an exception with optional structured context."""

    if context:
        logger.exception("%s | context=%s", msg, context)
    else:
        logger.exception("%s", msg)
