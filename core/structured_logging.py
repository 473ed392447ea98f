"""Log correlation for analysis runs.

Every emitted record carries the run id, the analyzed package and the
current analysis phase. The values live in context variables and are read
when the record passes a root handler.
"""

from __future__ import annotations

import contextvars
import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator, TextIO

CONTEXT_FIELDS: tuple[str, ...] = ("run_id", "package", "phase")

_UNSET = "-"

_CONTEXT: dict[str, contextvars.ContextVar[str]] = {
    name: contextvars.ContextVar(f"analysis_{name}", default=_UNSET)
    for name in CONTEXT_FIELDS
}

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | package=%(package)s | "
    "phase=%(phase)s | %(name)s | %(message)s"
)


class AnalysisContextFilter(logging.Filter):
    """Copy the correlation fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, var in _CONTEXT.items():
            setattr(record, name, var.get())
        return True


def configure_structured_logging(
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Route root logging through the correlation filter and format.

    A stream handler on stderr is installed when the root logger has none,
    so stdout stays free for the JSON report. Existing handlers are reused.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if not root_logger.handlers:
        root_logger.addHandler(logging.StreamHandler(stream or sys.stderr))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
        if not any(isinstance(f, AnalysisContextFilter) for f in handler.filters):
            handler.addFilter(AnalysisContextFilter())


def current_context() -> dict[str, str]:
    """Snapshot of the correlation fields."""
    return {name: var.get() for name, var in _CONTEXT.items()}


def set_run_id(run_id: str | None = None) -> str:
    """Set the run id, generating a short random one when omitted."""
    value = run_id or uuid.uuid4().hex[:12]
    _CONTEXT["run_id"].set(value)
    return value


def get_run_id() -> str:
    return _CONTEXT["run_id"].get()


def set_package_name(package_name: str) -> None:
    _CONTEXT["package"].set(package_name or _UNSET)


@contextmanager
def context_scope(**fields: str) -> Iterator[None]:
    """Override correlation fields for the duration of a block.

    Raises:
        KeyError: For a field outside ``CONTEXT_FIELDS``.
    """
    tokens = [(_CONTEXT[name], _CONTEXT[name].set(value)) for name, value in fields.items()]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def phase_scope(phase: str):
    """Tag records emitted inside the block with an analysis phase."""
    return context_scope(phase=phase)
