"""Logging configuration for lnr.

Logs go to stderr so they never mix with table or JSON output on stdout.
Records emitted while an API operation runs are tagged with its name
("list issues", "get cycle", ...) through a contextvar.
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Dict, Iterator, Optional, TextIO

_operation: ContextVar[Optional[str]] = ContextVar("lnr_operation", default=None)


@contextmanager
def log_context(operation: Optional[str]) -> Iterator[None]:
    """Tag records logged inside the block with ``operation``.

    An empty name keeps whatever operation is already active.
    """
    token = _operation.set(operation or _operation.get())
    try:
        yield
    finally:
        _operation.reset(token)


def _context_fields() -> Dict[str, str]:
    operation = _operation.get()
    return {"operation": operation} if operation else {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for piping into log tooling."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context_fields(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class HumanReadableFormatter(logging.Formatter):
    """``level: message [operation]``, short enough for a terminal."""

    def format(self, record: logging.LogRecord) -> str:
        text = f"{record.levelname.lower()}: {record.getMessage()}"
        operation = _context_fields().get("operation")
        if operation:
            text = f"{text} [{operation}]"
        if record.exc_info and record.exc_info[1]:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def configure_logging(
    log_format: str = "text",
    log_level: str = "WARNING",
    stream: Optional[TextIO] = None,
):
    """Install a single stderr handler on the root logger.

    Args:
        log_format: "json" for structured output, anything else for text.
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        stream: Where to write; defaults to ``sys.stderr``.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))

    # httpx logs every request at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
