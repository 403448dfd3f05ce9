"""
wordwatch/errors.py
───────────────────
Exception taxonomy for the directory monitor, plus a helper that logs a
chained exception link by link (outermost first).
"""

from __future__ import annotations

import logging
import traceback
from typing import Optional


class WordWatchError(Exception):
    """Base class for every error raised by wordwatch."""


class InvalidTargetError(WordWatchError):
    """The supplied path is not an accessible directory."""


class WatchFacilityError(WordWatchError):
    """The filesystem notification layer reported an internal fault."""


class FileAccessError(WordWatchError):
    """A watched file could not be opened, read or stat'ed."""

    def __init__(self, path, message: str):
        super().__init__(message)
        self.path = path


class ReportWriteError(WordWatchError):
    """A report could not be serialized or written to disk."""

    def __init__(self, path, message: str):
        super().__init__(message)
        self.path = path


def _next_link(exc: BaseException) -> Optional[BaseException]:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def log_exception_chain(logger: logging.Logger, exc: Optional[BaseException],
                        level: int = logging.ERROR) -> int:
    """
    Log every exception in a cause chain, outer to inner.

    Each link is logged with its message followed by its stack trace.
    Explicit causes (``raise ... from``) win over implicit context.

    Args:
        logger: Logger that receives the records
        exc: Outermost exception; None logs nothing
        level: Logging level for each record

    Returns:
        Number of links logged
    """
    seen = set()
    depth = 0
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        stack = "".join(traceback.format_tb(exc.__traceback__)).rstrip() or "  <no stack trace>"
        prefix = "Message" if depth == 0 else "Caused by"
        logger.log(level, "%s: %s: %s\nStack Trace:\n%s",
                   prefix, type(exc).__name__, exc, stack)
        depth += 1
        exc = _next_link(exc)
    return depth
