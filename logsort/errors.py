"""
Error hierarchy for the sort pipeline.

Every failure surfaces as a subclass of `LogSortError` so callers can catch
one type. Each error names the phase it came from and, where known, the file
path and byte offset that failed. Underlying exceptions are chained.
"""

from __future__ import annotations

from typing import Optional


class LogSortError(Exception):
    """Base class for all logsort failures."""


class ConfigurationError(LogSortError):
    """Invalid options; raised before anything is opened or created."""


class SourceIOError(LogSortError):
    """Opening, decompressing or reading the source failed."""

    def __init__(self, message: str, *, path: Optional[str] = None, offset: Optional[int] = None) -> None:
        self.path = path
        self.offset = offset
        super().__init__(_with_location(message, path, offset))


class ExtractionError(LogSortError):
    """The extractor returned something that is not a valid decision."""

    def __init__(self, message: str, *, lineno: Optional[int] = None, offset: Optional[int] = None) -> None:
        self.lineno = lineno
        self.offset = offset
        if lineno is not None:
            message = f"{message} (line {lineno})"
        super().__init__(_with_location(message, None, offset))


class ExtractionAbortError(ExtractionError):
    """The extractor asked to stop; `cause` is the extractor's own error, if any."""

    def __init__(
        self,
        message: str,
        *,
        lineno: Optional[int] = None,
        offset: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.cause = cause
        super().__init__(message, lineno=lineno, offset=offset)


class DestinationIOError(LogSortError):
    """Creating, compressing, writing or flushing the destination failed."""

    def __init__(self, message: str, *, path: Optional[str] = None, offset: Optional[int] = None) -> None:
        self.path = path
        self.offset = offset
        super().__init__(_with_location(message, path, offset))


class RandomAccessReadError(LogSortError):
    """
    Re-reading a line at a recorded offset failed.

    Signals that the index and the source disagree (e.g. the file changed
    between passes). Fatal; never retried.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        offset: Optional[int] = None,
        length: Optional[int] = None,
    ) -> None:
        self.path = path
        self.offset = offset
        self.length = length
        if length is not None:
            message = f"{message} (length {length})"
        super().__init__(_with_location(message, path, offset))


def _with_location(message: str, path: Optional[str], offset: Optional[int]) -> str:
    parts = []
    if path is not None:
        parts.append(f"path={path}")
    if offset is not None:
        parts.append(f"offset={offset}")
    if not parts:
        return message
    return f"{message} [{', '.join(parts)}]"
