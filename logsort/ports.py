"""
Hexagonal interfaces (Ports) for the sort pipeline.

These define the boundary between the core engine and its collaborators:
the caller-supplied extractor on one side and the line source used by the
reconstruction pass on the other. Keep them small so they are easy to fake
in tests.
"""

from __future__ import annotations

from typing import Protocol

from .dto import Extraction, LineRecord


class LineExtractorPort(Protocol):
    """
    Turns one line into a sort decision.

    Implementations MUST be a pure function of the line bytes; the index is
    only reproducible if the same line always yields the same result.
    """

    def extract(self, line: bytes) -> Extraction:
        """
        Return (timestamp, decision, error) for `line` (terminator excluded).

        - KEEP: `timestamp` is the sort key.
        - SKIP: the line is dropped from the output.
        - ABORT: the run stops; `error` (if any) is reported to the caller.
        """
        ...


class LineSourcePort(Protocol):
    """Yields the bytes of an indexed line during the second pass."""

    def read_line(self, record: LineRecord) -> bytes:
        """Return exactly `record.length` bytes of line content, terminator excluded."""
        ...
