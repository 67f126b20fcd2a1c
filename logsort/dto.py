"""
Data Transfer Objects (DTOs) used across the sort pipeline.

These are intentionally small and independent of any I/O. A `LineRecord`
is either offset-addressed (`content is None`, direct mode) or carries its
own bytes (retention mode); the sorter and writer never branch on which.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


# === Line decision protocol ===
class Decision(str, Enum):
    """Per-line outcome chosen by the extractor."""
    KEEP = "keep"
    SKIP = "skip"
    ABORT = "abort"


class Extraction(NamedTuple):
    """What an extractor returns for one line: (timestamp, decision, error)."""
    timestamp: int
    decision: Decision
    error: Optional[BaseException] = None


# === Index ===
@dataclass(frozen=True)
class LineRecord:
    """One kept line of the source."""
    offset: int                      # first byte, in the uncompressed stream
    length: int                      # terminator excluded
    timestamp: int                   # signed 64-bit sort key
    lineno: int = 0                  # 1-based, for diagnostics
    content: Optional[bytes] = None  # set only in retention mode

    @property
    def retained(self) -> bool:
        return self.content is not None


@dataclass
class LineIndex:
    """Result of the first pass: kept records in file order plus counters."""
    records: List[LineRecord] = field(default_factory=list)
    lines_scanned: int = 0
    lines_skipped: int = 0
    bytes_scanned: int = 0
    retained: bool = False

    @property
    def lines_kept(self) -> int:
        return len(self.records)


# === Final summary ===
@dataclass(frozen=True)
class SortReport:
    source_path: str
    destination_path: str
    lines_scanned: int
    lines_kept: int
    lines_skipped: int
    bytes_written: int
    retained: bool
