"""
logsort: reorder a line-oriented log file by timestamp.

Public API (stable):
- sort                     (default options)
- sort_with_options        (SortConfig or mapping)
- SortConfig               (configuration)
- LineExtractorPort        (per-line decision interface)
- Extractors: FunctionExtractor, PrefixTimeExtractor, RegexTimeExtractor
- DTOs: Decision, Extraction, LineRecord, SortReport
- Errors: LogSortError and subclasses

The engine holds no module-level state; independent runs on different file
pairs may execute concurrently.
"""

from __future__ import annotations

# Configuration
from .config import SortConfig

# Orchestration
from .orchestration.runner import sort, sort_with_options

# Ports
from .ports import LineExtractorPort, LineSourcePort

# Extractors
from .extractors import FunctionExtractor, PrefixTimeExtractor, RegexTimeExtractor

# DTOs
from .dto import Decision, Extraction, LineRecord, SortReport

# Errors
from .errors import (
    ConfigurationError,
    DestinationIOError,
    ExtractionAbortError,
    ExtractionError,
    LogSortError,
    RandomAccessReadError,
    SourceIOError,
)

__all__ = [
    "SortConfig",
    "sort",
    "sort_with_options",
    "LineExtractorPort",
    "LineSourcePort",
    "FunctionExtractor",
    "PrefixTimeExtractor",
    "RegexTimeExtractor",
    "Decision",
    "Extraction",
    "LineRecord",
    "SortReport",
    "ConfigurationError",
    "DestinationIOError",
    "ExtractionAbortError",
    "ExtractionError",
    "LogSortError",
    "RandomAccessReadError",
    "SourceIOError",
]
