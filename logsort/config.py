"""
Configuration schema for one sort run.

Keep this lean: only the knobs the pipeline actually reads. Cross-field
rules (extractor present, source != destination) are checked by the runner
before any file is touched, so a bad config never creates output.
"""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SortConfig(BaseModel):
    """
    Validated options for `sort_with_options`.
    Paths may be given as str or os.PathLike; they are stored as str.
    """

    model_config = ConfigDict(frozen=True)  # safe to share across threads

    # === Files ===
    source_path: str = Field(description="Log file to sort.")
    destination_path: str = Field(description="Output file; must differ from source_path.")

    # === Compression ===
    source_is_compressed: bool = Field(
        default=False,
        description="Decompress on read (gzip or zstd, detected from magic bytes). "
        "Line content is then kept in memory since offsets cannot be re-read.",
    )
    destination_is_compressed: bool = Field(
        default=False,
        description="Compress the output with destination_compressor.",
    )
    destination_compressor: Literal["gzip", "zstd"] = Field(
        default="gzip",
        description="Codec used when destination_is_compressed is set.",
    )

    # === Line decision ===
    extractor: Any = Field(
        default=None,
        description="LineExtractorPort or callable line -> (timestamp, decision, error).",
    )

    # === Output behaviour ===
    reverse: bool = Field(default=False, description="Newest first instead of oldest first.")
    flush_every: int = Field(
        default=1,
        ge=0,
        description="Flush the destination every N lines; 0 flushes only at the end.",
    )
    progress: bool = Field(default=False, description="Show a progress bar while writing.")

    @field_validator("source_path", "destination_path", mode="before")
    @classmethod
    def _fspath(cls, v: Any) -> Any:
        if isinstance(v, os.PathLike):
            return os.fspath(v)
        return v


class LoggingConfig:
    """Logging settings; override via environment variables."""

    LOG_LEVEL = os.getenv("LOGSORT_LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOGSORT_LOG_FILE", "")
