"""
Run orchestration: validate options, assemble the pipeline, run both passes.

    source -> [decompress] -> build_index -> sort_index -> write_sorted -> [compress] -> destination

The source is opened once and held for both passes. The destination is only
created after the index is complete, so an ABORT or a read failure during
the first pass leaves no output behind.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError

from ..config import SortConfig
from ..dto import SortReport
from ..errors import ConfigurationError, SourceIOError
from ..extractors import as_extractor
from ..intake.decompress import open_source_stream, sniff_compressor
from ..intake.line_source import RetainedLineSource, SeekableLineSource
from ..pipeline.indexer import build_index
from ..pipeline.sorter import sort_index
from ..pipeline.writer import open_destination_stream, write_sorted
from ..ports import LineExtractorPort, LineSourcePort
from ..utils import same_file

logger = logging.getLogger(__name__)


def sort(source_path: str, destination_path: str, extractor: Any) -> SortReport:
    """Sort `source_path` into `destination_path` with default options."""
    return sort_with_options(
        {
            "source_path": source_path,
            "destination_path": destination_path,
            "extractor": extractor,
        }
    )


def sort_with_options(options: Union[SortConfig, Mapping[str, Any]]) -> SortReport:
    """
    Sort according to `options` (a SortConfig or a mapping of its fields).

    Returns a SortReport on success; raises a LogSortError subclass otherwise.
    On a failure during the second pass the destination may hold a partial
    prefix of the sorted output.
    """
    cfg = _coerce_config(options)
    extractor = validate_config(cfg)
    return run_sort(cfg, extractor)


def validate_config(cfg: SortConfig) -> LineExtractorPort:
    """Check cross-field rules; return the extractor as a LineExtractorPort."""
    if cfg.extractor is None:
        raise ConfigurationError("an extractor is required")
    try:
        extractor = as_extractor(cfg.extractor)
    except TypeError as exc:
        raise ConfigurationError(str(exc)) from exc

    if same_file(cfg.source_path, cfg.destination_path):
        raise ConfigurationError(
            f"source and destination are the same file: {cfg.source_path!r}"
        )
    return extractor


def run_sort(cfg: SortConfig, extractor: LineExtractorPort) -> SortReport:
    """Execute both passes for an already validated config."""
    src = cfg.source_path
    dst = cfg.destination_path

    try:
        raw = open(src, "rb")
    except OSError as exc:
        raise SourceIOError(f"cannot open source: {exc}", path=src) from exc

    with raw:
        compressor = "none"
        if cfg.source_is_compressed:
            try:
                compressor = sniff_compressor(raw)
            except OSError as exc:
                raise SourceIOError(f"cannot read source header: {exc}", path=src, offset=0) from exc
            if compressor == "none":
                raise SourceIOError("source is not a gzip or zstd stream", path=src, offset=0)

        retain = compressor != "none"
        logger.info("Indexing %s (compressor=%s, retain=%s)", src, compressor, retain)

        # === Pass 1: index ===
        with open_source_stream(raw, compressor) as stream:
            index = build_index(stream, extractor, retain_content=retain, path=src)

        records = sort_index(index.records, reverse=cfg.reverse)

        # === Pass 2: reconstruct ===
        source: LineSourcePort = RetainedLineSource(src) if retain else SeekableLineSource(raw, src)
        out_compressor = cfg.destination_compressor if cfg.destination_is_compressed else "none"

        with open_destination_stream(dst, out_compressor) as out:
            written = write_sorted(
                records,
                source,
                out,
                flush_every=cfg.flush_every,
                path=dst,
                progress=cfg.progress,
            )

    logger.info(
        "Sorted %s -> %s: %d lines kept, %d skipped, %d bytes written",
        src,
        dst,
        index.lines_kept,
        index.lines_skipped,
        written,
    )
    return SortReport(
        source_path=src,
        destination_path=dst,
        lines_scanned=index.lines_scanned,
        lines_kept=index.lines_kept,
        lines_skipped=index.lines_skipped,
        bytes_written=written,
        retained=retain,
    )


def _coerce_config(options: Union[SortConfig, Mapping[str, Any]]) -> SortConfig:
    if isinstance(options, SortConfig):
        return options
    try:
        return SortConfig(**dict(options))
    except ValidationError as exc:
        raise ConfigurationError(f"invalid options: {exc}") from exc
    except TypeError as exc:
        raise ConfigurationError(f"options must be a SortConfig or a mapping: {exc}") from exc
