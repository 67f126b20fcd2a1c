"""
Index builder: the first pass.

One forward scan over the (possibly decompressed) source. Each line is
handed to the extractor; KEEP lines become `LineRecord`s in file order.
The offset cursor advances over every line, SKIP lines included, so the
recorded offsets stay valid for the source stream.

In retention mode the line bytes are copied into the record, because offsets
into a decompressed stream cannot be re-read from the underlying file.
"""

from __future__ import annotations

import logging
from typing import IO, Any

from ..dto import INT64_MAX, INT64_MIN, Decision, Extraction, LineIndex, LineRecord
from ..errors import ExtractionAbortError, ExtractionError, SourceIOError
from ..intake.decompress import DECODE_ERRORS
from ..intake.lines import CHUNK, iter_lines
from ..ports import LineExtractorPort

logger = logging.getLogger(__name__)


def build_index(
    stream: IO[bytes],
    extractor: LineExtractorPort,
    *,
    retain_content: bool = False,
    path: str | None = None,
    chunk_size: int = CHUNK,
) -> LineIndex:
    """
    Scan `stream` once and return the index of kept lines.

    Parameters
    ----------
    stream : binary file-like
        Readable source bytes, already wrapped in a decompression filter if any.
    extractor : LineExtractorPort
        Decides KEEP / SKIP / ABORT per line.
    retain_content : bool
        Store each kept line's bytes in its record (retention mode).
    path : str, optional
        Source path for error messages.

    Raises
    ------
    SourceIOError
        Read or decompression failure.
    ExtractionAbortError
        The extractor returned ABORT or raised.
    ExtractionError
        The extractor returned a malformed result.
    """
    index = LineIndex(retained=retain_content)
    lines = iter_lines(stream, chunk_size)
    lineno = 0

    while True:
        try:
            raw = next(lines)
        except StopIteration:
            break
        except DECODE_ERRORS as exc:
            raise SourceIOError(f"read failed after line {lineno}: {exc}", path=path, offset=index.bytes_scanned) from exc

        lineno += 1
        index.lines_scanned += 1
        index.bytes_scanned += raw.width

        try:
            result = extractor.extract(raw.data)
        except Exception as exc:
            raise ExtractionAbortError(
                f"extractor raised {type(exc).__name__}: {exc}",
                lineno=lineno,
                offset=raw.offset,
                cause=exc,
            ) from exc

        ts, decision, err = _unpack(result, lineno, raw.offset)

        if decision is Decision.SKIP:
            index.lines_skipped += 1
            continue

        if decision is Decision.ABORT:
            message = str(err) if err is not None else "extractor aborted"
            cause = err if isinstance(err, BaseException) else None
            raise ExtractionAbortError(message, lineno=lineno, offset=raw.offset, cause=cause) from cause

        index.records.append(
            LineRecord(
                offset=raw.offset,
                length=len(raw.data),
                timestamp=ts,
                lineno=lineno,
                content=bytes(raw.data) if retain_content else None,
            )
        )

    logger.debug(
        "Indexed %s: scanned=%d kept=%d skipped=%d bytes=%d",
        path or "<stream>",
        index.lines_scanned,
        index.lines_kept,
        index.lines_skipped,
        index.bytes_scanned,
    )
    return index


# === Helpers ===


def _unpack(result: Any, lineno: int, offset: int) -> Extraction:
    """Normalize an extractor result into a checked `Extraction`."""
    try:
        ts, decision, err = result
    except (TypeError, ValueError) as exc:
        raise ExtractionError(
            f"extractor must return (timestamp, decision, error), got {result!r}",
            lineno=lineno,
            offset=offset,
        ) from exc

    try:
        decision = Decision(decision)
    except ValueError as exc:
        raise ExtractionError(f"unknown decision {decision!r}", lineno=lineno, offset=offset) from exc

    if decision is Decision.KEEP:
        if isinstance(ts, bool) or not isinstance(ts, int):
            raise ExtractionError(f"timestamp must be an int, got {type(ts).__name__}", lineno=lineno, offset=offset)
        if not INT64_MIN <= ts <= INT64_MAX:
            raise ExtractionError(f"timestamp {ts} outside signed 64-bit range", lineno=lineno, offset=offset)

    return Extraction(ts, decision, err)
