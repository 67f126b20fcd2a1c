"""
Reconstruction writer: the second pass.

Walks the sorted index, pulls each line's bytes from the line source and
writes them to the destination followed by exactly one terminator.

Flushing
--------
By default the output is flushed after every line (`flush_every=1`): buffered
data stays bounded and, if the run fails midway, the destination already
holds a clean prefix of the sorted output. `flush_every=N` flushes every N
lines; `0` flushes once at the end. With a compressed destination each flush
is a codec flush, which costs compression ratio.
"""

from __future__ import annotations

import gzip
import logging
from contextlib import contextmanager
from typing import IO, Generator, Literal, Sequence

import zstandard  # type: ignore
from tqdm import tqdm

from ..dto import LineRecord
from ..errors import DestinationIOError
from ..intake.lines import TERMINATOR
from ..ports import LineSourcePort

logger = logging.getLogger(__name__)

OutputCompressor = Literal["none", "gzip", "zstd"]


@contextmanager
def open_destination_stream(path: str, compressor: OutputCompressor = "none") -> Generator[IO[bytes], None, None]:
    """
    Context manager yielding a writable binary stream for `path`.

    - compressor == "none": open() in 'wb'
    - compressor == "gzip": gzip.open(..., 'wb')
    - compressor == "zstd": zstd stream writer over the file

    The file is created (or truncated) on entry. Failures to create or to
    finalize the container on exit raise DestinationIOError.
    """
    try:
        raw = open(path, "wb")
    except OSError as exc:
        raise DestinationIOError(f"cannot create destination: {exc}", path=path) from exc

    if compressor == "none":
        stream = raw
    elif compressor == "gzip":
        stream = gzip.GzipFile(fileobj=raw, mode="wb")
    elif compressor == "zstd":
        stream = zstandard.ZstdCompressor().stream_writer(raw, closefd=False)
    else:
        raw.close()
        raise ValueError(f"unknown compressor: {compressor!r}")

    try:
        yield stream
    except BaseException:
        # The body's error wins; a finalize failure on top of it is only logged
        try:
            _finalize(stream, raw)
        except (OSError, zstandard.ZstdError):
            logger.warning("Could not finalize %s after an earlier failure", path, exc_info=True)
        raise

    try:
        _finalize(stream, raw)
    except (OSError, zstandard.ZstdError) as exc:
        raise DestinationIOError(f"cannot finalize destination: {exc}", path=path) from exc


def _finalize(stream: IO[bytes], raw: IO[bytes]) -> None:
    try:
        if stream is not raw:
            stream.close()
    finally:
        raw.close()


def write_sorted(
    records: Sequence[LineRecord],
    source: LineSourcePort,
    out: IO[bytes],
    *,
    flush_every: int = 1,
    path: str | None = None,
    progress: bool = False,
) -> int:
    """
    Write `records` in the given order to `out`; return the bytes written.

    Parameters
    ----------
    records : sequence of LineRecord
        Already sorted.
    source : LineSourcePort
        Supplies each line's bytes (direct or retention mode).
    out : writable binary stream
        Destination, possibly a compression filter.
    flush_every : int
        Flush after this many lines; 0 means only at the end.
    path : str, optional
        Destination path for error messages.
    progress : bool
        Show a tqdm progress bar on stderr.

    Raises
    ------
    RandomAccessReadError
        From the line source, when a recorded line cannot be re-read.
    DestinationIOError
        Write or flush failure.
    """
    written = 0
    pending = 0

    pbar = tqdm(total=len(records), unit="line", disable=not progress)
    pbar.set_description("Writing")
    try:
        for record in records:
            line = source.read_line(record)

            try:
                out.write(line)
                out.write(TERMINATOR)
            except (OSError, ValueError, zstandard.ZstdError) as exc:
                raise DestinationIOError(
                    f"write of line {record.lineno} failed: {exc}", path=path, offset=written
                ) from exc
            written += len(line) + len(TERMINATOR)
            pending += 1

            if flush_every and pending >= flush_every:
                _flush(out, path, written)
                pending = 0
            pbar.update()

        if pending:
            _flush(out, path, written)
    finally:
        pbar.close()

    logger.debug("Wrote %d lines (%d bytes) to %s", len(records), written, path or "<stream>")
    return written


def _flush(out: IO[bytes], path: str | None, offset: int) -> None:
    try:
        out.flush()
    except (OSError, ValueError, zstandard.ZstdError) as exc:
        raise DestinationIOError(f"flush failed: {exc}", path=path, offset=offset) from exc
