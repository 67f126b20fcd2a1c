"""
Compressed source opener.

Provides `sniff_compressor(raw)` to identify the container from its magic
bytes, and `open_source_stream(raw, compressor)` which wraps an already open
binary file in the matching decompression filter.

The raw handle stays owned by the caller: in direct mode the same handle is
reused for random-access reads during the second pass, so the file is opened
exactly once per run.

This module does not split lines; it only handles decompression.
"""

from __future__ import annotations

import gzip
import zlib
from contextlib import contextmanager
from typing import IO, Final, Generator, Literal

import zstandard  # type: ignore

Compressor = Literal["none", "gzip", "zstd"]

# --- Magic numbers (byte order as they appear on disk) ---
MAGIC_GZIP: Final[bytes] = bytes.fromhex("1f 8b".replace(" ", ""))
MAGIC_ZSTD: Final[bytes] = bytes.fromhex("28 b5 2f fd".replace(" ", ""))

# Exceptions a decompressing read may raise on corrupt or truncated input
DECODE_ERRORS = (OSError, EOFError, zlib.error, zstandard.ZstdError)


def _looks_like_gzip(head: bytes) -> bool:
    return len(head) >= 2 and head[:2] == MAGIC_GZIP


def _looks_like_zstd(head: bytes) -> bool:
    return len(head) >= 4 and head[:4] == MAGIC_ZSTD


def sniff_compressor(raw: IO[bytes]) -> Compressor:
    """
    Peek at the first bytes of a seekable binary file and name its container.

    The file position is restored to the start. Returns "none" when neither
    gzip nor zstd magic bytes are present.
    """
    head = raw.read(4)
    raw.seek(0)

    if _looks_like_gzip(head):
        return "gzip"
    if _looks_like_zstd(head):
        return "zstd"
    return "none"


@contextmanager
def open_source_stream(raw: IO[bytes], compressor: Compressor) -> Generator[IO[bytes], None, None]:
    """
    Context manager yielding a readable binary stream over `raw`.

    - compressor == "none": `raw` itself
    - compressor == "gzip": gzip.GzipFile over `raw`
    - compressor == "zstd": zstd stream reader over `raw`

    Closing the context closes the filter only, never `raw`.
    """
    if compressor == "none":
        yield raw
        return

    if compressor == "gzip":
        f = gzip.GzipFile(fileobj=raw, mode="rb")
        try:
            yield f  # gzip.GzipFile is file-like
        finally:
            f.close()
        return

    if compressor == "zstd":
        dctx = zstandard.ZstdDecompressor()
        stream = dctx.stream_reader(raw, read_across_frames=True, closefd=False)
        try:
            yield stream  # has .read(), acts like a file object
        finally:
            stream.close()
        return

    raise ValueError(f"unknown compressor: {compressor!r}")
