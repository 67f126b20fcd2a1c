"""
Line sources for the reconstruction pass.

Two variants of `LineSourcePort`, chosen once per run:
- `SeekableLineSource`: direct mode; re-reads `length` bytes at `offset` from
  the still-open uncompressed source.
- `RetainedLineSource`: retention mode; hands back the bytes stored in the
  record during the first pass.
"""

from __future__ import annotations

from typing import IO

from ..dto import LineRecord
from ..errors import RandomAccessReadError
from ..ports import LineSourcePort


class SeekableLineSource(LineSourcePort):
    """
    Random-access reads against an open binary file.

    Parameters
    ----------
    fh : binary file object
        Seekable handle on the uncompressed source. Not closed here.
    path : str
        Used only for error messages.
    """

    def __init__(self, fh: IO[bytes], path: str) -> None:
        self._fh = fh
        self._path = path

    def read_line(self, record: LineRecord) -> bytes:
        try:
            self._fh.seek(record.offset)
            data = self._fh.read(record.length)
        except (OSError, ValueError) as exc:
            raise RandomAccessReadError(
                f"re-read of line {record.lineno} failed: {exc}",
                path=self._path,
                offset=record.offset,
                length=record.length,
            ) from exc

        # Short read: the file shrank or changed since it was indexed.
        if len(data) != record.length:
            raise RandomAccessReadError(
                f"short re-read of line {record.lineno}: got {len(data)} bytes; source changed since indexing?",
                path=self._path,
                offset=record.offset,
                length=record.length,
            )
        return data


class RetainedLineSource(LineSourcePort):
    """Serves line bytes captured in the index (compressed sources)."""

    def __init__(self, path: str = "") -> None:
        self._path = path

    def read_line(self, record: LineRecord) -> bytes:
        if record.content is None:
            raise RandomAccessReadError(
                f"line {record.lineno} has no retained content",
                path=self._path or None,
                offset=record.offset,
                length=record.length,
            )
        return record.content
