"""
Newline splitter with byte-offset tracking.

`iter_lines` reads a binary stream in fixed-size chunks and yields one
`RawLine` per line. Offsets count bytes of the stream as consumed (i.e. the
decompressed bytes when a filter is interposed).

Rules:
- The terminator is b"\\n" and is never part of `data`.
- A b"\\r" before the terminator is line content and is kept verbatim.
- A final line without terminator is yielded with `terminated=False`.
- Nothing is yielded for the empty remainder after a trailing terminator.
"""

from __future__ import annotations

from typing import IO, Iterator, NamedTuple

CHUNK = 1 << 20  # 1 MiB reads
TERMINATOR = b"\n"


class RawLine(NamedTuple):
    offset: int
    data: bytes
    terminated: bool

    @property
    def width(self) -> int:
        """Bytes this line occupies in the stream, terminator included."""
        return len(self.data) + (1 if self.terminated else 0)


def iter_lines(stream: IO[bytes], chunk_size: int = CHUNK) -> Iterator[RawLine]:
    """Yield every line of `stream` together with its starting offset."""
    buf = bytearray()
    offset = 0

    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break

        # Bytes already in buf hold no terminator; search only the new chunk
        scan = len(buf)
        buf += chunk

        start = 0
        while True:
            idx = buf.find(TERMINATOR, max(start, scan))
            if idx < 0:
                break
            line = bytes(buf[start:idx])
            yield RawLine(offset, line, True)
            offset += len(line) + 1
            start = idx + 1
        if start:
            del buf[:start]

    if buf:
        yield RawLine(offset, bytes(buf), False)
