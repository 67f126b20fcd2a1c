from __future__ import annotations

import gzip
import io
import types
from pathlib import Path

import pytest

from logsort import DestinationIOError, LineRecord, RandomAccessReadError
from logsort.intake.line_source import RetainedLineSource, SeekableLineSource
from logsort.pipeline import writer
from logsort.pipeline.writer import open_destination_stream, write_sorted


def test_seekable_source_reads_exact_bytes():
    fh = io.BytesIO(b"hello\nworld\n")
    src = SeekableLineSource(fh, "mem")
    assert src.read_line(LineRecord(offset=6, length=5, timestamp=0)) == b"world"
    assert src.read_line(LineRecord(offset=0, length=5, timestamp=0)) == b"hello"


def test_short_read_means_source_changed():
    fh = io.BytesIO(b"abc")
    src = SeekableLineSource(fh, "mem.log")
    with pytest.raises(RandomAccessReadError) as ei:
        src.read_line(LineRecord(offset=1, length=10, timestamp=0, lineno=4))
    assert ei.value.offset == 1
    assert ei.value.length == 10
    assert ei.value.path == "mem.log"


def test_closed_handle_is_random_access_error():
    fh = io.BytesIO(b"abc")
    fh.close()
    with pytest.raises(RandomAccessReadError):
        SeekableLineSource(fh, "mem").read_line(LineRecord(offset=0, length=1, timestamp=0))


def test_retained_source_requires_content():
    src = RetainedLineSource()
    assert src.read_line(LineRecord(offset=0, length=3, timestamp=0, content=b"abc")) == b"abc"
    with pytest.raises(RandomAccessReadError):
        src.read_line(LineRecord(offset=0, length=3, timestamp=0))


def test_write_sorted_appends_one_terminator_per_line():
    records = [
        LineRecord(offset=0, length=1, timestamp=1, content=b"b"),
        LineRecord(offset=0, length=0, timestamp=2, content=b""),
        LineRecord(offset=0, length=2, timestamp=3, content=b"a\r"),
    ]
    out = io.BytesIO()
    written = write_sorted(records, RetainedLineSource(), out)
    assert out.getvalue() == b"b\n\na\r\n"
    assert written == 6


class _CountingSink(io.BytesIO):
    def __init__(self) -> None:
        super().__init__()
        self.flushes = 0

    def flush(self) -> None:
        self.flushes += 1
        super().flush()


@pytest.mark.parametrize("flush_every, expected", [(1, 5), (2, 3), (0, 1), (10, 1)])
def test_flush_every(flush_every: int, expected: int):
    records = [LineRecord(offset=0, length=1, timestamp=i, content=b"x") for i in range(5)]
    sink = _CountingSink()
    write_sorted(records, RetainedLineSource(), sink, flush_every=flush_every)
    assert sink.flushes == expected


class _BrokenSink(io.BytesIO):
    def write(self, b) -> int:
        raise OSError("no space left on device")


def test_write_failure_is_destination_error():
    records = [LineRecord(offset=0, length=1, timestamp=0, content=b"x")]
    with pytest.raises(DestinationIOError) as ei:
        write_sorted(records, RetainedLineSource(), _BrokenSink(), path="out.log")
    assert ei.value.path == "out.log"
    assert ei.value.offset == 0


def test_unwritable_destination(tmp_path: Path):
    with pytest.raises(DestinationIOError):
        with open_destination_stream(str(tmp_path / "missing-dir" / "out.log")):
            pass


def test_failure_midway_leaves_sorted_prefix(tmp_path: Path):
    dst = tmp_path / "out.log"
    fh = io.BytesIO(b"aa\nbb\n")
    records = [
        LineRecord(offset=0, length=2, timestamp=1, lineno=1),
        LineRecord(offset=3, length=2, timestamp=2, lineno=2),
        LineRecord(offset=50, length=2, timestamp=3, lineno=3),
    ]

    with pytest.raises(RandomAccessReadError):
        with open_destination_stream(str(dst)) as out:
            write_sorted(records, SeekableLineSource(fh, "mem"), out)

    assert dst.read_bytes() == b"aa\nbb\n"


class _GzipFailingOnClose(gzip.GzipFile):
    def close(self) -> None:
        super().close()
        raise OSError("codec trailer lost")


@pytest.fixture
def gzip_close_fails(monkeypatch):
    monkeypatch.setattr(writer, "gzip", types.SimpleNamespace(GzipFile=_GzipFailingOnClose))


def test_finalize_failure_is_destination_error(tmp_path: Path, gzip_close_fails):
    with pytest.raises(DestinationIOError, match="cannot finalize"):
        with open_destination_stream(str(tmp_path / "out.log.gz"), "gzip") as out:
            out.write(b"x\n")


def test_finalize_failure_does_not_mask_earlier_error(tmp_path: Path, gzip_close_fails):
    records = [LineRecord(offset=40, length=2, timestamp=1, lineno=1)]

    with pytest.raises(RandomAccessReadError):
        with open_destination_stream(str(tmp_path / "out.log.gz"), "gzip") as out:
            write_sorted(records, SeekableLineSource(io.BytesIO(b"aa\n"), "mem"), out)
