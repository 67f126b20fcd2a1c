from __future__ import annotations

import gzip
import logging
from pathlib import Path

import pytest

from logsort.cli import main
from logsort.utils import LOGGER_NAME, init_logging, same_file

from .helpers import NGINX_LINES, NGINX_SORTED, join_lines


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()


def test_cli_sorts_with_default_format(nginx_log: Path, tmp_path: Path):
    dst = tmp_path / "out.log"
    assert main([str(nginx_log), str(dst)]) == 0
    assert dst.read_bytes() == join_lines(NGINX_SORTED)


def test_cli_auto_detects_gzip_and_writes_zstd(nginx_log_gz: Path, tmp_path: Path):
    import zstandard

    dst = tmp_path / "out.log.zst"
    rc = main([str(nginx_log_gz), str(dst), "--auto-detect", "--dest-compressed", "--dest-codec", "zstd"])
    assert rc == 0
    with open(dst, "rb") as f:
        assert zstandard.ZstdDecompressor().stream_reader(f).read() == join_lines(NGINX_SORTED)


def test_cli_source_compressed_flag(nginx_log_gz: Path, tmp_path: Path):
    dst = tmp_path / "out.log.gz"
    assert main([str(nginx_log_gz), str(dst), "--source-compressed", "--dest-compressed"]) == 0
    assert gzip.decompress(dst.read_bytes()) == join_lines(NGINX_SORTED)


def test_cli_same_path_exit_code(nginx_log: Path):
    assert main([str(nginx_log), str(nginx_log)]) == 2
    assert nginx_log.read_bytes() == join_lines(NGINX_LINES)


def test_cli_abort_on_unparsable(tmp_path: Path):
    src = tmp_path / "mixed.log"
    src.write_bytes(join_lines(NGINX_LINES) + b"continuation without timestamp\n")
    dst = tmp_path / "out.log"

    assert main([str(src), str(dst), "--on-unparsable", "abort"]) == 1
    assert not dst.exists()

    assert main([str(src), str(dst)]) == 0
    assert dst.read_bytes() == join_lines(NGINX_SORTED)


def test_cli_regex_and_reverse(tmp_path: Path):
    src = tmp_path / "kv.log"
    src.write_bytes(b"msg=b ts=20200101T000002\nmsg=a ts=20200101T000001\n")
    dst = tmp_path / "out.log"

    rc = main([str(src), str(dst), "--regex", r"ts=(\S+)", "--format", "%Y%m%dT%H%M%S", "--reverse"])

    assert rc == 0
    assert dst.read_bytes() == b"msg=b ts=20200101T000002\nmsg=a ts=20200101T000001\n"


def test_cli_bad_flush_every_is_config_error(nginx_log: Path, tmp_path: Path):
    assert main([str(nginx_log), str(tmp_path / "out.log"), "--flush-every", "-3"]) == 2


def test_cli_missing_source(tmp_path: Path):
    assert main([str(tmp_path / "nope.log"), str(tmp_path / "out.log"), "--auto-detect"]) == 1


def test_init_logging_writes_rotating_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "logsort.log"
    logger = init_logging("debug", str(log_file))
    logger.info("hello")
    for h in logger.handlers:
        h.flush()

    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert "hello" in log_file.read_text()

    # Re-initializing replaces handlers instead of stacking them
    init_logging("info")
    assert len(logging.getLogger(LOGGER_NAME).handlers) == 1


def test_same_file(tmp_path: Path):
    a = tmp_path / "a.log"
    a.write_text("x")
    link = tmp_path / "link.log"
    link.hardlink_to(a)

    assert same_file(str(a), str(a))
    assert same_file(str(a), str(link))
    assert not same_file(str(a), str(tmp_path / "b.log"))


def test_cli_bad_regex_is_config_error(nginx_log: Path, tmp_path: Path):
    dst = tmp_path / "out.log"
    assert main([str(nginx_log), str(dst), "--regex", "("]) == 2
    assert not dst.exists()
