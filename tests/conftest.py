from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from logsort import PrefixTimeExtractor

from .helpers import NGINX_LINES, join_lines


@pytest.fixture
def nginx_log(tmp_path: Path) -> Path:
    p = tmp_path / "disorder.log"
    p.write_bytes(join_lines(NGINX_LINES))
    return p


@pytest.fixture
def nginx_log_gz(tmp_path: Path) -> Path:
    p = tmp_path / "disorder.log.gz"
    p.write_bytes(gzip.compress(join_lines(NGINX_LINES)))
    return p


@pytest.fixture
def nginx_extractor() -> PrefixTimeExtractor:
    return PrefixTimeExtractor("%Y/%m/%d %H:%M:%S")
