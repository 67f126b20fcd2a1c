from __future__ import annotations

from typing import List

from logsort import Decision, Extraction

NGINX_LINES = [
    b"2020/01/18 12:20:30 [error] 177003#0: *1004128358 recv() failed (104: Connection reset by peer)",
    b"2020/01/18 12:31:05 [error] 177004#0: *1004144640 recv() failed (104: Connection reset by peer)",
    b"2020/01/18 12:24:38 [error] 176995#0: *1004136348 [lua] heartbeat.lua:107: cb_heartbeat(): "
    b"failed to connect: 127.0.0.1:403, timeout, context: ngx.timer",
    b"2020/01/18 12:21:55 [error] 177004#0: *1004127283 recv() failed (104: Connection reset by peer)",
]

NGINX_SORTED = [NGINX_LINES[0], NGINX_LINES[3], NGINX_LINES[2], NGINX_LINES[1]]


def join_lines(lines: List[bytes]) -> bytes:
    return b"".join(line + b"\n" for line in lines)


def int_key(line: bytes) -> Extraction:
    """'<int> rest' -> KEEP with that int; lines starting with '#' are skipped."""
    if line.startswith(b"#"):
        return Extraction(0, Decision.SKIP, None)
    head = line.split(b" ", 1)[0]
    return Extraction(int(head), Decision.KEEP, None)
