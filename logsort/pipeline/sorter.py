"""
Index sorter.

Orders records by timestamp with Python's built-in sort (Timsort). It is
stable, so lines sharing a timestamp keep their original file order and
re-sorting sorted output reproduces it byte for byte.
"""

from __future__ import annotations

from operator import attrgetter
from typing import Iterable, List

from ..dto import LineRecord

_by_timestamp = attrgetter("timestamp")


def sort_index(records: Iterable[LineRecord], *, reverse: bool = False) -> List[LineRecord]:
    """
    Return a new list of `records` ordered by timestamp.

    Ascending by default; `reverse=True` gives newest first. Ties keep file
    order in both directions.
    """
    return sorted(records, key=_by_timestamp, reverse=reverse)
