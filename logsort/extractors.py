"""
Ready-made extractors implementing `LineExtractorPort`.

The engine never parses timestamps itself; these cover the common cases so
the CLI (and callers who do not need anything special) can sort typical logs:

- `FunctionExtractor`:   adapt a plain `line -> (ts, decision, err)` callable
- `PrefixTimeExtractor`: timestamp at the very start of the line (strptime)
- `RegexTimeExtractor`:  timestamp found anywhere via a bytes regex

Timestamps are integer Unix seconds, or Unix nanoseconds when
`nanoseconds=True` (needed to order sub-second formats such as `%f`).
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Callable, Optional, Union

from .dto import Decision, Extraction
from .ports import LineExtractorPort

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DEFAULT_FORMAT = "%Y/%m/%d %H:%M:%S"

# Used to measure how many characters a format renders to
_REFERENCE_TIME = datetime(2006, 1, 2, 15, 4, 5, 123456, tzinfo=timezone.utc)


class FunctionExtractor(LineExtractorPort):
    """Wraps a callable returning (timestamp, decision, error)."""

    def __init__(self, fn: Callable[[bytes], Any]) -> None:
        self._fn = fn

    def extract(self, line: bytes) -> Extraction:
        return self._fn(line)

    def __repr__(self) -> str:
        return f"FunctionExtractor({self._fn!r})"


def as_extractor(obj: Any) -> LineExtractorPort:
    """
    Return `obj` as a LineExtractorPort.

    Objects with an `extract` method are used as-is; other callables are
    wrapped in FunctionExtractor. Anything else raises TypeError.
    """
    if callable(getattr(obj, "extract", None)):
        return obj
    if callable(obj):
        return FunctionExtractor(obj)
    raise TypeError(f"extractor must have an extract() method or be callable, got {type(obj).__name__}")


class _TimeParser:
    """Shared strptime + epoch conversion for the time-based extractors."""

    def __init__(
        self,
        fmt: str,
        *,
        encoding: str,
        tz: tzinfo,
        on_error: Decision,
        nanoseconds: bool,
    ) -> None:
        on_error = Decision(on_error)
        if on_error is Decision.KEEP:
            raise ValueError("on_error must be SKIP or ABORT")
        self.fmt = fmt
        self.encoding = encoding
        self.tz = tz
        self.on_error = on_error
        self.nanoseconds = nanoseconds

    def parse(self, raw: bytes) -> Extraction:
        try:
            text = raw.decode(self.encoding)
            dt = datetime.strptime(text, self.fmt)
        except ValueError as exc:  # UnicodeDecodeError is a ValueError
            return Extraction(0, self.on_error, exc)

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=self.tz)
        delta = dt - EPOCH
        if self.nanoseconds:
            return Extraction((delta // timedelta(microseconds=1)) * 1000, Decision.KEEP, None)
        return Extraction(delta // timedelta(seconds=1), Decision.KEEP, None)

    def missing(self, line: bytes) -> Extraction:
        return Extraction(0, self.on_error, ValueError(f"no timestamp in line {line[:80]!r}"))


class PrefixTimeExtractor(LineExtractorPort):
    """
    Parse a timestamp occupying the first characters of each line.

    Parameters
    ----------
    fmt : str
        strptime format, default "%Y/%m/%d %H:%M:%S".
    width : int, optional
        Bytes to take from the line start. Defaults to the rendered width of
        `fmt`; pass it explicitly for formats with variable width (%b, %A...).
    encoding : str
        Decoding used for the prefix only; line bytes are never altered.
    tz : tzinfo
        Zone assumed for naive timestamps (UTC).
    on_error : Decision
        SKIP (default) or ABORT for lines without a parsable prefix.
    nanoseconds : bool
        Emit Unix nanoseconds instead of seconds.
    """

    def __init__(
        self,
        fmt: str = DEFAULT_FORMAT,
        *,
        width: Optional[int] = None,
        encoding: str = "utf-8",
        tz: tzinfo = timezone.utc,
        on_error: Decision = Decision.SKIP,
        nanoseconds: bool = False,
    ) -> None:
        self._parser = _TimeParser(fmt, encoding=encoding, tz=tz, on_error=on_error, nanoseconds=nanoseconds)
        self.width = width if width is not None else len(_REFERENCE_TIME.strftime(fmt).encode(encoding))

    def extract(self, line: bytes) -> Extraction:
        if len(line) < self.width:
            return self._parser.missing(line)
        return self._parser.parse(line[: self.width])


class RegexTimeExtractor(LineExtractorPort):
    """
    Locate a timestamp with a regex, then parse it with strptime.

    The first capture group is parsed when the pattern has one, otherwise the
    whole match. Patterns given as str are encoded with `encoding`.
    """

    def __init__(
        self,
        pattern: Union[str, bytes, "re.Pattern[bytes]"],
        fmt: str = DEFAULT_FORMAT,
        *,
        encoding: str = "utf-8",
        tz: tzinfo = timezone.utc,
        on_error: Decision = Decision.SKIP,
        nanoseconds: bool = False,
    ) -> None:
        if isinstance(pattern, str):
            pattern = pattern.encode(encoding)
        if isinstance(pattern, bytes):
            try:
                pattern = re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid timestamp regex {pattern!r}: {exc}") from exc
        self._rx = pattern
        self._group = 1 if self._rx.groups else 0
        self._parser = _TimeParser(fmt, encoding=encoding, tz=tz, on_error=on_error, nanoseconds=nanoseconds)

    def extract(self, line: bytes) -> Extraction:
        m = self._rx.search(line)
        if m is None or m.group(self._group) is None:
            return self._parser.missing(line)
        return self._parser.parse(m.group(self._group))
