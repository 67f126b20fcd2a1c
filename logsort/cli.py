"""
Command-line entry point.

    logsort disorder.log order.log --format "%Y/%m/%d %H:%M:%S"
    logsort app.log.gz sorted.log.zst --source-compressed --dest-compressed --dest-codec zstd

Exit status: 0 on success, 2 on configuration errors, 1 on any other failure.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .config import LoggingConfig, SortConfig
from .dto import Decision
from .errors import ConfigurationError, LogSortError
from .extractors import DEFAULT_FORMAT, PrefixTimeExtractor, RegexTimeExtractor
from .intake.decompress import sniff_compressor
from .orchestration.runner import sort_with_options
from .utils import init_logging


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="logsort", description="Sort a log file by line timestamp.")
    ap.add_argument("source", help="log file to sort")
    ap.add_argument("destination", help="output file (must differ from source)")
    ap.add_argument("--format", default=DEFAULT_FORMAT, help="strptime format of the timestamp (default: %(default)r)")
    ap.add_argument("--regex", default=None, help="regex locating the timestamp; default is the line prefix")
    ap.add_argument("--width", type=int, default=None, help="prefix width in bytes for variable-width formats")
    ap.add_argument("--nanoseconds", action="store_true", help="keep sub-second precision in the sort key")
    ap.add_argument(
        "--on-unparsable",
        choices=["skip", "abort"],
        default="skip",
        help="what to do with lines without a timestamp (default: %(default)s)",
    )

    comp = ap.add_mutually_exclusive_group()
    comp.add_argument("--source-compressed", action="store_true", help="source is gzip or zstd")
    comp.add_argument("--auto-detect", action="store_true", help="detect source compression from magic bytes")
    ap.add_argument("--dest-compressed", action="store_true", help="compress the output")
    ap.add_argument("--dest-codec", choices=["gzip", "zstd"], default="gzip", help="output codec (default: %(default)s)")

    ap.add_argument("--reverse", action="store_true", help="newest first")
    ap.add_argument("--flush-every", type=int, default=1, help="flush every N lines, 0 = only at end (default: %(default)s)")
    ap.add_argument("--progress", action="store_true", help="show a progress bar")
    ap.add_argument("--log-level", default=LoggingConfig.LOG_LEVEL, help="logging level (default: %(default)s)")
    ap.add_argument("--log-file", default=LoggingConfig.LOG_FILE or None, help="also log to this rotating file")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = init_logging(args.log_level, args.log_file)

    try:
        on_error = Decision(args.on_unparsable)
        if args.regex:
            extractor = RegexTimeExtractor(args.regex, args.format, on_error=on_error, nanoseconds=args.nanoseconds)
        else:
            extractor = PrefixTimeExtractor(
                args.format, width=args.width, on_error=on_error, nanoseconds=args.nanoseconds
            )

        source_is_compressed = args.source_compressed or (args.auto_detect and _is_compressed(args.source))

        cfg = SortConfig(
            source_path=args.source,
            destination_path=args.destination,
            source_is_compressed=source_is_compressed,
            destination_is_compressed=args.dest_compressed,
            destination_compressor=args.dest_codec,
            extractor=extractor,
            reverse=args.reverse,
            flush_every=args.flush_every,
            progress=args.progress,
        )
    except (ValueError, OSError) as exc:  # pydantic ValidationError is a ValueError
        logger.error("Configuration error: %s", exc)
        return 2

    try:
        report = sort_with_options(cfg)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    except LogSortError as exc:
        logger.error("Sort failed: %s", exc)
        return 1

    logger.info(
        "Done: %d/%d lines written to %s", report.lines_kept, report.lines_scanned, report.destination_path
    )
    return 0


def _is_compressed(path: str) -> bool:
    # An unreadable source is reported by the sort run itself
    try:
        with open(path, "rb") as f:
            return sniff_compressor(f) != "none"
    except OSError:
        return False


if __name__ == "__main__":
    sys.exit(main())
