"""
imagesorter command line.

Usage:
    imagesorter ROOT
    python -m imagesorter ROOT

Pipeline:
    1. Recreate the fingerprint store (./imagesorter.db by default)
    2. Walk ROOT, hashing every file, in one transaction
    3. Build duplicate groups
    4. Ask which copy of each group to keep, delete the others
    5. Optionally write a CSV report (IMAGESORTER_REPORT_PATH)

Any scan, store or deletion error stops the run with exit code 1.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence, TextIO

import structlog

from imagesorter.config.exceptions import ImagesorterError
from imagesorter.config.logging import configure_logging
from imagesorter.config.settings import ImagesorterSettings, load_settings
from imagesorter.dedup.deleter import FileDeleter
from imagesorter.dedup.grouper import DuplicateGrouper
from imagesorter.dedup.index import FingerprintIndex
from imagesorter.dedup.models import ResolutionSummary
from imagesorter.dedup.report_generator import ReportGenerator
from imagesorter.dedup.resolver import ResolutionDriver
from imagesorter.dedup.walker import TreeWalker

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imagesorter",
        description="Find files with identical content and choose which copy to keep",
    )
    parser.add_argument("root", type=Path, help="Directory to scan recursively")
    return parser


def run(
    root: Path,
    settings: ImagesorterSettings,
    input_func: Callable[[], str] = input,
    output: Optional[TextIO] = None,
) -> ResolutionSummary:
    """
    Scan root, then resolve every duplicate group interactively.

    Raises:
        ImagesorterError: any fatal scan, store or deletion failure
    """
    deleter = FileDeleter(
        chunk_size=settings.chunk_size,
        use_trash=settings.use_trash,
        verify=settings.verify_before_delete,
    )

    with FingerprintIndex.create_fresh(settings.db_path) as index:
        walker = TreeWalker(index, chunk_size=settings.chunk_size)
        with index.bulk_load():
            scan_stats = walker.scan(root)

        groups = DuplicateGrouper(index).build_groups()

        driver = ResolutionDriver(deleter, index=index, input_func=input_func, output=output)
        summary = driver.resolve_all(groups)

    if settings.report_path is not None:
        ReportGenerator().generate_csv(groups, summary, settings.report_path, scan_stats)

    return summary


def main(
    argv: Optional[Sequence[str]] = None,
    settings: Optional[ImagesorterSettings] = None,
    input_func: Callable[[], str] = input,
    output: Optional[TextIO] = None,
) -> int:
    """Entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        if settings is None:
            settings = load_settings()
        configure_logging(level=settings.log_level, json_format=settings.log_format == "json")

        run(args.root, settings, input_func=input_func, output=output)
    except ImagesorterError as e:
        logger.error("imagesorter_failed", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
