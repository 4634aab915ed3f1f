"""
CSV audit report of a dedup run.

Generates CSV report with:
- Header statistics (comments)
- Columns: group_id, hash, file_path, action
- UTF-8 encoding (accents in filenames)
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

import structlog

from imagesorter.dedup.models import DedupGroup, ResolutionSummary, ScanStats

logger = structlog.get_logger(__name__)


class ReportGenerator:
    """Write one CSV row per file of every duplicate group, with its fate."""

    CSV_COLUMNS = [
        "group_id",
        "hash",
        "file_path",
        "action",
    ]

    def generate_csv(
        self,
        groups: list[DedupGroup],
        summary: ResolutionSummary,
        output_path: Path,
        scan_stats: Optional[ScanStats] = None,
    ) -> Path:
        """
        Generate CSV report file.

        Args:
            groups: Duplicate groups presented to the user
            summary: Resolution results for those groups
            output_path: Where to save the CSV file
            scan_stats: Walk statistics for the header (optional)

        Returns:
            Path to generated CSV file
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            self._write(f, groups, summary, scan_stats)

        logger.info(
            "dedup_report_generated",
            output_path=str(output_path),
            groups=len(groups),
        )
        return output_path

    def generate_csv_string(
        self,
        groups: list[DedupGroup],
        summary: ResolutionSummary,
        scan_stats: Optional[ScanStats] = None,
    ) -> str:
        """Generate CSV content as string."""
        output = io.StringIO()
        self._write(output, groups, summary, scan_stats)
        return output.getvalue()

    def _write(
        self,
        f: TextIO,
        groups: list[DedupGroup],
        summary: ResolutionSummary,
        scan_stats: Optional[ScanStats],
    ) -> None:
        self._write_header_stats(f, groups, summary, scan_stats)

        resolutions = {r.group_id: r for r in summary.resolutions}

        writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
        writer.writeheader()

        for group in groups:
            resolution = resolutions.get(group.group_id)
            for file_path in group.files:
                action = resolution.action_for(file_path).value if resolution else "untouched"
                writer.writerow(
                    {
                        "group_id": group.group_id,
                        "hash": group.sha256_hash,
                        "file_path": str(file_path),
                        "action": action,
                    }
                )

    @staticmethod
    def _write_header_stats(
        f: TextIO,
        groups: list[DedupGroup],
        summary: ResolutionSummary,
        scan_stats: Optional[ScanStats],
    ) -> None:
        """Write header statistics as CSV comments."""
        f.write(f"# Report Date: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')}\n")
        if scan_stats is not None:
            f.write(f"# Total Files Scanned: {scan_stats.total_scanned:,}\n")
        f.write(f"# Duplicate Groups: {len(groups):,}\n")
        f.write(
            f"# Resolved: {summary.resolved} / Skipped: {summary.skipped} "
            f"/ Invalid: {summary.invalid}\n"
        )
        f.write(f"# Files Deleted: {summary.files_deleted}\n")
        f.write(f"# Space Reclaimed: {summary.space_reclaimed_mb:.2f} MB\n")
