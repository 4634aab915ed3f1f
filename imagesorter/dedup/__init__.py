"""
Dedup engine.

Modules:
- hasher: chunked SHA256 of one file
- walker: recursive walk feeding the fingerprint index
- index: SQLite files / locations store
- grouper: duplicate groups from the index
- resolver: interactive keep/delete prompt
- deleter: verified removal of losing copies
- report_generator: CSV audit report
- models: Pydantic data models
"""

from imagesorter.dedup.models import (
    DedupGroup,
    GroupResolution,
    Location,
    ResolutionOutcome,
    ResolutionSummary,
    ScanStats,
)

__all__ = [
    "DedupGroup",
    "GroupResolution",
    "Location",
    "ResolutionOutcome",
    "ResolutionSummary",
    "ScanStats",
]
