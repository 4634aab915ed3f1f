"""
Pydantic models for the dedup engine.

Models:
- Location: one (sha256, path) association found by the walk
- DedupGroup: all paths sharing one sha256, when there are 2+
- ScanStats: walk statistics
- GroupResolution: what happened to one group at the prompt
- ResolutionSummary: totals for the whole resolution pass
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class DedupAction(str, Enum):
    """Action taken on a file of a dedup group."""

    keep = "keep"
    delete = "delete"
    untouched = "untouched"


class ResolutionOutcome(str, Enum):
    """Terminal state reached by one group."""

    resolved = "resolved"
    skipped = "skipped"
    invalid = "invalid"


class Location(BaseModel):
    """A file path together with the hash of its content at scan time."""

    sha256_hash: str
    file_path: Path


class DedupGroup(BaseModel):
    """Group of duplicate files sharing the same SHA256 hash."""

    group_id: int
    sha256_hash: str
    files: list[Path] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files)


class ScanStats(BaseModel):
    """Walk statistics."""

    total_scanned: int = 0
    total_directories: int = 0
    distinct_hashes: int = 0
    elapsed_seconds: float = 0.0
    current_directory: str = ""


class GroupResolution(BaseModel):
    """Outcome of the keep/delete prompt for one group."""

    group_id: int
    sha256_hash: str
    outcome: ResolutionOutcome
    keeper: Optional[Path] = None
    deleted: list[Path] = Field(default_factory=list)

    def action_for(self, file_path: Path) -> DedupAction:
        if self.outcome is not ResolutionOutcome.resolved:
            return DedupAction.untouched
        if file_path == self.keeper:
            return DedupAction.keep
        if file_path in self.deleted:
            return DedupAction.delete
        return DedupAction.untouched


class ResolutionSummary(BaseModel):
    """Totals for one resolution pass."""

    groups_seen: int = 0
    resolved: int = 0
    skipped: int = 0
    invalid: int = 0
    files_deleted: int = 0
    space_reclaimed_bytes: int = 0
    resolutions: list[GroupResolution] = Field(default_factory=list)

    @property
    def space_reclaimed_mb(self) -> float:
        return round(self.space_reclaimed_bytes / (1024 * 1024), 2)

    def add(self, resolution: GroupResolution, reclaimed_bytes: int = 0) -> None:
        self.groups_seen += 1
        if resolution.outcome is ResolutionOutcome.resolved:
            self.resolved += 1
        elif resolution.outcome is ResolutionOutcome.skipped:
            self.skipped += 1
        else:
            self.invalid += 1
        self.files_deleted += len(resolution.deleted)
        self.space_reclaimed_bytes += reclaimed_bytes
        self.resolutions.append(resolution)
