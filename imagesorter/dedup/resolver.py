"""
Interactive keep/delete resolution of duplicate groups.

One group at a time:
    AWAITING_GROUP -> PRESENTING_OPTIONS -> AWAITING_SELECTION -> SKIPPED | RESOLVED

The selection is a single integer: 1..N keeps that file and deletes the
others, 0 skips the group, anything else (unparseable, negative, too large,
end of input) skips the group with an invalid-input notice.
"""

from __future__ import annotations

import re
import sys
from enum import Enum
from typing import Callable, Iterable, Optional, TextIO

import structlog

from imagesorter.dedup.deleter import FileDeleter
from imagesorter.dedup.index import FingerprintIndex
from imagesorter.dedup.models import (
    DedupGroup,
    GroupResolution,
    ResolutionOutcome,
    ResolutionSummary,
)

logger = structlog.get_logger(__name__)

PROMPT = "Please select which file to keep (0 to skip):"

# Optional minus sign, then ASCII digits only
SELECTION_RE = re.compile(r"-?[0-9]+")


class ResolutionState(str, Enum):
    """States of the per-group prompt."""

    AWAITING_GROUP = "awaiting_group"
    PRESENTING_OPTIONS = "presenting_options"
    AWAITING_SELECTION = "awaiting_selection"
    SKIPPED = "skipped"
    RESOLVED = "resolved"


class ResolutionDriver:
    """
    Ask the user which copy of each duplicate group to keep.

    The driver is the only component that deletes files. When an index is
    attached, each deleted path is dropped from it right after removal.
    """

    def __init__(
        self,
        deleter: FileDeleter,
        index: Optional[FingerprintIndex] = None,
        input_func: Callable[[], str] = input,
        output: Optional[TextIO] = None,
    ):
        """
        Initialize driver.

        Args:
            deleter: Removes losing copies
            index: Kept consistent with the filesystem after each deletion
            input_func: Returns one line of user input (raises EOFError at end)
            output: Where the prompt is written, stdout by default
        """
        self.deleter = deleter
        self.index = index
        self.input_func = input_func
        self.output = output
        self.state = ResolutionState.AWAITING_GROUP

    def resolve_all(self, groups: Iterable[DedupGroup]) -> ResolutionSummary:
        """Run the prompt for every group, in order."""
        summary = ResolutionSummary()

        for group in groups:
            resolution, reclaimed = self._resolve(group)
            summary.add(resolution, reclaimed)
            self.state = ResolutionState.AWAITING_GROUP

        logger.info(
            "dedup_resolution_completed",
            groups=summary.groups_seen,
            resolved=summary.resolved,
            skipped=summary.skipped,
            invalid=summary.invalid,
            files_deleted=summary.files_deleted,
            space_reclaimed_mb=summary.space_reclaimed_mb,
        )
        return summary

    def resolve_group(self, group: DedupGroup) -> GroupResolution:
        """Run the prompt for one group."""
        resolution, _ = self._resolve(group)
        return resolution

    def _resolve(self, group: DedupGroup) -> tuple[GroupResolution, int]:
        self.state = ResolutionState.PRESENTING_OPTIONS
        self._present(group)

        self.state = ResolutionState.AWAITING_SELECTION
        selected = self._read_selection()

        if selected is None or selected < 0 or selected > group.count:
            self.state = ResolutionState.SKIPPED
            self._say("Invalid input... skipping")
            logger.info("dedup_group_skipped", group_id=group.group_id, reason="invalid_input")
            return self._untouched(group, ResolutionOutcome.invalid), 0

        if selected == 0:
            self.state = ResolutionState.SKIPPED
            self._say("0 selected... skipping")
            logger.info("dedup_group_skipped", group_id=group.group_id, reason="user_skip")
            return self._untouched(group, ResolutionOutcome.skipped), 0

        keeper = group.files[selected - 1]
        losers = [p for i, p in enumerate(group.files, start=1) if i != selected]
        self.deleter.verify_group(group.sha256_hash, keeper, losers)

        deleted = []
        reclaimed = 0
        for i, file_path in enumerate(group.files, start=1):
            if i == selected:
                self._say(f"Selected file {file_path} kept.")
                continue
            reclaimed += self.deleter.delete(file_path)
            deleted.append(file_path)
            if self.index is not None:
                self.index.forget_location(group.sha256_hash, file_path)
            self._say(f"File {file_path} deleted.")

        self.state = ResolutionState.RESOLVED
        resolution = GroupResolution(
            group_id=group.group_id,
            sha256_hash=group.sha256_hash,
            outcome=ResolutionOutcome.resolved,
            keeper=keeper,
            deleted=deleted,
        )
        return resolution, reclaimed

    def _present(self, group: DedupGroup) -> None:
        self._say(group.sha256_hash)
        self._say("Duplicate files found:")
        for i, file_path in enumerate(group.files, start=1):
            self._say(f"{i} {file_path}")
        self._say(PROMPT)

    def _read_selection(self) -> Optional[int]:
        """Parse one integer from the user; None when the input is unusable."""
        try:
            raw = self.input_func()
        except EOFError:
            return None
        raw = raw.strip()
        if not SELECTION_RE.fullmatch(raw):
            return None
        return int(raw)

    def _say(self, line: str) -> None:
        print(line, file=self.output or sys.stdout, flush=True)

    @staticmethod
    def _untouched(group: DedupGroup, outcome: ResolutionOutcome) -> GroupResolution:
        return GroupResolution(
            group_id=group.group_id,
            sha256_hash=group.sha256_hash,
            outcome=outcome,
        )
