"""Duplicate grouping on top of the fingerprint index."""

from __future__ import annotations

from pathlib import Path

import structlog

from imagesorter.dedup.index import FingerprintIndex
from imagesorter.dedup.models import DedupGroup

logger = structlog.get_logger(__name__)


class DuplicateGrouper:
    """
    Build DedupGroups from the index.

    Groups are materialised up front so that the resolution pass can update
    the index while it works through them. Paths keep insertion (walk) order,
    which fixes the 1-based numbers shown at the prompt.
    """

    def __init__(self, index: FingerprintIndex):
        self.index = index

    def build_groups(self) -> list[DedupGroup]:
        groups = [
            DedupGroup(
                group_id=group_id,
                sha256_hash=sha256_hash,
                files=[Path(p) for p in paths],
            )
            for group_id, (sha256_hash, paths) in enumerate(self.index.duplicate_groups(), start=1)
        ]

        logger.info(
            "dedup_groups_built",
            duplicate_groups=len(groups),
            total_duplicates=sum(group.count - 1 for group in groups),
        )
        return groups
