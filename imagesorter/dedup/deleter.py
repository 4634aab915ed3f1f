"""
Verified removal of losing copies.

Features:
- Pre-deletion checks for a whole group (keeper exists, losers unchanged)
- Path.unlink, or send2trash when use_trash is set
- Fail-fast: a failed check or removal raises DeletionError
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import structlog

from imagesorter.config.exceptions import DeletionError, ScanError
from imagesorter.dedup.hasher import DEFAULT_CHUNK_SIZE, hash_file

logger = structlog.get_logger(__name__)


class FileDeleter:
    """
    Deletes duplicate files after checking they still match the scan.

    Safety checks (per group, before anything is removed):
    1. Keeper still exists
    2. Every loser still exists
    3. Every loser's SHA256 still equals the scanned hash
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        use_trash: bool = False,
        verify: bool = True,
    ):
        """
        Initialize deleter.

        Args:
            chunk_size: For re-hashing verification
            use_trash: Move files to the trash (send2trash) instead of unlinking
            verify: Run the safety checks before deleting a group
        """
        self.chunk_size = chunk_size
        self.use_trash = use_trash
        self.verify = verify

    def verify_group(self, sha256_hash: str, keeper: Path, losers: Sequence[Path]) -> None:
        """
        Check a group is still safe to resolve.

        Raises:
            DeletionError: keeper missing, or a loser missing / modified since scan
        """
        if not self.verify:
            return

        if not keeper.is_file():
            raise DeletionError(f"keeper {keeper} no longer exists")

        for loser in losers:
            if not loser.is_file():
                raise DeletionError(f"{loser} no longer exists")
            try:
                current_hash = hash_file(loser, self.chunk_size)
            except ScanError as e:
                raise DeletionError(f"cannot re-hash {loser}: {e}") from e
            if current_hash != sha256_hash:
                raise DeletionError(f"{loser} modified since scan (hash mismatch)")

    def delete(self, file_path: Path) -> int:
        """
        Remove one file.

        Returns:
            Size in bytes of the removed file

        Raises:
            DeletionError: the file could not be removed
        """
        try:
            size = file_path.stat().st_size
            if self.use_trash:
                import send2trash as _send2trash

                _send2trash.send2trash(str(file_path))
            else:
                file_path.unlink()
        except OSError as e:
            raise DeletionError(f"cannot delete {file_path}: {e}") from e

        logger.info(
            "dedup_file_deleted",
            file_path=str(file_path),
            size_bytes=size,
            trash=self.use_trash,
        )
        return size
