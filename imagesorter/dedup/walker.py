"""
Recursive content-fingerprinting walk.

Features:
- Depth-first, entries of each directory in name order
- No depth limit (explicit stack instead of recursion)
- Chunked SHA256 per file, one open handle at a time
- Fail-fast: any listing or read error aborts the walk
"""

from __future__ import annotations

import os
import stat
import time
from pathlib import Path
from typing import Callable, Iterator, Optional, Protocol, Union

import structlog

from imagesorter.config.exceptions import ScanError
from imagesorter.dedup.hasher import DEFAULT_CHUNK_SIZE, hash_file
from imagesorter.dedup.models import Location, ScanStats

logger = structlog.get_logger(__name__)

PROGRESS_EVERY = 100


class FingerprintRecorder(Protocol):
    """Write side of the index, as seen by the walker."""

    def record_hash(self, sha256_hash: str) -> None: ...

    def record_location(self, sha256_hash: str, file_path: Union[str, Path]) -> None: ...


class TreeWalker:
    """
    Walk a directory tree and feed (hash, path) pairs to an index.

    Symlinks are not followed when deciding whether to descend. A symlink to
    a regular file is hashed through the link; anything else that is not a
    regular file (symlink to a directory, FIFO, socket, device) aborts the walk.
    """

    def __init__(
        self,
        index: FingerprintRecorder,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_callback: Optional[Callable[[ScanStats], None]] = None,
    ):
        """
        Initialize walker.

        Args:
            index: Receives record_hash / record_location for every file
            chunk_size: SHA256 read size in bytes
            progress_callback: Called every 100 files with current stats
        """
        self.index = index
        self.chunk_size = chunk_size
        self.progress_callback = progress_callback
        self.stats = ScanStats()

    def walk(self, root: Union[str, Path]) -> Iterator[Location]:
        """
        Yield one Location per file under root, at any depth.

        Raises:
            ScanError: a directory cannot be listed or a file cannot be hashed
        """
        stack = [iter(self._list_directory(os.fspath(root)))]

        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                raise ScanError(f"cannot stat {entry.path}: {e}") from e

            if is_dir:
                stack.append(iter(self._list_directory(entry.path)))
                continue

            # FIFOs, sockets and devices would block or never reach EOF
            try:
                mode = entry.stat().st_mode
            except OSError as e:
                raise ScanError(f"cannot stat {entry.path}: {e}") from e
            if not stat.S_ISREG(mode):
                raise ScanError(f"not a regular file: {entry.path}")

            sha256_hash = hash_file(entry.path, self.chunk_size)
            yield Location(sha256_hash=sha256_hash, file_path=Path(entry.path))

    def scan(self, root: Union[str, Path]) -> ScanStats:
        """
        Walk root and record every file in the index.

        Returns:
            ScanStats for the walk
        """
        start = time.time()
        self.stats = ScanStats()
        seen_hashes: set[str] = set()

        logger.info("dedup_scan_started", root_path=str(root))

        for location in self.walk(root):
            self.index.record_hash(location.sha256_hash)
            self.index.record_location(location.sha256_hash, location.file_path)

            seen_hashes.add(location.sha256_hash)
            self.stats.total_scanned += 1
            self.stats.distinct_hashes = len(seen_hashes)

            if self.stats.total_scanned % PROGRESS_EVERY == 0:
                self.stats.current_directory = str(location.file_path.parent)
                logger.debug(
                    "dedup_scan_progress",
                    total_scanned=self.stats.total_scanned,
                    current_directory=self.stats.current_directory,
                )
                if self.progress_callback:
                    self.progress_callback(self.stats)

        self.stats.elapsed_seconds = round(time.time() - start, 3)

        logger.info(
            "dedup_scan_completed",
            total_scanned=self.stats.total_scanned,
            total_directories=self.stats.total_directories,
            distinct_hashes=self.stats.distinct_hashes,
            elapsed_seconds=self.stats.elapsed_seconds,
        )
        return self.stats

    def _list_directory(self, directory: str) -> list[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise ScanError(f"cannot list {directory}: {e}") from e

        self.stats.total_directories += 1
        return entries
