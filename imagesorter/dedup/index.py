"""
SQLite fingerprint index.

Two relations:
- files(hash): every distinct SHA256 seen by the walk
- locations(hash, filepath): where each hash was found

Inserts are idempotent (INSERT OR IGNORE). The walk writes inside a single
bulk_load() transaction, so the store holds either a complete walk or none
of it. The store is rebuilt from scratch on every run (create_fresh).
"""

from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

import structlog

from imagesorter.config.exceptions import IndexStoreError

logger = structlog.get_logger(__name__)


class FingerprintIndex:
    """Persistent hash -> paths index backed by SQLite."""

    SCHEMA = """
    CREATE TABLE IF NOT EXISTS files (
        hash TEXT PRIMARY KEY
    );
    CREATE TABLE IF NOT EXISTS locations (
        hash TEXT,
        filepath TEXT,
        PRIMARY KEY (hash, filepath),
        FOREIGN KEY (hash) REFERENCES files(hash)
    );
    """

    INSERT_HASH = "INSERT OR IGNORE INTO files(hash) VALUES (?)"
    INSERT_LOCATION = "INSERT OR IGNORE INTO locations(hash, filepath) VALUES (?, ?)"

    def __init__(self, db_path: Union[str, Path]):
        """
        Open (or create) the store at db_path.

        Args:
            db_path: SQLite file, or ":memory:"
        """
        self.db_path = str(db_path)
        try:
            # Autocommit mode: transactions are opened explicitly in bulk_load()
            self._conn: Optional[sqlite3.Connection] = sqlite3.connect(
                self.db_path, isolation_level=None
            )
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(self.SCHEMA)
        except sqlite3.Error as e:
            raise IndexStoreError(f"cannot initialise store {self.db_path}: {e}") from e

    @classmethod
    def create_fresh(cls, db_path: Union[str, Path]) -> "FingerprintIndex":
        """Discard any store left at db_path by a previous run and create a new one."""
        path = str(db_path)
        if path != ":memory:":
            for leftover in (path, path + "-journal"):
                try:
                    os.remove(leftover)
                except FileNotFoundError:
                    pass
                except OSError as e:
                    raise IndexStoreError(f"cannot remove old store {leftover}: {e}") from e

        index = cls(path)
        logger.info("dedup_index_created", db_path=path)
        return index

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise IndexStoreError("fingerprint index is closed")
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "FingerprintIndex":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def bulk_load(self) -> Iterator["FingerprintIndex"]:
        """
        Group every insert of a walk into one transaction.

        Commits on normal exit; rolls back and re-raises on any exception.
        """
        self._execute("BEGIN")
        try:
            yield self
        except BaseException:
            self.conn.rollback()
            raise
        self._execute("COMMIT")

    def record_hash(self, sha256_hash: str) -> None:
        """Ensure sha256_hash is in files; no-op if present."""
        self._execute(self.INSERT_HASH, (sha256_hash,))

    def record_location(self, sha256_hash: str, file_path: Union[str, Path]) -> None:
        """Ensure (sha256_hash, file_path) is in locations; no-op if present."""
        self._execute(self.INSERT_LOCATION, (sha256_hash, str(file_path)))

    def forget_location(self, sha256_hash: str, file_path: Union[str, Path]) -> None:
        """Drop one location row once its file is gone."""
        self._execute(
            "DELETE FROM locations WHERE hash = ? AND filepath = ?",
            (sha256_hash, str(file_path)),
        )

    def duplicate_hashes(self) -> list[str]:
        """Every hash found at 2+ locations, in first-seen order."""
        rows = self._fetchall(
            """
            SELECT hash
            FROM locations
            GROUP BY hash
            HAVING COUNT(*) > 1
            ORDER BY MIN(rowid)
            """
        )
        return [row[0] for row in rows]

    def locations_for(self, sha256_hash: str) -> list[str]:
        """All paths recorded for sha256_hash, in insertion order."""
        rows = self._fetchall(
            "SELECT filepath FROM locations WHERE hash = ? ORDER BY rowid",
            (sha256_hash,),
        )
        return [row[0] for row in rows]

    def duplicate_groups(self) -> list[tuple[str, list[str]]]:
        """(hash, paths) for every hash with 2+ locations."""
        return [(h, self.locations_for(h)) for h in self.duplicate_hashes()]

    def count_hashes(self) -> int:
        return self._fetchall("SELECT COUNT(*) FROM files")[0][0]

    def count_locations(self) -> int:
        return self._fetchall("SELECT COUNT(*) FROM locations")[0][0]

    def _execute(self, sql: str, params: tuple = ()) -> None:
        try:
            self.conn.execute(sql, params)
        except sqlite3.Error as e:
            raise IndexStoreError(f"store statement failed ({sql.split()[0]}): {e}") from e

    def _fetchall(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise IndexStoreError(f"store query failed: {e}") from e
