"""
Unit tests for TreeWalker.

Tests:
- Completeness: one Location per file, any depth
- Deterministic name order
- Index receives record_hash / record_location
- Fail-fast on listing and read errors
- Progress callback
"""

import os
from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from imagesorter.config.exceptions import ScanError
from imagesorter.dedup.walker import TreeWalker
from tests.conftest import sha256_of


@pytest.fixture
def recorder():
    return MagicMock()


@pytest.fixture
def walker(recorder):
    return TreeWalker(index=recorder)


class TestWalkCompleteness:
    def test_reference_tree(self, walker, duplicate_tree):
        locations = list(walker.walk(duplicate_tree["root"]))

        assert len(locations) == 3
        assert {loc.file_path for loc in locations} == {
            duplicate_tree["a"],
            duplicate_tree["b"],
            duplicate_tree["c"],
        }

    def test_deep_nesting(self, walker, tmp_path):
        """Nested directories are walked to any depth."""
        deep = tmp_path
        for i in range(60):
            deep = deep / f"d{i}"
        deep.mkdir(parents=True)
        (deep / "bottom.txt").write_bytes(b"deep")
        (tmp_path / "top.txt").write_bytes(b"top")

        paths = [loc.file_path for loc in walker.walk(tmp_path)]

        assert sorted(paths) == sorted([deep / "bottom.txt", tmp_path / "top.txt"])

    def test_n_files_n_locations(self, walker, tmp_path):
        expected = set()
        for i in range(5):
            sub = tmp_path / f"dir{i}" / "inner"
            sub.mkdir(parents=True)
            for j in range(3):
                f = sub / f"file{j}.dat"
                f.write_bytes(f"{i}-{j}".encode())
                expected.add(f)

        locations = list(walker.walk(tmp_path))

        assert len(locations) == 15
        assert {loc.file_path for loc in locations} == expected

    def test_hashes_match_content(self, walker, duplicate_tree):
        by_path = {loc.file_path: loc.sha256_hash for loc in walker.walk(duplicate_tree["root"])}

        assert by_path[duplicate_tree["a"]] == duplicate_tree["hash_hello"]
        assert by_path[duplicate_tree["b"]] == duplicate_tree["hash_hello"]
        assert by_path[duplicate_tree["c"]] == duplicate_tree["hash_world"]

    def test_empty_directory(self, walker, tmp_path):
        assert list(walker.walk(tmp_path)) == []

    def test_empty_files_are_included(self, walker, tmp_path):
        (tmp_path / "empty1").write_bytes(b"")
        (tmp_path / "empty2").write_bytes(b"")

        locations = list(walker.walk(tmp_path))

        assert len(locations) == 2
        assert {loc.sha256_hash for loc in locations} == {sha256_of(b"")}

    def test_depth_first_name_order(self, walker, tmp_path):
        (tmp_path / "b").mkdir()
        (tmp_path / "a").mkdir()
        (tmp_path / "b" / "2.txt").write_bytes(b"b2")
        (tmp_path / "a" / "1.txt").write_bytes(b"a1")
        (tmp_path / "c.txt").write_bytes(b"c")

        names = [loc.file_path.relative_to(tmp_path).as_posix() for loc in walker.walk(tmp_path)]

        assert names == ["a/1.txt", "b/2.txt", "c.txt"]

    def test_relative_root_gives_relative_paths(self, walker, duplicate_tree, monkeypatch):
        monkeypatch.chdir(duplicate_tree["root"].parent)

        paths = {loc.file_path for loc in walker.walk("root")}

        assert paths == {Path("root/a/x.txt"), Path("root/b/x.txt"), Path("root/c/y.txt")}


class TestScanRecordsIntoIndex:
    def test_records_hash_then_location(self, walker, recorder, tmp_path):
        f = tmp_path / "only.txt"
        f.write_bytes(b"hello")

        stats = walker.scan(tmp_path)

        assert recorder.mock_calls == [
            call.record_hash(sha256_of(b"hello")),
            call.record_location(sha256_of(b"hello"), f),
        ]
        assert stats.total_scanned == 1

    def test_stats(self, walker, duplicate_tree):
        stats = walker.scan(duplicate_tree["root"])

        assert stats.total_scanned == 3
        assert stats.distinct_hashes == 2
        assert stats.total_directories == 4  # root + a, b, c

    def test_progress_callback_every_100_files(self, recorder, tmp_path):
        for i in range(250):
            (tmp_path / f"file_{i:03}.txt").write_bytes(f"content {i}".encode())

        seen = []
        walker = TreeWalker(index=recorder, progress_callback=lambda s: seen.append(s.total_scanned))
        walker.scan(tmp_path)

        assert seen == [100, 200]


class TestFailFast:
    def test_missing_root(self, walker, tmp_path):
        with pytest.raises(ScanError, match="cannot list"):
            list(walker.walk(tmp_path / "does-not-exist"))

    def test_root_is_a_file(self, walker, tmp_path):
        f = tmp_path / "file.txt"
        f.write_bytes(b"x")

        with pytest.raises(ScanError):
            list(walker.walk(f))

    def test_unreadable_file_aborts_scan(self, walker, recorder, duplicate_tree):
        """No silent skip: the first read error stops everything."""
        with patch(
            "imagesorter.dedup.walker.hash_file",
            side_effect=ScanError("cannot hash: permission denied"),
        ):
            with pytest.raises(ScanError, match="permission denied"):
                walker.scan(duplicate_tree["root"])

        recorder.record_location.assert_not_called()

    def test_unlistable_subdirectory_aborts(self, walker, duplicate_tree):
        real_scandir = os.scandir

        def failing_scandir(path):
            if str(path).endswith(os.sep + "b"):
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        with patch("imagesorter.dedup.walker.os.scandir", side_effect=failing_scandir):
            with pytest.raises(ScanError, match="Permission denied"):
                list(walker.walk(duplicate_tree["root"]))

    def test_symlink_to_directory_is_fatal(self, walker, tmp_path):
        """Symlinks are not descended; a link to a directory is not a regular file."""
        target = tmp_path / "target"
        target.mkdir()
        (target / "f.txt").write_bytes(b"x")
        try:
            (tmp_path / "link").symlink_to(target, target_is_directory=True)
        except OSError:
            pytest.skip("Symlinks not supported on this platform")

        with pytest.raises(ScanError):
            list(walker.walk(tmp_path))

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="os.mkfifo not available")
    def test_fifo_is_fatal(self, walker, recorder, tmp_path):
        """A named pipe aborts the walk instead of blocking on open()."""
        (tmp_path / "a.txt").write_bytes(b"regular")
        os.mkfifo(tmp_path / "pipe")

        with pytest.raises(ScanError, match="not a regular file"):
            walker.scan(tmp_path)

        recorder.record_location.assert_called_once()

    def test_symlink_to_file_is_hashed(self, walker, tmp_path):
        target = tmp_path / "target.txt"
        target.write_bytes(b"linked")
        try:
            (tmp_path / "link.txt").symlink_to(target)
        except OSError:
            pytest.skip("Symlinks not supported on this platform")

        locations = list(walker.walk(tmp_path))

        assert [loc.file_path.name for loc in locations] == ["link.txt", "target.txt"]
        assert {loc.sha256_hash for loc in locations} == {sha256_of(b"linked")}
