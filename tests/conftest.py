"""
Shared pytest fixtures for imagesorter.

Provides:
- structlog configured once, to stderr, so stdout only carries the prompt
- the reference duplicate tree (a/x.txt, b/x.txt, c/y.txt)
- scripted user input for the resolution prompt
"""

import hashlib
import sys
from pathlib import Path
from typing import Callable, Iterable

import pytest

# ==========================================
# PYTHONPATH Setup
# ==========================================

repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from imagesorter.config.logging import configure_logging  # noqa: E402
from imagesorter.dedup.index import FingerprintIndex  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Only warnings and errors, on stderr."""
    configure_logging(level="WARNING")
    yield


# ==========================================
# Helpers
# ==========================================


def sha256_of(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def scripted_input(answers: Iterable[str]) -> Callable[[], str]:
    """
    Build an input_func returning answers in order, then EOFError.

    Usage:
        >>> driver = ResolutionDriver(deleter, input_func=scripted_input(["1", "0"]))
    """
    remaining = iter(answers)

    def _input() -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    return _input


# ==========================================
# Fixtures
# ==========================================


@pytest.fixture
def duplicate_tree(tmp_path) -> dict:
    """
    Reference tree.

    Structure:
        root/
            a/x.txt  "hello"  (dup)
            b/x.txt  "hello"  (dup)
            c/y.txt  "world"  (unique)
    """
    root = tmp_path / "root"
    for sub in ("a", "b", "c"):
        (root / sub).mkdir(parents=True)

    (root / "a" / "x.txt").write_bytes(b"hello")
    (root / "b" / "x.txt").write_bytes(b"hello")
    (root / "c" / "y.txt").write_bytes(b"world")

    return {
        "root": root,
        "a": root / "a" / "x.txt",
        "b": root / "b" / "x.txt",
        "c": root / "c" / "y.txt",
        "hash_hello": sha256_of(b"hello"),
        "hash_world": sha256_of(b"world"),
    }


@pytest.fixture
def index():
    """In-memory fingerprint index."""
    idx = FingerprintIndex(":memory:")
    yield idx
    idx.close()
