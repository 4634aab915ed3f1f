"""
Chunked SHA256 content fingerprinting.

A file is read chunk_size bytes at a time; its handle lives only for the
duration of hash_file. Read failures are fatal for the run.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO, Union

from imagesorter.config.exceptions import ScanError

DEFAULT_CHUNK_SIZE = 65536


def hash_stream(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """
    Compute SHA256 of a byte stream without loading it whole.

    Args:
        stream: Readable binary stream, consumed to EOF
        chunk_size: Bytes per read

    Returns:
        Lowercase hex digest
    """
    sha256 = hashlib.sha256()
    while chunk := stream.read(chunk_size):
        sha256.update(chunk)
    return sha256.hexdigest()


def hash_file(file_path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """
    Compute SHA256 of a file.

    Raises:
        ScanError: the file cannot be opened or read to completion
    """
    try:
        with open(file_path, "rb") as f:
            return hash_stream(f, chunk_size)
    except OSError as e:
        raise ScanError(f"cannot hash {file_path}: {e}") from e
