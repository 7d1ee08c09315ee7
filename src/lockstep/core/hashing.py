"""
Content checksums for migration files.

Each applied migration is recorded with the SHA-256 digest of the exact bytes
that were executed. The digest characterizes the file at apply time; it is
stored in the lock file alongside the path.

Examples:
    >>> file_checksum("db/migrations/00-create-tables.sql")
    '9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08'

Tags:
    hashing, sha256, checksum, lockstep
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from lockstep.core.errors import ChecksumError

CHUNK_SIZE = 64 * 1024


def file_checksum(path: str | Path) -> str:
    """
    Compute the lowercase hex SHA-256 digest of a file's bytes.

    The file is streamed in ``CHUNK_SIZE`` blocks so large seed files do not
    have to fit in memory.

    Args:
        path: File to hash

    Returns:
        64-char lowercase hex string

    Raises:
        ChecksumError: the file cannot be opened or read
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as e:
        raise ChecksumError(
            f"error calculating checksum for migration file {str(path)!r}", cause=e
        ).with_context(filepath=str(path)) from e
    return digest.hexdigest()
