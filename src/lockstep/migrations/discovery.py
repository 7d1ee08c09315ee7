"""Migration discovery and ordering.

A location is either a directory or a glob pattern.

Directory locations are listed, subdirectories dropped, entries filtered by
extension, and the remaining files ordered by ``compare_names``: files with a
leading number sort numerically (``2-b.sql`` before ``10-a.sql``), any pair
where one side has no leading number sorts lexicographically.

Glob locations are enumerated by the pattern matcher and returned in its
plain lexicographic order. The numeric comparator is deliberately not
applied to glob results, and the pattern replaces the extension filter.
"""

from __future__ import annotations

import functools
import glob
import os
import re
from collections.abc import Iterable
from pathlib import Path

from lockstep.core.errors import DiscoveryError

_LEADING_NUMBER = re.compile(r"^\d+")
_GLOB_MAGIC = re.compile(r"[*?[]")


def leading_number(name: str) -> int | None:
    """Integer value of the leading run of digits in *name*, if any."""
    match = _LEADING_NUMBER.match(name)
    if match is None:
        return None
    return int(match.group())


def compare_names(a: str, b: str) -> int:
    """Order two migration file names.

    Returns a negative number, zero or a positive number like ``cmp``.
    """
    num_a = leading_number(a)
    num_b = leading_number(b)
    if num_a is not None and num_b is not None and num_a != num_b:
        return -1 if num_a < num_b else 1
    # 1-a.sql vs 01-b.sql: equal numbers fall through to the full name
    return (a > b) - (a < b)


def sort_names(names: Iterable[str]) -> list[str]:
    """Sort file names with ``compare_names``."""
    return sorted(names, key=functools.cmp_to_key(compare_names))


def is_glob(location: str) -> bool:
    return _GLOB_MAGIC.search(location) is not None


def list_directory(directory: str | Path, extensions: Iterable[str]) -> list[Path]:
    """Candidate migration files in *directory*, in migration order.

    Raises:
        DiscoveryError: the directory cannot be listed
    """
    directory = Path(directory)
    allowed = set(extensions)
    try:
        with os.scandir(directory) as it:
            names = [
                entry.name
                for entry in it
                if not entry.is_dir() and Path(entry.name).suffix in allowed
            ]
    except OSError as e:
        raise DiscoveryError(
            f"error listing migration directory {str(directory)!r}", cause=e
        ).with_context(location=str(directory)) from e

    return [directory / name for name in sort_names(names)]


def list_glob(pattern: str) -> list[Path]:
    """Files matching *pattern*, in the matcher's lexicographic order.

    Raises:
        DiscoveryError: the pattern is malformed
    """
    try:
        matches = glob.glob(pattern)
    except (re.error, ValueError) as e:
        raise DiscoveryError(
            f"bad migration pattern {pattern!r}", cause=e
        ).with_context(location=pattern) from e

    return [Path(m) for m in sorted(matches) if not os.path.isdir(m)]


def discover(location: str, extensions: Iterable[str]) -> list[Path]:
    """Resolve a configured location to its ordered candidate files.

    Raises:
        DiscoveryError: the location does not exist, cannot be listed, or is
            a malformed pattern
    """
    if os.path.isdir(location):
        return list_directory(location, extensions)
    if is_glob(location):
        return list_glob(location)
    raise DiscoveryError(
        f"migration location {location!r} is neither a directory nor a glob pattern"
    ).with_context(location=location)
