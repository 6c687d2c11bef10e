"""Filesystem globbing and stat for the Locator.

Glob patterns always use forward slashes, even on Windows; results come
back with OS-specific separators. Blocking filesystem calls run in a worker
thread so that many searches can be in flight at once.
"""

import asyncio
import glob
import os
from enum import Enum
from typing import List


class PathKind(Enum):
    """What a filesystem path refers to."""

    FILE = "file"
    DIRECTORY = "directory"
    MISSING = "missing"


def fix_separators(path: str) -> str:
    """Convert forward slashes into OS-specific path separators."""
    if os.sep != "/":
        return path.replace("/", os.sep)
    return path


def to_glob_path(path: str) -> str:
    """Convert a filesystem path into forward-slash glob syntax."""
    return path.replace("\\", "/")


def strip_trailing_separators(path: str) -> str:
    """Remove any trailing '/' or '\\' characters."""
    return path.rstrip("/\\")


def has_magic(pattern: str) -> bool:
    """Whether a path contains glob wildcards."""
    return glob.has_magic(pattern)


def glob_root(root_dir: str) -> str:
    """Turn a root directory into a pattern prefix matching only itself.

    Wildcard characters in the root (e.g. "sdk[r22]") are escaped so only
    the part of a pattern appended after it is treated as a glob.
    """
    return glob.escape(to_glob_path(strip_trailing_separators(root_dir)))


class PathMatcher:
    """Matches glob patterns and inspects paths on the local filesystem."""

    async def glob(self, pattern: str) -> List[str]:
        """Find paths matching a glob pattern.

        Args:
            pattern: Glob pattern with forward slashes; ``**`` matches any
                number of directories; a trailing '/' matches directories only

        Returns:
            Sorted list of matching paths
        """
        found = await asyncio.to_thread(glob.glob, pattern, recursive=True)
        return sorted(fix_separators(path) for path in found)

    async def stat(self, path: str) -> PathKind:
        """Get the kind of filesystem entry at a path."""
        return await asyncio.to_thread(_path_kind, path)


def _path_kind(path: str) -> PathKind:
    if os.path.isfile(path):
        return PathKind.FILE
    if os.path.isdir(path):
        return PathKind.DIRECTORY
    return PathKind.MISSING
