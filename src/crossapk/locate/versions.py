"""Version-aware tie-breaks for Locator searches.

SDK tool directories are usually versioned (``build-tools/19.0.1``), but
some distributions name them after the Android release instead
(``build-tools/android-4.4``). The lookup table below maps API levels to
Android releases so both conventions sort on one scale: ``android-4.4`` is
treated as ``19.0.0``.
"""

import os
import re
from typing import Callable, Dict, Mapping, Sequence, Tuple

# Android API level -> Android release version
API_LEVEL_TO_ANDROID_VERSION: Dict[int, str] = {
    19: "4.4",  # kitkat
    18: "4.3",  # jelly bean MR2
    17: "4.2",  # jelly bean MR1
    16: "4.1",  # jelly bean
    15: "4.0.3",  # ice cream sandwich MR1
    14: "4.0",  # ice cream sandwich
}

_ANDROID_DIR_PATTERN = re.compile(r"^android-(.+)$")


def select_last(paths: Sequence[str]) -> str:
    """Pick the lexicographically last path."""
    if not paths:
        raise ValueError("cannot select from an empty list of paths")
    return sorted(paths)[-1]


def parent_dir_version(path: str, versions: Mapping[int, str] = API_LEVEL_TO_ANDROID_VERSION) -> str:
    """Get the version string encoded in a path's parent directory name.

    Args:
        path: Path to a file inside a versioned directory
        versions: API level -> Android release table

    Returns:
        The parent directory name; ``android-<release>`` names are mapped
        to ``<api level>.0.0`` when the release is in the table
    """
    parent = os.path.basename(os.path.dirname(path.replace("\\", "/").rstrip("/")))
    match = _ANDROID_DIR_PATTERN.match(parent)
    if match:
        release = match.group(1)
        for api_level, android_version in versions.items():
            if android_version == release:
                return f"{api_level}.0.0"
    return parent


def version_key(version: str) -> Tuple[int, ...]:
    """Convert a dotted version string to a tuple of its numeric parts."""
    return tuple(int(part) for part in re.findall(r"\d+", version))


def make_version_selector(
    versions: Mapping[int, str] = API_LEVEL_TO_ANDROID_VERSION,
) -> Callable[[Sequence[str]], str]:
    """Build a tie-break which picks the path with the highest version.

    Args:
        versions: API level -> Android release table used to interpret
            ``android-<release>`` directory names

    Returns:
        Function choosing one path from a non-empty sequence
    """

    def select(paths: Sequence[str]) -> str:
        if not paths:
            raise ValueError("cannot select from an empty list of paths")
        return max(paths, key=lambda p: (version_key(parent_dir_version(p, versions)), p))

    return select


select_latest_version = make_version_selector()
