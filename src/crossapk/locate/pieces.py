"""Piece queries and resolved values for the Locator.

A piece is one named item a build needs from an SDK or runtime tree. Each
query shape is its own frozen dataclass; ``PieceQuery`` is the closed union
of the four shapes and the Locator dispatches on it exhaustively.

Query shapes:
    - SingleFile: candidate file names (most preferred first) + guess dirs
    - Executable: a binary base name; file names depend on the platform
    - DirectoryGroup: one relative directory found anywhere under the root
    - ResourceBundle: resource dirs + library dirs + a Java package name
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..platform_utils import PlatformDetector
from .versions import select_last

TieBreak = Callable[[Sequence[str]], str]


@dataclass(frozen=True)
class SingleFile:
    """A file known by one of several names."""

    files: Tuple[str, ...]
    guess_dirs: Tuple[str, ...] = ()
    tie_break: TieBreak = select_last


@dataclass(frozen=True)
class Executable:
    """A binary whose file name carries a platform-specific suffix."""

    name: str
    guess_dirs: Tuple[str, ...] = ()
    tie_break: TieBreak = select_last


@dataclass(frozen=True)
class DirectoryGroup:
    """A relative directory path to find under the root.

    With ``multiple`` set every match is returned; otherwise ``tie_break``
    picks one of several matches, and without a tie-break several matches
    are an ambiguity failure.
    """

    directory: str
    tie_break: Optional[TieBreak] = None
    multiple: bool = False


@dataclass(frozen=True)
class ResourceBundle:
    """Android resource and library directories sharing one R.java package."""

    res_dirs: Tuple[str, ...]
    libs: Tuple[str, ...]
    package: str


PieceQuery = Union[SingleFile, Executable, DirectoryGroup, ResourceBundle]


@dataclass(frozen=True)
class ResolvedResourceBundle:
    """A ResourceBundle whose directories were all found."""

    res_dirs: Tuple[str, ...]
    libs: Tuple[str, ...]
    package: str

    def all_dirs(self) -> List[str]:
        """Library directories followed by resource directories."""
        return list(self.libs) + list(self.res_dirs)


@dataclass(frozen=True)
class NotFound:
    """Sentinel for a piece that could not be resolved.

    Attributes:
        attempts: Every guess path and search pattern tried, in order
        reason: "missing" or "ambiguous"
        candidates: Matches that made an ambiguous search fail
    """

    attempts: Tuple[str, ...]
    reason: str = "missing"
    candidates: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return "!!!NOT FOUND!!!" if self.reason == "missing" else "!!!AMBIGUOUS!!!"


ResolvedValue = Union[str, List[str], ResolvedResourceBundle, NotFound]


def likely_binary_names(name: str, platform: str) -> List[str]:
    """Create likely names for a binary on a platform, most likely first.

    Args:
        name: Base name of a binary, e.g. "aapt"
        platform: Platform identifier, e.g. "win32" or "linux"

    Returns:
        ["aapt.exe", "aapt.bat", "aapt"] on Windows, ["aapt"] elsewhere
    """
    return PlatformDetector(platform).likely_binary_names(name)
