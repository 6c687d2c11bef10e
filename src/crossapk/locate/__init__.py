"""Locating toolchain pieces inside SDK and runtime distribution trees."""

from .locator import ExecutableCheckError, Locator, LocatorError, PiecesNotFoundError
from .path_matcher import PathKind, PathMatcher
from .piece_defs import PieceDefinitionError, PieceDefinitions
from .pieces import (
    DirectoryGroup,
    Executable,
    NotFound,
    PieceQuery,
    ResolvedResourceBundle,
    ResolvedValue,
    ResourceBundle,
    SingleFile,
    likely_binary_names,
)
from .versions import (
    API_LEVEL_TO_ANDROID_VERSION,
    make_version_selector,
    select_last,
    select_latest_version,
)

__all__ = [
    "Locator",
    "LocatorError",
    "PiecesNotFoundError",
    "ExecutableCheckError",
    "PathMatcher",
    "PathKind",
    "PieceDefinitions",
    "PieceDefinitionError",
    "SingleFile",
    "Executable",
    "DirectoryGroup",
    "ResourceBundle",
    "PieceQuery",
    "ResolvedResourceBundle",
    "ResolvedValue",
    "NotFound",
    "likely_binary_names",
    "API_LEVEL_TO_ANDROID_VERSION",
    "select_last",
    "select_latest_version",
    "make_version_selector",
]
