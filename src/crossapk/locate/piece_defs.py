"""Piece definitions loaded from JSON.

A definitions file describes where the pieces of a distribution tree are
likely to be, and under which conditions each piece is needed:

    [
      {
        "criteria": {"arch": ["x86"], "mode": ["embedded"]},
        "pieces": {
          "native_libs": {"directory": "native_libs/x86/libs"},
          "keystore": {"files": ["xwalk-debug.keystore"],
                       "guessDirs": ["scripts/ant"]},
          "xwalk_core_resources": {"resDirs": ["gen/xwalk_core_java/res_grit"],
                                   "libs": ["libs_res/runtime"],
                                   "pkg": "org.xwalk.core"}
        }
      }
    ]

Each criteria value is a list of regexes; a definition applies to a query
when every criteria field has at least one regex matching the query's value
for that field (case-insensitive). A definition without criteria always
applies. Later definitions override earlier ones for the same piece name.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .pieces import DirectoryGroup, Executable, PieceQuery, ResourceBundle, SingleFile

DEFAULT_DEFINITIONS_PATH = Path(__file__).resolve().parent.parent / "assets" / "runtime_pieces.json"


class PieceDefinitionError(Exception):
    """Raised when a piece definitions file is malformed."""

    pass


def _native_path(path: str) -> str:
    # definitions always use forward slashes
    return str(Path(*path.split("/"))) if path else path


def _string_list(raw: Mapping[str, Any], key: str, piece_name: str) -> List[str]:
    value = raw.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PieceDefinitionError(f"Piece '{piece_name}': '{key}' must be a list of strings")
    return value


def piece_from_dict(piece_name: str, raw: Mapping[str, Any]) -> PieceQuery:
    """Convert one raw piece definition into a PieceQuery.

    Raises:
        PieceDefinitionError: If the definition matches no known shape
    """
    if not isinstance(raw, Mapping):
        raise PieceDefinitionError(f"Piece '{piece_name}' must be an object")

    guess_dirs = tuple(_native_path(d) for d in _string_list(raw, "guessDirs", piece_name))

    if "resDirs" in raw:
        if not isinstance(raw.get("pkg"), str):
            raise PieceDefinitionError(f"Piece '{piece_name}': resource bundles need a 'pkg'")
        return ResourceBundle(
            res_dirs=tuple(_native_path(d) for d in _string_list(raw, "resDirs", piece_name)),
            libs=tuple(_native_path(d) for d in _string_list(raw, "libs", piece_name)),
            package=raw["pkg"],
        )
    if "directory" in raw:
        return DirectoryGroup(directory=_native_path(raw["directory"]))
    if "exe" in raw:
        return Executable(name=raw["exe"], guess_dirs=guess_dirs)
    if "files" in raw:
        files = _string_list(raw, "files", piece_name)
        if not files:
            raise PieceDefinitionError(f"Piece '{piece_name}': 'files' must not be empty")
        return SingleFile(files=tuple(files), guess_dirs=guess_dirs)

    raise PieceDefinitionError(
        f"Piece '{piece_name}' needs one of 'files', 'exe', 'directory' or 'resDirs'"
    )


def matches_criterion(valid_regexes: List[str], value: Optional[str]) -> bool:
    """Whether any regex in valid_regexes matches value (case-insensitive)."""
    if value is None:
        return False
    return any(re.search(regex, value, re.IGNORECASE) for regex in valid_regexes)


class PieceDefinitions:
    """A parsed list of piece definitions."""

    def __init__(self, definitions: List[Dict[str, Any]]):
        """Initialize from raw definitions.

        Raises:
            PieceDefinitionError: If the definitions are malformed
        """
        if not isinstance(definitions, list):
            raise PieceDefinitionError("Piece definitions must be a list")

        self._definitions = []
        for index, definition in enumerate(definitions):
            if not isinstance(definition, dict):
                raise PieceDefinitionError(f"Definition {index} must be an object")
            criteria = definition.get("criteria", {})
            if not isinstance(criteria, dict) or not all(
                isinstance(v, list) for v in criteria.values()
            ):
                raise PieceDefinitionError(
                    f"Definition {index}: criteria must map fields to lists of patterns"
                )
            pieces = {
                name: piece_from_dict(name, raw)
                for name, raw in definition.get("pieces", {}).items()
            }
            self._definitions.append((criteria, pieces))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "PieceDefinitions":
        """Load definitions from a JSON file (the bundled file by default).

        Raises:
            PieceDefinitionError: If the file is missing or malformed
        """
        path = path or DEFAULT_DEFINITIONS_PATH
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as e:
            raise PieceDefinitionError(f"Piece definitions not found: {path}") from e
        except json.JSONDecodeError as e:
            raise PieceDefinitionError(f"Failed to parse {path}: {e}") from e
        return cls(raw)

    def get_pieces_for_query(self, query: Mapping[str, str]) -> Dict[str, PieceQuery]:
        """Get the pieces required for a query.

        Args:
            query: Field values to match criteria against,
                e.g. {"arch": "arm", "mode": "embedded"}

        Returns:
            Mapping of piece name to PieceQuery for every applicable definition
        """
        result: Dict[str, PieceQuery] = {}
        for criteria, pieces in self._definitions:
            applies = all(
                matches_criterion(regexes, query.get(field))
                for field, regexes in criteria.items()
            )
            if applies:
                result.update(pieces)
        return result
