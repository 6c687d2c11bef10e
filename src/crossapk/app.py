"""HTML5 application definition.

An AppDefinition names the application, its Java package, the directory
holding the HTML5 files to bundle as assets, and a skeleton directory
holding the already-rendered Android project files (AndroidManifest.xml,
res/, src/) to stage alongside them.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

_INVALID_CHARS = re.compile(r"[\\/:*?'\"<>|\-\s!]")


class AppDefinitionError(Exception):
    """Raised when an application definition is invalid."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            "one or more App configuration errors occurred\n" + "\n".join(errors)
        )


def replace_invalid_chars(value: str, keep_periods: bool = False) -> str:
    """Replace characters which are invalid in file and Java names.

    Args:
        value: Name to clean
        keep_periods: Keep '.' characters (for package names)

    Returns:
        value with invalid characters replaced by '_', runs of '_'
        collapsed and a trailing '_' removed
    """
    value = _INVALID_CHARS.sub("_", value)
    if not keep_periods:
        value = value.replace(".", "_")
    value = re.sub(r"_{2,}", "_", value)
    return re.sub(r"_$", "", value)


@dataclass
class AppDefinition:
    """An HTML5 application to package as an apk.

    Attributes:
        name: Display name of the application
        package: Java package, e.g. "org.example.myapp"
        root: Directory containing the HTML5 application
        entry: Entry page relative to root
        skeleton: Directory with AndroidManifest.xml, res/ and src/
        java_src_dirs: Extra Java source directories to compile
        jars: Extra jars for the classpath and the apk
        sanitised_name: File-safe name; derived from name when unset
    """

    name: str
    package: str
    root: Path
    entry: str = "index.html"
    skeleton: Optional[Path] = None
    java_src_dirs: List[Path] = field(default_factory=list)
    jars: List[Path] = field(default_factory=list)
    sanitised_name: Optional[str] = None

    def __post_init__(self):
        self.root = Path(self.root)
        self.skeleton = Path(self.skeleton) if self.skeleton else None
        self.java_src_dirs = [Path(p) for p in self.java_src_dirs]
        self.jars = [Path(p) for p in self.jars]

        errors = self.validate()
        if errors:
            raise AppDefinitionError(errors)

        self.sanitised_name = self.sanitised_name or replace_invalid_chars(self.name)
        self.package = replace_invalid_chars(self.package, keep_periods=True)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "AppDefinition":
        """Create a definition from a mapping of field values."""
        return cls(**values)

    def validate(self) -> List[str]:
        """Check the definition.

        Returns:
            List of error messages; empty if the definition is valid
        """
        errors = []

        if not self.name:
            errors.append("name must be set")

        if not self.package:
            errors.append("package must be set")
        elif not re.search(r".+\..+", self.package):
            errors.append(
                "package must contain at least two character sequences "
                'separated by a period (.) character, e.g. "foo.bar"'
            )
        elif re.search(r"(\.\d|^\d)", self.package):
            errors.append(
                'package must not start with a digit (e.g. "1.org" is BAD) and '
                "must have no sequences where a digit follows a period "
                'character (e.g. "foo.123" is BAD)'
            )

        if self.skeleton is None:
            errors.append("skeleton must be set to a directory containing AndroidManifest.xml")
        elif not (self.skeleton / "AndroidManifest.xml").is_file():
            errors.append(f"skeleton {self.skeleton} does not contain AndroidManifest.xml")

        if not self.root.is_dir():
            errors.append(f"app root {self.root} is not a directory; check root")
        elif not (self.root / self.entry).is_file():
            errors.append(
                f"expected HTML file at {self.entry} does not exist under "
                f"{self.root}; check root and entry"
            )

        return errors
