"""Staging layout for one apk build.

All intermediate and output paths of a build are derived from the
application's sanitised name, its Java package and the target architecture:

    <dest_dir>/
    ├── AndroidManifest.xml
    ├── assets/                     # HTML5 app + runtime assets
    ├── classes/                    # javac output
    ├── res/
    ├── src/                        # Java sources + generated R.java
    │   └── org/example/myapp/
    ├── classes.dex                 # dx output
    ├── <name>.<arch>.ap_           # resources-only package
    ├── <name>-unsigned.<arch>.apk
    ├── <name>-signed.<arch>.apk
    └── <name>.<arch>.apk           # final, signed and aligned

A layout is immutable; inputs collected from the build configuration are
attached with with_inputs(), which returns a new layout.
"""

import dataclasses
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from ..locate.pieces import ResolvedResourceBundle

DEFAULT_DEST_DIRNAME = "crossapk-build"


@dataclass(frozen=True)
class StagingLayout:
    """Input and output locations for one apk build."""

    name: str
    package: str
    arch: str
    dest_dir: Path

    classes_dir: Path
    dex_file: Path
    res_package_apk: Path
    unsigned_apk: Path
    signed_apk: Path
    final_apk: Path
    res_dir: Path
    assets_dir: Path
    src_dir: Path
    java_package_dir: Path
    android_manifest: Path

    # jars on the javac classpath
    build_jars: Tuple[str, ...] = ()
    # jars dexed into the apk
    jars: Tuple[str, ...] = ()
    # directories copied into assets/
    assets: Tuple[str, ...] = ()
    native_libs: Tuple[str, ...] = ()
    resources: Mapping[str, ResolvedResourceBundle] = field(default_factory=dict)

    def __post_init__(self):
        # read-only copy so the frozen layout cannot change under a build
        object.__setattr__(self, "resources", MappingProxyType(dict(self.resources)))

    @classmethod
    def create(
        cls, name: str, package: str, arch: str, dest_dir: Optional[Path] = None
    ) -> "StagingLayout":
        """Derive every location from the app name, package and arch.

        Args:
            name: Sanitised application name
            package: Java package of the application
            arch: Target architecture ("x86" or "arm")
            dest_dir: Build directory; defaults to <tmp>/crossapk-build

        Raises:
            ValueError: If name, package or arch is empty
        """
        for label, value in (("name", name), ("package", package), ("arch", arch)):
            if not value or not isinstance(value, str):
                raise ValueError(f"{label} should be a non-empty string")

        if dest_dir is None:
            dest_dir = Path(tempfile.gettempdir()) / DEFAULT_DEST_DIRNAME
        dest_dir = Path(dest_dir).resolve()

        src_dir = dest_dir / "src"
        res_dir = dest_dir / "res"

        return cls(
            name=name,
            package=package,
            arch=arch,
            dest_dir=dest_dir,
            classes_dir=dest_dir / "classes",
            dex_file=dest_dir / "classes.dex",
            res_package_apk=dest_dir / f"{name}.{arch}.ap_",
            unsigned_apk=dest_dir / f"{name}-unsigned.{arch}.apk",
            signed_apk=dest_dir / f"{name}-signed.{arch}.apk",
            final_apk=dest_dir / f"{name}.{arch}.apk",
            res_dir=res_dir,
            assets_dir=dest_dir / "assets",
            src_dir=src_dir,
            java_package_dir=src_dir.joinpath(*package.split(".")),
            android_manifest=dest_dir / "AndroidManifest.xml",
        )

    def with_inputs(
        self,
        build_jars: Tuple[str, ...] = (),
        jars: Tuple[str, ...] = (),
        assets: Tuple[str, ...] = (),
        native_libs: Tuple[str, ...] = (),
        resources: Optional[Mapping[str, ResolvedResourceBundle]] = None,
    ) -> "StagingLayout":
        """Return a copy of this layout with extra inputs appended."""
        return dataclasses.replace(
            self,
            build_jars=self.build_jars + tuple(build_jars),
            jars=self.jars + tuple(jars),
            assets=self.assets + tuple(assets),
            native_libs=self.native_libs + tuple(native_libs),
            resources={**self.resources, **(resources or {})},
        )

    @property
    def directories(self) -> List[Path]:
        """Directories which must exist before the tools run."""
        return [
            self.dest_dir,
            self.classes_dir,
            self.res_dir,
            self.assets_dir,
            self.src_dir,
            self.java_package_dir,
        ]

    def resource_dirs(self) -> List[str]:
        """The app's res/ directory followed by every bundle's directories."""
        dirs = [str(self.res_dir)]
        for bundle in self.resources.values():
            dirs.extend(bundle.all_dirs())
        return dirs

