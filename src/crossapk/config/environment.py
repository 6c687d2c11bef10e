"""Environment resolution: from sparse settings to a full configuration.

The resolver fills every unset path in BuildSettings by asking the Locator
to search the Android SDK and the Crosswalk runtime tree, and checks that
the JDK and Ant executables actually work. Only pieces the user did not set
explicitly are searched for.

Usual SDK locations:
    aapt:          build-tools/19.0.1/aapt (or build-tools/android-4.4/aapt)
    dx:            build-tools/19.0.1/dx
    anttasks.jar:  tools/lib/anttasks.jar (older SDKs: ant-tasks.jar)
    android.jar:   platforms/android-19/android.jar
    zipalign:      tools/zipalign
"""

import asyncio
import dataclasses
import glob
import logging
import os
import re
from typing import Dict, Mapping, Optional

from ..locate import (
    API_LEVEL_TO_ANDROID_VERSION,
    Executable,
    Locator,
    PieceDefinitions,
    PieceQuery,
    ResolvedValue,
    SingleFile,
    make_version_selector,
)
from ..locate.path_matcher import glob_root, strip_trailing_separators
from .build_config import BuildConfiguration, BuildSettings, ConfigurationIncompleteError

logger = logging.getLogger(__name__)


class EnvironmentResolver:
    """Resolves BuildSettings into a BuildConfiguration."""

    def __init__(
        self,
        locator: Optional[Locator] = None,
        definitions: Optional[PieceDefinitions] = None,
        api_versions: Optional[Mapping[int, str]] = None,
    ):
        """Initialize the resolver.

        Args:
            locator: Locator used for all searches and executable checks
            definitions: Crosswalk runtime piece definitions; defaults to
                the bundled definitions
            api_versions: Extra API level -> Android release mappings,
                merged over API_LEVEL_TO_ANDROID_VERSION
        """
        self.locator = locator or Locator()
        self.definitions = definitions or PieceDefinitions.load()
        self.api_versions: Dict[int, str] = {**API_LEVEL_TO_ANDROID_VERSION, **(api_versions or {})}

    async def resolve(self, settings: BuildSettings) -> BuildConfiguration:
        """Locate everything a build needs.

        Args:
            settings: User settings; not modified

        Returns:
            Fully-resolved BuildConfiguration

        Raises:
            ConfigurationIncompleteError: If a distribution root is unset
                or is not a directory, or a value is still missing
            PiecesNotFoundError: If a piece could not be located
            ExecutableCheckError: If a JDK or Ant executable does not work
        """
        missing = settings.unset_fields(["android_sdk_dir", "xwalk_android_dir"])
        if missing:
            raise ConfigurationIncompleteError(
                missing,
                f"Build configuration: {' and '.join(missing)} location must be specified",
            )

        settings = dataclasses.replace(settings)
        settings.android_api_level = await self.detect_api_level(settings)
        logger.info(f"Targeting Android API level {settings.android_api_level}")

        # roots are literal paths, never patterns
        sdk_ok, xwalk_ok = await asyncio.gather(
            self.locator.check_is_directory(glob.escape(settings.android_sdk_dir)),
            self.locator.check_is_directory(glob.escape(settings.xwalk_android_dir)),
        )
        not_dirs = [
            name
            for name, ok in (("android_sdk_dir", sdk_ok), ("xwalk_android_dir", xwalk_ok))
            if not ok
        ]
        if not_dirs:
            raise ConfigurationIncompleteError(
                not_dirs,
                "Build configuration: not a directory: "
                + ", ".join(f"{name}={getattr(settings, name)}" for name in not_dirs),
            )

        android_pieces, xwalk_pieces, _ = await asyncio.gather(
            self._locate(settings.android_sdk_dir, self.android_pieces(settings)),
            self._locate(settings.xwalk_android_dir, self.runtime_pieces(settings)),
            self.check_executables(settings),
        )

        for name, value in {**android_pieces, **xwalk_pieces}.items():
            setattr(settings, name, value)

        return BuildConfiguration.from_settings(settings)

    async def detect_api_level(self, settings: BuildSettings) -> int:
        """Get the API level to target.

        The explicit setting wins; otherwise the highest platforms/android-N
        directory in the SDK; otherwise the highest level in the version table.
        """
        if settings.android_api_level:
            return int(settings.android_api_level)

        pattern = f"{glob_root(settings.android_sdk_dir)}/platforms/android-*/"
        levels = []
        for directory in await self.locator.path_matcher.glob(pattern):
            match = re.match(r"android-(\d+)$", os.path.basename(strip_trailing_separators(directory)))
            if match:
                levels.append(int(match.group(1)))

        if levels:
            return max(levels)

        logger.warning(
            f"No platforms/android-* directories in {settings.android_sdk_dir}; "
            "using the highest known API level"
        )
        return max(self.api_versions)

    def android_pieces(self, settings: BuildSettings) -> Dict[str, PieceQuery]:
        """Android SDK pieces still to be located."""
        level = settings.android_api_level
        android_version = self.api_versions.get(level, str(level))
        build_tools_dirs = (
            os.path.join("build-tools", f"{level}*"),
            os.path.join("build-tools", f"android-{android_version}"),
        )
        select_latest = make_version_selector(self.api_versions)

        pieces: Dict[str, PieceQuery] = {
            "anttasks_jar": SingleFile(
                files=("ant-tasks.jar", "anttasks.jar"),
                guess_dirs=(os.path.join("tools", "lib"),),
            ),
            "android_jar": SingleFile(
                files=("android.jar",),
                guess_dirs=(os.path.join("platforms", f"android-{level}"),),
            ),
            "zipalign": Executable("zipalign", guess_dirs=("tools",)),
            "aapt": Executable("aapt", guess_dirs=build_tools_dirs, tie_break=select_latest),
            "dx": Executable("dx", guess_dirs=build_tools_dirs, tie_break=select_latest),
        }
        return {name: piece for name, piece in pieces.items() if not getattr(settings, name)}

    def runtime_pieces(self, settings: BuildSettings) -> Dict[str, PieceQuery]:
        """Crosswalk runtime pieces still to be located."""
        query = {"arch": settings.arch, "mode": "embedded" if settings.embedded else "shared"}
        pieces = self.definitions.get_pieces_for_query(query)
        return {name: piece for name, piece in pieces.items() if not getattr(settings, name, None)}

    async def check_executables(self, settings: BuildSettings) -> None:
        """Check the JDK and Ant executables run.

        Raises:
            ExecutableCheckError: If any executable fails its check
        """
        await asyncio.gather(
            self.locator.check_executable(settings.java, ["-version"], r"version"),
            self.locator.check_executable(settings.javac, ["-version"]),
            self.locator.check_executable(settings.ant, ["-version"]),
            # jarsigner -help exits 1 on some JDKs even though it works
            self.locator.check_executable(
                settings.jarsigner, ["-help"], r"Usage: jarsigner", ignore_errors=True
            ),
        )

    async def _locate(self, root_dir: str, pieces: Dict[str, PieceQuery]) -> Dict[str, ResolvedValue]:
        if not pieces:
            return {}
        return await self.locator.locate_pieces(root_dir, pieces)

