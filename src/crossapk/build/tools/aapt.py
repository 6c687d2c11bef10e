"""aapt wrapper.

Runs the Android Asset Packaging Tool to generate R.java files and to
package the app's resources into an intermediate .ap_ file.
"""

from typing import List, Optional, Sequence

from ...command_runner import CommandRunner, join_command
from ...locate.path_matcher import strip_trailing_separators

# aapt's default minus ".*" and "<dir>_*", which would drop runtime assets
IGNORE_ASSETS = "!.svn:!.git:!CVS:!thumbs.db:!picasa.ini:!*.scc:*~"


class AaptWrapper:
    """Wrapper for the aapt command line tool."""

    def __init__(self, aapt: str, command_runner: CommandRunner, platform: Optional[str] = None):
        self.aapt = str(aapt)
        self.command_runner = command_runner
        self.platform = platform

    def _base_args(
        self,
        android_manifest: str,
        assets_dir: str,
        res_dirs: Sequence[str],
        build_jars: Sequence[str],
    ) -> List[str]:
        args = [
            self.aapt,
            "package",
            "-m",
            "-M",
            str(android_manifest),
            "-A",
            str(assets_dir),
            "-f",
            "--auto-add-overlay",
        ]

        # aapt rejects resource directories with trailing separators
        for res_dir in res_dirs:
            args.extend(["-S", strip_trailing_separators(str(res_dir))])

        for jar in build_jars:
            args.extend(["-I", str(jar)])

        return args

    async def generate_r_java(
        self,
        android_manifest: str,
        assets_dir: str,
        res_dirs: Sequence[str],
        build_jars: Sequence[str],
        src_dir: str,
        package: Optional[str] = None,
    ) -> str:
        """Generate an R.java file under src_dir.

        Args:
            android_manifest: AndroidManifest.xml of the app
            assets_dir: Staged assets directory
            res_dirs: Resource directories, app first
            build_jars: Jars to include (-I)
            src_dir: Base output directory for R.java
            package: Package for R.java; defaults to the manifest's package

        Returns:
            Output of aapt
        """
        args = self._base_args(android_manifest, assets_dir, res_dirs, build_jars)
        if package:
            args.extend(["--custom-package", package])
        args.extend(["-J", str(src_dir)])

        return await self.command_runner.run(join_command(args, self.platform))

    async def package_resources(
        self,
        android_manifest: str,
        assets_dir: str,
        res_dirs: Sequence[str],
        build_jars: Sequence[str],
        res_package_apk: str,
    ) -> str:
        """Package resources and assets into an intermediate .ap_ file.

        Returns:
            Output of aapt
        """
        args = self._base_args(android_manifest, assets_dir, res_dirs, build_jars)
        args.extend(["-F", str(res_package_apk), "--ignore-assets", IGNORE_ASSETS])

        return await self.command_runner.run(
            join_command(args, self.platform),
            f"Packaging resources into {res_package_apk}",
        )
