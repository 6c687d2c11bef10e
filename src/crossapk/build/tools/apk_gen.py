"""Ant wrapper for the Crosswalk apk-package build file."""

import os
import re
from typing import Optional, Sequence

from ...command_runner import CommandRunner, join_command


class ApkGenWrapper:
    """Creates the unsigned apk by running ant on apk-package.xml."""

    def __init__(
        self,
        ant: str,
        android_sdk_dir: str,
        anttasks_jar: str,
        apk_package_ant_file: str,
        command_runner: CommandRunner,
        platform: Optional[str] = None,
    ):
        """Initialize the ant wrapper.

        Args:
            ant: Path to ant
            android_sdk_dir: Android SDK root (ANDROID_SDK_ROOT)
            anttasks_jar: Android SDK anttasks.jar
            apk_package_ant_file: Crosswalk apk-package.xml build file
            command_runner: Runner for the ant command line
            platform: Host platform used for quoting
        """
        self.ant = str(ant)
        self.android_sdk_dir = str(android_sdk_dir)
        self.anttasks_jar = str(anttasks_jar)
        self.apk_package_ant_file = str(apk_package_ant_file)
        self.command_runner = command_runner
        self.platform = platform

    async def package_unsigned(
        self,
        dest_dir: str,
        res_package_apk: str,
        src_dir: str,
        unsigned_apk: str,
        native_libs: Sequence[str] = (),
    ) -> str:
        """Build the unsigned apk from the .ap_ file and classes.dex.

        APK_NAME is the .ap_ path relative to dest_dir without its suffix;
        the ant task appends the suffix and location itself.

        Returns:
            Output of ant
        """
        dest_dir = str(dest_dir)
        apk_name = re.sub(r"\.ap_$", "", os.path.relpath(str(res_package_apk), dest_dir))

        args = [
            self.ant,
            f"-Dbasedir={dest_dir}",
            f"-DANDROID_SDK_ROOT={self.android_sdk_dir}",
            f"-DANT_TASKS_JAR={self.anttasks_jar}",
            f"-DAPK_NAME={apk_name}",
            "-DCONFIGURATION_NAME=Release",
            f"-DOUT_DIR={dest_dir}",
            f"-DSOURCE_DIR={os.path.relpath(str(src_dir), dest_dir)}",
            f"-DUNSIGNED_APK_PATH={unsigned_apk}",
        ]

        for native_lib in native_libs:
            args.append(f"-DNATIVE_LIBS_DIR={os.path.relpath(str(native_lib), dest_dir)}")

        args.extend(["-buildfile", self.apk_package_ant_file])

        return await self.command_runner.run(
            join_command(args, self.platform),
            f"Creating unsigned apk in {unsigned_apk}",
        )
