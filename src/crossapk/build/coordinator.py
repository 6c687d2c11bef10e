"""
Build coordination for apk builds.

This module runs the external tools in dependency order to turn a staged
application into a signed, aligned apk:

1. Generate R.java for the app and for every runtime resource bundle (aapt)
2. Compile all Java sources (javac)
3. Package resources into an .ap_ file (aapt) and compile classes.dex (dx);
   these two run concurrently
4. Create the unsigned apk (ant with the Crosswalk apk-package.xml)
5. Sign a copy of the unsigned apk (jarsigner), then align it (zipalign)

A stage starts only after every task of the previous stage has succeeded.
When a task fails, its sibling tasks in the same stage are still awaited,
then a BuildError naming the failed stage is raised. Intermediate files are
left in place for diagnosis.

Example usage:
    tools = BuildTools.from_configuration(config, CommandRunner())
    coordinator = BuildCoordinator(tools)
    apk = asyncio.run(coordinator.build(config, layout))
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Tuple

from ..command_runner import CommandRunner
from ..config.build_config import BuildConfiguration
from .layout import StagingLayout
from .tools import AaptWrapper, ApkGenWrapper, ApkSignWrapper, DxWrapper, JavacWrapper

logger = logging.getLogger(__name__)


class BuildStage(Enum):
    """Stages of an apk build, in execution order."""

    RESOURCE_INDEX = "1"
    COMPILE = "2"
    PACKAGE_RESOURCES = "3a"
    DEX = "3b"
    PACKAGE_UNSIGNED = "4"
    SIGN = "5a"
    ALIGN = "5b"

    @property
    def label(self) -> str:
        """Human-readable stage name."""
        return self.name.lower().replace("_", " ")


class BuildError(Exception):
    """Raised when a build stage fails."""

    def __init__(self, stage: BuildStage, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"Build failed at stage {stage.value} ({stage.label}):\n{cause}")


@dataclass
class BuildTools:
    """The tool wrappers used by one build."""

    aapt: AaptWrapper
    javac: JavacWrapper
    dx: DxWrapper
    apk_gen: ApkGenWrapper
    apk_sign: ApkSignWrapper

    @classmethod
    def from_configuration(
        cls,
        config: BuildConfiguration,
        command_runner: CommandRunner,
        platform: Optional[str] = None,
    ) -> "BuildTools":
        """Construct every wrapper from a resolved configuration."""
        return cls(
            aapt=AaptWrapper(config.aapt, command_runner, platform),
            javac=JavacWrapper(
                config.javac,
                config.source_java_version,
                config.target_java_version,
                command_runner,
                platform,
            ),
            dx=DxWrapper(config.dx, command_runner, platform),
            apk_gen=ApkGenWrapper(
                config.ant,
                config.android_sdk_dir,
                config.anttasks_jar,
                config.xwalk_apk_package_ant_file,
                command_runner,
                platform,
            ),
            apk_sign=ApkSignWrapper(
                config.jarsigner,
                config.zipalign,
                config.keystore,
                config.keystore_password,
                config.keystore_alias,
                command_runner,
                platform,
            ),
        )


StageTask = Tuple[BuildStage, Awaitable[str]]


class BuildCoordinator:
    """Runs the apk build stages with a set of tool wrappers."""

    def __init__(
        self,
        tools: BuildTools,
        on_stage: Optional[Callable[[BuildStage], None]] = None,
    ):
        """Initialize the coordinator.

        Args:
            tools: Tool wrappers to run
            on_stage: Called with each stage as it starts
        """
        self.tools = tools
        self.on_stage = on_stage

    async def build(self, config: BuildConfiguration, layout: StagingLayout) -> Path:
        """Build the apk described by a staged layout.

        Args:
            config: Resolved build configuration
            layout: Staging layout with inputs attached

        Returns:
            Path to the final apk

        Raises:
            BuildError: If any stage fails
        """
        logger.info(f"Building {layout.final_apk} for {config.arch}")

        await asyncio.to_thread(self._ensure_directories, layout)

        res_dirs = layout.resource_dirs()
        common = dict(
            android_manifest=str(layout.android_manifest),
            assets_dir=str(layout.assets_dir),
            res_dirs=res_dirs,
            build_jars=list(layout.build_jars),
        )

        # 1: R.java for the app, then one per resource bundle package
        r_java_tasks = [
            (BuildStage.RESOURCE_INDEX, self.tools.aapt.generate_r_java(src_dir=str(layout.src_dir), **common))
        ]
        for bundle in layout.resources.values():
            r_java_tasks.append(
                (
                    BuildStage.RESOURCE_INDEX,
                    self.tools.aapt.generate_r_java(
                        src_dir=str(layout.src_dir), package=bundle.package, **common
                    ),
                )
            )
        await self._run_stage(r_java_tasks)

        # 2
        await self._run_stage(
            [
                (
                    BuildStage.COMPILE,
                    self.tools.javac.compile(
                        str(layout.classes_dir), list(layout.build_jars), str(layout.src_dir)
                    ),
                )
            ]
        )

        # 3a and 3b
        await self._run_stage(
            [
                (
                    BuildStage.PACKAGE_RESOURCES,
                    self.tools.aapt.package_resources(
                        res_package_apk=str(layout.res_package_apk), **common
                    ),
                ),
                (
                    BuildStage.DEX,
                    self.tools.dx.compile(
                        str(layout.dex_file), str(layout.classes_dir), list(layout.jars)
                    ),
                ),
            ]
        )

        # 4
        await self._run_stage(
            [
                (
                    BuildStage.PACKAGE_UNSIGNED,
                    self.tools.apk_gen.package_unsigned(
                        str(layout.dest_dir),
                        str(layout.res_package_apk),
                        str(layout.src_dir),
                        str(layout.unsigned_apk),
                        list(layout.native_libs),
                    ),
                )
            ]
        )

        # 5a then 5b
        await self._run_stage(
            [
                (
                    BuildStage.SIGN,
                    self.tools.apk_sign.sign(str(layout.unsigned_apk), str(layout.signed_apk)),
                )
            ]
        )
        await self._run_stage(
            [
                (
                    BuildStage.ALIGN,
                    self.tools.apk_sign.align(str(layout.signed_apk), str(layout.final_apk)),
                )
            ]
        )

        logger.info(f"Built {layout.final_apk}")
        return Path(layout.final_apk)

    async def _run_stage(self, tasks: List[StageTask]) -> List[str]:
        """Run the tasks of one stage concurrently.

        Every task is awaited even if another fails; the first failure in
        task order is raised as a BuildError.
        """
        announced = []
        for stage, _ in tasks:
            if stage not in announced:
                announced.append(stage)
                logger.debug(f"Starting stage {stage.value} ({stage.label})")
                if self.on_stage:
                    self.on_stage(stage)

        results = await asyncio.gather(*(task for _, task in tasks), return_exceptions=True)

        for (stage, _), result in zip(tasks, results):
            if isinstance(result, Exception):
                raise BuildError(stage, result) from result
            if isinstance(result, BaseException):
                raise result

        return results

    @staticmethod
    def _ensure_directories(layout: StagingLayout) -> None:
        for directory in layout.directories:
            directory.mkdir(parents=True, exist_ok=True)
