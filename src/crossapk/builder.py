"""
Apk building for crossapk projects.

This module ties the build together:
- Environment resolution (Android SDK, Crosswalk runtime, JDK, Ant)
- Staging layout derivation and application staging
- Build coordination (aapt, javac, dx, ant, jarsigner, zipalign)

Example usage:
    builder = ApkBuilder(settings, verbose=True)
    result = asyncio.run(builder.build(app, dest_dir=Path("build")))
    if result.success:
        print(f"Apk: {result.apk_path}")
"""

import asyncio
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

from .app import AppDefinition
from .build import AppStager, BuildCoordinator, BuildError, BuildStage, BuildTools, StagingError
from .build.layout import StagingLayout
from .command_runner import CommandRunner
from .config import BuildConfiguration, BuildSettings, ConfigurationIncompleteError, EnvironmentResolver
from .locate import Locator, LocatorError, PieceDefinitions

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a complete apk build."""

    success: bool
    apk_path: Optional[Path]
    build_time: float
    message: str
    stage: Optional[BuildStage] = None


class ApkBuilder:
    """
    Builds an apk for an HTML5 app with the Crosswalk runtime.

    The builder:
    1. Resolves the build environment from the settings
    2. Derives the staging layout for the app and architecture
    3. Attaches runtime jars, assets, native libraries and resources
    4. Stages the app files
    5. Runs the build stages
    """

    def __init__(
        self,
        settings: BuildSettings,
        command_runner: Optional[CommandRunner] = None,
        locator: Optional[Locator] = None,
        verbose: bool = False,
        definitions: Optional[PieceDefinitions] = None,
        api_versions: Optional[Mapping[int, str]] = None,
        on_stage: Optional[Callable[[BuildStage], None]] = None,
    ):
        """
        Initialize the builder.

        Args:
            settings: Build settings; unset paths are located
            command_runner: Runner for every external command
            locator: Locator for SDK and runtime pieces
            verbose: Log every command line
            definitions: Crosswalk runtime piece definitions
            api_versions: Extra API level -> Android release mappings
            on_stage: Called with each build stage as it starts
        """
        self.settings = settings
        self.verbose = verbose
        self.command_runner = command_runner or CommandRunner(verbose=verbose)
        self.locator = locator or Locator(command_runner=self.command_runner)
        self.resolver = EnvironmentResolver(self.locator, definitions, api_versions)
        self.on_stage = on_stage

    async def resolve(self) -> BuildConfiguration:
        """Resolve the build environment."""
        return await self.resolver.resolve(self.settings)

    def create_layout(
        self, app: AppDefinition, config: BuildConfiguration, dest_dir: Optional[Path] = None
    ) -> StagingLayout:
        """Derive the layout for an app and attach the build inputs."""
        layout = StagingLayout.create(app.sanitised_name, app.package, config.arch, dest_dir)
        app_jars = tuple(str(jar) for jar in app.jars)

        layout = layout.with_inputs(
            build_jars=tuple(config.build_jars) + app_jars,
            jars=tuple(config.bundled_jars) + app_jars,
        )

        if config.embedded:
            layout = layout.with_inputs(
                assets=(config.xwalk_assets,),
                native_libs=(config.native_libs,),
                resources=config.resources,
            )

        return layout

    async def build(
        self, app: AppDefinition, dest_dir: Optional[Path] = None, clean: bool = False
    ) -> BuildResult:
        """
        Build an apk for an app.

        Args:
            app: Validated application definition
            dest_dir: Build directory; defaults to <tmp>/crossapk-build
            clean: Remove the build directory before staging

        Returns:
            BuildResult; configuration, location, staging and tool failures
            produce an unsuccessful result
        """
        start_time = time.time()

        try:
            config = await self.resolve()
            layout = self.create_layout(app, config, dest_dir)

            if clean and layout.dest_dir.exists():
                logger.info(f"Cleaning {layout.dest_dir}")
                await asyncio.to_thread(shutil.rmtree, layout.dest_dir)

            await asyncio.to_thread(AppStager(self.verbose).stage, app, layout)

            tools = BuildTools.from_configuration(
                config, self.command_runner, self.locator.platform.platform
            )
            coordinator = BuildCoordinator(tools, on_stage=self.on_stage)
            apk_path = await coordinator.build(config, layout)

        except BuildError as e:
            logger.error(f"Build failed at stage {e.stage.value}")
            return BuildResult(
                success=False,
                apk_path=None,
                build_time=time.time() - start_time,
                message=str(e),
                stage=e.stage,
            )
        except (ConfigurationIncompleteError, LocatorError, StagingError) as e:
            logger.error(f"Build could not start: {e}")
            return BuildResult(
                success=False,
                apk_path=None,
                build_time=time.time() - start_time,
                message=str(e),
            )

        build_time = time.time() - start_time
        return BuildResult(
            success=True,
            apk_path=apk_path,
            build_time=build_time,
            message=f"Built {apk_path} in {build_time:.2f}s",
        )
