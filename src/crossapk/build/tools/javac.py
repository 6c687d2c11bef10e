"""javac wrapper."""

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence

from ...command_runner import CommandRunner, join_command
from ...platform_utils import PlatformDetector


def find_java_sources(src_dir: Path) -> List[str]:
    """Get every .java file under a directory, sorted."""
    return sorted(str(path) for path in Path(src_dir).rglob("*.java") if path.is_file())


class JavacWrapper:
    """Compiles Java sources into .class files."""

    def __init__(
        self,
        javac: str,
        source_version: str,
        target_version: str,
        command_runner: CommandRunner,
        platform: Optional[str] = None,
    ):
        """Initialize javac wrapper.

        Args:
            javac: Path to javac
            source_version: Value for -source (e.g. "1.5")
            target_version: Value for -target
            command_runner: Runner for the javac command line
            platform: Host platform; decides the classpath separator
        """
        self.javac = str(javac)
        self.source_version = source_version
        self.target_version = target_version
        self.command_runner = command_runner
        self.platform = platform
        self.classpath_separator = PlatformDetector(platform).classpath_separator

    async def compile(self, classes_dir: str, build_jars: Sequence[str], src_dir: str) -> str:
        """Compile every .java file under src_dir into classes_dir.

        Returns:
            Output of javac
        """
        args = [
            self.javac,
            "-g",
            "-d",
            str(classes_dir),
            "-source",
            self.source_version,
            "-target",
            self.target_version,
            "-Xlint:unchecked",
            "-Xlint:deprecation",
        ]

        if build_jars:
            args.extend(["-classpath", self.classpath_separator.join(str(j) for j in build_jars)])

        args.extend(await asyncio.to_thread(find_java_sources, Path(src_dir)))

        return await self.command_runner.run(
            join_command(args, self.platform),
            f"Compiling Java sources in {src_dir}",
        )
