"""dx wrapper."""

from typing import Optional, Sequence

from ...command_runner import CommandRunner, join_command


class DxWrapper:
    """Converts .class files and jars into a classes.dex file."""

    def __init__(self, dx: str, command_runner: CommandRunner, platform: Optional[str] = None):
        self.dx = str(dx)
        self.command_runner = command_runner
        self.platform = platform

    async def compile(self, dex_file: str, classes_dir: str, jars: Sequence[str]) -> str:
        """Compile classes_dir plus jars to dex_file.

        Returns:
            Output of dx
        """
        args = [self.dx, "--dex", "--output", str(dex_file), str(classes_dir)]
        args.extend(str(jar) for jar in jars)

        return await self.command_runner.run(
            join_command(args, self.platform),
            f"Compiling .class files with dx to generate .dex file in {dex_file}",
        )
