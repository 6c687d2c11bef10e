"""jarsigner and zipalign wrapper."""

import asyncio
import shutil
from pathlib import Path
from typing import Optional

from ...command_runner import CommandRunner, join_command


def _replace_copy(source: Path, dest: Path) -> None:
    if dest.is_file():
        dest.unlink()
    shutil.copyfile(source, dest)


class ApkSignWrapper:
    """Signs an apk with jarsigner and aligns it with zipalign."""

    def __init__(
        self,
        jarsigner: str,
        zipalign: str,
        keystore: str,
        keystore_password: str,
        keystore_alias: str,
        command_runner: CommandRunner,
        platform: Optional[str] = None,
    ):
        self.jarsigner = str(jarsigner)
        self.zipalign = str(zipalign)
        self.keystore = str(keystore)
        self.keystore_password = keystore_password
        self.keystore_alias = keystore_alias
        self.command_runner = command_runner
        self.platform = platform

    async def sign(self, unsigned_apk: str, signed_apk: str) -> str:
        """Copy the unsigned apk to signed_apk and sign the copy in place.

        An existing file at signed_apk is replaced; unsigned_apk is left
        untouched.

        Returns:
            Output of jarsigner
        """
        await asyncio.to_thread(_replace_copy, Path(unsigned_apk), Path(signed_apk))

        args = [
            self.jarsigner,
            "-sigalg",
            "SHA1withRSA",
            "-digestalg",
            "SHA1",
            "-keystore",
            self.keystore,
            "-storepass",
            self.keystore_password,
            str(signed_apk),
            self.keystore_alias,
        ]
        return await self.command_runner.run(
            join_command(args, self.platform), f"Signing {signed_apk}"
        )

    async def align(self, signed_apk: str, final_apk: str) -> str:
        """Align the signed apk at 4-byte boundaries into final_apk."""
        args = [self.zipalign, "-f", "4", str(signed_apk), str(final_apk)]
        return await self.command_runner.run(
            join_command(args, self.platform), f"Aligning {final_apk}"
        )

    async def sign_package(self, unsigned_apk: str, signed_apk: str, final_apk: str) -> str:
        """Sign, then align.

        Returns:
            Output of zipalign
        """
        await self.sign(unsigned_apk, signed_apk)
        return await self.align(signed_apk, final_apk)
