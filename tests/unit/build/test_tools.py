"""
Unit tests for the external tool wrappers.

Each wrapper is given a mocked CommandRunner; the tests check the command
lines the wrappers build.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from crossapk.build.tools import AaptWrapper, ApkGenWrapper, ApkSignWrapper, DxWrapper, JavacWrapper
from crossapk.build.tools.aapt import IGNORE_ASSETS


@pytest.fixture
def runner():
    mock = AsyncMock()
    mock.run = AsyncMock(return_value="ok")
    return mock


def command_of(runner) -> str:
    return runner.run.await_args.args[0]


class TestAaptWrapper:
    """Test suite for AaptWrapper."""

    def test_generate_r_java(self, runner):
        aapt = AaptWrapper("/sdk/aapt", runner, platform="linux")

        asyncio.run(
            aapt.generate_r_java(
                android_manifest="/b/AndroidManifest.xml",
                assets_dir="/b/assets",
                res_dirs=["/b/res", "/x/libs_res/ui/"],
                build_jars=["/sdk/android.jar", "/x/client.jar"],
                src_dir="/b/src",
            )
        )

        assert command_of(runner) == (
            "/sdk/aapt package -m -M /b/AndroidManifest.xml -A /b/assets -f --auto-add-overlay"
            " -S /b/res -S /x/libs_res/ui -I /sdk/android.jar -I /x/client.jar -J /b/src"
        )

    def test_generate_r_java_custom_package(self, runner):
        aapt = AaptWrapper("aapt", runner, platform="linux")

        asyncio.run(
            aapt.generate_r_java("M.xml", "assets", ["res"], [], "src", package="org.chromium.ui")
        )

        assert command_of(runner).endswith("-S res --custom-package org.chromium.ui -J src")

    def test_package_resources(self, runner):
        aapt = AaptWrapper("aapt", runner, platform="linux")

        asyncio.run(aapt.package_resources("M.xml", "assets", ["res/"], ["a.jar"], "/b/App.x86.ap_"))

        command = command_of(runner)
        assert command.startswith("aapt package -m -M M.xml -A assets -f --auto-add-overlay -S res -I a.jar")
        assert f"-F /b/App.x86.ap_ --ignore-assets '{IGNORE_ASSETS}'" in command
        assert "-J" not in command


class TestJavacWrapper:
    """Test suite for JavacWrapper."""

    def test_compile_all_sources(self, runner, tmp_path):
        src = tmp_path / "src"
        (src / "org" / "x").mkdir(parents=True)
        (src / "org" / "x" / "R.java").write_text("")
        (src / "org" / "x" / "Main.java").write_text("")
        (src / "org" / "x" / "notes.txt").write_text("")
        javac = JavacWrapper("javac", "1.5", "1.5", runner, platform="linux")

        asyncio.run(javac.compile("/b/classes", ["/sdk/android.jar", "/x/client.jar"], str(src)))

        assert command_of(runner) == (
            "javac -g -d /b/classes -source 1.5 -target 1.5 -Xlint:unchecked -Xlint:deprecation"
            f" -classpath /sdk/android.jar:/x/client.jar {src / 'org' / 'x' / 'Main.java'}"
            f" {src / 'org' / 'x' / 'R.java'}"
        )

    def test_windows_classpath_separator(self, runner, tmp_path):
        javac = JavacWrapper("javac.exe", "1.6", "1.6", runner, platform="win32")

        asyncio.run(javac.compile("C:\\b\\classes", ["C:\\a.jar", "C:\\b.jar"], str(tmp_path)))

        assert "-classpath C:\\a.jar;C:\\b.jar" in command_of(runner)

    def test_no_classpath_without_jars(self, runner, tmp_path):
        javac = JavacWrapper("javac", "1.5", "1.5", runner, platform="linux")

        asyncio.run(javac.compile("classes", [], str(tmp_path)))

        assert "-classpath" not in command_of(runner)


class TestDxWrapper:
    """Test suite for DxWrapper."""

    def test_compile(self, runner):
        dx = DxWrapper("/sdk/dx", runner, platform="linux")

        asyncio.run(dx.compile("/b/classes.dex", "/b/classes", ["/x/client.jar", "/x/embedded.jar"]))

        assert command_of(runner) == (
            "/sdk/dx --dex --output /b/classes.dex /b/classes /x/client.jar /x/embedded.jar"
        )


class TestApkGenWrapper:
    """Test suite for ApkGenWrapper."""

    def test_package_unsigned(self, runner):
        ant = ApkGenWrapper("ant", "/sdk", "/sdk/tools/lib/anttasks.jar", "/x/apk-package.xml", runner, "linux")

        asyncio.run(
            ant.package_unsigned(
                dest_dir="/b",
                res_package_apk="/b/App.x86.ap_",
                src_dir="/b/src",
                unsigned_apk="/b/App-unsigned.x86.apk",
                native_libs=["/x/native_libs/x86/libs/"],
            )
        )

        assert command_of(runner) == (
            "ant -Dbasedir=/b -DANDROID_SDK_ROOT=/sdk -DANT_TASKS_JAR=/sdk/tools/lib/anttasks.jar"
            " -DAPK_NAME=App.x86 -DCONFIGURATION_NAME=Release -DOUT_DIR=/b -DSOURCE_DIR=src"
            " -DUNSIGNED_APK_PATH=/b/App-unsigned.x86.apk -DNATIVE_LIBS_DIR=../x/native_libs/x86/libs"
            " -buildfile /x/apk-package.xml"
        )

    def test_quotes_paths_with_spaces(self, runner):
        ant = ApkGenWrapper("ant", "/my sdk", "/my sdk/anttasks.jar", "/x/apk-package.xml", runner, "linux")

        asyncio.run(ant.package_unsigned("/b", "/b/A.x86.ap_", "/b/src", "/b/A-unsigned.x86.apk"))

        assert "'-DANDROID_SDK_ROOT=/my sdk'" in command_of(runner)


class TestApkSignWrapper:
    """Test suite for ApkSignWrapper."""

    @pytest.fixture
    def signer(self, runner):
        return ApkSignWrapper("jarsigner", "zipalign", "/k/debug.keystore", "pw", "alias", runner, "linux")

    def test_sign_copies_then_signs_copy(self, signer, runner, tmp_path):
        unsigned = tmp_path / "A-unsigned.x86.apk"
        signed = tmp_path / "A-signed.x86.apk"
        unsigned.write_bytes(b"unsigned")
        signed.write_bytes(b"stale")

        asyncio.run(signer.sign(str(unsigned), str(signed)))

        assert signed.read_bytes() == b"unsigned"
        assert unsigned.read_bytes() == b"unsigned"
        assert command_of(runner) == (
            "jarsigner -sigalg SHA1withRSA -digestalg SHA1 -keystore /k/debug.keystore"
            f" -storepass pw {signed} alias"
        )

    def test_align(self, signer, runner):
        asyncio.run(signer.align("/b/A-signed.x86.apk", "/b/A.x86.apk"))

        assert command_of(runner) == "zipalign -f 4 /b/A-signed.x86.apk /b/A.x86.apk"

    def test_sign_package_signs_before_aligning(self, signer, runner, tmp_path):
        unsigned = tmp_path / "u.apk"
        unsigned.write_bytes(b"u")

        asyncio.run(signer.sign_package(str(unsigned), str(tmp_path / "s.apk"), str(tmp_path / "f.apk")))

        commands = [call.args[0] for call in runner.run.await_args_list]
        assert commands[0].startswith("jarsigner")
        assert commands[1].startswith("zipalign")

    def test_sign_missing_unsigned_apk(self, signer, tmp_path):
        with pytest.raises(FileNotFoundError):
            asyncio.run(signer.sign(str(tmp_path / "missing.apk"), str(tmp_path / "s.apk")))
