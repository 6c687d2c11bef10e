"""
Pytest configuration for the crossapk test suite.

This configuration enables the --full flag to run integration tests, which
need a real Android SDK, JDK, Ant and Crosswalk runtime.
"""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite including integration tests (slow)",
    )


def pytest_configure(config):
    """Configure pytest based on command-line options."""
    if config.getoption("--full"):
        # Remove the default marker expression that excludes integration tests
        markexpr = config.getoption("-m", "")
        if markexpr == "not integration":
            # Clear the marker expression to run all tests
            config.option.markexpr = ""


@pytest.fixture
def fake_sdk(tmp_path):
    """Create a fake Android SDK tree with the usual layout."""
    sdk = tmp_path / "android-sdk"
    files = [
        "tools/lib/anttasks.jar",
        "tools/zipalign",
        "platforms/android-19/android.jar",
        "build-tools/19.0.0/aapt",
        "build-tools/19.0.0/dx",
        "build-tools/19.0.1/aapt",
        "build-tools/19.0.1/dx",
    ]
    for name in files:
        path = sdk / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")
    return sdk


@pytest.fixture
def fake_xwalk(tmp_path):
    """Create a fake Crosswalk xwalk_app_template tree for embedded x86 builds."""
    xwalk = tmp_path / "xwalk_app_template"
    files = [
        "libs/xwalk_app_runtime_java.jar",
        "libs/xwalk_core_embedded.dex.jar",
        "scripts/ant/apk-package.xml",
        "scripts/ant/xwalk-debug.keystore",
        "native_libs_res/icudtl.dat",
        "native_libs/x86/libs/x86/libxwalkcore.so",
        "native_libs/armeabi-v7a/libs/armeabi-v7a/libxwalkcore.so",
        "gen/xwalk_core_java/res_grit/values/strings.xml",
        "libs_res/runtime/values/strings.xml",
        "gen/ui_java/res_crunched/drawable/ic.png",
        "gen/ui_java/res_v14_compatibility/values/styles.xml",
        "gen/ui_java/res_grit/values/strings.xml",
        "libs_res/ui/values/strings.xml",
        "gen/content_java/res_crunched/drawable/ic.png",
        "gen/content_java/res_v14_compatibility/values/styles.xml",
        "gen/content_java/res_grit/values/strings.xml",
        "libs_res/content/values/strings.xml",
    ]
    for name in files:
        path = xwalk / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")
    return xwalk
