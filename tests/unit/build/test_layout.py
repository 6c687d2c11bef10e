"""
Unit tests for StagingLayout.
"""

import tempfile
from pathlib import Path

import pytest

from crossapk.build import StagingLayout
from crossapk.locate import ResolvedResourceBundle


class TestStagingLayout:
    """Test suite for StagingLayout."""

    def test_derived_paths(self, tmp_path):
        layout = StagingLayout.create("MyApp", "org.example.myapp", "arm", tmp_path)
        dest = tmp_path.resolve()

        assert layout.dest_dir == dest
        assert layout.classes_dir == dest / "classes"
        assert layout.dex_file == dest / "classes.dex"
        assert layout.res_package_apk == dest / "MyApp.arm.ap_"
        assert layout.unsigned_apk == dest / "MyApp-unsigned.arm.apk"
        assert layout.signed_apk == dest / "MyApp-signed.arm.apk"
        assert layout.final_apk == dest / "MyApp.arm.apk"
        assert layout.res_dir == dest / "res"
        assert layout.assets_dir == dest / "assets"
        assert layout.src_dir == dest / "src"
        assert layout.java_package_dir == dest / "src" / "org" / "example" / "myapp"
        assert layout.android_manifest == dest / "AndroidManifest.xml"

    def test_default_dest_dir(self):
        layout = StagingLayout.create("MyApp", "a.b", "x86")
        assert layout.dest_dir == (Path(tempfile.gettempdir()) / "crossapk-build").resolve()

    @pytest.mark.parametrize("name, package, arch", [("", "a.b", "x86"), ("A", "", "x86"), ("A", "a.b", "")])
    def test_empty_values_rejected(self, name, package, arch):
        with pytest.raises(ValueError, match="non-empty string"):
            StagingLayout.create(name, package, arch)

    def test_with_inputs_returns_new_layout(self, tmp_path):
        layout = StagingLayout.create("A", "a.b", "x86", tmp_path)
        bundle = ResolvedResourceBundle(res_dirs=("/r/res/",), libs=("/r/lib/",), package="org.r")

        extended = layout.with_inputs(
            build_jars=("android.jar",),
            jars=("client.jar",),
            assets=("/x/assets/",),
            native_libs=("/x/libs/",),
            resources={"core": bundle},
        )
        extended = extended.with_inputs(jars=("extra.jar",))

        assert layout.jars == ()
        assert layout.resources == {}
        assert extended.build_jars == ("android.jar",)
        assert extended.jars == ("client.jar", "extra.jar")
        assert extended.assets == ("/x/assets/",)
        assert extended.native_libs == ("/x/libs/",)
        assert extended.resources == {"core": bundle}

    def test_resource_dirs(self, tmp_path):
        bundle = ResolvedResourceBundle(res_dirs=("/r/res/",), libs=("/r/lib/",), package="org.r")
        layout = StagingLayout.create("A", "a.b", "x86", tmp_path).with_inputs(resources={"core": bundle})

        assert layout.resource_dirs() == [str(layout.res_dir), "/r/lib/", "/r/res/"]


    def test_resources_are_read_only(self, tmp_path):
        bundle = ResolvedResourceBundle(res_dirs=("/r/res/",), libs=("/r/lib/",), package="org.r")
        given = {"core": bundle}
        layout = StagingLayout.create("A", "a.b", "x86", tmp_path).with_inputs(resources=given)
        given["other"] = bundle

        with pytest.raises(TypeError):
            layout.resources["other"] = bundle
        assert list(layout.resources) == ["core"]
        assert StagingLayout.create("A", "a.b", "x86", tmp_path).resources == {}
