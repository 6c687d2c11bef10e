"""
Unit tests for AppStager.
"""

import pytest

from crossapk.app import AppDefinition
from crossapk.build import AppStager, StagingError, StagingLayout
from crossapk.build.stager import copy_contents, prepare_directory


@pytest.fixture
def app(tmp_path):
    root = tmp_path / "www"
    (root / "js").mkdir(parents=True)
    (root / "index.html").write_text("<html></html>")
    (root / "js" / "app.js").write_text("void 0;")

    skeleton = tmp_path / "skeleton"
    (skeleton / "res" / "values").mkdir(parents=True)
    (skeleton / "src" / "org" / "example" / "hello").mkdir(parents=True)
    (skeleton / "AndroidManifest.xml").write_text("<manifest package='org.example.hello'/>")
    (skeleton / "res" / "values" / "strings.xml").write_text("<resources/>")
    (skeleton / "src" / "org" / "example" / "hello" / "HelloActivity.java").write_text("class A {}")

    return AppDefinition(name="Hello", package="org.example.hello", root=root, skeleton=skeleton)


@pytest.fixture
def layout(tmp_path):
    return StagingLayout.create("Hello", "org.example.hello", "x86", tmp_path / "build")


class TestAppStager:
    """Test suite for AppStager."""

    def test_stage_copies_skeleton_and_app(self, app, layout):
        AppStager().stage(app, layout)

        assert layout.android_manifest.read_text() == "<manifest package='org.example.hello'/>"
        assert (layout.res_dir / "values" / "strings.xml").is_file()
        assert (layout.java_package_dir / "HelloActivity.java").is_file()
        assert (layout.assets_dir / "index.html").is_file()
        assert (layout.assets_dir / "js" / "app.js").read_text() == "void 0;"
        assert layout.classes_dir.is_dir()

    def test_stage_runtime_assets_and_java_sources(self, app, layout, tmp_path):
        runtime_assets = tmp_path / "xwalk_assets"
        runtime_assets.mkdir()
        (runtime_assets / "icudtl.dat").write_bytes(b"\x00")
        java_src = tmp_path / "extra_src"
        (java_src / "org" / "extra").mkdir(parents=True)
        (java_src / "org" / "extra" / "Extra.java").write_text("class Extra {}")
        app.java_src_dirs = [java_src]
        layout = layout.with_inputs(assets=(str(runtime_assets) + "/",))

        AppStager(verbose=True).stage(app, layout)

        assert (layout.assets_dir / "icudtl.dat").read_bytes() == b"\x00"
        assert (layout.src_dir / "org" / "extra" / "Extra.java").is_file()
        assert (layout.java_package_dir / "HelloActivity.java").is_file()

    def test_stage_twice_overwrites(self, app, layout):
        stager = AppStager()
        stager.stage(app, layout)
        (app.root / "index.html").write_text("<html>v2</html>")

        stager.stage(app, layout)

        assert (layout.assets_dir / "index.html").read_text() == "<html>v2</html>"

    def test_missing_java_source_dir(self, app, layout, tmp_path):
        app.java_src_dirs = [tmp_path / "nope"]

        with pytest.raises(StagingError, match="Directory of Java sources does not exist"):
            AppStager().stage(app, layout)

    def test_directory_path_is_a_file(self, app, layout):
        layout.dest_dir.mkdir(parents=True)
        layout.classes_dir.write_text("")

        with pytest.raises(StagingError, match="already exists and is a file"):
            AppStager().stage(app, layout)


class TestStagingHelpers:
    """Test suite for the staging helper functions."""

    def test_prepare_directory_creates_parents(self, tmp_path):
        target = tmp_path / "a" / "b"
        prepare_directory(target)
        prepare_directory(target)
        assert target.is_dir()

    def test_copy_contents_merges(self, tmp_path):
        source = tmp_path / "source"
        (source / "sub").mkdir(parents=True)
        (source / "sub" / "new.txt").write_text("new")
        dest = tmp_path / "dest"
        (dest / "sub").mkdir(parents=True)
        (dest / "sub" / "old.txt").write_text("old")

        copy_contents(source, dest)

        assert (dest / "sub" / "old.txt").read_text() == "old"
        assert (dest / "sub" / "new.txt").read_text() == "new"
