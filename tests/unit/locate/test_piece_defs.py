"""
Unit tests for piece definitions.
"""

import json
import os

import pytest

from crossapk.locate import DirectoryGroup, Executable, ResourceBundle, SingleFile
from crossapk.locate.piece_defs import (
    PieceDefinitionError,
    PieceDefinitions,
    matches_criterion,
    piece_from_dict,
)


class TestPieceFromDict:
    """Test suite for piece_from_dict."""

    def test_single_file(self):
        piece = piece_from_dict("keystore", {"files": ["a.keystore"], "guessDirs": ["scripts/ant"]})
        assert piece == SingleFile(files=("a.keystore",), guess_dirs=(os.path.join("scripts", "ant"),))

    def test_executable(self):
        piece = piece_from_dict("aapt", {"exe": "aapt", "guessDirs": ["build-tools"]})
        assert piece == Executable(name="aapt", guess_dirs=("build-tools",))

    def test_directory(self):
        piece = piece_from_dict("native_libs", {"directory": "native_libs/x86/libs"})
        assert piece == DirectoryGroup(directory=os.path.join("native_libs", "x86", "libs"))

    def test_resource_bundle(self):
        piece = piece_from_dict(
            "ui", {"resDirs": ["gen/ui_java/res_grit"], "libs": ["libs_res/ui"], "pkg": "org.chromium.ui"}
        )
        assert isinstance(piece, ResourceBundle)
        assert piece.package == "org.chromium.ui"
        assert piece.res_dirs == (os.path.join("gen", "ui_java", "res_grit"),)
        assert piece.libs == (os.path.join("libs_res", "ui"),)

    def test_resource_bundle_needs_package(self):
        with pytest.raises(PieceDefinitionError, match="pkg"):
            piece_from_dict("ui", {"resDirs": ["res"]})

    def test_unknown_shape(self):
        with pytest.raises(PieceDefinitionError):
            piece_from_dict("thing", {"guessDirs": ["x"]})

    def test_empty_files(self):
        with pytest.raises(PieceDefinitionError):
            piece_from_dict("thing", {"files": []})


class TestMatchesCriterion:
    """Test suite for matches_criterion."""

    def test_case_insensitive(self):
        assert matches_criterion(["^x86$"], "X86")

    def test_any_regex_matches(self):
        assert matches_criterion(["^x86$", "^arm"], "armeabi-v7a")

    def test_missing_value(self):
        assert not matches_criterion(["^x86$"], None)


class TestPieceDefinitions:
    """Test suite for PieceDefinitions."""

    @pytest.fixture
    def definitions(self):
        return PieceDefinitions.load()

    def test_embedded_x86_pieces(self, definitions):
        pieces = definitions.get_pieces_for_query({"arch": "x86", "mode": "embedded"})

        assert set(pieces) == {
            "xwalk_runtime_client_jar",
            "xwalk_apk_package_ant_file",
            "keystore",
            "xwalk_embedded_jar",
            "xwalk_assets",
            "xwalk_core_resources",
            "chromium_ui_resources",
            "chromium_content_resources",
            "native_libs",
        }
        assert pieces["native_libs"] == DirectoryGroup(os.path.join("native_libs", "x86", "libs"))

    def test_embedded_arm_native_libs(self, definitions):
        pieces = definitions.get_pieces_for_query({"arch": "arm", "mode": "embedded"})
        assert pieces["native_libs"] == DirectoryGroup(os.path.join("native_libs", "armeabi-v7a", "libs"))

    def test_shared_mode_has_no_embedded_pieces(self, definitions):
        pieces = definitions.get_pieces_for_query({"arch": "x86", "mode": "shared"})
        assert set(pieces) == {"xwalk_runtime_client_jar", "xwalk_apk_package_ant_file", "keystore"}

    def test_later_definitions_override(self):
        definitions = PieceDefinitions(
            [
                {"pieces": {"jar": {"files": ["old.jar"]}}},
                {"criteria": {"mode": ["new"]}, "pieces": {"jar": {"files": ["new.jar"]}}},
            ]
        )

        assert definitions.get_pieces_for_query({"mode": "old"})["jar"].files == ("old.jar",)
        assert definitions.get_pieces_for_query({"mode": "new"})["jar"].files == ("new.jar",)

    def test_load_custom_file(self, tmp_path):
        path = tmp_path / "pieces.json"
        path.write_text(json.dumps([{"pieces": {"dx": {"exe": "dx"}}}]))

        definitions = PieceDefinitions.load(path)

        assert definitions.get_pieces_for_query({}) == {"dx": Executable("dx")}

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(PieceDefinitionError, match="not found"):
            PieceDefinitions.load(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "pieces.json"
        path.write_text("[{")
        with pytest.raises(PieceDefinitionError, match="Failed to parse"):
            PieceDefinitions.load(path)

    def test_criteria_must_be_lists(self):
        with pytest.raises(PieceDefinitionError):
            PieceDefinitions([{"criteria": {"arch": "x86"}, "pieces": {}}])
