"""
crossapk.ini project configuration parser.

Example crossapk.ini:
    [crossapk]
    android_sdk_dir = /opt/android-sdk
    xwalk_android_dir = /opt/xwalk-android
    arch = arm
    keystore = ${app:root}/release.keystore

    [app]
    name = My App
    package = org.example.myapp
    root = www
    entry = index.html
    skeleton = skeleton
    java_src_dirs = java/src, java/extra
    jars = libs/analytics.jar

    [versions]
    20 = 4.4W

Relative paths in [app] are resolved against the directory holding the ini
file. CROSSAPK_ANDROID_SDK_DIR and CROSSAPK_XWALK_ANDROID_DIR fill in the two
distribution roots when the file leaves them unset.

Usage:
    config = ProjectConfig(Path("crossapk.ini"))
    settings = config.get_build_settings()
    app = config.get_app_definition()
"""

import configparser
import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List

from ..app import AppDefinition
from .build_config import RESOURCE_BUNDLE_FIELDS, BuildSettings

CONFIG_FILENAME = "crossapk.ini"

ENV_OVERRIDES = {
    "android_sdk_dir": "CROSSAPK_ANDROID_SDK_DIR",
    "xwalk_android_dir": "CROSSAPK_XWALK_ANDROID_DIR",
}


class ProjectConfigError(Exception):
    """Exception raised for crossapk.ini configuration errors."""

    pass


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.replace("\n", ",").split(",") if item.strip()]


class ProjectConfig:
    """Parser for crossapk.ini project files."""

    BUILD_SECTION = "crossapk"
    APP_SECTION = "app"
    VERSIONS_SECTION = "versions"

    APP_REQUIRED_FIELDS = {"name", "package", "root", "skeleton"}

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with a crossapk.ini file.

        Args:
            ini_path: Path to the crossapk.ini file

        Raises:
            ProjectConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = Path(ini_path)
        self.project_dir = self.ini_path.resolve().parent

        if not self.ini_path.exists():
            raise ProjectConfigError(f"Configuration file not found: {ini_path}")

        self.config = configparser.ConfigParser(
            interpolation=configparser.ExtendedInterpolation()
        )

        try:
            self.config.read(self.ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ProjectConfigError(f"Failed to parse {ini_path}: {e}") from e

    @classmethod
    def from_project_dir(cls, project_dir: Path) -> "ProjectConfig":
        """Load the crossapk.ini file in a project directory."""
        return cls(Path(project_dir) / CONFIG_FILENAME)

    def _section(self, name: str) -> Dict[str, str]:
        if not self.config.has_section(name):
            return {}
        try:
            return dict(self.config.items(name))
        except configparser.Error as e:
            raise ProjectConfigError(f"Failed to read [{name}] in {self.ini_path}: {e}") from e

    def get_build_settings(self) -> BuildSettings:
        """
        Build settings from the [crossapk] section and the environment.

        Returns:
            BuildSettings with every value from the file applied

        Raises:
            ProjectConfigError: If a key is unknown or a value is invalid
        """
        raw = self._section(self.BUILD_SECTION)

        allowed = {f.name for f in fields(BuildSettings)} - set(RESOURCE_BUNDLE_FIELDS)
        unknown = sorted(set(raw) - allowed)
        if unknown:
            raise ProjectConfigError(
                f"Unknown keys in [{self.BUILD_SECTION}] of {self.ini_path}: {', '.join(unknown)}"
            )

        values: Dict[str, Any] = dict(raw)

        for key, env_var in ENV_OVERRIDES.items():
            if not values.get(key) and os.environ.get(env_var):
                values[key] = os.environ[env_var]

        if "embedded" in values:
            try:
                values["embedded"] = self.config.getboolean(self.BUILD_SECTION, "embedded")
            except ValueError as e:
                raise ProjectConfigError(f"Invalid value for embedded: {e}") from e

        if values.get("android_api_level"):
            try:
                values["android_api_level"] = int(values["android_api_level"])
            except ValueError as e:
                raise ProjectConfigError(
                    f"android_api_level must be an integer, got '{values['android_api_level']}'"
                ) from e

        return BuildSettings.from_dict(values)

    def get_app_values(self) -> Dict[str, Any]:
        """
        Get the [app] section with lists split and paths resolved.

        Returns:
            Dictionary of AppDefinition keyword arguments

        Raises:
            ProjectConfigError: If required app fields are missing
        """
        raw = self._section(self.APP_SECTION)

        missing = self.APP_REQUIRED_FIELDS - set(raw)
        if missing:
            raise ProjectConfigError(
                f"[{self.APP_SECTION}] in {self.ini_path} is missing required fields: "
                f"{', '.join(sorted(missing))}"
            )

        values: Dict[str, Any] = dict(raw)
        values["root"] = self._resolve(values["root"])
        if "skeleton" in values:
            values["skeleton"] = self._resolve(values["skeleton"])
        for key in ("java_src_dirs", "jars"):
            if key in values:
                values[key] = [self._resolve(p) for p in _split_list(values[key])]
        return values

    def get_app_definition(self) -> AppDefinition:
        """Create the AppDefinition described by the [app] section."""
        return AppDefinition.from_dict(self.get_app_values())

    def get_api_versions(self) -> Dict[int, str]:
        """
        Get extra API level -> Android release mappings from [versions].

        Raises:
            ProjectConfigError: If a key is not an integer API level
        """
        versions = {}
        for key, value in self._section(self.VERSIONS_SECTION).items():
            try:
                versions[int(key)] = value
            except ValueError as e:
                raise ProjectConfigError(
                    f"[{self.VERSIONS_SECTION}] keys must be API levels, got '{key}'"
                ) from e
        return versions

    def _resolve(self, path: str) -> Path:
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = self.project_dir / resolved
        return resolved
