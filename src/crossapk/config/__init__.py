"""Configuration for crossapk builds."""

from .build_config import BuildConfiguration, BuildSettings, ConfigurationIncompleteError
from .environment import EnvironmentResolver
from .project_config import CONFIG_FILENAME, ProjectConfig, ProjectConfigError

__all__ = [
    "BuildSettings",
    "BuildConfiguration",
    "ConfigurationIncompleteError",
    "EnvironmentResolver",
    "ProjectConfig",
    "ProjectConfigError",
    "CONFIG_FILENAME",
]
