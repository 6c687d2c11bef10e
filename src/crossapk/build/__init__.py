"""
Apk build components for crossapk.

This module provides the build implementation including:
- Staging layout and application staging
- Wrappers for aapt, javac, dx, ant, jarsigner and zipalign
- Build coordination
"""

from .coordinator import BuildCoordinator, BuildError, BuildStage, BuildTools
from .layout import StagingLayout
from .stager import AppStager, StagingError

__all__ = [
    "StagingLayout",
    "AppStager",
    "StagingError",
    "BuildCoordinator",
    "BuildError",
    "BuildStage",
    "BuildTools",
]
