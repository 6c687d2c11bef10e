"""Platform Detection Utilities.

This module provides utilities for detecting the host platform, which
decides how external tool binaries are named and how Java classpaths are
joined.

Platform identifiers follow ``sys.platform`` (e.g. "win32", "linux",
"darwin"); anything starting with "win" is treated as Windows.
"""

import sys
from typing import List, Optional


class PlatformDetector:
    """Answers platform-dependent naming questions for a host platform."""

    def __init__(self, platform: Optional[str] = None):
        """Initialize the detector.

        Args:
            platform: Platform identifier; defaults to the running platform
        """
        self.platform = platform or sys.platform

    @property
    def is_windows(self) -> bool:
        """Whether the platform is Windows-like."""
        return self.platform.lower().startswith("win")

    @property
    def classpath_separator(self) -> str:
        """Separator used between entries of a Java classpath."""
        return ";" if self.is_windows else ":"

    def likely_binary_names(self, name: str) -> List[str]:
        """Get likely file names for a binary, most likely first.

        Args:
            name: Base name of the binary (e.g. "aapt")

        Returns:
            ["aapt.exe", "aapt.bat", "aapt"] on Windows, ["aapt"] elsewhere
        """
        if self.is_windows:
            return [f"{name}.exe", f"{name}.bat", name]
        return [name]

