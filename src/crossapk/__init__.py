"""crossapk - build Crosswalk apks for HTML5 applications."""

__version__ = "0.1.0"
