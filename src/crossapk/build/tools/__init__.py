"""Wrappers for the external tools used to build an apk."""

from .aapt import AaptWrapper
from .apk_gen import ApkGenWrapper
from .apk_sign import ApkSignWrapper
from .dx import DxWrapper
from .javac import JavacWrapper

__all__ = [
    "AaptWrapper",
    "JavacWrapper",
    "DxWrapper",
    "ApkGenWrapper",
    "ApkSignWrapper",
]
