"""
Setup file.
"""

import os

from setuptools import setup

URL = "https://github.com/crossapk/crossapk"
KEYWORDS = "android crosswalk apk html5 aapt javac dx ant jarsigner zipalign"
HERE = os.path.dirname(os.path.abspath(__file__))



if __name__ == "__main__":
    setup(
        keywords=KEYWORDS,
        url=URL,
        package_data={"crossapk": ["assets/*.json"]},
        include_package_data=True)
