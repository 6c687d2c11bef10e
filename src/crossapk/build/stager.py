"""Application staging.

Copies everything the build tools read into the staging layout:

- the app skeleton (AndroidManifest.xml, res/, src/)
- the contents of the app's Java source directories into src/
- the contents of runtime asset directories into assets/
- the contents of the HTML5 app root into assets/

Staging is pure file copying; no external tools are involved.
"""

import logging
import shutil
from pathlib import Path
from typing import Iterable

from ..app import AppDefinition
from .layout import StagingLayout

logger = logging.getLogger(__name__)


class StagingError(Exception):
    """Raised when the app cannot be staged into the build directory."""

    pass


def prepare_directory(path: Path) -> None:
    """Create a directory (and parents) unless it already exists.

    Raises:
        StagingError: If the path exists and is not a directory
    """
    if path.exists() and not path.is_dir():
        raise StagingError(
            f"could not prepare directory {path} as it already exists and is a file"
        )
    path.mkdir(parents=True, exist_ok=True)


def copy_contents(source_dir: Path, dest_dir: Path) -> None:
    """Copy the contents of source_dir into dest_dir, merging directories."""
    for entry in sorted(Path(source_dir).iterdir()):
        target = dest_dir / entry.name
        if entry.is_dir():
            shutil.copytree(entry, target, dirs_exist_ok=True)
        else:
            shutil.copy2(entry, target)


class AppStager:
    """Copies an application and runtime assets into a StagingLayout."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def stage(self, app: AppDefinition, layout: StagingLayout) -> None:
        """Stage an app into a layout's directories.

        Args:
            app: Validated application definition
            layout: Layout with runtime assets attached

        Raises:
            StagingError: If a directory cannot be prepared or a source is missing
        """
        for directory in layout.directories:
            prepare_directory(directory)

        logger.info(f"Staging {app.name} into {layout.dest_dir}")

        try:
            self._copy_skeleton(Path(app.skeleton), layout)
            self._copy_dirs(app.java_src_dirs, layout.src_dir, "Java sources")
            self._copy_dirs((Path(a) for a in layout.assets), layout.assets_dir, "runtime assets")
            copy_contents(app.root, layout.assets_dir)
        except OSError as e:
            raise StagingError(f"Failed to stage {app.name} into {layout.dest_dir}: {e}") from e

        if self.verbose:
            logger.info(f"Staged app files from {app.root} into {layout.assets_dir}")

    def _copy_skeleton(self, skeleton: Path, layout: StagingLayout) -> None:
        shutil.copy2(skeleton / "AndroidManifest.xml", layout.android_manifest)
        for name, target in (("res", layout.res_dir), ("src", layout.src_dir)):
            source = skeleton / name
            if source.is_dir():
                copy_contents(source, target)

    def _copy_dirs(self, sources: Iterable[Path], dest_dir: Path, what: str) -> None:
        for source in sources:
            if not source.is_dir():
                raise StagingError(f"Directory of {what} does not exist: {source}")
            logger.debug(f"Copying {what} from {source}")
            copy_contents(source, dest_dir)
