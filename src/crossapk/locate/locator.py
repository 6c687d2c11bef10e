"""Locator: finds SDK and runtime pieces inside loosely-structured trees.

SDK and runtime distributions differ in layout between platforms, versions
and installation methods, so each piece is found by guessing first and
searching second:

    1. For each candidate file name (most preferred first), try each guess
       directory under the root, e.g. for root=/sdk, guess dirs
       ['build-tools/19*', 'build-tools/android-4.4'] and names
       ['aapt.exe', 'aapt.bat', 'aapt']:
           /sdk/build-tools/19*/aapt.exe
           /sdk/build-tools/android-4.4/aapt.exe
           /sdk/build-tools/19*/aapt.bat
           ...
    2. If no guess hits, search /sdk/**/<name> for each name in turn.

Directories are always found by searching. Every guess path and search
pattern is recorded so that a failed lookup can tell the operator exactly
where it looked.
"""

import asyncio
import logging
import os
import re
from typing import Dict, List, Mapping, Optional, Pattern, Sequence, Union

from ..command_runner import CommandError, CommandRunner, join_command
from ..platform_utils import PlatformDetector
from .path_matcher import (
    PathKind,
    PathMatcher,
    glob_root,
    has_magic,
    strip_trailing_separators,
    to_glob_path,
)
from .pieces import (
    DirectoryGroup,
    Executable,
    NotFound,
    PieceQuery,
    ResolvedResourceBundle,
    ResolvedValue,
    ResourceBundle,
    SingleFile,
    TieBreak,
)
from .versions import select_last

logger = logging.getLogger(__name__)


class LocatorError(Exception):
    """Base class for Locator failures."""

    pass


class PiecesNotFoundError(LocatorError):
    """Raised when one or more requested pieces could not be resolved.

    Attributes:
        root_dir: Directory that was searched
        found: Pieces which did resolve
        missing: Unresolved pieces with their attempt history
    """

    def __init__(
        self,
        root_dir: str,
        found: Dict[str, ResolvedValue],
        missing: Dict[str, NotFound],
    ):
        self.root_dir = root_dir
        self.found = found
        self.missing = missing
        super().__init__(self._format())

    @property
    def attempts(self) -> Dict[str, List[str]]:
        """Attempted locations for each unresolved piece."""
        return {name: list(not_found.attempts) for name, not_found in self.missing.items()}

    def _format(self) -> str:
        lines = [f"could not find all required locations under {self.root_dir}", "Find results:"]
        for name, value in self.found.items():
            lines.append(f"{name}={_describe(value)}")
        for name, not_found in self.missing.items():
            lines.append(f"{name}={not_found}")
            for candidate in not_found.candidates:
                lines.append(f"    candidate: {candidate}")
            for attempt in not_found.attempts:
                lines.append(f"    tried: {attempt}")
        return "\n".join(lines)


class ExecutableCheckError(LocatorError):
    """Raised when an executable fails to run or its output is unexpected."""

    pass


def _describe(value: ResolvedValue) -> str:
    if isinstance(value, ResolvedResourceBundle):
        return ", ".join(value.all_dirs())
    if isinstance(value, list):
        return ", ".join(value)
    return str(value)


class Locator:
    """Finds and tests files, directories and executables."""

    def __init__(
        self,
        platform: Optional[str] = None,
        command_runner: Optional[CommandRunner] = None,
        path_matcher: Optional[PathMatcher] = None,
    ):
        """Initialize the locator.

        Args:
            platform: Platform the binaries are for (e.g. "win32", "linux");
                defaults to the running platform
            command_runner: Runner used to test executables
            path_matcher: Filesystem glob/stat implementation
        """
        self.platform = PlatformDetector(platform)
        self.command_runner = command_runner or CommandRunner()
        self.path_matcher = path_matcher or PathMatcher()

    async def check_is_file(self, path: str, tie_break: TieBreak = select_last) -> Optional[str]:
        """Check whether a path (which may contain wildcards) is a file.

        Returns:
            The file path, chosen by tie_break if a wildcard matched several
            files, or None
        """
        return await self._check_path(path, PathKind.FILE, tie_break)

    async def check_is_directory(self, path: str, tie_break: TieBreak = select_last) -> Optional[str]:
        """Check whether a path (which may contain wildcards) is a directory.

        Returns:
            The directory path, or None if missing or not a directory
        """
        return await self._check_path(path, PathKind.DIRECTORY, tie_break)

    async def _check_path(self, path: str, kind: PathKind, tie_break: TieBreak) -> Optional[str]:
        if not path:
            raise ValueError("could not check path as it was not set")

        path = os.path.abspath(path)
        if has_magic(path):
            candidates = await self.path_matcher.glob(to_glob_path(path))
        else:
            candidates = [path]
        return await self._pick(candidates, kind, tie_break)

    async def _check_under_root(
        self, root_dir: str, relative: str, kind: PathKind, tie_break: TieBreak
    ) -> Optional[str]:
        # wildcards may only come from the relative part
        if has_magic(relative):
            candidates = await self.path_matcher.glob(f"{glob_root(root_dir)}/{to_glob_path(relative)}")
        else:
            candidates = [os.path.normpath(os.path.join(root_dir, relative))]
        return await self._pick(candidates, kind, tie_break)

    async def _pick(self, candidates: List[str], kind: PathKind, tie_break: TieBreak) -> Optional[str]:
        matching = [c for c in candidates if await self.path_matcher.stat(c) is kind]
        if not matching:
            return None
        return tie_break(matching)

    async def check_executable(
        self,
        exe: str,
        args: Sequence[str] = (),
        required: Union[str, Pattern[str], None] = None,
        ignore_errors: bool = False,
    ) -> str:
        """Check that an executable runs and that its output is as expected.

        Args:
            exe: Executable to test
            args: Arguments to pass to the executable
            required: Regex which the combined output must match
            ignore_errors: Still accept a non-zero exit code as long as the
                output matches; some tools return 1 while working correctly
                (e.g. jarsigner -help on older JDKs)

        Returns:
            The command's output

        Raises:
            ExecutableCheckError: If the command fails or the output does
                not match
        """
        if isinstance(required, str):
            required = re.compile(required, re.MULTILINE)

        command = join_command([exe, *args], self.platform.platform)
        try:
            output = await self.command_runner.run(command)
        except CommandError as e:
            if not ignore_errors:
                raise ExecutableCheckError(f"{exe} is not a working executable:\n{e}") from e
            output = e.output

        if required is not None and not required.search(output):
            raise ExecutableCheckError(
                f"output\n{output}\nfrom {exe} did not match required regex {required.pattern}"
            )
        return output

    def _search_pattern(self, root_dir: str, name: str, is_directory: bool) -> str:
        pattern = f"{glob_root(root_dir)}/**/{to_glob_path(name)}"
        if is_directory:
            pattern += "/"
        return pattern

    async def glob_files(self, root_dir: str, name: str, is_directory: bool = False) -> List[str]:
        """Find files (or directories) called name anywhere under root_dir.

        Args:
            root_dir: Root directory to search inside
            name: File name or relative path to find
            is_directory: Search for directories instead of files

        Returns:
            Sorted matching paths, without trailing separators; may be empty
        """
        root_dir = os.path.abspath(root_dir)
        pattern = self._search_pattern(root_dir, name, is_directory)
        kind = PathKind.DIRECTORY if is_directory else PathKind.FILE

        found = []
        for match in await self.path_matcher.glob(pattern):
            match = strip_trailing_separators(match)
            if await self.path_matcher.stat(match) is kind:
                found.append(match)
        return found

    async def find_file(
        self,
        root_dir: str,
        guess_dirs: Sequence[str],
        names: Sequence[str],
        tie_break: TieBreak = select_last,
    ) -> str:
        """Find a file by guessing, then by searching.

        Raises:
            PiecesNotFoundError: If no candidate name is found
        """
        root_dir = os.path.abspath(root_dir)
        result = await self._find_file(root_dir, guess_dirs, names, tie_break)
        if isinstance(result, NotFound):
            raise PiecesNotFoundError(root_dir, {}, {names[0] if names else "": result})
        return result

    async def _find_file(
        self,
        root_dir: str,
        guess_dirs: Sequence[str],
        names: Sequence[str],
        tie_break: TieBreak,
    ) -> Union[str, NotFound]:
        attempts: List[str] = []

        # filename-major: every guess dir for the preferred name first
        for name in names:
            for guess_dir in guess_dirs:
                relative = os.path.join(guess_dir, name)
                attempts.append(os.path.join(root_dir, relative))
                found = await self._check_under_root(root_dir, relative, PathKind.FILE, tie_break)
                if found:
                    logger.debug(f"Found {name} by guessing: {found}")
                    return found

        for name in names:
            attempts.append(self._search_pattern(root_dir, name, is_directory=False))
            matches = await self.glob_files(root_dir, name)
            if matches:
                found = tie_break(matches)
                logger.debug(f"Found {name} by searching: {found}")
                return found

        return NotFound(tuple(attempts))

    async def find_directory(
        self,
        root_dir: str,
        directory: str,
        tie_break: Optional[TieBreak] = None,
        multiple: bool = False,
    ) -> Union[str, List[str]]:
        """Find a directory anywhere under root_dir.

        Returns:
            Directory path with exactly one trailing separator, or every
            match if multiple is set

        Raises:
            PiecesNotFoundError: If nothing matches, or several directories
                match and there is no tie-break
        """
        root_dir = os.path.abspath(root_dir)
        result = await self._find_directory(root_dir, directory, tie_break, multiple)
        if isinstance(result, NotFound):
            raise PiecesNotFoundError(root_dir, {}, {directory: result})
        return result

    async def _find_directory(
        self,
        root_dir: str,
        directory: str,
        tie_break: Optional[TieBreak],
        multiple: bool,
    ) -> Union[str, List[str], NotFound]:
        attempts = (self._search_pattern(root_dir, directory, is_directory=True),)
        matches = [m + os.sep for m in await self.glob_files(root_dir, directory, is_directory=True)]

        if not matches:
            return NotFound(attempts)
        if multiple:
            return matches
        if len(matches) == 1:
            return matches[0]
        if tie_break is None:
            return NotFound(attempts, reason="ambiguous", candidates=tuple(matches))
        return tie_break(matches)

    async def _find_resource_bundle(
        self, root_dir: str, bundle: ResourceBundle
    ) -> Union[ResolvedResourceBundle, NotFound]:
        res_dirs, libs = await asyncio.gather(
            asyncio.gather(*(self._find_directory(root_dir, d, select_last, False) for d in bundle.res_dirs)),
            asyncio.gather(*(self._find_directory(root_dir, d, select_last, False) for d in bundle.libs)),
        )

        failed = [r for r in list(res_dirs) + list(libs) if isinstance(r, NotFound)]
        if failed:
            attempts = tuple(a for not_found in failed for a in not_found.attempts)
            return NotFound(attempts)

        return ResolvedResourceBundle(
            res_dirs=tuple(res_dirs),
            libs=tuple(libs),
            package=bundle.package,
        )

    async def _resolve_piece(self, root_dir: str, piece: PieceQuery) -> ResolvedValue:
        if isinstance(piece, SingleFile):
            return await self._find_file(root_dir, piece.guess_dirs, piece.files, piece.tie_break)
        if isinstance(piece, Executable):
            names = self.platform.likely_binary_names(piece.name)
            return await self._find_file(root_dir, piece.guess_dirs, names, piece.tie_break)
        if isinstance(piece, DirectoryGroup):
            return await self._find_directory(root_dir, piece.directory, piece.tie_break, piece.multiple)
        if isinstance(piece, ResourceBundle):
            return await self._find_resource_bundle(root_dir, piece)
        raise TypeError(f"Unknown piece query: {piece!r}")

    async def locate_pieces(
        self, root_dir: str, pieces: Mapping[str, PieceQuery]
    ) -> Dict[str, ResolvedValue]:
        """Find every requested piece under root_dir.

        All pieces are searched for concurrently. Results are never cached,
        as the filesystem may change between builds.

        Args:
            root_dir: Directory to start looking inside
            pieces: Mapping of piece name to query, e.g.
                {"aapt": Executable("aapt", ("build-tools/19*",)),
                 "android_jar": SingleFile(("android.jar",), ("platforms/android-19",))}

        Returns:
            Mapping of piece name to its resolved path, list of paths or
            resource bundle

        Raises:
            PiecesNotFoundError: If any piece could not be resolved; carries
                the pieces which did resolve and the attempt history of
                each one which did not
        """
        root_dir = os.path.abspath(root_dir)
        names = list(pieces)
        resolved = await asyncio.gather(*(self._resolve_piece(root_dir, pieces[n]) for n in names))
        results = dict(zip(names, resolved))

        missing = {n: v for n, v in results.items() if isinstance(v, NotFound)}
        if missing:
            found = {n: v for n, v in results.items() if not isinstance(v, NotFound)}
            logger.warning(f"Could not locate {', '.join(missing)} under {root_dir}")
            raise PiecesNotFoundError(root_dir, found, missing)

        logger.debug(f"Located {len(results)} pieces under {root_dir}")
        return results
