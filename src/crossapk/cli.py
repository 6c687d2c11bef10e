"""
Command-line interface for crossapk.

This module provides the `crossapk` CLI tool for building Crosswalk apks
from HTML5 applications.
"""

import argparse
import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from crossapk import __version__
from crossapk.app import AppDefinitionError
from crossapk.builder import ApkBuilder
from crossapk.cli_utils import (
    ErrorFormatter,
    PathValidator,
    ProjectLoader,
    StageProgress,
    setup_logging,
)
from crossapk.command_runner import CommandRunner
from crossapk.config import ConfigurationIncompleteError, EnvironmentResolver, ProjectConfigError
from crossapk.locate import Locator, LocatorError


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project_dir: Path
    dest: Optional[Path] = None
    clean: bool = False
    verbose: bool = False
    timeout: Optional[float] = None


@dataclass
class LocateArgs:
    """Arguments for the locate command."""

    project_dir: Path
    verbose: bool = False
    timeout: Optional[float] = None


def build_command(args: BuildArgs) -> None:
    """Build an apk for the project's HTML5 app.

    Examples:
        crossapk build                   # Build the project in the current directory
        crossapk build examples/hello    # Build a specific project
        crossapk build --dest out        # Write build files and the apk to out/
        crossapk build --clean           # Remove the build directory first
        crossapk build --timeout 300     # Kill any tool running over 5 minutes
    """
    print(f"crossapk v{__version__}")
    print()

    progress = None
    try:
        project = ProjectLoader.load(args.project_dir)
        app = project.get_app()

        if args.verbose:
            print(f"Building project: {args.project_dir}")
            print(f"App: {app.name} ({app.package})")
            print(f"Architecture: {project.settings.arch}")
            print()
        else:
            print(f"Building {app.name}...")

        progress = StageProgress(enabled=not args.verbose)
        builder = ApkBuilder(
            project.settings,
            command_runner=CommandRunner(verbose=args.verbose, timeout=args.timeout),
            verbose=args.verbose,
            api_versions=project.api_versions,
            on_stage=progress,
        )
        result = asyncio.run(builder.build(app, dest_dir=args.dest, clean=args.clean))
        progress.close(result.success)

        if result.success:
            ErrorFormatter.print_success("Build successful!")
            print()
            print(f"Apk: {result.apk_path}")
            print(f"Build time: {result.build_time:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.print_error("Build failed!", result.message)
            sys.exit(1)

    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except (ProjectConfigError, AppDefinitionError, ValueError) as e:
        ErrorFormatter.handle_config_error(e)
    except KeyboardInterrupt:
        if progress:
            progress.close(False)
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def locate_command(args: LocateArgs) -> None:
    """Resolve and print the build environment of a project.

    Examples:
        crossapk locate                  # Locate tools for the current project
        crossapk locate examples/hello   # Locate tools for a specific project
    """
    try:
        project = ProjectLoader.load(args.project_dir)
        runner = CommandRunner(verbose=args.verbose, timeout=args.timeout)
        resolver = EnvironmentResolver(Locator(command_runner=runner), api_versions=project.api_versions)
        config = asyncio.run(resolver.resolve(project.settings))

        for key, value in config.to_dict().items():
            if key == "keystore_password":
                value = "*" * len(value)
            print(f"{key}: {value}")
        sys.exit(0)

    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except (ProjectConfigError, ConfigurationIncompleteError, ValueError) as e:
        ErrorFormatter.handle_config_error(e)
    except LocatorError as e:
        ErrorFormatter.print_error("Environment incomplete", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main() -> None:
    """crossapk - build Crosswalk apks from HTML5 applications."""
    parser = argparse.ArgumentParser(
        prog="crossapk",
        description="crossapk - build Crosswalk apks from HTML5 applications",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"crossapk {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build an apk for the project",
    )
    build_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    build_parser.add_argument(
        "-d",
        "--dest",
        type=Path,
        default=None,
        help="Build directory (default: crossapk-build in the temp directory)",
    )
    build_parser.add_argument(
        "-c",
        "--clean",
        action="store_true",
        help="Remove the build directory before building",
    )
    build_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose build output",
    )
    build_parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Seconds before an external tool is killed (default: no timeout)",
    )

    # Locate command
    locate_parser = subparsers.add_parser(
        "locate",
        help="Locate the Android SDK and Crosswalk pieces and print them",
    )
    locate_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    locate_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )
    locate_parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Seconds before an executable check is killed (default: no timeout)",
    )

    # Parse arguments
    parsed_args = parser.parse_args()

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    setup_logging(parsed_args.verbose)

    # Validate project directory exists
    PathValidator.validate_project_dir(parsed_args.project_dir)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                project_dir=parsed_args.project_dir,
                dest=parsed_args.dest,
                clean=parsed_args.clean,
                verbose=parsed_args.verbose,
                timeout=parsed_args.timeout,
            )
        )
    elif parsed_args.command == "locate":
        locate_command(
            LocateArgs(
                project_dir=parsed_args.project_dir,
                verbose=parsed_args.verbose,
                timeout=parsed_args.timeout,
            )
        )


if __name__ == "__main__":
    main()
