"""CLI utility functions for crossapk.

This module provides common utilities used across CLI commands including:
- Project loading from crossapk.ini
- Logging setup
- Build stage progress display
- Error handling and formatting
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from tqdm import tqdm

from crossapk.app import AppDefinition
from crossapk.build import BuildStage
from crossapk.config import CONFIG_FILENAME, BuildSettings, ProjectConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger for CLI use.

    Args:
        verbose: Log at INFO (DEBUG for crossapk) instead of WARNING
    """
    logger = logging.getLogger()
    logger.setLevel(logging.INFO if verbose else logging.WARNING)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if verbose:
        logging.getLogger("crossapk").setLevel(logging.DEBUG)


@dataclass
class Project:
    """Everything loaded from a project's crossapk.ini."""

    config: ProjectConfig
    settings: BuildSettings
    api_versions: Dict[int, str]

    def get_app(self) -> AppDefinition:
        """Load and validate the [app] section."""
        return self.config.get_app_definition()


class ProjectLoader:
    """Loads crossapk.ini from a project directory."""

    @staticmethod
    def load(project_dir: Path) -> Project:
        """Load the project configuration.

        Args:
            project_dir: Project directory containing crossapk.ini

        Returns:
            Project with build settings and version overrides

        Raises:
            FileNotFoundError: If crossapk.ini doesn't exist
            ProjectConfigError: If crossapk.ini is invalid
        """
        ini_path = project_dir / CONFIG_FILENAME
        if not ini_path.exists():
            raise FileNotFoundError(f"{CONFIG_FILENAME} not found in {project_dir}")

        config = ProjectConfig(ini_path)
        return Project(
            config=config,
            settings=config.get_build_settings(),
            api_versions=config.get_api_versions(),
        )


class StageProgress:
    """Shows build stages on a tqdm progress bar."""

    def __init__(self, enabled: bool = True):
        self.bar: Optional[tqdm] = None
        if enabled:
            self.bar = tqdm(total=len(BuildStage), desc="Building", unit="stage")

    def __call__(self, stage: BuildStage) -> None:
        if self.bar is None:
            return
        self.bar.set_description(f"Stage {stage.value}: {stage.label}")
        # position is the number of stages already completed
        self.bar.n = list(BuildStage).index(stage)
        self.bar.refresh()

    def close(self, success: bool) -> None:
        if self.bar is None:
            return
        if success:
            self.bar.n = len(BuildStage)
            self.bar.set_description("Done")
        self.bar.close()


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "File not found", "Build failed")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        """Print formatted success message."""
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        """Print formatted warning message."""
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_file_not_found(error: FileNotFoundError) -> None:
        """Handle FileNotFoundError with standard formatting."""
        ErrorFormatter.print_error("Error: File not found", str(error))
        print(f"Make sure you're in a crossapk project directory with a {CONFIG_FILENAME} file.")
        sys.exit(1)

    @staticmethod
    def handle_config_error(error: Exception) -> None:
        """Handle invalid project or app configuration."""
        ErrorFormatter.print_error("Error: Invalid configuration", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class PathValidator:
    """Validates project paths and directories."""

    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Validate that project directory exists and is a directory.

        Raises:
            SystemExit: If path doesn't exist or isn't a directory
        """
        if not project_dir.exists():
            print(
                f"{ErrorFormatter.RED}✗ Error: Path does not exist: {project_dir}{ErrorFormatter.RESET}"
            )
            sys.exit(2)
        if not project_dir.is_dir():
            print(
                f"{ErrorFormatter.RED}✗ Error: Path is not a directory: {project_dir}{ErrorFormatter.RESET}"
            )
            sys.exit(2)
