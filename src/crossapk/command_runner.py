"""Shell command execution for external build tools.

Every tool wrapper and the Locator's executable check run their command
lines through a CommandRunner. The runner returns stdout followed by stderr,
because tools such as java and javac print informational text on stderr
even when they succeed.

Design:
    - asyncio subprocesses so independent tool invocations can overlap
    - Structured CommandError carrying the command, exit code and both streams
    - Optional timeout which terminates the whole process tree (psutil)
"""

import asyncio
import logging
import shlex
import subprocess
import sys
import time
from typing import List, Optional, Sequence

import psutil

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when a command exits with a non-zero code."""

    def __init__(
        self,
        command: str,
        exit_code: Optional[int],
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(self._format())

    @property
    def output(self) -> str:
        """Combined output of the failed command."""
        return self.stdout + self.stderr

    def _format(self) -> str:
        return (
            f"command\n{self.command}\nreturned bad code {self.exit_code}"
            f"\nstderr was:\n{self.stderr}\nstdout was:\n{self.stdout}"
        )


class CommandTimeoutError(CommandError):
    """Raised when a command exceeds the runner's timeout."""

    def __init__(self, command: str, timeout: float, stdout: str = "", stderr: str = ""):
        self.timeout = timeout
        super().__init__(command, None, stdout, stderr)

    def _format(self) -> str:
        return (
            f"command\n{self.command}\ntimed out after {self.timeout}s"
            f"\nstderr was:\n{self.stderr}\nstdout was:\n{self.stdout}"
        )


class CommandRunner:
    """Runs command lines in the shell and collects their output."""

    def __init__(self, verbose: bool = False, timeout: Optional[float] = None):
        """Initialize command runner.

        Args:
            verbose: Log every executed command line with its run time
            timeout: Seconds to wait for a command before killing it;
                None waits indefinitely
        """
        self.verbose = verbose
        self.timeout = timeout

    async def run(self, command: str, message: Optional[str] = None) -> str:
        """Run a command line in the shell.

        Args:
            command: Command line to run
            message: Optional message to log before the command runs

        Returns:
            stdout followed by stderr of the command

        Raises:
            CommandError: If the command returns a non-zero exit code
            CommandTimeoutError: If the command exceeds the timeout
        """
        if message:
            logger.info(message)

        start = time.time()
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []
        readers = asyncio.gather(
            _drain(proc.stdout, stdout_chunks),
            _drain(proc.stderr, stderr_chunks),
            proc.wait(),
        )

        try:
            await asyncio.wait_for(readers, timeout=self.timeout)
        except asyncio.TimeoutError:
            # psutil.wait_procs blocks, keep it off the event loop
            killed = await asyncio.to_thread(_kill_process_tree, proc.pid)
            logger.warning(
                f"Command timed out after {self.timeout}s, killed {killed} processes: {command}"
            )
            await proc.wait()
            await _drain_remaining(proc, stdout_chunks, stderr_chunks)
            raise CommandTimeoutError(
                command, self.timeout, _decode(stdout_chunks), _decode(stderr_chunks)
            )

        stdout = _decode(stdout_chunks)
        stderr = _decode(stderr_chunks)

        if self.verbose:
            elapsed_ms = int((time.time() - start) * 1000)
            logger.info(f"COMMAND EXECUTED:\n{command}\n--- EXECUTION TIME: {elapsed_ms}ms")

        if proc.returncode != 0:
            raise CommandError(command, proc.returncode, stdout, stderr)

        return stdout + stderr


async def _drain(stream: Optional[asyncio.StreamReader], chunks: List[bytes]) -> None:
    """Read a stream to EOF, keeping every chunk read so far in chunks."""
    if stream is None:
        return
    while True:
        chunk = await stream.read(65536)
        if not chunk:
            return
        chunks.append(chunk)


async def _drain_remaining(
    proc: asyncio.subprocess.Process, stdout_chunks: List[bytes], stderr_chunks: List[bytes]
) -> None:
    """Collect output still buffered in the pipes of a killed process."""
    try:
        await asyncio.wait_for(
            asyncio.gather(_drain(proc.stdout, stdout_chunks), _drain(proc.stderr, stderr_chunks)),
            timeout=1,
        )
    except asyncio.TimeoutError:
        logger.debug("Gave up reading output of killed process")


def _decode(chunks: List[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


def join_command(parts: Sequence[str], platform: Optional[str] = None) -> str:
    """Join command arguments into one shell command line.

    Arguments containing whitespace or shell metacharacters are quoted
    using the conventions of the target platform.
    """
    platform = platform or sys.platform
    if platform.lower().startswith("win"):
        return subprocess.list2cmdline(list(parts))
    return " ".join(shlex.quote(part) for part in parts)


def _kill_process_tree(root_pid: int) -> int:
    """Terminate a process and all of its descendants.

    Children are terminated before their parents; anything still alive after
    a short grace period is force-killed.

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(root_pid)
        processes: List[psutil.Process] = root.children(recursive=True)
        processes.reverse()
        processes.append(root)
    except psutil.NoSuchProcess:
        return 0

    signalled = []
    for proc in processes:
        try:
            proc.terminate()
            signalled.append(proc)
        except psutil.NoSuchProcess:
            pass

    _gone, alive = psutil.wait_procs(signalled, timeout=3)
    for proc in alive:
        try:
            proc.kill()
            logger.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass

    return len(signalled)
