"""External command execution with interrupt-driven cancellation.

All external tools (composer, php, git, gh, npm) are started through
ProcessRunner. The installer only needs to know whether a command succeeded;
failures are reported by the caller, which decides whether they are fatal.

Cancellation:
    handle_interrupts() installs SIGINT/SIGTERM handlers that cancel a
    CancellationToken and raise InstallationCancelled in the main thread. A
    runner waiting on a child process terminates it and re-raises. Nothing
    created so far is rolled back.

Usage:
    token = CancellationToken()
    with handle_interrupts(token):
        runner = ProcessRunner(token=token)
        if not runner.run(["npm", "install"], cwd=project_dir):
            logger.warning("NPM command failed")
"""

import logging
import os
import signal
import subprocess
import threading
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from larinit.exceptions import InstallationCancelled

logger = logging.getLogger(__name__)

# Seconds between checks of the cancellation token while a child runs
POLL_INTERVAL = 0.1

# Seconds a cancelled child gets to exit before it is killed
TERMINATE_GRACE_PERIOD = 3.0

# Timeout for short informational commands (git config, gh auth status)
CAPTURE_TIMEOUT = 10.0


class CancellationToken:
    """Thread-safe flag telling long-running work to stop waiting."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise InstallationCancelled if cancel() has been called."""
        if self._event.is_set():
            raise InstallationCancelled("Installation cancelled by user")


@contextmanager
def handle_interrupts(token: CancellationToken) -> Iterator[CancellationToken]:
    """Route SIGINT/SIGTERM to ``token`` for the duration of the block.

    The handler cancels the token and raises InstallationCancelled, which
    also unblocks a pending prompt. Previous handlers are restored on exit.
    Outside the main thread signal handlers cannot be installed; the token
    still works but is only cancelled programmatically.
    """

    def _handler(signum: int, frame: object) -> None:
        logger.debug(f"Received signal {signum}, cancelling")
        token.cancel()
        raise InstallationCancelled("Installation cancelled by user")

    previous: dict[int, object] = {}
    try:
        for sig in (signal.SIGINT, signal.SIGTERM):
            previous[sig] = signal.signal(sig, _handler)
    except ValueError:
        logger.debug("Not in main thread; interrupt handlers not installed")

    try:
        yield token
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@dataclass(frozen=True)
class CommandRecord:
    """One executed external command.

    Attributes:
        command: Argument vector
        cwd: Working directory (None for the current directory)
        returncode: Exit status, or None if the process could not be started
    """

    command: tuple[str, ...]
    cwd: Optional[str]
    returncode: Optional[int]

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    def __str__(self) -> str:
        return " ".join(self.command)


class ProcessRunner:
    """Run external commands and record their outcome.

    Example:
        >>> runner = ProcessRunner(quiet=True)
        >>> runner.run(["git", "init", "-q"], cwd="my-app")
        True
        >>> [str(record) for record in runner.history]
        ['git init -q']
    """

    def __init__(
        self,
        quiet: bool = False,
        token: Optional[CancellationToken] = None,
        poll_interval: float = POLL_INTERVAL,
    ):
        """Initialize ProcessRunner.

        Args:
            quiet: Discard child stdout/stderr instead of inheriting them
            token: Cancellation token checked while waiting on children
            poll_interval: Seconds between token checks
        """
        self.quiet = quiet
        self.token = token or CancellationToken()
        self.poll_interval = poll_interval
        self.history: list[CommandRecord] = []

    def _record(self, command: Sequence[str], cwd: Optional[Union[str, Path]], returncode: Optional[int]) -> None:
        self.history.append(
            CommandRecord(command=tuple(command), cwd=str(cwd) if cwd is not None else None, returncode=returncode)
        )

    def run(
        self,
        command: Sequence[str],
        cwd: Optional[Union[str, Path]] = None,
        env: Optional[Mapping[str, str]] = None,
        quiet: Optional[bool] = None,
    ) -> bool:
        """Run a command to completion.

        Args:
            command: Argument vector (never passed through a shell)
            cwd: Working directory
            env: Variables merged over the current environment
            quiet: Override the runner's quiet setting for this command

        Returns:
            True if the command exited with status 0

        Raises:
            InstallationCancelled: If the token is cancelled while waiting
        """
        self.token.raise_if_cancelled()

        process_env = os.environ.copy()
        if env:
            process_env.update(env)

        silent = self.quiet if quiet is None else quiet
        stream = subprocess.DEVNULL if silent else None

        logger.debug(f"Running: {' '.join(command)} (cwd={cwd or '.'})")
        try:
            process = subprocess.Popen(
                list(command),
                cwd=str(cwd) if cwd is not None else None,
                env=process_env,
                stdout=stream,
                stderr=stream,
            )
        except FileNotFoundError:
            logger.error(f"Command not found: {command[0]}. Is it installed and in your PATH?")
            self._record(command, cwd, None)
            return False
        except OSError as e:
            logger.error(f"Could not start {command[0]}: {e}")
            self._record(command, cwd, None)
            return False

        try:
            returncode = self._wait(process)
        except InstallationCancelled:
            self._terminate(process)
            self._record(command, cwd, process.returncode)
            raise

        self._record(command, cwd, returncode)
        if returncode != 0:
            logger.debug(f"{' '.join(command)} exited with status {returncode}")
        return returncode == 0

    def _wait(self, process: subprocess.Popen) -> int:
        while True:
            try:
                return process.wait(timeout=self.poll_interval)
            except subprocess.TimeoutExpired:
                self.token.raise_if_cancelled()

    def _terminate(self, process: subprocess.Popen) -> None:
        if process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=TERMINATE_GRACE_PERIOD)
        except subprocess.TimeoutExpired:
            logger.debug(f"Process {process.pid} ignored terminate, killing")
            process.kill()
            process.wait()

    def capture(self, command: Sequence[str], cwd: Optional[Union[str, Path]] = None) -> Optional[str]:
        """Run a short command and return its stripped stdout.

        Returns:
            Output on exit status 0, None on failure, timeout or missing binary
        """
        self.token.raise_if_cancelled()
        try:
            result = subprocess.run(
                list(command),
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                timeout=CAPTURE_TIMEOUT,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"{' '.join(command)} timed out after {CAPTURE_TIMEOUT}s")
            self._record(command, cwd, None)
            return None
        except OSError as e:
            logger.debug(f"Could not run {command[0]}: {e}")
            self._record(command, cwd, None)
            return None

        self._record(command, cwd, result.returncode)
        if result.returncode != 0:
            return None
        return result.stdout.strip()
