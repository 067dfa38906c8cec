"""
Git command runner for prmerge.

All version-control work goes through GitClient, which builds git command
lines, runs them in the target checkout and turns a non-zero exit status
into VcsCommandError. Output is never parsed except for the remote URL
lookup; it is streamed to the terminal (or captured and logged when quiet).
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable
from pathlib import Path

from prmerge.core.errors import VcsCommandError

logger = logging.getLogger(__name__)

CommandCallback = Callable[[list[str]], None]


def format_command(cmd: list[str]) -> str:
    """Render a command line for display."""
    return shlex.join(cmd)


class GitClient:
    """
    Runs git commands against a single working tree.

    Every call blocks until git exits. The working tree is shared mutable
    state, so callers must never run two commands concurrently.

    Example:
        >>> git = GitClient(Path("/src/project"))
        >>> git.run(["checkout", "master"], "Unable to switch to base branch")
    """

    def __init__(
        self,
        cwd: Path,
        *,
        quiet: bool = False,
        timeout: float | None = None,
        on_command: CommandCallback | None = None,
    ) -> None:
        """
        Initialize GitClient.

        Args:
            cwd: Directory of the checkout to operate on
            quiet: Capture command output instead of streaming it
            timeout: Seconds before a command is killed (None waits forever)
            on_command: Called with each mutating command before it runs
        """
        self.cwd = cwd
        self.quiet = quiet
        self.timeout = timeout
        self.on_command = on_command

    def _exec(self, cmd: list[str], *, capture: bool) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            cmd,
            cwd=self.cwd,
            capture_output=capture,
            text=True,
            check=False,
            timeout=self.timeout,
        )

    def run(self, args: list[str], operation: str) -> None:
        """
        Run a mutating git command, raising if it fails.

        Args:
            args: Arguments following ``git``
            operation: Message describing the step, used in the error

        Raises:
            VcsCommandError: If git exits non-zero, is missing, or times out
        """
        cmd = ["git", *args]
        if self.on_command is not None:
            self.on_command(cmd)
        logger.debug("Running %s in %s", format_command(cmd), self.cwd)

        try:
            result = self._exec(cmd, capture=self.quiet)
        except subprocess.TimeoutExpired as e:
            raise VcsCommandError(f"{operation} (timed out after {self.timeout}s)", cmd) from e
        except OSError as e:
            raise VcsCommandError(f"{operation} (could not run git: {e})", cmd) from e

        if self.quiet:
            for stream in (result.stdout, result.stderr):
                if stream and stream.strip():
                    logger.debug("%s: %s", format_command(cmd), stream.strip())

        if result.returncode != 0:
            logger.debug("%s exited with %d", format_command(cmd), result.returncode)
            raise VcsCommandError(operation, cmd, result.returncode)

    def succeeds(self, args: list[str]) -> bool:
        """
        Run a read-only git query and report whether it exited cleanly.

        Output is discarded.
        """
        cmd = ["git", *args]
        try:
            result = self._exec(cmd, capture=True)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("%s could not run: %s", format_command(cmd), e)
            return False
        return result.returncode == 0

    def get_remote_url(self, name: str) -> str | None:
        """
        Get the URL configured for a remote.

        Args:
            name: Remote name (e.g. "origin")

        Returns:
            The URL, or None if the remote is unknown or git is unavailable
        """
        cmd = ["git", "config", "--get", f"remote.{name}.url"]
        try:
            result = self._exec(cmd, capture=True)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("Remote lookup failed: %s", e)
            return None
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        return url or None

    def branch_exists(self, name: str) -> bool:
        """Check whether a ref named ``name`` resolves."""
        return self.succeeds(["rev-parse", "--verify", "--quiet", name])
