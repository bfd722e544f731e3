"""External process execution.

The single place where ``subprocess.run`` is called. Steps and probes go
through ``ShellRunner`` so tests can substitute a fake runner.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass

from wsl_bootstrap.environment import Environment
from wsl_bootstrap.errors import CommandError

logger = logging.getLogger(__name__)

# Keep the tail of process output only; installers can be very chatty.
OUTPUT_LIMIT = 4000

DEFAULT_TIMEOUT = 900


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an external command.

    Attributes:
        argv: The command that ran (including any sudo prefix).
        returncode: Exit status; -1 when the process could not be started
            or timed out.
        stdout: Captured standard output (tail).
        stderr: Captured standard error (tail).
        elapsed: Seconds spent waiting for the process.
    """

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def is_root() -> bool:
    """Check if the current process runs as root."""
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class ShellRunner:
    """Runs external commands with a composed environment.

    Satisfies the CommandRunner protocol structurally.
    """

    def __init__(self, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def run(
        self,
        argv: list[str],
        env: Environment | None = None,
        *,
        sudo: bool = False,
        timeout: int | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        """Run a command and capture its output.

        Never raises for process failures; inspect ``CommandResult.ok``.

        Args:
            argv: Command and arguments.
            env: Environment snapshot for the child process.
            sudo: Prefix with ``sudo`` unless already root.
            timeout: Seconds before the process is abandoned.
            cwd: Working directory.

        Returns:
            CommandResult describing the outcome.
        """
        if sudo and not is_root():
            argv = ["sudo", *argv]
        timeout = timeout or self.timeout
        environ = env.as_environ() if env is not None else None
        if env is not None and argv and not os.path.isabs(argv[0]):
            # Resolve against the snapshot PATH, not this process's PATH
            resolved = env.which(argv[0])
            if resolved:
                argv = [resolved, *argv[1:]]

        logger.debug("Running: %s", " ".join(argv))
        start = time.monotonic()
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                stdin=subprocess.DEVNULL,
                text=True,
                timeout=timeout,
                env=environ,
                cwd=cwd,
            )
        except subprocess.TimeoutExpired:
            logger.debug("Timed out after %ss: %s", timeout, argv[0])
            return CommandResult(
                argv=argv,
                returncode=-1,
                stderr=f"timed out after {timeout}s",
                elapsed=time.monotonic() - start,
            )
        except OSError as e:
            logger.debug("Could not start %s: %s", argv[0], e)
            return CommandResult(
                argv=argv, returncode=-1, stderr=str(e), elapsed=time.monotonic() - start
            )

        elapsed = time.monotonic() - start
        result = CommandResult(
            argv=argv,
            returncode=completed.returncode,
            stdout=(completed.stdout or "")[-OUTPUT_LIMIT:],
            stderr=(completed.stderr or "")[-OUTPUT_LIMIT:],
            elapsed=elapsed,
        )
        logger.debug("Exit %d after %.1fs: %s", result.returncode, elapsed, argv[0])
        return result

    def check(
        self,
        argv: list[str],
        env: Environment | None = None,
        *,
        sudo: bool = False,
        timeout: int | None = None,
        cwd: str | None = None,
        remediation: str | None = None,
    ) -> CommandResult:
        """Run a command and raise CommandError on a non-zero exit."""
        result = self.run(argv, env, sudo=sudo, timeout=timeout, cwd=cwd)
        if not result.ok:
            raise CommandError(result.argv, result.returncode, result.output, remediation)
        return result
