"""Protocol definitions for core abstractions.

This module defines abstract interfaces (Protocols) for the collaborators
the runner and its steps depend on. Designing to interfaces enables:
- Loose coupling between steps and the host system
- Easy substitution of test doubles
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wsl_bootstrap.environment import Environment
    from wsl_bootstrap.shell import CommandResult


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for running external commands.

    Implementations never raise from ``run`` for process failures; ``check``
    raises CommandError on a non-zero exit.
    """

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

        Args:
            argv: Command and arguments.
            env: Environment snapshot for the child process.
            sudo: Run with elevated privileges.
            timeout: Seconds before the process is abandoned.
            cwd: Working directory.

        Returns:
            CommandResult describing the outcome.
        """
        ...

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
        """Run a command, raising CommandError on failure.

        Args:
            argv: Command and arguments.
            env: Environment snapshot for the child process.
            sudo: Run with elevated privileges.
            timeout: Seconds before the process is abandoned.
            cwd: Working directory.
            remediation: Hint attached to the raised error.

        Returns:
            CommandResult of the successful command.
        """
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for filesystem operations.

    Abstracts filesystem access to enable testing without real I/O.
    """

    def read_text(self, path: Path) -> str:
        """Read text content from a file.

        Raises:
            FileNotFoundError: If file does not exist.
        """
        ...

    def write_text(self, path: Path, content: str, mode: int | None = None) -> None:
        """Write text content to a file, optionally setting its mode."""
        ...

    def append_text(self, path: Path, content: str) -> None:
        """Append text to a file, preserving permission bits."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        ...

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        ...

    def chmod(self, path: Path, mode: int) -> None:
        """Change permission bits."""
        ...

    def get_mode(self, path: Path) -> int:
        """Get permission bits of a path."""
        ...


@runtime_checkable
class Downloader(Protocol):
    """Protocol for fetching remote resources."""

    def fetch(self, url: str, destination: Path) -> Path:
        """Download ``url`` to ``destination``.

        Raises:
            DownloadError: If the resource cannot be fetched.
        """
        ...

    def latest_release_tag(self, owner: str, repo: str) -> str | None:
        """Query the latest release tag of a GitHub repository."""
        ...
