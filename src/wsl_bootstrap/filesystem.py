"""Filesystem abstraction for testability.

This module provides a filesystem abstraction that enables testing
without touching the real home directory. The RealFileSystem
implementation wraps standard library operations.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library Path operations.
    Satisfies the FileSystem protocol structurally.
    """

    def read_text(self, path: Path) -> str:
        """Read text content from a file."""
        return path.read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str, mode: int | None = None) -> None:
        """Write text content to a file, optionally setting its mode.

        The mode is in place before any content is written.
        """
        if mode is None:
            path.write_text(content, encoding="utf-8")
            return
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        # open leaves existing files at their mode and new ones narrowed by the umask
        try:
            os.fchmod(fd, mode)
        except OSError:
            os.close(fd)
            raise
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)

    def append_text(self, path: Path, content: str) -> None:
        """Append text to a file without touching its permission bits."""
        with path.open("a", encoding="utf-8") as handle:
            handle.write(content)

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        return path.is_dir()

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        path.mkdir(parents=parents, exist_ok=exist_ok)

    def chmod(self, path: Path, mode: int) -> None:
        """Change permission bits."""
        path.chmod(mode)

    def get_mode(self, path: Path) -> int:
        """Get permission bits of a path."""
        return stat.S_IMODE(path.stat().st_mode)
