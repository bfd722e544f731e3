"""Idempotent insertion of configuration fragments into text files.

A fragment is a block of text identified by a marker substring. The marker
is the idempotency key: once it appears in the target file, the fragment is
never written again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from wsl_bootstrap.filesystem import RealFileSystem
from wsl_bootstrap.protocols import FileSystem
from wsl_bootstrap.types import FragmentOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigFileFragment:
    """A marked block of configuration text.

    Attributes:
        name: Human-readable name, used in reports.
        marker: Substring that identifies a prior insertion.
        text: The block to append.
    """

    name: str
    marker: str
    text: str

    def __post_init__(self) -> None:
        """Validate invariants."""
        _validate(self.marker, self.text)


def _validate(marker: str, text: str) -> None:
    if not marker:
        raise ValueError("marker cannot be empty")
    if not text.strip():
        raise ValueError("fragment text cannot be empty")


def compose(marker: str, text: str) -> str:
    """Build the block written for a fragment.

    The marker must land in the file or the next call cannot detect the
    insertion, so it is prepended as its own line when ``text`` lacks it.
    """
    block = text if marker in text else f"{marker}\n{text}"
    return block if block.endswith("\n") else block + "\n"


def ensure_fragment(
    path: Path,
    marker: str,
    text: str,
    filesystem: FileSystem | None = None,
    create_mode: int | None = None,
) -> FragmentOutcome:
    """Append ``text`` to ``path`` unless ``marker`` is already present.

    A missing file counts as empty. Appending keeps the existing file's
    permission bits; ``create_mode`` applies only when the file is new.

    Args:
        path: Target configuration file.
        marker: Idempotency key searched for in the current content.
        text: Fragment to append.
        filesystem: Filesystem abstraction (real filesystem if omitted).
        create_mode: Permission bits for a newly created file.

    Returns:
        FragmentOutcome.INSERTED or FragmentOutcome.ALREADY_PRESENT.

    Raises:
        ValueError: If marker or text is empty.
    """
    _validate(marker, text)
    fs = filesystem or RealFileSystem()

    existed = fs.exists(path)
    content = fs.read_text(path) if existed else ""
    if marker in content:
        logger.debug("Fragment %r already present in %s", marker, path)
        return FragmentOutcome.ALREADY_PRESENT

    block = compose(marker, text)
    if not existed:
        fs.mkdir(path.parent, parents=True, exist_ok=True)
        fs.write_text(path, block, mode=create_mode)
        logger.info("Created %s with fragment %r", path, marker)
        return FragmentOutcome.INSERTED

    if not content:
        separator = ""
    elif content.endswith("\n"):
        separator = "\n"
    else:
        separator = "\n\n"
    fs.append_text(path, separator + block)
    logger.info("Appended fragment %r to %s", marker, path)
    return FragmentOutcome.INSERTED


def ensure(
    path: Path,
    fragment: ConfigFileFragment,
    filesystem: FileSystem | None = None,
    create_mode: int | None = None,
) -> FragmentOutcome:
    """Ensure a ConfigFileFragment is present in ``path``."""
    return ensure_fragment(path, fragment.marker, fragment.text, filesystem, create_mode)
