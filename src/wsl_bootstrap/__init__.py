"""Idempotent provisioning of a WSL development workstation."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from wsl_bootstrap.protocols import (
    CommandRunner,
    Downloader,
    FileSystem,
)

__all__ = [
    "__version__",
    "CommandRunner",
    "Downloader",
    "FileSystem",
]
