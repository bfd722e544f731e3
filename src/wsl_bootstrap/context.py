"""Application context for dependency injection.

Separates object creation from object use: CLI commands receive an
``AppContext`` and tests construct one directly with test doubles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from wsl_bootstrap.config import BootstrapConfig, load_config
from wsl_bootstrap.environment import Environment
from wsl_bootstrap.protocols import CommandRunner, Downloader, FileSystem
from wsl_bootstrap.report import Reporter
from wsl_bootstrap.runner import StepRunner
from wsl_bootstrap.steps import StepContext


def _default_reporter() -> Reporter:
    return Reporter()


@dataclass
class AppContext:
    """Container for application dependencies.

    Collaborators are typed by Protocol so test doubles can be injected
    without inheritance.
    """

    config: BootstrapConfig
    shell: CommandRunner
    filesystem: FileSystem
    downloader: Downloader
    env: Environment
    reporter: Reporter = field(default_factory=_default_reporter)

    def step_context(self) -> StepContext:
        """Build the context handed to steps."""
        return StepContext(
            shell=self.shell,
            fs=self.filesystem,
            env=self.env,
            downloader=self.downloader,
        )

    def create_runner(self, *, fail_fast: bool, force: bool) -> StepRunner:
        """Create a runner that reports results as they arrive."""
        return StepRunner(
            self.step_context(),
            fail_fast=fail_fast,
            force=force,
            on_result=self.reporter.show_result,
            on_phase=self.reporter.show_phase,
        )


def create_context(config_path: Path | None = None) -> AppContext:
    """Factory for application dependencies.

    Use this in production code. For tests, construct AppContext directly.

    Args:
        config_path: Explicit configuration file.

    Returns:
        Configured AppContext.

    Raises:
        ConfigError: If the configuration is missing or invalid.
    """
    from wsl_bootstrap.downloads import UrlDownloader
    from wsl_bootstrap.filesystem import RealFileSystem
    from wsl_bootstrap.shell import ShellRunner

    config = load_config(config_path)
    return AppContext(
        config=config,
        shell=ShellRunner(timeout=config.command_timeout),
        filesystem=RealFileSystem(),
        downloader=UrlDownloader(),
        env=Environment.from_os(home=config.home),
    )
