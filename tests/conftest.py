"""Shared test fixtures."""

from __future__ import annotations

import logging
import stat
from pathlib import Path
from typing import Callable

import pytest

from wsl_bootstrap.environment import Environment
from wsl_bootstrap.errors import CommandError
from wsl_bootstrap.filesystem import RealFileSystem
from wsl_bootstrap.shell import CommandResult
from wsl_bootstrap.steps import StepContext

# ============================================================================
# Test Doubles
# ============================================================================


class FakeShell:
    """Command runner that records calls instead of spawning processes.

    Responses are looked up by the full argv tuple first, then by the
    command name. Anything unmatched succeeds with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], bool]] = []
        self.responses: dict[tuple[str, ...] | str, CommandResult | Callable[[], CommandResult]] = {}

    def respond(
        self, key: tuple[str, ...] | str, returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        self.responses[key] = CommandResult(
            argv=list(key) if isinstance(key, tuple) else [key],
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )

    def run(self, argv, env=None, *, sudo=False, timeout=None, cwd=None) -> CommandResult:
        argv = list(argv)
        self.calls.append((argv, sudo))
        name = _command_name(argv)
        response = self.responses.get(tuple(argv), self.responses.get(name))
        if callable(response):
            response = response()
        if response is None:
            return CommandResult(argv=argv, returncode=0)
        return CommandResult(
            argv=argv,
            returncode=response.returncode,
            stdout=response.stdout,
            stderr=response.stderr,
        )

    def check(self, argv, env=None, *, sudo=False, timeout=None, cwd=None, remediation=None):
        result = self.run(argv, env, sudo=sudo, timeout=timeout, cwd=cwd)
        if not result.ok:
            raise CommandError(result.argv, result.returncode, result.output, remediation)
        return result

    def commands(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(argv[: len(prefix)] == list(prefix) for argv in self.commands())


def _command_name(argv: list[str]) -> str:
    """Name of the program run, looking through an ``env VAR=value`` prefix."""
    words = list(argv)
    if words and Path(words[0]).name == "env":
        words = words[1:]
        while words and "=" in words[0]:
            words = words[1:]
    return Path(words[0]).name if words else ""


class FakeDownloader:
    """Downloader that writes canned content instead of fetching."""

    def __init__(self, tag: str | None = "v1.2.3", content: str = "#!/bin/sh\n") -> None:
        self.tag = tag
        self.content = content
        self.fetched: list[str] = []

    def fetch(self, url: str, destination: Path) -> Path:
        self.fetched.append(url)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(self.content)
        return destination

    def latest_release_tag(self, owner: str, repo: str) -> str | None:
        return self.tag


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo logging setup done by CLI callbacks."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def temp_home(tmp_path: Path) -> Path:
    """Isolated home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Directory on the test environment's PATH."""
    directory = tmp_path / "bin"
    directory.mkdir()
    return directory


@pytest.fixture
def make_tool(bin_dir: Path) -> Callable[[str], Path]:
    """Create an executable placeholder so PATH lookups find it."""

    def _make(name: str, directory: Path | None = None) -> Path:
        target = (directory or bin_dir) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("#!/bin/sh\nexit 0\n")
        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return target

    return _make


@pytest.fixture
def env(temp_home: Path, bin_dir: Path) -> Environment:
    """Environment whose PATH contains only the test bin directory."""
    return Environment(home=temp_home, path=(str(bin_dir),), variables={"HOME": str(temp_home)})


@pytest.fixture
def fake_shell() -> FakeShell:
    return FakeShell()


@pytest.fixture
def fake_downloader() -> FakeDownloader:
    return FakeDownloader()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def step_context(
    fake_shell: FakeShell,
    fake_downloader: FakeDownloader,
    fake_clock: FakeClock,
    env: Environment,
) -> StepContext:
    """StepContext wired to fakes and a real filesystem under tmp_path."""
    return StepContext(
        shell=fake_shell,
        fs=RealFileSystem(),
        env=env,
        downloader=fake_downloader,
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )
