"""Install step variants.

Every unit of work is an ``InstallStep`` subclass sharing one execution
contract: ``detect`` (never raises), ``install`` (returns a detail message
or raises ActionFailure), optional ``verify``, and a ``remediation`` hint.

Pattern: Template Method - the base class owns detection, verification and
remediation plumbing; subclasses provide the action.
"""

from __future__ import annotations

import logging
import tempfile
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, ClassVar

from wsl_bootstrap.environment import EnvContribution, Environment
from wsl_bootstrap.errors import ActionFailure, CommandError, DownloadError, ReadinessTimeout
from wsl_bootstrap.fragments import ConfigFileFragment, ensure
from wsl_bootstrap.probe import (
    Check,
    ToolSpec,
    command_succeeds,
    file_contains,
    output_contains,
    path_exists,
    probe_spec,
    tool_present,
)
from wsl_bootstrap.protocols import CommandRunner, Downloader, FileSystem
from wsl_bootstrap.types import Criticality, FragmentOutcome

logger = logging.getLogger(__name__)


@dataclass
class StepContext:
    """Collaborators available to a step while it runs.

    The runner replaces ``env`` as steps contribute to it.
    """

    shell: CommandRunner
    fs: FileSystem
    env: Environment
    downloader: Downloader
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep


@dataclass(kw_only=True)
class InstallStep(ABC):
    """Base class for all steps.

    Attributes:
        name: Unique step name.
        phase: Phase the step belongs to (filled in by ``Phase``).
        criticality: REQUIRED steps fail the run, OPTIONAL steps warn.
        detector: Presence check; subclasses supply a default.
        verifier: Post-install check; None skips verification.
        env: Environment contributed once the step is in place.
        hint: Remediation override; subclasses derive a default.
        forceable: Whether force re-runs the action of a present step.
    """

    name: str
    phase: str = ""
    criticality: Criticality = Criticality.OPTIONAL
    detector: Check | None = None
    verifier: Check | None = None
    env: EnvContribution = field(default_factory=EnvContribution)
    hint: str | None = None

    forceable: ClassVar[bool] = True

    @property
    def required(self) -> bool:
        return self.criticality is Criticality.REQUIRED

    @property
    def variant(self) -> str:
        return type(self).__name__

    def detect(self, ctx: StepContext) -> bool:
        """Return True when the step's outcome is already in place."""
        check = self.detector or self.default_detector()
        if check is None:
            return False
        return check(ctx)

    def verify(self, ctx: StepContext) -> bool | None:
        """Run the post-install check. None when there is nothing to verify."""
        if self.verifier is None:
            return None
        return self.verifier(ctx)

    @property
    def remediation(self) -> str:
        return self.hint or self.default_remediation()

    def default_detector(self) -> Check | None:
        return None

    def describe_present(self, ctx: StepContext) -> str | None:
        """Detail reported when the step is skipped as already present."""
        return None

    @abstractmethod
    def default_remediation(self) -> str:
        """Manual command that finishes this step."""
        ...

    @abstractmethod
    def install(self, ctx: StepContext) -> str:
        """Perform the action.

        Returns:
            Human-readable detail of what was done.

        Raises:
            ActionFailure: If the action could not complete.
        """
        ...


# ============================================================================
# Package managers
# ============================================================================

# manager -> (command prefix, needs root)
PACKAGE_MANAGERS: dict[str, tuple[tuple[str, ...], bool]] = {
    "apt": (("apt-get", "install", "-y", "-qq"), True),
    "npm": (("npm", "install", "-g"), False),
    "pip": (("python3", "-m", "pip", "install", "--user"), False),
    "pipx": (("pipx", "install"), False),
    "gh-extension": (("gh", "extension", "install"), False),
}

# sudo resets the environment, so the frontend is set on the command line
APT_NONINTERACTIVE = ("env", "DEBIAN_FRONTEND=noninteractive")


@dataclass(kw_only=True)
class PackageManagerInstall(InstallStep):
    """Install packages through a system or language package manager.

    Attributes:
        packages: Package names passed to the manager.
        manager: One of PACKAGE_MANAGERS.
        binary: Executable whose presence means installed.
        aliases: Alternate names of ``binary``.
        fallback: Step tried when the manager fails.
    """

    packages: tuple[str, ...]
    manager: str = "apt"
    binary: str | None = None
    aliases: tuple[str, ...] = ()
    fallback: InstallStep | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.manager not in PACKAGE_MANAGERS:
            raise ValueError(
                f"Unknown package manager: {self.manager}. "
                f"Supported: {list(PACKAGE_MANAGERS.keys())}"
            )
        if not self.packages:
            raise ValueError("packages cannot be empty")

    def command(self) -> list[str]:
        prefix, _ = PACKAGE_MANAGERS[self.manager]
        return [*prefix, *self.packages]

    @property
    def needs_root(self) -> bool:
        return PACKAGE_MANAGERS[self.manager][1]

    def default_detector(self) -> Check | None:
        if self.binary:
            return tool_present(self.binary, *self.aliases)
        if self.manager == "apt":
            return command_succeeds(["dpkg", "-s", *self.packages])
        if self.manager == "npm":
            return command_succeeds(["npm", "ls", "-g", *self.packages])
        if self.manager == "pip":
            return command_succeeds(["python3", "-m", "pip", "show", *self.packages])
        if self.manager == "gh-extension":
            return output_contains(["gh", "extension", "list"], self.packages[0])
        return None

    def default_remediation(self) -> str:
        argv = self.command()
        if self.needs_root:
            argv = ["sudo", *argv]
        return " ".join(argv)

    def install(self, ctx: StepContext) -> str:
        argv = self.command()
        if self.manager == "apt":
            argv = [*APT_NONINTERACTIVE, *argv]
        try:
            ctx.shell.check(argv, ctx.env, sudo=self.needs_root, remediation=self.remediation)
        except CommandError as e:
            if self.fallback is None:
                raise
            logger.info("%s failed via %s, trying %s: %s", self.name, self.manager, self.fallback.name, e)
            detail = self.fallback.install(ctx)
            return f"{detail} (fallback after {self.manager} failed)"
        return f"installed {', '.join(self.packages)} via {self.manager}"


# ============================================================================
# Downloads
# ============================================================================

DOWNLOAD_KINDS = ("binary", "file", "deb", "tarball")


@dataclass(kw_only=True)
class DirectDownloadInstall(InstallStep):
    """Download an artifact and install it.

    ``url`` may contain ``{tag}`` and ``{version}`` placeholders, filled from
    the latest GitHub release of ``release`` (owner, repo).

    Attributes:
        url: Artifact URL or template.
        kind: "binary" (install as executable), "file" (install read-only,
            e.g. an apt keyring), "deb" (dpkg -i) or "tarball" (extract
            into ``destination``).
        destination: Target file (binary) or directory (tarball).
        release: GitHub (owner, repo) used to resolve placeholders.
        sudo: Install with elevated privileges.
        binary: Executable whose presence means installed.
        replace: Directory removed before extracting a tarball.
    """

    url: str
    kind: str = "binary"
    destination: str = ""
    release: tuple[str, str] | None = None
    sudo: bool = False
    binary: str | None = None
    replace: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.kind not in DOWNLOAD_KINDS:
            raise ValueError(f"Unknown download kind: {self.kind}. Supported: {list(DOWNLOAD_KINDS)}")
        if self.kind != "deb" and not self.destination:
            raise ValueError(f"destination is required for {self.kind} downloads")

    def resolve_url(self, ctx: StepContext) -> str:
        """Fill release placeholders in the URL."""
        if self.release is None:
            return self.url
        owner, repo = self.release
        tag = ctx.downloader.latest_release_tag(owner, repo)
        if not tag:
            raise DownloadError(
                f"Could not determine latest release of {owner}/{repo}",
                remediation=self.remediation,
            )
        return self.url.format(tag=tag, version=tag.lstrip("v"))

    def default_detector(self) -> Check | None:
        return tool_present(self.binary) if self.binary else None

    def default_remediation(self) -> str:
        prefix = "sudo " if self.sudo or self.kind == "deb" else ""
        if self.kind == "deb":
            return f"curl -fsSLo pkg.deb {self.url} && {prefix}dpkg -i pkg.deb"
        if self.kind == "tarball":
            return f"curl -fsSL {self.url} | {prefix}tar -C {self.destination} -xz"
        if self.kind == "file":
            return f"curl -fsSL {self.url} | {prefix}tee {self.destination} >/dev/null"
        return f"curl -fsSLo {self.destination} {self.url} && chmod +x {self.destination}"

    def install(self, ctx: StepContext) -> str:
        url = self.resolve_url(ctx)
        with tempfile.TemporaryDirectory(prefix="wsl-bootstrap-") as scratch:
            artifact = ctx.downloader.fetch(url, Path(scratch) / Path(url).name)
            destination = ctx.env.expand(self.destination)

            if self.kind == "deb":
                ctx.shell.check(
                    ["dpkg", "-i", str(artifact)], ctx.env, sudo=True, remediation=self.remediation
                )
                return f"installed {artifact.name}"

            if self.kind == "tarball":
                if self.replace:
                    ctx.shell.check(
                        ["rm", "-rf", ctx.env.expand(self.replace)], ctx.env, sudo=self.sudo
                    )
                ctx.shell.check(["mkdir", "-p", destination], ctx.env, sudo=self.sudo)
                ctx.shell.check(
                    ["tar", "-C", destination, "-xzf", str(artifact)],
                    ctx.env,
                    sudo=self.sudo,
                    remediation=self.remediation,
                )
                return f"extracted {artifact.name} into {destination}"

            mode = "0755" if self.kind == "binary" else "0644"
            ctx.shell.check(
                ["install", "-D", "-m", mode, str(artifact), destination],
                ctx.env,
                sudo=self.sudo,
                remediation=self.remediation,
            )
            return f"installed {destination}"


@dataclass(kw_only=True)
class ScriptPipeInstall(InstallStep):
    """Download an installer script and run it.

    Attributes:
        url: Installer script URL.
        interpreter: Command that runs the script.
        args: Arguments passed to the script.
        sudo: Run the interpreter with elevated privileges.
        binary: Executable whose presence means installed.
        marker_path: Path whose existence means installed (e.g. ``~/.nvm``).
    """

    url: str
    interpreter: tuple[str, ...] = ("bash",)
    args: tuple[str, ...] = ()
    sudo: bool = False
    binary: str | None = None
    marker_path: str | None = None

    def default_detector(self) -> Check | None:
        if self.marker_path:
            marker = self.marker_path
            return lambda ctx: ctx.fs.exists(Path(ctx.env.expand(marker)))
        return tool_present(self.binary) if self.binary else None

    def default_remediation(self) -> str:
        runner = " ".join(self.interpreter)
        if self.sudo:
            runner = f"sudo {runner}"
        if self.args:
            return f"curl -fsSL {self.url} | {runner} -s -- {' '.join(self.args)}"
        return f"curl -fsSL {self.url} | {runner}"

    def install(self, ctx: StepContext) -> str:
        with tempfile.TemporaryDirectory(prefix="wsl-bootstrap-") as scratch:
            script = ctx.downloader.fetch(self.url, Path(scratch) / "install.sh")
            ctx.shell.check(
                [*self.interpreter, str(script), *self.args],
                ctx.env,
                sudo=self.sudo,
                remediation=self.remediation,
            )
        return f"ran installer from {self.url}"


# ============================================================================
# Commands and checks
# ============================================================================


@dataclass(kw_only=True)
class CommandInstall(InstallStep):
    """Run a fixed sequence of commands.

    Arguments are expanded for ``~`` and ``$HOME``.

    Attributes:
        commands: Commands run in order; the first failure stops the step.
        sudo: Run the commands with elevated privileges.
        creates: Path the commands produce. When it exists the commands are
            not run, even under force.
    """

    commands: tuple[tuple[str, ...], ...]
    sudo: bool = False
    creates: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.commands:
            raise ValueError("commands cannot be empty")

    def default_detector(self) -> Check | None:
        return path_exists(self.creates) if self.creates else None

    def default_remediation(self) -> str:
        prefix = "sudo " if self.sudo else ""
        return " && ".join(prefix + " ".join(argv) for argv in self.commands)

    def install(self, ctx: StepContext) -> str:
        if self.creates and ctx.fs.exists(Path(ctx.env.expand(self.creates))):
            return f"kept existing {self.creates}"
        for argv in self.commands:
            expanded = [ctx.env.expand(arg) for arg in argv]
            ctx.shell.check(expanded, ctx.env, sudo=self.sudo, remediation=self.remediation)
        return f"ran {len(self.commands)} command(s)"


@dataclass(kw_only=True)
class NoOp(InstallStep):
    """Check-only step.

    The action cannot install anything; an absent target turns into a
    failure (or warning) carrying the remediation hint.

    Attributes:
        missing: Detail reported when the check fails.
        tool: Tool probed for presence and version when no detector is set.
    """

    forceable: ClassVar[bool] = False

    missing: str = ""
    tool: ToolSpec | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.detector is None and self.tool is None:
            raise ValueError("NoOp steps require a detector or a tool")
        if not self.hint:
            raise ValueError("NoOp steps require a remediation hint")

    def default_detector(self) -> Check | None:
        if self.tool is None:
            return None
        return tool_present(self.tool.name, *self.tool.aliases, locations=self.tool.locations)

    def describe_present(self, ctx: StepContext) -> str | None:
        if self.tool is None:
            return None
        return str(probe_spec(self.tool, env=ctx.env, runner=ctx.shell))

    def default_remediation(self) -> str:
        return self.hint or ""

    def install(self, ctx: StepContext) -> str:
        raise ActionFailure(self.missing or f"{self.name}: not found", self.remediation)


# ============================================================================
# Filesystem
# ============================================================================


@dataclass(kw_only=True)
class EnsureFragmentStep(InstallStep):
    """Ensure a configuration fragment is present in a file.

    Attributes:
        path: Target file (``~`` expanded).
        fragment: Fragment to insert.
        create_mode: Permission bits if the file has to be created.
    """

    path: str
    fragment: ConfigFileFragment
    create_mode: int | None = None

    def default_detector(self) -> Check | None:
        return file_contains(self.path, self.fragment.marker)

    def default_remediation(self) -> str:
        return f"append the '{self.fragment.name}' block to {self.path}"

    def install(self, ctx: StepContext) -> str:
        target = Path(ctx.env.expand(self.path))
        outcome = ensure(target, self.fragment, ctx.fs, self.create_mode)
        if outcome is FragmentOutcome.ALREADY_PRESENT:
            return f"'{self.fragment.name}' already in {self.path}"
        return f"added '{self.fragment.name}' to {self.path}"


@dataclass(kw_only=True)
class EnsureDirectoryStep(InstallStep):
    """Ensure directories exist, optionally with restricted permissions.

    Attributes:
        paths: Directories to create (``~`` expanded).
        mode: Permission bits applied to each directory.
    """

    paths: tuple[str, ...]
    mode: int | None = None

    def _targets(self, ctx: StepContext) -> list[Path]:
        return [Path(ctx.env.expand(p)) for p in self.paths]

    def default_detector(self) -> Check | None:
        def check(ctx: StepContext) -> bool:
            for target in self._targets(ctx):
                if not ctx.fs.is_dir(target):
                    return False
                if self.mode is not None and ctx.fs.get_mode(target) != self.mode:
                    return False
            return True

        return check

    def default_remediation(self) -> str:
        cmd = f"mkdir -p {' '.join(self.paths)}"
        if self.mode is not None:
            cmd += f" && chmod {self.mode:o} {' '.join(self.paths)}"
        return cmd

    def install(self, ctx: StepContext) -> str:
        for target in self._targets(ctx):
            ctx.fs.mkdir(target, parents=True, exist_ok=True)
            if self.mode is not None:
                ctx.fs.chmod(target, self.mode)
        return f"created {', '.join(self.paths)}"


@dataclass(kw_only=True)
class WriteFileStep(InstallStep):
    """Create a file from a template unless it already exists.

    An existing file is never overwritten, even under force.

    Attributes:
        path: Target file (``~`` expanded).
        content: Template content.
        mode: Permission bits for the new file.
    """

    path: str
    content: str
    mode: int | None = None

    def default_detector(self) -> Check | None:
        path = self.path
        return lambda ctx: ctx.fs.exists(Path(ctx.env.expand(path)))

    def default_remediation(self) -> str:
        cmd = f"create {self.path}"
        if self.mode is not None:
            cmd += f" && chmod {self.mode:o} {self.path}"
        return cmd

    def install(self, ctx: StepContext) -> str:
        target = Path(ctx.env.expand(self.path))
        if ctx.fs.exists(target):
            return f"kept existing {self.path}"
        ctx.fs.mkdir(target.parent, parents=True, exist_ok=True)
        ctx.fs.write_text(target, self.content, mode=self.mode)
        return f"created {self.path}"


# ============================================================================
# Readiness
# ============================================================================


@dataclass(kw_only=True)
class WaitForReady(InstallStep):
    """Poll an external service until it is ready.

    A timeout raises ReadinessTimeout, which the runner records as a
    warning regardless of criticality.

    Attributes:
        ready: Readiness check, used as the detector as well.
        timeout: Maximum seconds to wait.
        interval: Seconds between checks.
    """

    ready: Check
    timeout: float = 60.0
    interval: float = 5.0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.timeout <= 0 or self.interval <= 0:
            raise ValueError("timeout and interval must be positive")
        if not self.hint:
            raise ValueError("WaitForReady steps require a remediation hint")

    def default_detector(self) -> Check | None:
        return self.ready

    def default_remediation(self) -> str:
        return self.hint or ""

    def install(self, ctx: StepContext) -> str:
        start = ctx.clock()
        deadline = start + self.timeout
        while True:
            if self.ready(ctx):
                return f"ready after {ctx.clock() - start:.0f}s"
            if ctx.clock() >= deadline:
                raise ReadinessTimeout(
                    f"not ready after {self.timeout:.0f}s", remediation=self.remediation
                )
            ctx.sleep(self.interval)


# ============================================================================
# Phases
# ============================================================================


@dataclass
class Phase:
    """Named, skippable group of steps run in order."""

    name: str
    title: str
    steps: list[InstallStep] = field(default_factory=list)

    def __post_init__(self) -> None:
        for step in self.steps:
            step.phase = self.name
