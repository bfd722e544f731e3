"""Non-failing probes of system state.

``probe`` locates an external tool and extracts its version. The predicate
factories below build detection and verification callables for steps. None
of them raise: any error while probing means "absent" or "unknown".
"""

from __future__ import annotations

import glob
import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from wsl_bootstrap.environment import Environment
from wsl_bootstrap.errors import DetectionError
from wsl_bootstrap.protocols import CommandRunner
from wsl_bootstrap.shell import ShellRunner
from wsl_bootstrap.types import UNKNOWN_VERSION, ProbeResult

if TYPE_CHECKING:
    from wsl_bootstrap.steps import StepContext

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 15

Check = Callable[["StepContext"], bool]


@dataclass(frozen=True)
class ToolSpec:
    """How to find a tool and read its version.

    Attributes:
        name: Canonical tool name.
        version_command: Command printing the version; ``name`` in
            position 0 is replaced by whichever candidate binary matched.
        version_pattern: Regex; group 1 (or the whole match) is the version.
        aliases: Alternate binary names (e.g. ``fdfind`` for ``fd``).
        locations: Explicit file paths checked when PATH lookup fails; a
            ``*`` pattern matches the newest entry in sorted order.
    """

    name: str
    version_command: tuple[str, ...] = ()
    version_pattern: str = r"(\d+\.\d+(?:\.\d+)?)"
    aliases: tuple[str, ...] = ()
    locations: tuple[str, ...] = field(default_factory=tuple)


def _locate(spec: ToolSpec, env: Environment) -> str | None:
    for candidate in (spec.name, *spec.aliases):
        if env.which(candidate):
            return candidate
    for location in spec.locations:
        expanded = env.expand(location)
        candidates = sorted(glob.glob(expanded)) if "*" in expanded else [expanded]
        for path in reversed(candidates):
            if Path(path).is_file():
                return path
    return None


def probe(
    tool_name: str,
    version_command: list[str] | tuple[str, ...] | None = None,
    version_pattern: str = r"(\d+\.\d+(?:\.\d+)?)",
    *,
    aliases: tuple[str, ...] = (),
    locations: tuple[str, ...] = (),
    env: Environment | None = None,
    runner: CommandRunner | None = None,
) -> ProbeResult:
    """Check whether a tool is available and read its version.

    Any failure after the binary is located (non-zero exit, timeout, no
    regex match) yields Present with version "unknown", never Absent.

    Args:
        tool_name: Canonical binary name.
        version_command: Command that prints the version.
        version_pattern: Regex used to extract the version.
        aliases: Alternate binary names to try.
        locations: Explicit file paths to try.
        env: Environment whose PATH is searched.
        runner: Command runner used for the version command.

    Returns:
        ProbeResult describing presence and version.
    """
    spec = ToolSpec(
        name=tool_name,
        version_command=tuple(version_command or ()),
        version_pattern=version_pattern,
        aliases=aliases,
        locations=locations,
    )
    return probe_spec(spec, env=env, runner=runner)


def probe_spec(
    spec: ToolSpec,
    env: Environment | None = None,
    runner: CommandRunner | None = None,
) -> ProbeResult:
    """Probe using a ToolSpec. See ``probe``."""
    env = env or Environment.from_os()
    try:
        binary = _locate(spec, env)
    except Exception as e:
        logger.debug("Probe for %s failed during lookup: %s", spec.name, e)
        return ProbeResult.absent()
    if binary is None:
        return ProbeResult.absent()

    if not spec.version_command:
        return ProbeResult(present=True, version=UNKNOWN_VERSION, binary=binary)

    argv = list(spec.version_command)
    if argv[0] in (spec.name, *spec.aliases):
        argv[0] = binary

    runner = runner or ShellRunner()
    try:
        result = runner.run(argv, env, timeout=PROBE_TIMEOUT)
        # Some tools print their version to stderr, some exit non-zero
        match = re.search(spec.version_pattern, result.output)
    except Exception as e:
        logger.debug("Version command for %s failed: %s", spec.name, e)
        match = None

    if not match:
        return ProbeResult(present=True, version=UNKNOWN_VERSION, binary=binary)
    version = match.group(1) if match.groups() else match.group(0)
    return ProbeResult(present=True, version=version, binary=binary)


# ============================================================================
# Predicate factories
# ============================================================================


def _safe(check: Check, description: str) -> Check:
    def wrapped(ctx: StepContext) -> bool:
        try:
            return bool(check(ctx))
        except Exception as e:
            logger.debug("Check '%s' raised, treating as absent: %s", description, e)
            return False

    wrapped.__doc__ = description
    return wrapped


def tool_present(name: str, *aliases: str, locations: tuple[str, ...] = ()) -> Check:
    """True when ``name`` or one of its aliases is on PATH."""
    spec = ToolSpec(name=name, aliases=aliases, locations=locations)
    return _safe(lambda ctx: _locate(spec, ctx.env) is not None, f"tool {name}")


def path_exists(path: str) -> Check:
    """True when ``path`` (``~`` expanded) exists."""
    return _safe(lambda ctx: ctx.fs.exists(Path(ctx.env.expand(path))), f"path {path}")


def file_contains(path: str, marker: str) -> Check:
    """True when the file at ``path`` contains ``marker``."""

    def check(ctx: StepContext) -> bool:
        target = Path(ctx.env.expand(path))
        if not ctx.fs.exists(target):
            return False
        try:
            return marker in ctx.fs.read_text(target)
        except (OSError, UnicodeDecodeError) as e:
            raise DetectionError(f"Cannot read {target}: {e}") from e

    return _safe(check, f"{path} contains {marker!r}")


def command_succeeds(argv: list[str], sudo: bool = False) -> Check:
    """True when ``argv`` exits with status 0."""

    def check(ctx: StepContext) -> bool:
        return ctx.shell.run(argv, ctx.env, sudo=sudo, timeout=PROBE_TIMEOUT).ok

    return _safe(check, " ".join(argv))


def output_contains(argv: list[str], needle: str) -> Check:
    """True when the combined output of ``argv`` contains ``needle``.

    The exit status is ignored.
    """

    def check(ctx: StepContext) -> bool:
        return needle in ctx.shell.run(argv, ctx.env, timeout=PROBE_TIMEOUT).output

    return _safe(check, f"{' '.join(argv)} | grep {needle}")


def any_of(*checks: Check) -> Check:
    """True when any of ``checks`` is true."""
    return _safe(lambda ctx: any(c(ctx) for c in checks), "any of")


def all_of(*checks: Check) -> Check:
    """True when all of ``checks`` are true."""
    return _safe(lambda ctx: all(c(ctx) for c in checks), "all of")


def negate(check: Check) -> Check:
    """True when ``check`` is false."""
    return _safe(lambda ctx: not check(ctx), "not")


def recently_modified(path: str, max_age: float) -> Check:
    """True when ``path`` exists and was modified less than ``max_age`` seconds ago."""

    def check(ctx: StepContext) -> bool:
        target = Path(ctx.env.expand(path))
        try:
            mtime = target.stat().st_mtime
        except FileNotFoundError:
            return False
        except OSError as e:
            raise DetectionError(f"Cannot stat {target}: {e}") from e
        return time.time() - mtime < max_age

    return _safe(check, f"{path} newer than {max_age:.0f}s")
