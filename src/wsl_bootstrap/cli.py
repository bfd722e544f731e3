"""CLI commands using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from wsl_bootstrap.context import AppContext
    from wsl_bootstrap.types import RunReport

import typer
from rich.console import Console

from wsl_bootstrap import __version__
from wsl_bootstrap.catalog import TOOLS, build_plan
from wsl_bootstrap.config import PHASES
from wsl_bootstrap.context import create_context
from wsl_bootstrap.errors import ConfigError, PrerequisiteFailure
from wsl_bootstrap.logging_config import resolve_level, setup_logging
from wsl_bootstrap.probe import probe_spec
from wsl_bootstrap.report import Reporter

logger = logging.getLogger(__name__)

# Exit status for usage and configuration errors
EXIT_USAGE = 2

app = typer.Typer(
    name="wsl-bootstrap",
    help="Provision a WSL development workstation",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")

console = Console()
reporter = Reporter(console)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Configuration file (YAML)"),
]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"wsl-bootstrap v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Also write full-detail logs to this file"),
    ] = None,
) -> None:
    """Provision a WSL development workstation."""
    setup_logging(
        resolve_level(log_level),
        str(log_file) if log_file else None,
        "DEBUG" if log_file else None,
    )


def _load_context(config: Path | None) -> AppContext:
    """Create the application context, mapping config errors to exit 2."""
    try:
        return create_context(config)
    except ConfigError as e:
        reporter.show_error(str(e))
        raise typer.Exit(EXIT_USAGE) from e


def _check_phases(names: list[str], option: str) -> None:
    unknown = [n for n in names if n not in PHASES]
    if unknown:
        reporter.show_error(
            f"Unknown phase(s) for {option}: {', '.join(unknown)}. "
            f"Supported: {', '.join(PHASES)}"
        )
        raise typer.Exit(EXIT_USAGE)


def _finish(ctx: AppContext, report: RunReport) -> None:
    ctx.reporter.show_report(report)
    try:
        report.raise_for_failure()
    except PrerequisiteFailure as e:
        raise typer.Exit(report.exit_code) from e


# ============================================================================
# Run Commands
# ============================================================================


@app.command("run")
def run(
    skip: Annotated[
        list[str] | None,
        typer.Option("--skip", "-s", help="Phase to skip (repeatable)"),
    ] = None,
    skip_infrastructure: Annotated[
        bool, typer.Option("--skip-infrastructure", help="Skip system packages")
    ] = False,
    skip_container_engine: Annotated[
        bool, typer.Option("--skip-container-engine", help="Skip Docker setup")
    ] = False,
    only: Annotated[
        list[str] | None,
        typer.Option("--only", "-o", help="Run only this phase (repeatable)"),
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Re-run actions for present steps")
    ] = False,
    no_fail_fast: Annotated[
        bool,
        typer.Option("--no-fail-fast", help="Keep going after a required step fails"),
    ] = False,
    config: ConfigOption = None,
    _context=None,
) -> None:
    """Run the bootstrap phases in order."""
    skip = list(skip or [])
    only = list(only or [])
    _check_phases(skip, "--skip")
    _check_phases(only, "--only")

    ctx = _context or _load_context(config)

    skipped = set(ctx.config.skip_phases) | set(skip)
    if skip_infrastructure:
        skipped.add("infrastructure")
    if skip_container_engine:
        skipped.add("container-engine")
    if only:
        skipped |= {name for name in PHASES if name not in only}

    try:
        settings = ctx.config.with_overrides(
            skip_phases=[name for name in PHASES if name in skipped],
            force=True if force else None,
            fail_fast=False if no_fail_fast else None,
        )
    except ConfigError as e:
        reporter.show_error(str(e))
        raise typer.Exit(EXIT_USAGE) from e

    runner = ctx.create_runner(fail_fast=settings.fail_fast, force=settings.force)
    ctx.reporter.show_banner(__version__)
    report = runner.run_phases(build_plan(settings), skip=settings.skip_phases)
    _finish(ctx, report)


@app.command("verify")
def verify(
    config: ConfigOption = None,
    _context=None,
) -> None:
    """Check every tool and file without installing anything."""
    ctx = _context or _load_context(config)
    phases = [p for p in build_plan(ctx.config) if p.name == "verify"]
    runner = ctx.create_runner(fail_fast=False, force=False)
    report = runner.run_phases(phases)
    _finish(ctx, report)


@app.command("plan")
def plan(
    config: ConfigOption = None,
    _context=None,
) -> None:
    """List phases and steps without running anything."""
    ctx = _context or _load_context(config)
    ctx.reporter.show_plan(build_plan(ctx.config), set(ctx.config.skip_phases))


@app.command("probe")
def probe(
    tool: Annotated[str, typer.Argument(help="Tool name, e.g. rg or docker")],
    config: ConfigOption = None,
    _context=None,
) -> None:
    """Probe one tool and print its version."""
    spec = TOOLS.get(tool)
    if spec is None:
        reporter.show_error(f"Unknown tool: {tool}. Known: {', '.join(sorted(TOOLS))}")
        raise typer.Exit(EXIT_USAGE)

    ctx = _context or _load_context(config)
    result = probe_spec(spec, env=ctx.env, runner=ctx.shell)
    ctx.reporter.show_probe(spec, result)
    if not result.present:
        raise typer.Exit(1)


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    config: ConfigOption = None,
    _context=None,
) -> None:
    """Show the effective configuration."""
    ctx = _context or _load_context(config)
    ctx.reporter.show_config(ctx.config)


if __name__ == "__main__":
    app()
