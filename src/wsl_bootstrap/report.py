"""Rich console output for bootstrap runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from wsl_bootstrap.types import RunReport, StepResult, StepStatus

if TYPE_CHECKING:
    from wsl_bootstrap.config import BootstrapConfig
    from wsl_bootstrap.probe import ToolSpec
    from wsl_bootstrap.steps import Phase
    from wsl_bootstrap.types import ProbeResult

# status -> (glyph, style)
STATUS_STYLES: dict[StepStatus, tuple[str, str]] = {
    StepStatus.SKIPPED: ("✓", "green"),
    StepStatus.INSTALLED: ("+", "green"),
    StepStatus.WARNED: ("!", "yellow"),
    StepStatus.FAILED: ("✗", "red"),
}


class Reporter:
    """Prints step results as they arrive and summarizes the run."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the reporter.

        Args:
            console: Output console. Defaults to stdout.
        """
        self.console = console or Console()

    def show_banner(self, version: str) -> None:
        """Display the run banner."""
        self.console.print(
            Panel(
                f"[bold blue]wsl-bootstrap[/bold blue] v{version}\n"
                "Provision a WSL development workstation",
                border_style="blue",
            )
        )

    def show_phase(self, phase: Phase) -> None:
        """Announce the start of a phase."""
        self.console.print()
        self.console.rule(f"[bold]{phase.title}[/bold] [dim]({phase.name})[/dim]")

    def show_result(self, result: StepResult) -> None:
        """Print one result line.

        Args:
            result: Result to print.
        """
        glyph, style = STATUS_STYLES[result.status]
        self.console.print(
            f"  [{style}]{glyph}[/{style}] [cyan]{result.name}[/cyan] "
            f"[dim]{escape(result.detail)}[/dim]"
        )

    def show_report(self, report: RunReport) -> None:
        """Print the per-phase table, remediations and the summary line.

        Args:
            report: Finished run report.
        """
        self.console.print()
        table = Table(title="Bootstrap Summary")
        table.add_column("Phase", style="cyan")
        table.add_column("Passed", style="green", justify="right")
        table.add_column("Warnings", style="yellow", justify="right")
        table.add_column("Failed", style="red", justify="right")

        for phase, results in report.by_phase().items():
            table.add_row(
                phase or "-",
                str(sum(1 for r in results if r.status.passed)),
                str(sum(1 for r in results if r.status is StepStatus.WARNED)),
                str(sum(1 for r in results if r.status is StepStatus.FAILED)),
            )
        for phase in report.skipped_phases:
            table.add_row(f"[dim]{phase}[/dim]", "[dim]skipped[/dim]", "", "")
        self.console.print(table)

        pending = [r for r in report.results if not r.status.passed]
        if pending:
            self.console.print("\n[bold]To finish manually:[/bold]")
            for result in pending:
                _, style = STATUS_STYLES[result.status]
                hint = escape(result.remediation or "")
                self.console.print(f"  [{style}]{result.name}[/{style}]: {hint}")

        if report.halted_by:
            self.show_error(f"Stopped after required step '{report.halted_by}' failed")

        self.console.print(
            f"\n[green]{report.passed} passed[/green], "
            f"[yellow]{report.warned} warnings[/yellow], "
            f"[red]{report.failed} failed[/red]"
        )

    def show_plan(self, phases: list[Phase], skip: set[str]) -> None:
        """Display the phases and steps that a run would attempt.

        Args:
            phases: Planned phases.
            skip: Names of phases that would be skipped.
        """
        for phase in phases:
            table = Table(title=f"{phase.title} ({phase.name})")
            if phase.name in skip:
                table.title += " [dim]skipped[/dim]"
            table.add_column("Step", style="cyan")
            table.add_column("Kind")
            table.add_column("Criticality")
            for step in phase.steps:
                criticality = "[bold]required[/bold]" if step.required else "optional"
                table.add_row(step.name, step.variant, criticality)
            self.console.print(table)

    def show_probe(self, spec: ToolSpec, result: ProbeResult) -> None:
        """Display the result of probing one tool."""
        if result.present:
            self.show_success(f"{spec.name}: {result}")
        else:
            self.show_warning(f"{spec.name}: not installed")

    def show_config(self, config: BootstrapConfig) -> None:
        """Display the effective configuration."""
        table = Table(title="Effective Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for key, value in config.model_dump(by_alias=True, mode="json").items():
            table.add_row(key, str(value))
        self.console.print(table)

    def show_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def show_error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def show_warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")
