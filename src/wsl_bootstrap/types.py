"""Shared data types for the bootstrap runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from wsl_bootstrap.errors import PrerequisiteFailure

__all__ = [
    "Criticality",
    "FragmentOutcome",
    "ProbeResult",
    "RunReport",
    "StepResult",
    "StepStatus",
    "UNKNOWN_VERSION",
]

UNKNOWN_VERSION = "unknown"


class StepStatus(str, Enum):
    """Outcome of running one step."""

    SKIPPED = "skipped"  # already present, no action taken
    INSTALLED = "installed"
    WARNED = "warned"
    FAILED = "failed"

    @property
    def passed(self) -> bool:
        return self in (StepStatus.SKIPPED, StepStatus.INSTALLED)


class Criticality(str, Enum):
    """Whether a step's failure fails the run or merely warns."""

    REQUIRED = "required"
    OPTIONAL = "optional"


class FragmentOutcome(str, Enum):
    """Result of ensuring a configuration fragment is present."""

    INSERTED = "inserted"
    ALREADY_PRESENT = "already_present"


@dataclass(frozen=True)
class ProbeResult:
    """Result of probing for an external tool.

    Attributes:
        present: True if a candidate binary was found.
        version: Parsed version, "unknown" if unparseable, None when absent.
        binary: Name or path of the binary that matched.
    """

    present: bool
    version: str | None = None
    binary: str | None = None

    @classmethod
    def absent(cls) -> ProbeResult:
        return cls(present=False)

    def __str__(self) -> str:
        if not self.present:
            return "not installed"
        if self.binary:
            return f"{self.version} ({self.binary})"
        return str(self.version)


@dataclass(frozen=True)
class StepResult:
    """Result of running a single install step.

    Attributes:
        name: Step name.
        status: Outcome status.
        detail: Human-readable explanation.
        phase: Phase the step belongs to.
        criticality: Criticality of the step.
        remediation: Manual command to finish the step (required on warn/fail).
        elapsed: Wall time spent in the step, in seconds.
    """

    name: str
    status: StepStatus
    detail: str
    phase: str = ""
    criticality: Criticality = Criticality.OPTIONAL
    remediation: str | None = None
    elapsed: float = 0.0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.name:
            raise ValueError("name cannot be empty")
        if not self.detail:
            raise ValueError("detail cannot be empty")
        if not self.status.passed and not self.remediation:
            raise ValueError(f"{self.status.value} result requires a remediation hint")


@dataclass(frozen=True)
class RunReport:
    """Ordered results of a run plus aggregate counts.

    Counts are derived from ``results`` so they always match the tally.
    """

    results: tuple[StepResult, ...] = ()
    halted_by: str | None = None
    skipped_phases: tuple[str, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.status.passed)

    @property
    def warned(self) -> int:
        return sum(1 for r in self.results if r.status is StepStatus.WARNED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status is StepStatus.FAILED)

    @property
    def required_failures(self) -> list[StepResult]:
        return [
            r
            for r in self.results
            if r.status is StepStatus.FAILED and r.criticality is Criticality.REQUIRED
        ]

    @property
    def success(self) -> bool:
        return not self.required_failures

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def get(self, name: str) -> StepResult | None:
        for result in self.results:
            if result.name == name:
                return result
        return None

    def by_phase(self) -> dict[str, list[StepResult]]:
        grouped: dict[str, list[StepResult]] = {}
        for result in self.results:
            grouped.setdefault(result.phase, []).append(result)
        return grouped

    def raise_for_failure(self) -> None:
        """Raise PrerequisiteFailure if any Required step failed."""
        failures = self.required_failures
        if failures:
            raise PrerequisiteFailure([r.name for r in failures])
