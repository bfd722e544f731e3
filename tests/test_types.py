"""Tests for result types and the run report."""

from __future__ import annotations

import pytest

from wsl_bootstrap.errors import CommandError, PrerequisiteFailure
from wsl_bootstrap.types import Criticality, ProbeResult, RunReport, StepResult, StepStatus


def _result(name: str, status: StepStatus, required: bool = False, phase: str = "p") -> StepResult:
    return StepResult(
        name=name,
        status=status,
        detail="detail",
        phase=phase,
        criticality=Criticality.REQUIRED if required else Criticality.OPTIONAL,
        remediation=None if status.passed else f"fix {name}",
    )


class TestStepResult:
    """Tests for StepResult invariants."""

    def test_warned_requires_remediation(self) -> None:
        """Test that a warning without a remediation hint is rejected."""
        with pytest.raises(ValueError, match="remediation"):
            StepResult(name="x", status=StepStatus.WARNED, detail="broken")

    def test_failed_requires_remediation(self) -> None:
        """Test that a failure without a remediation hint is rejected."""
        with pytest.raises(ValueError, match="remediation"):
            StepResult(name="x", status=StepStatus.FAILED, detail="broken")

    def test_passed_needs_no_remediation(self) -> None:
        """Test that skipped and installed results need no hint."""
        StepResult(name="x", status=StepStatus.SKIPPED, detail="already present")
        StepResult(name="x", status=StepStatus.INSTALLED, detail="done")

    def test_empty_detail_rejected(self) -> None:
        """Test that every result explains itself."""
        with pytest.raises(ValueError, match="detail"):
            StepResult(name="x", status=StepStatus.SKIPPED, detail="")

    def test_status_passed(self) -> None:
        """Test which statuses count as passed."""
        assert StepStatus.SKIPPED.passed
        assert StepStatus.INSTALLED.passed
        assert not StepStatus.WARNED.passed
        assert not StepStatus.FAILED.passed


class TestRunReport:
    """Tests for RunReport aggregation."""

    def test_counts_match_results(self) -> None:
        """Test that counts are derived from the results."""
        report = RunReport(
            results=(
                _result("a", StepStatus.SKIPPED),
                _result("b", StepStatus.INSTALLED),
                _result("c", StepStatus.WARNED),
                _result("d", StepStatus.FAILED),
            )
        )

        assert (report.passed, report.warned, report.failed) == (2, 1, 1)
        assert report.passed + report.warned + report.failed == len(report.results)

    def test_optional_failure_is_success(self) -> None:
        """Test that only Required failures fail the run."""
        report = RunReport(results=(_result("a", StepStatus.FAILED, required=False),))

        assert report.success
        assert report.exit_code == 0

    def test_required_failure_exit_code(self) -> None:
        """Test that a Required failure gives exit status 1."""
        report = RunReport(results=(_result("a", StepStatus.FAILED, required=True),))

        assert not report.success
        assert report.exit_code == 1
        assert [r.name for r in report.required_failures] == ["a"]

    def test_raise_for_failure(self) -> None:
        """Test that raise_for_failure names the failed steps."""
        report = RunReport(results=(_result("docker", StepStatus.FAILED, required=True),))

        with pytest.raises(PrerequisiteFailure) as excinfo:
            report.raise_for_failure()

        assert excinfo.value.step_names == ["docker"]

    def test_raise_for_failure_passes(self) -> None:
        """Test that a successful report does not raise."""
        RunReport(results=(_result("a", StepStatus.WARNED),)).raise_for_failure()

    def test_get_and_by_phase(self) -> None:
        """Test lookup by name and grouping by phase."""
        report = RunReport(
            results=(
                _result("a", StepStatus.SKIPPED, phase="one"),
                _result("b", StepStatus.SKIPPED, phase="two"),
                _result("c", StepStatus.SKIPPED, phase="one"),
            )
        )

        assert report.get("b").phase == "two"
        assert report.get("missing") is None
        assert [r.name for r in report.by_phase()["one"]] == ["a", "c"]


class TestProbeResult:
    """Tests for ProbeResult display."""

    def test_str(self) -> None:
        """Test the human-readable forms."""
        assert str(ProbeResult.absent()) == "not installed"
        assert str(ProbeResult(present=True, version="14.1.0", binary="rg")) == "14.1.0 (rg)"
        assert str(ProbeResult(present=True, version="unknown")) == "unknown"


class TestCommandError:
    """Tests for CommandError messages."""

    def test_message_includes_last_output_line(self) -> None:
        """Test that the last non-blank output line is quoted."""
        error = CommandError(["apt-get", "install", "x"], 100, "reading\nE: Unable to locate x\n\n")

        assert "'apt-get install x' exited with status 100" in str(error)
        assert str(error).endswith("E: Unable to locate x")

    def test_remediation_attached(self) -> None:
        """Test that the remediation hint is carried."""
        error = CommandError(["false"], 1, remediation="run it by hand")

        assert error.remediation == "run it by hand"
        assert str(error) == "'false' exited with status 1"
