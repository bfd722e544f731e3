"""Sequential, idempotent execution of install steps."""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Iterable

from wsl_bootstrap.errors import ActionFailure, ReadinessTimeout
from wsl_bootstrap.steps import InstallStep, Phase, StepContext
from wsl_bootstrap.types import RunReport, StepResult, StepStatus

logger = logging.getLogger(__name__)

ResultCallback = Callable[[StepResult], None]
PhaseCallback = Callable[[Phase], None]


class StepRunner:
    """Runs steps in order and aggregates their results.

    Detection and verification never propagate exceptions. Action failures
    become FAILED (Required) or WARNED (Optional) results; with ``fail_fast``
    a Required failure stops the run.
    """

    def __init__(
        self,
        context: StepContext,
        *,
        fail_fast: bool = True,
        force: bool = False,
        on_result: ResultCallback | None = None,
        on_phase: PhaseCallback | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            context: Collaborators passed to each step. Its environment is
                replaced as steps contribute to it.
            fail_fast: Halt after a Required step fails.
            force: Treat present steps as absent and run their actions.
                Check-only steps still detect.
            on_result: Called with each result as soon as it exists.
            on_phase: Called when a phase starts.
        """
        self.context = context
        self.fail_fast = fail_fast
        self.force = force
        self.on_result = on_result
        self.on_phase = on_phase

    def run_all(self, steps: Iterable[InstallStep]) -> RunReport:
        """Run steps in order.

        Args:
            steps: Ordered steps to run.

        Returns:
            RunReport with one result per attempted step.
        """
        results: list[StepResult] = []
        halted_by = self._run_into(steps, results)
        return RunReport(results=tuple(results), halted_by=halted_by)

    def run_phases(
        self, phases: Iterable[Phase], skip: Iterable[str] = ()
    ) -> RunReport:
        """Run phases in order, leaving out the skipped ones.

        Args:
            phases: Ordered phases.
            skip: Names of phases to leave out.

        Returns:
            RunReport over all attempted steps.
        """
        skip_set = set(skip)
        results: list[StepResult] = []
        skipped: list[str] = []
        halted_by = None

        for phase in phases:
            if phase.name in skip_set:
                logger.info("Skipping phase %s", phase.name)
                skipped.append(phase.name)
                continue
            if self.on_phase:
                self.on_phase(phase)
            halted_by = self._run_into(phase.steps, results)
            if halted_by:
                break

        return RunReport(
            results=tuple(results), halted_by=halted_by, skipped_phases=tuple(skipped)
        )

    def _run_into(self, steps: Iterable[InstallStep], results: list[StepResult]) -> str | None:
        for step in steps:
            result = self.run_step(step)
            results.append(result)
            if self.on_result:
                self.on_result(result)
            if result.status is StepStatus.FAILED and step.required and self.fail_fast:
                logger.error("Required step %s failed, halting", step.name)
                return step.name
        return None

    def run_step(self, step: InstallStep) -> StepResult:
        """Run a single step: detect, act, verify.

        Args:
            step: Step to run.

        Returns:
            The step's result. The runner's environment is updated when the
            step is in place.
        """
        start = time.monotonic()

        def result(status: StepStatus, detail: str, remediation: str | None = None) -> StepResult:
            return StepResult(
                name=step.name,
                status=status,
                detail=detail,
                phase=step.phase,
                criticality=step.criticality,
                remediation=remediation,
                elapsed=time.monotonic() - start,
            )

        if not (self.force and step.forceable) and self._detect(step):
            logger.info("%s already present", step.name)
            self._contribute(step)
            return result(StepStatus.SKIPPED, self._present_detail(step))

        logger.info("Installing %s (%s)", step.name, step.variant)
        try:
            detail = step.install(self.context)
        except ReadinessTimeout as e:
            logger.warning("%s: %s", step.name, e)
            return result(
                StepStatus.WARNED, str(e) or "not ready", e.remediation or step.remediation
            )
        except ActionFailure as e:
            detail = str(e) or type(e).__name__
            return self._failure(step, detail, e.remediation or step.remediation, result)
        except Exception as e:
            logger.debug("Unexpected error in %s", step.name, exc_info=True)
            detail = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            return self._failure(step, detail, step.remediation, result)

        self._contribute(step)
        verified = self._verify(step)
        if verified is False:
            logger.warning("%s installed but not verified", step.name)
            return result(
                StepStatus.WARNED, f"installed but not verified ({detail})", step.remediation
            )
        return result(StepStatus.INSTALLED, detail)

    def _failure(
        self,
        step: InstallStep,
        detail: str,
        remediation: str,
        result: Callable[..., StepResult],
    ) -> StepResult:
        if step.required:
            logger.error("%s failed: %s", step.name, detail)
            return result(StepStatus.FAILED, detail, remediation)
        logger.warning("%s failed (optional): %s", step.name, detail)
        return result(StepStatus.WARNED, detail, remediation)

    def _detect(self, step: InstallStep) -> bool:
        try:
            return bool(step.detect(self.context))
        except Exception as e:
            logger.debug("Detection for %s raised, treating as absent: %s", step.name, e)
            return False

    def _present_detail(self, step: InstallStep) -> str:
        try:
            detail = step.describe_present(self.context)
        except Exception as e:
            logger.debug("Describing %s raised: %s", step.name, e)
            detail = None
        return f"already present: {detail}" if detail else "already present"

    def _verify(self, step: InstallStep) -> bool | None:
        try:
            return step.verify(self.context)
        except Exception as e:
            logger.debug("Verification for %s raised, treating as unverified: %s", step.name, e)
            return False

    def _contribute(self, step: InstallStep) -> None:
        if step.env.is_empty():
            return
        self.context = replace(self.context, env=self.context.env.apply(step.env))
