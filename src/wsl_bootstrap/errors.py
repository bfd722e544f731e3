"""Exception hierarchy for bootstrap operations."""

from __future__ import annotations


class BootstrapError(Exception):
    """Base class for all bootstrap errors."""

    pass


class ConfigError(BootstrapError):
    """Raised when the configuration file is missing required data or invalid."""

    pass


class DetectionError(BootstrapError):
    """Error while probing system state.

    Never escapes the runner: a detection that raises is treated as Absent.
    """

    pass


class ActionFailure(BootstrapError):
    """An installation action could not complete.

    Attributes:
        remediation: Command the user can run manually to finish the step.
    """

    def __init__(self, message: str, remediation: str | None = None) -> None:
        super().__init__(message)
        self.remediation = remediation


class CommandError(ActionFailure):
    """External command exited with a non-zero status."""

    def __init__(
        self,
        argv: list[str],
        returncode: int,
        output: str = "",
        remediation: str | None = None,
    ) -> None:
        self.argv = argv
        self.returncode = returncode
        self.output = output
        message = f"'{' '.join(argv)}' exited with status {returncode}"
        tail = _last_line(output)
        if tail:
            message = f"{message}: {tail}"
        super().__init__(message, remediation)


class DownloadError(ActionFailure):
    """A remote resource could not be fetched."""

    pass


class ReadinessTimeout(ActionFailure):
    """A polled external service did not become ready in time.

    Always recorded as a warning: the service may finish starting after
    the bootstrap process exits.
    """

    pass


class PrerequisiteFailure(BootstrapError):
    """A Required step failed and the run cannot be considered successful."""

    def __init__(self, step_names: list[str]) -> None:
        self.step_names = step_names
        super().__init__(f"Required step(s) failed: {', '.join(step_names)}")


def _last_line(output: str) -> str:
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    return lines[-1][:200] if lines else ""
