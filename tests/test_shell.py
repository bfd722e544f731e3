"""Tests for external command execution."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from wsl_bootstrap.environment import Environment
from wsl_bootstrap.errors import CommandError
from wsl_bootstrap.shell import CommandResult, ShellRunner


@pytest.fixture
def system_env(temp_home: Path) -> Environment:
    return Environment(
        home=temp_home,
        path=("/usr/local/bin", "/usr/bin", "/bin"),
        variables={"HOME": str(temp_home), "GREETING": "hello"},
    )


class TestCommandResult:
    """Tests for CommandResult."""

    def test_output_joins_streams(self) -> None:
        """Test combined output skips empty streams."""
        assert CommandResult(["x"], 0, stdout="out").output == "out"
        assert CommandResult(["x"], 1, stdout="out", stderr="err").output == "out\nerr"

    def test_ok(self) -> None:
        """Test ok reflects the exit status."""
        assert CommandResult(["x"], 0).ok
        assert not CommandResult(["x"], 2).ok


class TestShellRunner:
    """Tests for ShellRunner against real processes."""

    def test_success(self, system_env: Environment) -> None:
        """Test a zero exit status."""
        result = ShellRunner().run(["true"], system_env)

        assert result.ok
        assert result.argv[0].endswith("true")

    def test_failure_does_not_raise(self, system_env: Environment) -> None:
        """Test that run reports failures through the result."""
        result = ShellRunner().run(["false"], system_env)

        assert result.returncode == 1

    def test_environment_passed(self, system_env: Environment) -> None:
        """Test that the snapshot becomes the child environment."""
        result = ShellRunner().run(["sh", "-c", "echo $GREETING $HOME"], system_env)

        assert result.stdout.strip() == f"hello {system_env.home}"

    def test_missing_binary(self, system_env: Environment) -> None:
        """Test that an unstartable command yields -1."""
        result = ShellRunner().run(["wsl-bootstrap-no-such-binary"], system_env)

        assert result.returncode == -1
        assert result.stderr

    def test_timeout(self, system_env: Environment) -> None:
        """Test that a hung process is abandoned."""
        result = ShellRunner().run(["sleep", "5"], system_env, timeout=1)

        assert result.returncode == -1
        assert "timed out" in result.stderr

    def test_cwd(self, system_env: Environment, tmp_path: Path) -> None:
        """Test the working directory option."""
        result = ShellRunner().run(["pwd"], system_env, cwd=str(tmp_path))

        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_sudo_prefix(self, system_env: Environment, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that sudo is prepended for non-root users."""
        monkeypatch.setattr("wsl_bootstrap.shell.is_root", lambda: False)
        seen = []
        monkeypatch.setattr(
            "wsl_bootstrap.shell.subprocess.run",
            lambda argv, **kwargs: seen.append(argv) or _completed(argv),
        )

        ShellRunner().run(["apt-get", "update"], system_env, sudo=True)

        assert seen[0][0].endswith("sudo")
        assert seen[0][-2:] == ["apt-get", "update"]

    def test_no_sudo_as_root(self, system_env: Environment, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that root runs commands directly."""
        monkeypatch.setattr("wsl_bootstrap.shell.is_root", lambda: True)
        seen = []
        monkeypatch.setattr(
            "wsl_bootstrap.shell.subprocess.run",
            lambda argv, **kwargs: seen.append(argv) or _completed(argv),
        )

        ShellRunner().run(["apt-get", "update"], system_env, sudo=True)

        assert len(seen[0]) == 2
        assert Path(seen[0][0]).name == "apt-get"
        assert seen[0][1] == "update"

    def test_stdin_not_inherited(self, system_env: Environment, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that commands cannot block waiting on the terminal."""
        seen = []
        monkeypatch.setattr(
            "wsl_bootstrap.shell.subprocess.run",
            lambda argv, **kwargs: seen.append(kwargs) or _completed(argv),
        )

        ShellRunner().run(["ssh-keygen", "-f", "key"], system_env)

        assert seen[0]["stdin"] is subprocess.DEVNULL

    def test_reading_stdin_sees_eof(self, system_env: Environment) -> None:
        """Test that a prompt gets end-of-file instead of waiting."""
        result = ShellRunner().run(["sh", "-c", "read answer; echo \"got=$answer\""], system_env, timeout=5)

        assert result.stdout.strip() == "got="

    def test_check_raises(self, system_env: Environment) -> None:
        """Test that check turns failures into CommandError."""
        with pytest.raises(CommandError) as exc_info:
            ShellRunner().check(
                ["sh", "-c", "echo broken >&2; exit 3"], system_env, remediation="fix it"
            )

        assert exc_info.value.returncode == 3
        assert exc_info.value.remediation == "fix it"
        assert "broken" in str(exc_info.value)

    def test_check_returns_result(self, system_env: Environment) -> None:
        """Test that check passes successes through."""
        result = ShellRunner().check(["echo", "ok"], system_env)

        assert result.stdout.strip() == "ok"


def _completed(argv):
    return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")
