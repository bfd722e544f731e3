"""Tests for environment snapshots and contributions."""

from __future__ import annotations

from pathlib import Path

import pytest

from wsl_bootstrap.environment import EnvContribution, Environment


@pytest.fixture
def base(temp_home: Path) -> Environment:
    return Environment(home=temp_home, path=("/usr/bin", "/bin"), variables={"LANG": "C"})


class TestExpand:
    """Tests for home expansion."""

    def test_tilde(self, base: Environment, temp_home: Path) -> None:
        """Test ~ and ~/ expansion."""
        assert base.expand("~") == str(temp_home)
        assert base.expand("~/.nvm") == f"{temp_home}/.nvm"

    def test_home_variable(self, base: Environment, temp_home: Path) -> None:
        """Test $HOME and ${HOME} expansion."""
        assert base.expand("$HOME/go/bin") == f"{temp_home}/go/bin"
        assert base.expand("${HOME}/.cargo") == f"{temp_home}/.cargo"

    def test_other_text_untouched(self, base: Environment) -> None:
        """Test that unrelated values pass through."""
        assert base.expand("/usr/local/go/bin") == "/usr/local/go/bin"
        assert base.expand("user~name") == "user~name"


class TestApply:
    """Tests for folding contributions into an environment."""

    def test_prepend_and_append(self, base: Environment, temp_home: Path) -> None:
        """Test PATH ordering."""
        result = base.apply(
            EnvContribution(path_prepend=("~/.cargo/bin",), path_append=("/usr/local/go/bin",))
        )

        assert result.path == (f"{temp_home}/.cargo/bin", "/usr/bin", "/bin", "/usr/local/go/bin")

    def test_original_unchanged(self, base: Environment) -> None:
        """Test that environments are immutable snapshots."""
        base.apply(EnvContribution(path_prepend=("/opt/bin",), variables={"A": "1"}))

        assert base.path == ("/usr/bin", "/bin")
        assert "A" not in base.variables

    def test_no_duplicate_entries(self, base: Environment) -> None:
        """Test that re-applying moves rather than duplicates entries."""
        contribution = EnvContribution(path_prepend=("/opt/bin",))

        result = base.apply(contribution).apply(contribution)

        assert result.path.count("/opt/bin") == 1

    def test_variables_expanded(self, base: Environment, temp_home: Path) -> None:
        """Test that exported values are expanded."""
        result = base.apply(EnvContribution(variables={"NVM_DIR": "~/.nvm"}))

        assert result.variables["NVM_DIR"] == f"{temp_home}/.nvm"
        assert result.variables["LANG"] == "C"

    def test_empty_contribution_returns_same(self, base: Environment) -> None:
        """Test the no-op fast path."""
        assert base.apply(EnvContribution()) is base

    def test_glob_entry_resolves_to_last_match(self, base: Environment, temp_home: Path) -> None:
        """Test wildcard PATH entries."""
        for version in ("v18.19.0", "v20.11.0"):
            (temp_home / ".nvm" / "versions" / "node" / version / "bin").mkdir(parents=True)

        result = base.apply(EnvContribution(path_prepend=("~/.nvm/versions/node/*/bin",)))

        assert result.path[0] == f"{temp_home}/.nvm/versions/node/v20.11.0/bin"

    def test_unmatched_glob_dropped(self, base: Environment) -> None:
        """Test that a wildcard with no match adds nothing."""
        result = base.apply(EnvContribution(path_prepend=("~/.nvm/versions/node/*/bin",)))

        assert result.path == base.path


class TestEnviron:
    """Tests for subprocess environments and lookups."""

    def test_as_environ(self, base: Environment, temp_home: Path) -> None:
        """Test the mapping handed to subprocess."""
        environ = base.as_environ()

        assert environ["PATH"] == "/usr/bin:/bin"
        assert environ["HOME"] == str(temp_home)
        assert environ["LANG"] == "C"

    def test_which_uses_snapshot_path(self, env: Environment, make_tool) -> None:
        """Test that lookups search the snapshot, not the process PATH."""
        tool = make_tool("rg")

        assert env.which("rg") == str(tool)
        assert env.which("definitely-not-installed") is None

    def test_from_os(self, temp_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test capturing the process environment."""
        monkeypatch.setenv("PATH", "/a:/b")
        monkeypatch.setenv("WSL_BOOTSTRAP_TEST", "1")

        snapshot = Environment.from_os(home=temp_home)

        assert snapshot.path == ("/a", "/b")
        assert snapshot.variables["WSL_BOOTSTRAP_TEST"] == "1"
        assert snapshot.variables["HOME"] == str(temp_home)
