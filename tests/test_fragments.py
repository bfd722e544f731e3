"""Tests for idempotent fragment insertion."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from wsl_bootstrap.filesystem import RealFileSystem
from wsl_bootstrap.fragments import ConfigFileFragment, compose, ensure, ensure_fragment
from wsl_bootstrap.types import FragmentOutcome


class TestEnsureFragment:
    """Tests for ensure_fragment."""

    def test_missing_file_is_created(self, tmp_path: Path) -> None:
        """Test that a missing file is treated as empty and created."""
        target = tmp_path / "nested" / ".bashrc"

        outcome = ensure_fragment(target, "# MARKER-A", "export A=1")

        assert outcome is FragmentOutcome.INSERTED
        assert target.read_text() == "# MARKER-A\nexport A=1\n"

    def test_append_preserves_existing_content(self, tmp_path: Path) -> None:
        """Test that existing content is untouched and a blank line separates blocks."""
        target = tmp_path / ".bashrc"
        target.write_text("alias ll='ls -l'\n")

        outcome = ensure_fragment(target, "# MARKER-A", "# MARKER-A\nexport A=1\n")

        assert outcome is FragmentOutcome.INSERTED
        assert target.read_text() == "alias ll='ls -l'\n\n# MARKER-A\nexport A=1\n"

    def test_content_without_trailing_newline(self, tmp_path: Path) -> None:
        """Test that a file lacking a final newline gets one before the block."""
        target = tmp_path / ".bashrc"
        target.write_text("export X=1")

        ensure_fragment(target, "# M", "# M\nexport Y=2\n")

        assert target.read_text() == "export X=1\n\n# M\nexport Y=2\n"

    @pytest.mark.parametrize("calls", [1, 2, 5])
    def test_repeated_calls_insert_once(self, tmp_path: Path, calls: int) -> None:
        """Test that N calls leave exactly one copy of the fragment."""
        target = tmp_path / ".bashrc"
        target.write_text("# existing\n")

        outcomes = [ensure_fragment(target, "# MARKER-A", "export A=1") for _ in range(calls)]

        assert outcomes[0] is FragmentOutcome.INSERTED
        assert all(o is FragmentOutcome.ALREADY_PRESENT for o in outcomes[1:])
        assert target.read_text().count("# MARKER-A") == 1

    def test_marker_anywhere_counts_as_present(self, tmp_path: Path) -> None:
        """Test that a marker written by hand prevents insertion."""
        target = tmp_path / ".bashrc"
        original = "# set up by hand: bashrc.d sourcing\n"
        target.write_text(original)

        outcome = ensure_fragment(target, "bashrc.d", "# bashrc.d loader\n")

        assert outcome is FragmentOutcome.ALREADY_PRESENT
        assert target.read_text() == original

    def test_create_mode_applies_to_new_file(self, tmp_path: Path) -> None:
        """Test that create_mode sets permissions on a created file."""
        target = tmp_path / ".ssh" / "config"

        ensure_fragment(target, "Host github.com", "Host github.com\n", create_mode=0o600)

        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_append_keeps_existing_mode(self, tmp_path: Path) -> None:
        """Test that appending does not change permission bits."""
        target = tmp_path / "config"
        target.write_text("Host other\n")
        target.chmod(0o644)

        ensure_fragment(target, "Host github.com", "Host github.com\n", create_mode=0o600)

        assert stat.S_IMODE(target.stat().st_mode) == 0o644

    @pytest.mark.parametrize("marker,text", [("", "export A=1"), ("# M", ""), ("# M", "  \n")])
    def test_empty_marker_or_text_rejected(self, tmp_path: Path, marker: str, text: str) -> None:
        """Test that empty inputs are rejected before touching the file."""
        target = tmp_path / ".bashrc"

        with pytest.raises(ValueError):
            ensure_fragment(target, marker, text)

        assert not target.exists()


class TestConfigFileFragment:
    """Tests for the ConfigFileFragment value type."""

    def test_invalid_fragment_rejected(self) -> None:
        """Test that construction validates the marker."""
        with pytest.raises(ValueError):
            ConfigFileFragment(name="x", marker="", text="y")

    def test_ensure_through_filesystem(self, tmp_path: Path) -> None:
        """Test ensure() with an explicit filesystem."""
        target = tmp_path / ".profile"
        fragment = ConfigFileFragment(name="profile", marker="bashrc", text="source ~/.bashrc\n")

        first = ensure(target, fragment, RealFileSystem())
        second = ensure(target, fragment, RealFileSystem())

        assert (first, second) == (FragmentOutcome.INSERTED, FragmentOutcome.ALREADY_PRESENT)


class TestCompose:
    """Tests for compose."""

    def test_marker_prepended_when_missing(self) -> None:
        """Test that the marker is added so the next call detects the block."""
        assert compose("# M", "export A=1") == "# M\nexport A=1\n"

    def test_text_with_marker_unchanged(self) -> None:
        """Test that text already carrying the marker is kept as is."""
        assert compose("COMPOSE", "export COMPOSE=1\n") == "export COMPOSE=1\n"
