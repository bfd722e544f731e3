"""Immutable environment snapshots passed between steps.

Steps never communicate through re-sourced rc files. Each step declares an
``EnvContribution`` and the runner folds it into the ``Environment`` that
later steps see.
"""

from __future__ import annotations

import glob
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class EnvContribution:
    """Environment changes a step makes available once it is in place.

    Values may reference ``~`` or ``$HOME``; they are expanded against the
    environment's home directory when applied. A PATH entry containing
    ``*`` resolves to its last match in sorted order, or is dropped when
    nothing matches (e.g. ``~/.nvm/versions/node/*/bin``).

    Attributes:
        path_prepend: Directories placed in front of PATH.
        path_append: Directories placed at the end of PATH.
        variables: Variables to export.
    """

    path_prepend: tuple[str, ...] = ()
    path_append: tuple[str, ...] = ()
    variables: Mapping[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.path_prepend or self.path_append or self.variables)


@dataclass(frozen=True)
class Environment:
    """Snapshot of PATH and exported variables for subprocesses."""

    home: Path
    path: tuple[str, ...] = ()
    variables: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_os(cls, home: Path | None = None) -> Environment:
        """Capture the current process environment."""
        variables = dict(os.environ)
        path = tuple(p for p in variables.pop("PATH", "").split(os.pathsep) if p)
        home = home or Path.home()
        variables["HOME"] = str(home)
        return cls(home=home, path=path, variables=MappingProxyType(variables))

    def expand(self, value: str) -> str:
        """Expand ``~`` and ``$HOME`` against this environment's home."""
        if value == "~" or value.startswith("~/"):
            value = str(self.home) + value[1:]
        return value.replace("${HOME}", str(self.home)).replace("$HOME", str(self.home))

    def apply(self, contribution: EnvContribution) -> Environment:
        """Return a new environment with ``contribution`` folded in."""
        if contribution.is_empty():
            return self

        prepend = self._resolve_entries(contribution.path_prepend)
        append = self._resolve_entries(contribution.path_append)
        rest = [p for p in self.path if p not in prepend and p not in append]
        variables = dict(self.variables)
        for key, value in contribution.variables.items():
            variables[key] = self.expand(value)

        return Environment(
            home=self.home,
            path=tuple(prepend + rest + append),
            variables=MappingProxyType(variables),
        )

    def _resolve_entries(self, entries: tuple[str, ...]) -> list[str]:
        resolved = []
        for entry in entries:
            expanded = self.expand(entry)
            if "*" in expanded:
                matches = sorted(glob.glob(expanded))
                if not matches:
                    continue
                expanded = matches[-1]
            resolved.append(expanded)
        return resolved

    @property
    def path_string(self) -> str:
        return os.pathsep.join(self.path)

    def as_environ(self) -> dict[str, str]:
        """Build an ``env`` mapping suitable for ``subprocess.run``."""
        env = dict(self.variables)
        env["PATH"] = self.path_string
        env["HOME"] = str(self.home)
        return env

    def which(self, name: str) -> str | None:
        """Locate an executable on this environment's PATH."""
        return shutil.which(name, path=self.path_string)
