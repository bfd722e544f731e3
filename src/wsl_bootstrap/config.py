"""Bootstrap configuration loaded from YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wsl_bootstrap.errors import ConfigError

logger = logging.getLogger(__name__)

# Default configuration location
CONFIG_DIR = Path.home() / ".config" / "wsl-bootstrap"
CONFIG_FILE = CONFIG_DIR / "config.yml"

LOG_LEVEL_ENV = "WSL_BOOTSTRAP_LOG_LEVEL"

PHASES = (
    "infrastructure",
    "user-env",
    "github",
    "container-engine",
    "dev-tools",
    "ai-agents",
    "verify",
)


class BootstrapConfig(BaseModel):
    """Effective bootstrap settings.

    Paths may use ``~``; they are resolved against ``home`` by the catalog.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    home: Path = Field(default_factory=Path.home)
    rc_file: str = Field(default="~/.bashrc", alias="rcFile")
    profile_file: str = Field(default="~/.bash_profile", alias="profileFile")
    projects_dir: str = Field(default="~/projects", alias="projectsDir")
    credentials_file: str = Field(default="~/.config/ai-agents/env", alias="credentialsFile")
    skip_phases: list[str] = Field(default_factory=list, alias="skipPhases")
    force: bool = False
    fail_fast: bool = Field(default=True, alias="failFast")
    python_version: str = Field(default="3.12", alias="pythonVersion")
    go_version: str = Field(default="1.22.0", alias="goVersion")
    nvm_version: str = Field(default="v0.39.7", alias="nvmVersion")
    docker_wait_timeout: float = Field(default=60.0, alias="dockerWaitTimeout", gt=0)
    docker_wait_interval: float = Field(default=5.0, alias="dockerWaitInterval", gt=0)
    command_timeout: int = Field(default=900, alias="commandTimeout", gt=0)

    @field_validator("skip_phases")
    @classmethod
    def _known_phases(cls, value: list[str]) -> list[str]:
        unknown = [p for p in value if p not in PHASES]
        if unknown:
            raise ValueError(f"Unknown phase(s): {unknown}. Supported: {list(PHASES)}")
        return value

    @classmethod
    def from_file(cls, path: Path) -> BootstrapConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML file.

        Returns:
            Parsed BootstrapConfig.

        Raises:
            ConfigError: If the file is unreadable or invalid.
        """
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read configuration {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {path} must be a mapping")
        return cls.from_mapping(data, source=str(path))

    @classmethod
    def from_mapping(cls, data: dict[str, Any], source: str = "<config>") -> BootstrapConfig:
        """Validate a mapping into a configuration."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {source}: {e}") from e

    def with_overrides(self, **overrides: Any) -> BootstrapConfig:
        """Return a copy with non-None overrides applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return self.from_mapping(data, source="command line")


def load_config(path: Path | None = None) -> BootstrapConfig:
    """Load configuration, falling back to defaults.

    Args:
        path: Explicit configuration file. Must exist when given.

    Returns:
        BootstrapConfig from the file, or defaults when the default
        location has no file.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        return BootstrapConfig.from_file(path)

    if CONFIG_FILE.exists():
        logger.debug("Loading configuration from %s", CONFIG_FILE)
        return BootstrapConfig.from_file(CONFIG_FILE)
    return BootstrapConfig()
