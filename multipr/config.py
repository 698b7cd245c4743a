"""multipr configuration management using Pydantic."""

from pathlib import Path
from typing import Any

import pydantic
import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field

from multipr.constants import (
    CONFIG_FILE,
    DEFAULT_BASE_BRANCH,
    DEFAULT_BRANCH_PREFIX,
    DEFAULT_MAX_SLUG_LENGTH,
    DEFAULT_REMOTE,
    LOGS_DIR,
)
from multipr.exceptions import ConfigurationError


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="warn", pattern="^(debug|info|warn|error)$")
    directory: str = LOGS_DIR
    json_file: bool = True


class MultiPRConfig(BaseModel):
    """Complete multipr configuration."""

    default_base_branch: str = Field(default=DEFAULT_BASE_BRANCH, min_length=1)
    use_hosting_cli: bool = True
    remote: str = Field(default=DEFAULT_REMOTE, min_length=1)
    branch_prefix: str = Field(default=DEFAULT_BRANCH_PREFIX, pattern=r"^[A-Za-z0-9._/-]*$")
    max_slug_length: int = Field(default=DEFAULT_MAX_SLUG_LENGTH, ge=8, le=100)
    pull_base: bool = True
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "MultiPRConfig":
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Defaults to .multipr/config.yaml

        Returns:
            MultiPRConfig instance; defaults if the file does not exist

        Raises:
            ConfigurationError: If the file is not valid YAML or fails validation
        """
        config_path = Path(CONFIG_FILE) if config_path is None else Path(config_path)

        if not config_path.exists():
            return cls()

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_path}", details={"error": str(e)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {config_path}")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MultiPRConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            MultiPRConfig instance
        """
        try:
            return cls(**data)
        except pydantic.ValidationError as e:
            raise ConfigurationError(
                "Invalid multipr configuration",
                details={"errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]},
            ) from e

    def save(self, config_path: str | Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Defaults to .multipr/config.yaml
        """
        config_path = Path(CONFIG_FILE) if config_path is None else Path(config_path)

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()
