"""Installer settings models."""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from opencode_azure_setup.llm.defaults import DEFAULTS_URL


def default_config_path() -> Path:
    """Location of the OpenCode configuration file."""
    return Path.home() / ".config" / "opencode" / "opencode.json"


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="WARNING")
    file: Optional[str] = Field(default=None)

    model_config = ConfigDict(validate_assignment=True)


class InstallerConfig(BaseModel):
    """Configuration for the auxiliary installers run after a successful setup."""

    enabled: bool = Field(default=True)
    mcp_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "opencode" / "mcps" / "mcp-marketplace")
    bin_dir: Path = Field(default_factory=lambda: Path.home() / ".local" / "bin")
    release_url: str = Field(default="https://api.github.com/repos/schwarztim/opencode/releases/latest")
    release_timeout: float = Field(default=10.0, gt=0)
    download_timeout: float = Field(default=120.0, gt=0)
    npm_timeout: float = Field(default=120.0, gt=0)

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("mcp_dir", "bin_dir")
    @classmethod
    def _expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class SetupSettings(BaseModel):
    """Settings for a setup session."""

    config_path: Path = Field(default_factory=default_config_path)
    defaults_url: str = Field(default=DEFAULTS_URL)
    defaults_timeout: float = Field(default=3.0, gt=0)
    probe_timeout: float = Field(default=15.0, gt=0)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    installers: InstallerConfig = Field(default_factory=InstallerConfig)

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("config_path")
    @classmethod
    def _expand_user(cls, v: Path) -> Path:
        return v.expanduser()

    @classmethod
    def from_env(cls) -> "SetupSettings":
        """Create settings from environment variables, keeping defaults for anything unset."""
        settings = cls()
        if config_path := os.getenv("OPENCODE_CONFIG_PATH"):
            settings.config_path = Path(config_path).expanduser()
        if defaults_url := os.getenv("AZURE_SETUP_DEFAULTS_URL"):
            settings.defaults_url = defaults_url
        if probe_timeout := os.getenv("AZURE_SETUP_PROBE_TIMEOUT"):
            settings.probe_timeout = float(probe_timeout)
        if log_level := os.getenv("AZURE_SETUP_LOG_LEVEL"):
            settings.logging.level = log_level.upper()
        if os.getenv("AZURE_SETUP_SKIP_EXTRAS", "false").lower() == "true":
            settings.installers.enabled = False
        return settings

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SetupSettings":
        """Create settings from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)
