"""Configuration management for the Azure setup installer."""

from opencode_azure_setup.config.base import (
    InstallerConfig,
    LoggingConfig,
    SetupSettings,
    default_config_path,
)
from opencode_azure_setup.config.store import ConfigDocument, ConfigStore

__all__ = [
    # Installer settings
    "InstallerConfig",
    "LoggingConfig",
    "SetupSettings",
    "default_config_path",
    # OpenCode config file
    "ConfigDocument",
    "ConfigStore",
]
