"""Optional components installed alongside the Azure configuration."""

from typing import List

from opencode_azure_setup.config.base import InstallerConfig
from opencode_azure_setup.installers.base import AuxiliaryTask, TaskPhase, TaskResult, run_task
from opencode_azure_setup.installers.binary import BinaryInstaller
from opencode_azure_setup.installers.mcp import McpMarketplaceInstaller


def default_tasks(config: InstallerConfig) -> List[AuxiliaryTask]:
    """The auxiliary tasks enabled by ``config``."""
    if not config.enabled:
        return []
    return [
        McpMarketplaceInstaller(install_dir=config.mcp_dir, timeout=config.npm_timeout),
        BinaryInstaller(
            bin_dir=config.bin_dir,
            release_url=config.release_url,
            release_timeout=config.release_timeout,
            download_timeout=config.download_timeout,
        ),
    ]


__all__ = [
    "AuxiliaryTask",
    "BinaryInstaller",
    "McpMarketplaceInstaller",
    "TaskPhase",
    "TaskResult",
    "default_tasks",
    "run_task",
]
