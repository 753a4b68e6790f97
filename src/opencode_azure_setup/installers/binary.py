"""Download of the opencode binary from the latest GitHub release."""

import logging
import os
import platform
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from opencode_azure_setup.config.store import ConfigDocument
from opencode_azure_setup.installers.base import AuxiliaryTask, TaskPhase, TaskResult

logger = logging.getLogger(__name__)

RELEASES_PAGE = "https://github.com/schwarztim/opencode/releases"
USER_AGENT = "opencode-azure-setup"


def platform_name() -> str:
    return "windows" if sys.platform == "win32" else sys.platform


def arch_name() -> str:
    return "arm64" if platform.machine().lower() in ("arm64", "aarch64") else "x64"


def find_asset(assets: List[Dict[str, Any]], binary_name: str) -> Optional[Dict[str, Any]]:
    """Pick the release asset for ``binary_name``, allowing ``.exe`` and ``-bin`` suffixes."""
    wanted = {binary_name, f"{binary_name}.exe", f"{binary_name}-bin"}
    return next((a for a in assets if a.get("name") in wanted), None)


class BinaryInstaller(AuxiliaryTask):
    """Installs the ``opencode`` executable into a user bin directory."""

    name = "opencode binary"
    phase = TaskPhase.AFTER_SAVE
    manual_hint = f"You can install manually from: {RELEASES_PAGE}"

    def __init__(
        self,
        bin_dir: Path,
        release_url: str,
        release_timeout: float = 10.0,
        download_timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        platform_id: Optional[str] = None,
        arch_id: Optional[str] = None,
    ):
        self.bin_dir = Path(bin_dir)
        self.release_url = release_url
        self.release_timeout = release_timeout
        self.download_timeout = download_timeout
        self.transport = transport
        self.platform_id = platform_id or platform_name()
        self.arch_id = arch_id or arch_name()

    @property
    def binary_name(self) -> str:
        return f"opencode-{self.platform_id}-{self.arch_id}"

    @property
    def target_path(self) -> Path:
        return self.bin_dir / ("opencode.exe" if self.platform_id == "windows" else "opencode")

    async def run(self, document: ConfigDocument) -> TaskResult:
        headers = {"User-Agent": USER_AGENT}
        async with httpx.AsyncClient(transport=self.transport, follow_redirects=True, headers=headers) as client:
            release = await client.get(self.release_url, timeout=self.release_timeout)
            if release.status_code != 200:
                raise RuntimeError(f"Failed to fetch release: {release.status_code}")

            asset = find_asset(release.json().get("assets", []), self.binary_name)
            if asset is None:
                raise RuntimeError(f"No binary found for {self.binary_name}")

            size_mb = asset.get("size", 0) / 1024 / 1024
            details = [f"Downloaded {asset['name']} ({size_mb:.1f} MB)"]
            logger.info(f"Downloading {asset['browser_download_url']}")

            download = await client.get(asset["browser_download_url"], timeout=self.download_timeout)
            if download.status_code != 200:
                raise RuntimeError(f"Failed to download: {download.status_code}")

        self.bin_dir.mkdir(parents=True, exist_ok=True)
        self.target_path.write_bytes(download.content)
        self.target_path.chmod(0o755)
        details.append(str(self.target_path))

        path_dirs = os.environ.get("PATH", "").split(os.pathsep)
        if str(self.bin_dir) not in path_dirs:
            details.append(f'Add to PATH: export PATH="{self.bin_dir}:$PATH"')

        return TaskResult(name=self.name, ok=True, message="opencode installed!", details=details)
