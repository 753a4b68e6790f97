"""MCP marketplace installation via npm."""

import asyncio
import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from opencode_azure_setup.config.store import ConfigDocument
from opencode_azure_setup.installers.base import AuxiliaryTask, TaskPhase, TaskResult

logger = logging.getLogger(__name__)

MCP_PACKAGE = "opencode-mcp-marketplace"
MCP_SERVER_NAME = "mcp-marketplace"


class McpMarketplaceInstaller(AuxiliaryTask):
    """Installs the MCP marketplace package locally and registers it in the config.

    The package goes into its own directory under the OpenCode config folder
    so no global npm install (and no sudo) is needed.
    """

    name = "MCP Marketplace"
    phase = TaskPhase.BEFORE_SAVE
    manual_hint = f"npm install -g {MCP_PACKAGE}"

    def __init__(self, install_dir: Path, npm: Optional[str] = None, timeout: float = 120.0):
        self.install_dir = Path(install_dir)
        self.npm = npm
        self.timeout = timeout

    @property
    def entry_point(self) -> Path:
        return self.install_dir / "node_modules" / MCP_PACKAGE / "dist" / "index.js"

    def _ensure_package_json(self) -> None:
        pkg_path = self.install_dir / "package.json"
        if pkg_path.exists():
            return
        pkg_path.write_text(
            json.dumps({"name": "opencode-mcps", "version": "1.0.0", "type": "module"}, indent=2),
            encoding="utf-8",
        )

    def _npm_command(self) -> List[str]:
        npm = self.npm or shutil.which("npm")
        if not npm:
            raise RuntimeError("npm not available")
        return [npm, "install", f"{MCP_PACKAGE}@latest"]

    async def run(self, document: ConfigDocument) -> TaskResult:
        self.install_dir.mkdir(parents=True, exist_ok=True)
        self._ensure_package_json()

        cmd = self._npm_command()
        logger.info(f"Running {' '.join(cmd)} in {self.install_dir}")
        try:
            completed = await asyncio.to_thread(
                subprocess.run, cmd, cwd=self.install_dir, capture_output=True, text=True, timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"npm install timed out after {self.timeout:g}s")
        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip().splitlines()
            raise RuntimeError(f"npm install failed ({stderr[-1] if stderr else completed.returncode})")

        mcp = document.get("mcp")
        if not isinstance(mcp, dict):
            mcp = {}
            document["mcp"] = mcp
        mcp[MCP_SERVER_NAME] = {"type": "local", "command": ["node", str(self.entry_point)]}

        return TaskResult(name=self.name, ok=True, message="MCP Marketplace installed!")
