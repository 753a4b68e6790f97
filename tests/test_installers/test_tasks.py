"""Tests for auxiliary task plumbing."""
from pathlib import Path

import pytest

from opencode_azure_setup.config.base import InstallerConfig
from opencode_azure_setup.installers import BinaryInstaller, McpMarketplaceInstaller, default_tasks
from opencode_azure_setup.installers.base import AuxiliaryTask, TaskPhase, TaskResult, run_task


class FailingTask(AuxiliaryTask):
    name = "failing"
    manual_hint = "install it yourself"

    async def run(self, document):
        raise OSError("disk full")


class SilentFailingTask(AuxiliaryTask):
    name = "silent"

    async def run(self, document):
        raise ValueError()


class PassingTask(AuxiliaryTask):
    name = "passing"

    async def run(self, document):
        return TaskResult(name=self.name, ok=True, message="done")


@pytest.mark.unit
class TestRunTask:
    @pytest.mark.asyncio
    async def test_failure_becomes_result(self):
        result = await run_task(FailingTask(), {})

        assert not result.ok
        assert result.name == "failing"
        assert result.message == "disk full"
        assert result.hint == "install it yourself"

    @pytest.mark.asyncio
    async def test_failure_without_message(self):
        result = await run_task(SilentFailingTask(), {})
        assert result.message == "ValueError"

    @pytest.mark.asyncio
    async def test_success_passes_through(self):
        result = await run_task(PassingTask(), {})

        assert result.ok
        assert result.message == "done"


@pytest.mark.unit
class TestDefaultTasks:
    def test_disabled(self):
        assert default_tasks(InstallerConfig(enabled=False)) == []

    def test_enabled(self, tmp_path):
        config = InstallerConfig(mcp_dir=tmp_path / "mcp", bin_dir=tmp_path / "bin")
        mcp, binary = default_tasks(config)

        assert isinstance(mcp, McpMarketplaceInstaller)
        assert mcp.phase is TaskPhase.BEFORE_SAVE
        assert mcp.install_dir == tmp_path / "mcp"
        assert mcp.timeout == config.npm_timeout
        assert isinstance(binary, BinaryInstaller)
        assert binary.phase is TaskPhase.AFTER_SAVE
        assert binary.bin_dir == tmp_path / "bin"
        assert binary.release_url == config.release_url

    def test_npm_timeout_from_config(self, tmp_path):
        mcp, _ = default_tasks(InstallerConfig(mcp_dir=tmp_path, npm_timeout=30))
        assert mcp.timeout == 30.0

    def test_paths_expand_user(self):
        config = InstallerConfig(bin_dir="~/bin")
        assert config.bin_dir == Path.home() / "bin"
