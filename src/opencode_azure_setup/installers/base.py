"""Best-effort auxiliary installation tasks."""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from opencode_azure_setup.config.store import ConfigDocument

logger = logging.getLogger(__name__)


class TaskPhase(str, Enum):
    """When a task runs relative to saving the config file."""

    BEFORE_SAVE = "before_save"
    AFTER_SAVE = "after_save"


class TaskResult(BaseModel):
    """Outcome of an auxiliary task."""

    name: str
    ok: bool
    message: str = ""
    details: List[str] = Field(default_factory=list)
    hint: str = Field(default="", description="How to do the same thing by hand")


class AuxiliaryTask(ABC):
    """An optional install step whose failure never affects the setup result.

    Tasks in the ``BEFORE_SAVE`` phase may add entries to the document; they
    run after the Azure settings are merged and before the file is written.
    """

    name: str = "task"
    phase: TaskPhase = TaskPhase.AFTER_SAVE
    manual_hint: str = ""

    @abstractmethod
    async def run(self, document: ConfigDocument) -> TaskResult:
        """Perform the task, raising on failure."""


async def run_task(task: AuxiliaryTask, document: ConfigDocument) -> TaskResult:
    """Run ``task`` and turn any failure into a failed ``TaskResult``."""
    logger.debug(f"Running auxiliary task {task.name}")
    try:
        return await task.run(document)
    except Exception as e:
        logger.warning(f"Auxiliary task {task.name} failed: {e}")
        return TaskResult(name=task.name, ok=False, message=str(e) or type(e).__name__, hint=task.manual_hint)
