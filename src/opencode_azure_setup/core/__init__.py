"""Setup session, orchestration, and terminal I/O."""

from opencode_azure_setup.core.exceptions import MissingInputError, SetupAborted, SetupError
from opencode_azure_setup.core.orchestrator import SetupMode, SetupOrchestrator, SetupOutcome, SetupState
from opencode_azure_setup.core.prompts import ClickPromptIO, PromptIO, Tone
from opencode_azure_setup.core.session import SetupSession

__all__ = [
    "ClickPromptIO",
    "MissingInputError",
    "PromptIO",
    "SetupAborted",
    "SetupError",
    "SetupMode",
    "SetupOrchestrator",
    "SetupOutcome",
    "SetupSession",
    "SetupState",
    "Tone",
]
