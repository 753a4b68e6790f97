"""Per-run session context."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from opencode_azure_setup.config.base import SetupSettings
from opencode_azure_setup.config.store import ConfigDocument, ConfigStore
from opencode_azure_setup.core.prompts import PromptIO
from opencode_azure_setup.llm.models import ProviderSettings

logger = logging.getLogger(__name__)


@dataclass
class SetupSession:
    """Everything a single setup run owns: the terminal, the store and the loaded document.

    Use as a context manager so the terminal is released on every exit path,
    including fatal errors and interrupts.
    """

    io: PromptIO
    settings: SetupSettings
    unattended: bool = False
    store: ConfigStore = field(init=False)
    document: ConfigDocument = field(default_factory=dict, init=False)
    prior: Optional[ProviderSettings] = field(default=None, init=False)
    closed: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.store = ConfigStore(self.settings.config_path)

    def load(self) -> Optional[ProviderSettings]:
        """Load the config document and remember any Azure settings it holds."""
        self.document = self.store.load()
        self.prior = self.store.extract_provider_settings(self.document)
        return self.prior

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.io.close()
        logger.debug("Setup session closed")

    def __enter__(self) -> "SetupSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
