"""Loading, merging, and saving the OpenCode configuration file."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from opencode_azure_setup.llm.models import (
    DEFAULT_API_VERSION,
    DEFAULT_DEPLOYMENT,
    Credential,
    EndpointDescriptor,
    ProviderSettings,
)

logger = logging.getLogger(__name__)

ConfigDocument = Dict[str, Any]

SCHEMA_URL = "https://opencode.ai/config.json"
PROVIDER_NAME = "azure"
PROVIDER_PACKAGE = "@ai-sdk/azure"
PROVIDER_DISPLAY_NAME = "Azure OpenAI"
MODEL_CONTEXT_LIMIT = 200000
MODEL_OUTPUT_LIMIT = 16384

# Top-level sections worth mentioning when they survive a merge.
PRESERVED_SECTIONS = {
    "agent": "agents",
    "permission": "permissions",
}


class ConfigStore:
    """Reads and writes the OpenCode JSON configuration.

    Only the Azure provider entry, the default model and the schema marker are
    owned here; every other key of the document is carried through untouched.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> ConfigDocument:
        """Load the document, returning an empty one if it is missing or unusable."""
        if not self.path.exists():
            logger.debug(f"No config at {self.path}, starting from an empty document")
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable config at {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.debug(f"Ignoring config at {self.path}: top level is {type(data).__name__}, not an object")
            return {}
        return data

    @staticmethod
    def extract_provider_settings(document: Mapping[str, Any]) -> Optional[ProviderSettings]:
        """Return the stored Azure settings, or None if there are none."""
        provider = document.get("provider")
        azure = provider.get(PROVIDER_NAME) if isinstance(provider, Mapping) else None
        if not isinstance(azure, Mapping):
            return None
        options = azure.get("options")
        if not isinstance(options, Mapping):
            return None

        models = azure.get("models")
        deployment = next(iter(models), None) if isinstance(models, Mapping) else None

        return ProviderSettings(
            base_url=str(options.get("baseURL") or ""),
            api_key=str(options.get("apiKey") or ""),
            deployment=str(deployment or DEFAULT_DEPLOYMENT),
            api_version=str(options.get("apiVersion") or DEFAULT_API_VERSION),
        )

    @staticmethod
    def build_provider_entry(endpoint: EndpointDescriptor, credential: Credential) -> Dict[str, Any]:
        return {
            "npm": PROVIDER_PACKAGE,
            "name": PROVIDER_DISPLAY_NAME,
            "options": {
                "baseURL": endpoint.base_url,
                "apiKey": credential.reveal(),
                "useDeploymentBasedUrls": True,
                "apiVersion": endpoint.api_version,
            },
            "models": {
                endpoint.deployment: {
                    "name": endpoint.deployment,
                    "limit": {"context": MODEL_CONTEXT_LIMIT, "output": MODEL_OUTPUT_LIMIT},
                },
            },
        }

    def merge(self, document: ConfigDocument, endpoint: EndpointDescriptor, credential: Credential) -> ConfigDocument:
        """Write the Azure settings into ``document`` in place and return it.

        The Azure provider entry is replaced as a whole. Other providers and
        all other top-level keys are left as they are.
        """
        document["$schema"] = SCHEMA_URL
        document["model"] = f"{PROVIDER_NAME}/{endpoint.deployment}"

        provider = document.get("provider")
        if not isinstance(provider, dict):
            if provider is not None:
                logger.warning(f"Replacing malformed 'provider' section ({type(provider).__name__})")
            provider = {}
            document["provider"] = provider
        provider[PROVIDER_NAME] = self.build_provider_entry(endpoint, credential)

        logger.debug(f"Merged {PROVIDER_NAME} provider for {endpoint.deployment_url()}")
        return document

    def persist(self, document: ConfigDocument) -> Path:
        """Overwrite the config file with ``document``.

        The new content goes to a temporary file next to the target, which is
        then renamed over it, so readers never see a half-written file. A
        symlinked config is written through: the link stays and its target is replaced.
        """
        target = self.path.resolve()
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(document, indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Saved configuration to {self.path}")
        return self.path

    @staticmethod
    def preserved_sections(document: Mapping[str, Any]) -> List[str]:
        """Labels of notable user sections present in ``document``."""
        return [label for key, label in PRESERVED_SECTIONS.items() if document.get(key)]
