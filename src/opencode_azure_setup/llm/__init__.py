"""Azure endpoint model, parsing, and probing."""

from opencode_azure_setup.llm.defaults import DEFAULTS_URL, fetch_defaults
from opencode_azure_setup.llm.endpoint import parse_azure_endpoint
from opencode_azure_setup.llm.models import (
    DEFAULT_API_VERSION,
    DEFAULT_DEPLOYMENT,
    Credential,
    Defaults,
    EndpointDescriptor,
    ProbeFailure,
    ProbeResult,
    ProviderSettings,
)
from opencode_azure_setup.llm.prober import ConnectivityProber

__all__ = [
    # Models
    "Credential",
    "Defaults",
    "EndpointDescriptor",
    "ProbeFailure",
    "ProbeResult",
    "ProviderSettings",
    "DEFAULT_API_VERSION",
    "DEFAULT_DEPLOYMENT",
    # Operations
    "ConnectivityProber",
    "fetch_defaults",
    "parse_azure_endpoint",
    "DEFAULTS_URL",
]
