"""Core data models for Azure endpoint setup."""

import json
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_DEPLOYMENT = "model-router"
DEFAULT_API_VERSION = "2025-01-01-preview"

# Status code reported when no HTTP response was received at all.
TRANSPORT_FAILURE_STATUS = 0


class Defaults(BaseModel):
    """Fallback deployment and API version used when the user supplies none."""

    deployment: str = Field(default=DEFAULT_DEPLOYMENT)
    api_version: str = Field(default=DEFAULT_API_VERSION)

    model_config = ConfigDict(validate_assignment=True)


class EndpointDescriptor(BaseModel):
    """Canonical Azure OpenAI endpoint.

    ``base_url`` is the API root (``https://<host>/openai``). The deployment
    name and API version are kept as separate fields and never embedded in it.
    """

    base_url: str = Field(..., description="API root, ending in /openai")
    deployment: str = Field(..., min_length=1, description="Model deployment name")
    api_version: str = Field(..., description="Value of the api-version query parameter")

    model_config = ConfigDict(frozen=True)

    def deployment_url(self) -> str:
        """URL of the deployment, without any operation path or query."""
        return f"{self.base_url}/deployments/{self.deployment}"

    def request_url(self) -> str:
        """URL of the chat completions operation for this deployment."""
        return f"{self.deployment_url()}/chat/completions"

    def with_overrides(self, deployment: Optional[str] = None, api_version: Optional[str] = None) -> "EndpointDescriptor":
        """Return a copy with deployment and/or API version replaced."""
        return EndpointDescriptor(
            base_url=self.base_url,
            deployment=deployment or self.deployment,
            api_version=api_version or self.api_version,
        )


class Credential(BaseModel):
    """API key for the Azure resource.

    The key is held as a ``SecretStr`` so it never shows up in reprs or logs.
    """

    api_key: SecretStr

    model_config = ConfigDict(frozen=True)

    @field_validator("api_key")
    @classmethod
    def _not_blank(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("API key cannot be empty")
        return v

    @classmethod
    def from_key(cls, api_key: str) -> "Credential":
        return cls(api_key=SecretStr(api_key))

    def reveal(self) -> str:
        return self.api_key.get_secret_value()

    def redacted(self) -> str:
        """Key with everything but the first and last four characters hidden."""
        key = self.reveal()
        if len(key) <= 8:
            return "*" * len(key)
        return f"{key[:4]}...{key[-4:]}"


class ProviderSettings(BaseModel):
    """Azure settings previously stored in the OpenCode config."""

    base_url: str = ""
    api_key: str = ""
    deployment: str = DEFAULT_DEPLOYMENT
    api_version: str = DEFAULT_API_VERSION

    @property
    def has_endpoint(self) -> bool:
        return bool(self.base_url)

    @property
    def is_complete(self) -> bool:
        """Whether the settings can be used without asking the user anything."""
        return bool(self.base_url) and bool(self.api_key.strip())

    @property
    def endpoint(self) -> EndpointDescriptor:
        return EndpointDescriptor(
            base_url=self.base_url,
            deployment=self.deployment,
            api_version=self.api_version,
        )

    @property
    def credential(self) -> Optional[Credential]:
        return Credential.from_key(self.api_key) if self.api_key.strip() else None


class ProbeFailure(str, Enum):
    """Why a connectivity probe did not succeed."""

    NONE = "none"
    HTTP_STATUS = "http_status"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"

    def __str__(self) -> str:
        return self.value


class ProbeResult(BaseModel):
    """Outcome of a single connectivity probe."""

    ok: bool
    status_code: int = TRANSPORT_FAILURE_STATUS
    body: str = ""
    failure: ProbeFailure = ProbeFailure.NONE

    @classmethod
    def success(cls, status_code: int, body: str) -> "ProbeResult":
        return cls(ok=True, status_code=status_code, body=body)

    @classmethod
    def http_error(cls, status_code: int, body: str) -> "ProbeResult":
        return cls(ok=False, status_code=status_code, body=body, failure=ProbeFailure.HTTP_STATUS)

    @classmethod
    def transport_error(cls, message: str) -> "ProbeResult":
        return cls(ok=False, body=message, failure=ProbeFailure.TRANSPORT)

    @classmethod
    def timeout(cls) -> "ProbeResult":
        return cls(ok=False, body="Timeout", failure=ProbeFailure.TIMEOUT)

    @property
    def status_label(self) -> str:
        """Status code for display, or ``error`` when no response arrived."""
        return str(self.status_code) if self.status_code != TRANSPORT_FAILURE_STATUS else "error"

    def error_summary(self, limit: int = 200) -> str:
        """Short diagnostic text for display.

        Azure returns ``{"error": {"message": ...}}`` for most failures; that
        message is preferred over the raw body.
        """
        if not self.body:
            return ""
        try:
            data = json.loads(self.body)
        except ValueError:
            return self.body[:limit]
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return self.body[:limit]
