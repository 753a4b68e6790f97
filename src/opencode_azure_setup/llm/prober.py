"""Connectivity probe against an Azure OpenAI deployment."""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from opencode_azure_setup.llm.models import Credential, EndpointDescriptor, ProbeResult

logger = logging.getLogger(__name__)

PROBE_MESSAGE = "hi"
PROBE_MAX_TOKENS = 5


class ConnectivityProber(BaseModel):
    """Sends the smallest useful chat request to check endpoint and key.

    Every outcome, including timeouts and connection errors, is returned as a
    ``ProbeResult``; ``probe`` does not raise.
    """

    timeout: float = Field(default=15.0, gt=0, description="Overall request timeout in seconds")
    transport: Optional[httpx.AsyncBaseTransport] = Field(
        default=None, description="Custom httpx transport, used by tests"
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @staticmethod
    def build_payload() -> Dict[str, Any]:
        return {
            "messages": [{"role": "user", "content": PROBE_MESSAGE}],
            "max_completion_tokens": PROBE_MAX_TOKENS,
        }

    async def probe(self, endpoint: EndpointDescriptor, credential: Credential) -> ProbeResult:
        """Probe ``endpoint`` with ``credential`` and classify the response."""
        url = endpoint.request_url()
        headers = {"Content-Type": "application/json", "api-key": credential.reveal()}
        logger.debug(f"Probing {url} (api-version={endpoint.api_version}, key={credential.redacted()})")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    params={"api-version": endpoint.api_version},
                    headers=headers,
                    json=self.build_payload(),
                )
        except httpx.TimeoutException:
            logger.warning(f"Probe of {url} timed out after {self.timeout}s")
            return ProbeResult.timeout()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # ValueError covers header values httpx cannot encode, e.g. a pasted key with smart quotes.
            logger.warning(f"Probe of {url} failed: {e}")
            return ProbeResult.transport_error(str(e) or type(e).__name__)

        if response.status_code == 200:
            logger.info(f"Probe of {url} succeeded")
            return ProbeResult.success(response.status_code, response.text)

        logger.warning(f"Probe of {url} returned HTTP {response.status_code}")
        return ProbeResult.http_error(response.status_code, response.text)
