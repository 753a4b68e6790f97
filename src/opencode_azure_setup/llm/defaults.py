"""Remote defaults for deployment name and API version."""

import logging
from typing import Optional

import httpx

from opencode_azure_setup.llm.models import Defaults

logger = logging.getLogger(__name__)

DEFAULTS_URL = "https://raw.githubusercontent.com/schwarztim/opencode/dev/azure-defaults.json"


async def fetch_defaults(
    url: str = DEFAULTS_URL,
    timeout: float = 3.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Defaults:
    """Fetch the latest recommended defaults, falling back to hardcoded ones.

    The feed is a JSON object with optional ``deployment`` and ``apiVersion``
    keys. Being offline, a slow feed, or a malformed document all yield the
    hardcoded defaults.
    """
    defaults = Defaults()
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.get(url, follow_redirects=True)
        if response.status_code != 200:
            logger.debug(f"Defaults feed returned HTTP {response.status_code}, using built-in defaults")
            return defaults
        data = response.json()
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        logger.debug(f"Could not fetch defaults from {url}: {e}")
        return defaults

    if not isinstance(data, dict):
        return defaults
    if data.get("apiVersion"):
        defaults.api_version = str(data["apiVersion"])
    if data.get("deployment"):
        defaults.deployment = str(data["deployment"])
    logger.debug(f"Using defaults deployment={defaults.deployment} api_version={defaults.api_version}")
    return defaults
