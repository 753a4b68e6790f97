"""Normalization of user-supplied Azure OpenAI endpoints.

Users paste anything from a bare resource host (``foo.openai.azure.com``) to
the full request URL copied from the Azure portal::

    https://foo.openai.azure.com/openai/deployments/gpt-5/chat/completions?api-version=2024-10-01

Both reduce to the same canonical ``EndpointDescriptor``.
"""

import logging
import re
from typing import Optional
from urllib.parse import SplitResult, parse_qs, unquote, urlsplit, urlunsplit

from opencode_azure_setup.llm.models import Defaults, EndpointDescriptor

logger = logging.getLogger(__name__)

ROOT_SEGMENT = "openai"
SECURE_SCHEME = "https://"

_DEPLOYMENT_RE = re.compile(r"/deployments/([^/]+)")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def _strict_split(raw: str) -> Optional[SplitResult]:
    """Split ``raw`` only if it is an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(raw)
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    return parts


def _root_path(path: str) -> str:
    """Cut ``path`` right after its first ``openai`` segment."""
    segments = path.split("/")
    if ROOT_SEGMENT in segments:
        return "/".join(segments[: segments.index(ROOT_SEGMENT) + 1])
    return f"/{ROOT_SEGMENT}"


def _from_url(parts: SplitResult, defaults: Defaults) -> EndpointDescriptor:
    deployment = defaults.deployment
    api_version = defaults.api_version

    match = _DEPLOYMENT_RE.search(parts.path)
    if match:
        deployment = unquote(match.group(1))

    version = parse_qs(parts.query).get("api-version", [""])[0]
    if version:
        api_version = version

    base_url = urlunsplit((parts.scheme.lower(), parts.netloc.lower(), _root_path(parts.path), "", ""))
    return EndpointDescriptor(base_url=base_url.rstrip("/"), deployment=deployment, api_version=api_version)


def parse_azure_endpoint(raw: str, defaults: Optional[Defaults] = None) -> EndpointDescriptor:
    """Turn raw endpoint text into an ``EndpointDescriptor``.

    Args:
        raw: Endpoint as typed or pasted by the user.
        defaults: Deployment and API version to use when ``raw`` does not carry them.

    Returns:
        The canonical endpoint. ``base_url`` never ends in a slash and always
        ends in a single ``/openai`` component.
    """
    defaults = defaults or Defaults()
    text = raw.strip()

    parts = _strict_split(text)
    if parts is not None:
        return _from_url(parts, defaults)

    # Not an absolute URL; most likely just the resource host.
    cleaned = text[:-1] if text.endswith("/") else text
    if not _SCHEME_RE.match(cleaned):
        cleaned = SECURE_SCHEME + cleaned

    parts = _strict_split(cleaned)
    if parts is not None:
        return _from_url(parts, defaults)

    logger.debug(f"Endpoint {cleaned!r} is not a parseable URL, appending root segment as-is")
    if not cleaned.endswith(f"/{ROOT_SEGMENT}"):
        cleaned = f"{cleaned}/{ROOT_SEGMENT}"
    return EndpointDescriptor(base_url=cleaned, deployment=defaults.deployment, api_version=defaults.api_version)
