"""Root test configuration and common fixtures."""
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from opencode_azure_setup.config.base import InstallerConfig, SetupSettings
from opencode_azure_setup.core.prompts import Tone
from opencode_azure_setup.llm.models import Credential, Defaults, EndpointDescriptor, ProbeResult

# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

TEST_API_KEY = "abcd1234efgh5678ijkl"
PORTAL_URL = "https://foo.openai.azure.com/openai/deployments/gpt-5/chat/completions?api-version=2024-10-01"


class ScriptedIO:
    """PromptIO that replays canned answers and records everything shown."""

    def __init__(self, answers: Optional[List[str]] = None, secrets: Optional[List[str]] = None):
        self.answers = list(answers or [])
        self.secrets = list(secrets or [])
        self.prompts: List[Tuple[str, str]] = []
        self.messages: List[Tuple[Tone, str]] = []
        self.closed = False

    def ask_text(self, prompt: str, default: str = "") -> str:
        self.prompts.append((prompt, default))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {prompt}")
        # Blank answers behave like pressing Enter at a click prompt.
        return self.answers.pop(0) or default

    def ask_secret(self, prompt: str, existing_redacted: str = "") -> str:
        self.prompts.append((prompt, existing_redacted))
        if not self.secrets:
            raise AssertionError(f"Unexpected secret prompt: {prompt}")
        return self.secrets.pop(0)

    def show(self, message: str = "", tone: Tone = Tone.PLAIN) -> None:
        self.messages.append((tone, message))

    def close(self) -> None:
        self.closed = True

    @property
    def prompt_names(self) -> List[str]:
        return [p for p, _ in self.prompts]

    @property
    def output(self) -> str:
        return "\n".join(m for _, m in self.messages)


class FakeProber:
    """Prober returning queued results and recording each call."""

    def __init__(self, *results: ProbeResult):
        self.results = list(results)
        self.calls: List[Tuple[EndpointDescriptor, Credential]] = []

    async def probe(self, endpoint: EndpointDescriptor, credential: Credential) -> ProbeResult:
        self.calls.append((endpoint, credential))
        if not self.results:
            raise AssertionError("Unexpected probe")
        return self.results.pop(0)


@pytest.fixture
def config_path(tmp_path) -> Path:
    """Location of the OpenCode config inside a temporary home."""
    return tmp_path / ".config" / "opencode" / "opencode.json"


@pytest.fixture
def settings(config_path) -> SetupSettings:
    """Settings pointing at the temporary config, with auxiliary installers off."""
    return SetupSettings(config_path=config_path, installers=InstallerConfig(enabled=False))


@pytest.fixture
def endpoint() -> EndpointDescriptor:
    return EndpointDescriptor(
        base_url="https://foo.openai.azure.com/openai",
        deployment="gpt-5",
        api_version="2024-10-01",
    )


@pytest.fixture
def credential() -> Credential:
    return Credential.from_key(TEST_API_KEY)


@pytest.fixture
def existing_document() -> Dict[str, Any]:
    """A config written by an earlier run plus user sections that must survive."""
    return {
        "$schema": "https://opencode.ai/config.json",
        "model": "azure/gpt-5",
        "provider": {
            "azure": {
                "npm": "@ai-sdk/azure",
                "name": "Azure OpenAI",
                "options": {
                    "baseURL": "https://foo.openai.azure.com/openai",
                    "apiKey": TEST_API_KEY,
                    "useDeploymentBasedUrls": True,
                    "apiVersion": "2024-12-01-preview",
                },
                "models": {"gpt-5": {"name": "gpt-5", "limit": {"context": 200000, "output": 16384}}},
            },
            "ollama": {"npm": "@ai-sdk/openai-compatible", "options": {"baseURL": "http://localhost:11434/v1"}},
        },
        "agent": {"review": {"model": "azure/gpt-5", "prompt": "Review the diff"}},
        "permission": {"bash": "ask", "edit": "allow"},
        "theme": "tokyonight",
    }


@pytest.fixture
def write_config(config_path) -> Callable[[Any], bytes]:
    """Write a document (or raw text) to the config path and return the bytes written."""

    def _write(content: Any) -> bytes:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        text = content if isinstance(content, str) else json.dumps(content, indent=2)
        config_path.write_text(text, encoding="utf-8")
        return config_path.read_bytes()

    return _write


@pytest.fixture
def defaults_provider():
    """Async defaults provider that never touches the network."""
    calls = []

    async def _provider() -> Defaults:
        calls.append(True)
        return Defaults()

    _provider.calls = calls
    return _provider


def _json_transport(status_code: int, payload: Any = None, text: Optional[str] = None) -> httpx.MockTransport:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=payload)

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


def _raising_transport(exc: Exception) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return httpx.MockTransport(handler)


@pytest.fixture
def scripted_io():
    """Factory for ScriptedIO instances."""
    return ScriptedIO


@pytest.fixture
def fake_prober():
    """Factory for FakeProber instances."""
    return FakeProber


@pytest.fixture
def json_transport():
    """Factory for a MockTransport answering every request with the same response.

    Handled requests are recorded on ``transport.requests``.
    """
    return _json_transport


@pytest.fixture
def raising_transport():
    """Factory for a MockTransport that raises the given exception."""
    return _raising_transport


@pytest.fixture
def api_key() -> str:
    return TEST_API_KEY


@pytest.fixture
def portal_url() -> str:
    """Request URL as copied from the Azure portal."""
    return PORTAL_URL
