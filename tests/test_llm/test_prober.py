"""Tests for the connectivity prober."""
import json

import httpx
import pytest

from opencode_azure_setup.llm.models import Credential, ProbeFailure
from opencode_azure_setup.llm.prober import ConnectivityProber


@pytest.mark.unit
class TestConnectivityProber:
    @pytest.mark.asyncio
    async def test_success(self, endpoint, credential, json_transport):
        transport = json_transport(200, {"choices": [{"message": {"content": "Hello"}}]})
        result = await ConnectivityProber(transport=transport).probe(endpoint, credential)

        assert result.ok
        assert result.status_code == 200
        assert result.failure is ProbeFailure.NONE

    @pytest.mark.asyncio
    async def test_request_shape(self, endpoint, credential, api_key, json_transport):
        transport = json_transport(200, {})
        await ConnectivityProber(transport=transport).probe(endpoint, credential)

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/openai/deployments/gpt-5/chat/completions"
        assert request.url.params["api-version"] == "2024-10-01"
        assert request.headers["api-key"] == api_key
        assert json.loads(request.content) == {
            "messages": [{"role": "user", "content": "hi"}],
            "max_completion_tokens": 5,
        }

    @pytest.mark.asyncio
    async def test_http_error_keeps_body(self, endpoint, credential, json_transport):
        transport = json_transport(401, {"error": {"code": "401", "message": "Access denied due to invalid key"}})
        result = await ConnectivityProber(transport=transport).probe(endpoint, credential)

        assert not result.ok
        assert result.status_code == 401
        assert result.failure is ProbeFailure.HTTP_STATUS
        assert result.error_summary() == "Access denied due to invalid key"

    @pytest.mark.asyncio
    async def test_non_200_success_code_is_failure(self, endpoint, credential, json_transport):
        result = await ConnectivityProber(transport=json_transport(201, {})).probe(endpoint, credential)
        assert not result.ok

    @pytest.mark.asyncio
    async def test_timeout(self, endpoint, credential, raising_transport):
        transport = raising_transport(httpx.ReadTimeout("timed out"))
        result = await ConnectivityProber(transport=transport).probe(endpoint, credential)

        assert not result.ok
        assert result.status_code == 0
        assert result.body == "Timeout"
        assert result.failure is ProbeFailure.TIMEOUT

    @pytest.mark.asyncio
    async def test_connection_error(self, endpoint, credential, raising_transport):
        transport = raising_transport(httpx.ConnectError("Name or service not known"))
        result = await ConnectivityProber(transport=transport).probe(endpoint, credential)

        assert not result.ok
        assert result.status_code == 0
        assert result.failure is ProbeFailure.TRANSPORT
        assert "Name or service not known" in result.body
        assert result.status_label == "error"

    @pytest.mark.asyncio
    async def test_key_that_cannot_be_sent_is_transport_failure(self, endpoint, json_transport):
        # Pasted keys sometimes carry smart quotes, which are not valid in an HTTP header.
        credential = Credential.from_key("abcd1234“efgh5678")
        transport = json_transport(200, {})

        result = await ConnectivityProber(transport=transport).probe(endpoint, credential)

        assert not result.ok
        assert result.status_code == 0
        assert result.failure is ProbeFailure.TRANSPORT
        assert credential.reveal() not in result.body
        assert not transport.requests
