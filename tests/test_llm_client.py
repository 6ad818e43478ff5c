"""
Tests for the completion client against a mocked HTTP transport.
"""

import asyncio
import json

import httpx
import pytest

from contract_analysis.config.settings import CompletionConfig
from contract_analysis.exceptions import (
    CompletionError,
    ConfigurationError,
    MalformedResponseError,
)
from contract_analysis.tools.llm_client import (
    CompletionClient,
    create_client,
    parse_json_payload,
)


def _envelope(content, model="gpt-4o-2024", total_tokens=42):
    return {
        "model": model,
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"total_tokens": total_tokens},
    }


def _client(handler, **kwargs) -> CompletionClient:
    return CompletionClient(
        api_key="test-key",
        base_url="https://llm.example/v1",
        transport=httpx.MockTransport(handler),
        **kwargs
    )


async def _complete(client: CompletionClient, **kwargs):
    async with client:
        return await client.complete("system", "user", **kwargs)


# =============================================================================
# JSON Payload Parsing
# =============================================================================

class TestParseJsonPayload:

    def test_plain_json(self):
        assert parse_json_payload('{"risks": []}') == {"risks": []}

    def test_fenced_json(self):
        content = '```json\n{"clauses": [{"clauseTitle": "Term"}]}\n```'
        assert parse_json_payload(content) == {"clauses": [{"clauseTitle": "Term"}]}

    def test_invalid_json_raises(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_json_payload("Here are the risks: none")
        assert exc_info.value.raw == "Here are the risks: none"


# =============================================================================
# Request Shape
# =============================================================================

class TestRequestShape:

    def test_json_mode_sends_response_format(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_envelope('{"ok": true}'))

        result = asyncio.run(_complete(_client(handler), expect_json=True, temperature=0.2))

        assert seen["url"] == "https://llm.example/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["response_format"] == {"type": "json_object"}
        assert seen["body"]["temperature"] == 0.2
        assert seen["body"]["messages"][0] == {"role": "system", "content": "system"}
        assert result.json_data == {"ok": True}
        assert result.is_json
        assert result.tokens_used == 42
        assert result.model == "gpt-4o-2024"

    def test_text_mode_omits_response_format(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_envelope("A short summary."))

        result = asyncio.run(_complete(_client(handler, model="custom-model")))

        assert "response_format" not in seen["body"]
        assert seen["body"]["model"] == "custom-model"
        assert result.text == "A short summary."
        assert not result.is_json


# =============================================================================
# Failure Mapping
# =============================================================================

class TestFailures:

    def test_error_status_raises_completion_error(self):
        def handler(request):
            return httpx.Response(500, text="upstream exploded")

        with pytest.raises(CompletionError) as exc_info:
            asyncio.run(_complete(_client(handler)))
        assert "500" in str(exc_info.value)

    def test_connection_error_raises_completion_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CompletionError):
            asyncio.run(_complete(_client(handler)))

    def test_non_json_reply_in_json_mode(self):
        def handler(request):
            return httpx.Response(200, json=_envelope("I could not find any risks."))

        with pytest.raises(MalformedResponseError):
            asyncio.run(_complete(_client(handler), expect_json=True))

    def test_bad_envelope(self):
        def handler(request):
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(MalformedResponseError):
            asyncio.run(_complete(_client(handler)))

    def test_null_content(self):
        def handler(request):
            return httpx.Response(200, json=_envelope(None))

        with pytest.raises(MalformedResponseError):
            asyncio.run(_complete(_client(handler)))

    def test_malformed_is_not_a_completion_error(self):
        assert not issubclass(MalformedResponseError, CompletionError)


# =============================================================================
# Construction
# =============================================================================

class TestConstruction:

    @pytest.mark.parametrize("key", [None, ""])
    def test_missing_api_key_fails_fast(self, key):
        with pytest.raises(ConfigurationError):
            CompletionClient(api_key=key)

    def test_create_client_from_config(self):
        config = CompletionConfig(api_key="k", model="gpt-4o-mini", base_url="https://x/v1/")
        client = create_client(config)

        assert client.model == "gpt-4o-mini"
        assert client.base_url == "https://x/v1"
        asyncio.run(client.aclose())

    def test_create_client_without_key(self):
        with pytest.raises(ConfigurationError):
            create_client(CompletionConfig(api_key=None))

    def test_is_available(self):
        def handler(request):
            assert request.url.path == "/v1/models"
            return httpx.Response(200, json={"data": []})

        async def check():
            async with _client(handler) as client:
                return await client.is_available()

        assert asyncio.run(check()) is True

    def test_is_available_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        async def check():
            async with _client(handler) as client:
                return await client.is_available()

        assert asyncio.run(check()) is False
