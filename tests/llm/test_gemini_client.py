"""Tests for GeminiClient with the provider SDK mocked out."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from event_trust.config.settings import settings
from event_trust.errors import ProviderError
from event_trust.llm.base import LLMClient
from event_trust.llm.gemini_client import GeminiClient
from event_trust.llm.messages import (
    AssistantMessage,
    ToolResult,
    ToolResultMessage,
    ToolSpec,
    UserMessage,
)

SEARCH_SPEC = ToolSpec(name="search_web", description="Search the web.")


@pytest.fixture
def genai_mock():
    with patch("event_trust.llm.gemini_client.genai") as mock:
        model = MagicMock()
        model.generate_content_async = AsyncMock()
        mock.GenerativeModel.return_value = model
        yield mock


def _reply(text: str) -> MagicMock:
    response = MagicMock()
    response.text = text
    return response


class TestInit:
    def test_requires_api_key(self, monkeypatch, genai_mock):
        monkeypatch.setattr(settings, "gemini_api_key", None)
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            GeminiClient()

    def test_configures_sdk(self, genai_mock):
        client = GeminiClient(api_key="test-key", model_name="gemini-test")
        genai_mock.configure.assert_called_once_with(api_key="test-key")
        assert client.model_name == "gemini-test"

    def test_satisfies_protocol(self, genai_mock):
        assert isinstance(GeminiClient(api_key="test-key"), LLMClient)


class TestComplete:
    @pytest.mark.asyncio
    async def test_final_answer(self, genai_mock):
        model = genai_mock.GenerativeModel.return_value
        model.generate_content_async.return_value = _reply('{"verified": true}')

        client = GeminiClient(api_key="test-key")
        response = await client.complete("system", [UserMessage(content="hi")], [SEARCH_SPEC])

        assert response.text == '{"verified": true}'
        assert response.stop_reason == "end_turn"

    @pytest.mark.asyncio
    async def test_tool_call_parsed(self, genai_mock):
        model = genai_mock.GenerativeModel.return_value
        model.generate_content_async.return_value = _reply(
            '{"tool": "search_web", "input": {"query": "jazz"}}'
        )

        client = GeminiClient(api_key="test-key")
        response = await client.complete("system", [UserMessage(content="hi")], [SEARCH_SPEC])

        assert response.stop_reason == "tool_use"
        assert response.tool_calls[0].input == {"query": "jazz"}

    @pytest.mark.asyncio
    async def test_no_tools_no_parsing(self, genai_mock):
        model = genai_mock.GenerativeModel.return_value
        model.generate_content_async.return_value = _reply('{"tool": "search_web"}')

        client = GeminiClient(api_key="test-key")
        response = await client.complete("system", [UserMessage(content="hi")])

        assert response.tool_calls == []

    @pytest.mark.asyncio
    async def test_tool_instructions_in_system_prompt(self, genai_mock):
        model = genai_mock.GenerativeModel.return_value
        model.generate_content_async.return_value = _reply("ok")

        client = GeminiClient(api_key="test-key", model_name="gemini-test")
        await client.complete("Verify events.", [UserMessage(content="hi")], [SEARCH_SPEC])

        _, kwargs = genai_mock.GenerativeModel.call_args
        assert kwargs["system_instruction"].startswith("Verify events.")
        assert "search_web" in kwargs["system_instruction"]

    @pytest.mark.asyncio
    async def test_conversation_roles(self, genai_mock):
        model = genai_mock.GenerativeModel.return_value
        model.generate_content_async.return_value = _reply("ok")

        client = GeminiClient(api_key="test-key")
        await client.complete(
            "system",
            [
                UserMessage(content="verify"),
                AssistantMessage(content='{"tool": "search_web", "input": {"query": "q"}}'),
                ToolResultMessage(
                    results=[
                        ToolResult(call_id="call-1", name="search_web", content={"found": False})
                    ]
                ),
            ],
            [SEARCH_SPEC],
        )

        contents = model.generate_content_async.call_args.args[0]
        assert [c["role"] for c in contents] == ["user", "model", "user"]
        assert "Tool result (search_web, call-1)" in contents[2]["parts"][0]

    @pytest.mark.asyncio
    async def test_failure_raises_provider_error(self, genai_mock):
        model = genai_mock.GenerativeModel.return_value
        model.generate_content_async.side_effect = RuntimeError("503 unavailable")

        client = GeminiClient(api_key="test-key", max_attempts=1)
        with pytest.raises(ProviderError, match="503"):
            await client.complete("system", [UserMessage(content="hi")])

    @pytest.mark.asyncio
    async def test_rate_limiter_awaited(self, genai_mock):
        model = genai_mock.GenerativeModel.return_value
        model.generate_content_async.return_value = _reply("ok")
        limiter = MagicMock()
        limiter.acquire = AsyncMock(return_value=True)

        client = GeminiClient(api_key="test-key", rate_limiter=limiter)
        await client.complete("system", [UserMessage(content="hi")])

        limiter.acquire.assert_awaited_once()
