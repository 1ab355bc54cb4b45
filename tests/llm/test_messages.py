"""Tests for conversation messages and the text tool-call protocol."""

import json

import pytest
from pydantic import TypeAdapter

from event_trust.llm.messages import (
    AssistantMessage,
    Message,
    ModelResponse,
    ToolCall,
    ToolResult,
    ToolResultMessage,
    ToolSpec,
    UserMessage,
    parse_tool_calls,
    render_tool_instructions,
    render_tool_results,
    strip_code_fences,
)


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


class TestParseToolCalls:
    def test_single_call(self):
        calls = parse_tool_calls('{"tool": "search_web", "input": {"query": "jazz miami"}}')
        assert calls == [ToolCall(id="call-1", name="search_web", input={"query": "jazz miami"})]

    def test_fenced_call(self):
        text = '```json\n{"tool": "search_web", "input": {"query": "q"}}\n```'
        calls = parse_tool_calls(text)
        assert len(calls) == 1
        assert calls[0].input == {"query": "q"}

    def test_call_after_prose(self):
        text = 'Let me check the venue listing.\n{"tool": "search_web", "input": {"query": "q"}}'
        assert [c.name for c in parse_tool_calls(text)] == ["search_web"]

    def test_multiple_calls(self):
        text = (
            '{"tool": "search_web", "input": {"query": "a"}}\n'
            '{"tool": "search_web", "input": {"query": "b"}}'
        )
        calls = parse_tool_calls(text)
        assert [c.id for c in calls] == ["call-1", "call-2"]
        assert [c.input["query"] for c in calls] == ["a", "b"]

    def test_flat_input(self):
        calls = parse_tool_calls('{"tool": "search_web", "query": "q"}')
        assert calls[0].input == {"query": "q"}

    def test_final_verdict_is_not_a_call(self):
        verdict = json.dumps({"verified": True, "confidence": "high", "reasoning": "ok"})
        assert parse_tool_calls(verdict) == []

    def test_plain_text(self):
        assert parse_tool_calls("No tool needed.") == []

    def test_broken_json_ignored(self):
        assert parse_tool_calls('{"tool": "search_web", "input": ') == []


class TestMessages:
    def test_discriminated_union(self):
        adapter = TypeAdapter(list[Message])
        messages = adapter.validate_python(
            [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "{}", "tool_calls": []},
                {
                    "role": "tool",
                    "results": [{"call_id": "call-1", "name": "search_web", "content": {"found": False}}],
                },
            ]
        )
        assert isinstance(messages[0], UserMessage)
        assert isinstance(messages[1], AssistantMessage)
        assert isinstance(messages[2], ToolResultMessage)

    def test_unknown_role_rejected(self):
        with pytest.raises(Exception):
            TypeAdapter(Message).validate_python({"role": "system", "content": "x"})

    def test_stop_reason(self):
        assert ModelResponse(text="done").stop_reason == "end_turn"
        call = ToolCall(id="call-1", name="search_web")
        assert ModelResponse(text="", tool_calls=[call]).stop_reason == "tool_use"


class TestRendering:
    def test_tool_instructions(self):
        spec = ToolSpec(
            name="search_web",
            description="Search the web.",
            input_schema={"type": "object"},
        )
        text = render_tool_instructions([spec])
        assert "search_web: Search the web." in text
        assert '"tool"' in text

    def test_no_tools_no_instructions(self):
        assert render_tool_instructions([]) == ""

    def test_tool_results(self):
        message = ToolResultMessage(
            results=[ToolResult(call_id="call-1", name="search_web", content={"found": False})]
        )
        assert render_tool_results(message) == (
            'Tool result (search_web, call-1): {"found": false}'
        )
