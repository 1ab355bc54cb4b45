"""Conversation data exchanged between an agent loop and an LLM client.

Messages are discriminated on ``role`` so a conversation can be dumped,
replayed and asserted on in tests without a live provider.

Tool calls travel as text: a reply line that is a JSON object with a
"tool" key is a call, e.g. ``{"tool": "search_web", "input": {"query": "..."}}``.
This keeps the client interface vendor-neutral.
"""

import json
import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

_CODE_FENCE = re.compile(r"^```(?:json)?\s*\n?|\n?\s*```$", re.IGNORECASE)


class ToolSpec(BaseModel):
    """A tool the model may call."""

    name: str
    description: str
    input_schema: dict[str, Any] = Field(default_factory=dict)


class ToolCall(BaseModel):
    """One tool invocation requested by the model."""

    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Output of one tool invocation, fed back to the model."""

    call_id: str
    name: str
    content: dict[str, Any]


class UserMessage(BaseModel):
    role: Literal["user"] = "user"
    content: str


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str
    tool_calls: list[ToolCall] = Field(default_factory=list)


class ToolResultMessage(BaseModel):
    role: Literal["tool"] = "tool"
    results: list[ToolResult]


Message = Annotated[
    Union[UserMessage, AssistantMessage, ToolResultMessage],
    Field(discriminator="role"),
]


class ModelResponse(BaseModel):
    """One assistant turn as returned by an LLM client."""

    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)

    @property
    def stop_reason(self) -> Literal["tool_use", "end_turn"]:
        return "tool_use" if self.tool_calls else "end_turn"


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence, if any."""
    return _CODE_FENCE.sub("", text.strip()).strip()


def parse_tool_calls(text: str) -> list[ToolCall]:
    """
    Extract text-protocol tool calls from a model reply.

    Args:
        text: Raw assistant text

    Returns:
        ToolCall list in reply order (empty when the reply is a final answer)
    """
    candidates = [strip_code_fences(text)]
    candidates.extend(line.strip() for line in text.splitlines())

    calls: list[ToolCall] = []
    seen: set[str] = set()
    for chunk in candidates:
        if not chunk.startswith("{") or chunk in seen:
            continue
        seen.add(chunk)
        try:
            payload = json.loads(chunk)
        except json.JSONDecodeError:
            continue
        if not isinstance(payload, dict) or "tool" not in payload:
            continue
        tool_input = payload.get("input")
        if not isinstance(tool_input, dict):
            tool_input = {k: v for k, v in payload.items() if k != "tool"}
        calls.append(
            ToolCall(
                id=f"call-{len(calls) + 1}",
                name=str(payload["tool"]),
                input=tool_input,
            )
        )
        # A whole-reply match already covers any single-line duplicate
        if chunk == candidates[0]:
            break
    return calls


def render_tool_instructions(tools: list[ToolSpec]) -> str:
    """Describe available tools and the call syntax for the system prompt."""
    if not tools:
        return ""
    lines = ["", "TOOLS:"]
    for tool in tools:
        lines.append(f"- {tool.name}: {tool.description}")
        lines.append(f"  input schema: {json.dumps(tool.input_schema)}")
    lines.append(
        'To call a tool, reply with only one JSON line: '
        '{"tool": "<name>", "input": {...}}. '
        "Tool results arrive in the next message."
    )
    return "\n".join(lines)


def render_tool_results(message: ToolResultMessage) -> str:
    """Text form of tool results for providers without native tool turns."""
    return "\n".join(
        f"Tool result ({result.name}, {result.call_id}): {json.dumps(result.content)}"
        for result in message.results
    )
