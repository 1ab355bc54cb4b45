"""LLM + web search corroboration for one candidate event.

The agent runs a bounded tool-use loop, modelled as an explicit state
machine over discriminated conversation messages:

    awaiting_model -> awaiting_tool_result -> awaiting_model -> ...
        -> done | turn_limit_exceeded

Each model call counts as one turn. Reaching max_turns while the model is
still calling tools ends the loop in turn_limit_exceeded.

Failures never escape verify_event. A provider error, an unparseable
verdict or the turn limit all degrade to the recovery verdict of the
configured RecoveryPolicy, which is never a removal and is never cached.

Usage:
    from event_trust.agents.sifters.verification import CorroborationAgent

    agent = CorroborationAgent(llm_client=GeminiClient(), search_tool=WebSearchTool())
    result = await agent.verify_event(candidate)
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from event_trust.agents.sifters.verification.search_tool import WebSearchTool
from event_trust.config.prompts.verification_prompts import (
    CORROBORATION_SYSTEM_PROMPT,
    CORROBORATION_USER_PROMPT,
)
from event_trust.config.settings import settings
from event_trust.data_management.schemas import (
    EventCandidate,
    RecoveryPolicy,
    VerificationResult,
)
from event_trust.data_management.verification_cache import PersistentVerificationCache
from event_trust.errors import AgentParseError, ProviderError
from event_trust.llm.base import LLMClient
from event_trust.llm.messages import (
    AssistantMessage,
    Message,
    ModelResponse,
    ToolCall,
    ToolResult,
    ToolResultMessage,
    UserMessage,
    strip_code_fences,
)
from event_trust.utils.logging import get_structured_logger

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class AgentState(str, Enum):
    """States of the corroboration loop."""

    AWAITING_MODEL = "awaiting_model"
    AWAITING_TOOL_RESULT = "awaiting_tool_result"
    DONE = "done"
    TURN_LIMIT_EXCEEDED = "turn_limit_exceeded"


@dataclass
class LoopTrace:
    """Record of one loop run, for logging and tests."""

    states: list[AgentState] = field(default_factory=lambda: [AgentState.AWAITING_MODEL])
    turns: int = 0
    tool_calls: int = 0
    messages: list[Message] = field(default_factory=list)

    @property
    def final_state(self) -> AgentState:
        return self.states[-1]

    def enter(self, state: AgentState) -> AgentState:
        self.states.append(state)
        return state


def parse_verdict(text: str) -> VerificationResult:
    """
    Parse the model's final reply into a VerificationResult.

    Args:
        text: Final assistant text, optionally wrapped in a code fence

    Returns:
        Validated VerificationResult

    Raises:
        AgentParseError: If the text is not a JSON object matching the verdict schema
    """
    cleaned = strip_code_fences(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AgentParseError(f"reply is not JSON: {cleaned[:80]!r}") from e
    if not isinstance(payload, dict):
        raise AgentParseError(f"reply is not a JSON object: {cleaned[:80]!r}")
    try:
        return VerificationResult.model_validate(payload)
    except ValidationError as e:
        raise AgentParseError(f"reply does not match verdict schema: {e}") from e


class CorroborationAgent:
    """Decides {verified, confidence, reasoning, cancelled} for one candidate.

    Attributes:
        max_turns: Model calls allowed per candidate
        recovery: Policy applied when verification itself fails
    """

    def __init__(
        self,
        llm_client: LLMClient,
        search_tool: Optional[WebSearchTool] = None,
        cache: Optional[PersistentVerificationCache] = None,
        max_turns: Optional[int] = None,
        recovery: Optional[RecoveryPolicy] = None,
        system_prompt: str = CORROBORATION_SYSTEM_PROMPT,
    ) -> None:
        """Initialize the agent.

        Args:
            llm_client: Any LLMClient implementation.
            search_tool: Handler for search_web (a default WebSearchTool if None).
            cache: Verdict cache. None disables caching.
            max_turns: Model calls per candidate (defaults to settings).
            recovery: RecoveryPolicy (defaults to settings).
            system_prompt: Verdict instructions for the model.
        """
        self.llm_client = llm_client
        self.search_tool = search_tool or WebSearchTool()
        self.cache = cache
        self.max_turns = max_turns or settings.agent_max_turns
        self.recovery = RecoveryPolicy(recovery or settings.recovery_policy)
        self.system_prompt = system_prompt
        self._handlers: dict[str, ToolHandler] = {
            self.search_tool.spec.name: self.search_tool,
        }
        self._tool_specs = [self.search_tool.spec]
        self._logger = get_structured_logger("CorroborationAgent")

    async def verify_event(self, candidate: EventCandidate) -> VerificationResult:
        """Verdict for one candidate, from cache or a fresh loop run.

        Successful verdicts are cached before returning. Recovery verdicts
        are returned uncached so the next run tries again.
        """
        key = candidate.cache_key
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                self._logger.debug("cache_hit", title=candidate.title)
                return cached

        try:
            text, trace = await self.run_loop(self.build_prompt(candidate))
        except ProviderError as e:
            return self._recover(candidate, "provider error", e)

        if trace.final_state is AgentState.TURN_LIMIT_EXCEEDED:
            return self._recover(
                candidate,
                "turn limit",
                AgentParseError(f"no verdict after {trace.turns} turns"),
            )

        try:
            result = parse_verdict(text)
        except AgentParseError as e:
            return self._recover(candidate, "parse error", e)

        if self.cache is not None:
            self.cache.set(key, result)

        self._logger.info(
            "event_verified",
            title=candidate.title,
            verified=result.verified,
            confidence=result.confidence.value,
            cancelled=result.cancelled,
            turns=trace.turns,
        )
        return result

    async def run_loop(self, prompt: str) -> tuple[str, LoopTrace]:
        """
        Run the tool-use loop until a final reply or the turn cap.

        Args:
            prompt: Initial user message

        Returns:
            (final assistant text, LoopTrace). The text is the last reply
            seen, which may be a tool call when the turn limit was hit.

        Raises:
            ProviderError: If the LLM client fails
        """
        trace = LoopTrace(messages=[UserMessage(content=prompt)])
        state = AgentState.AWAITING_MODEL
        response = ModelResponse()

        while state not in (AgentState.DONE, AgentState.TURN_LIMIT_EXCEEDED):
            if state is AgentState.AWAITING_MODEL:
                if trace.turns >= self.max_turns:
                    state = trace.enter(AgentState.TURN_LIMIT_EXCEEDED)
                    continue
                response = await self.llm_client.complete(
                    self.system_prompt,
                    trace.messages,
                    tools=self._tool_specs,
                )
                trace.turns += 1
                trace.messages.append(
                    AssistantMessage(content=response.text, tool_calls=response.tool_calls)
                )
                if response.stop_reason == "tool_use":
                    if trace.turns >= self.max_turns:
                        # no turn left to read the tool result
                        state = trace.enter(AgentState.TURN_LIMIT_EXCEEDED)
                    else:
                        state = trace.enter(AgentState.AWAITING_TOOL_RESULT)
                else:
                    state = trace.enter(AgentState.DONE)

            elif state is AgentState.AWAITING_TOOL_RESULT:
                results = [await self._invoke_tool(call) for call in response.tool_calls]
                trace.tool_calls += len(results)
                trace.messages.append(ToolResultMessage(results=results))
                state = trace.enter(AgentState.AWAITING_MODEL)

        if state is AgentState.TURN_LIMIT_EXCEEDED:
            self._logger.warning("turn_limit_exceeded", turns=trace.turns)
        return response.text, trace

    def build_prompt(self, candidate: EventCandidate) -> str:
        """User message describing the candidate."""
        source_line = f"Source URL: {candidate.source_url}\n" if candidate.source_url else ""
        return CORROBORATION_USER_PROMPT.format(
            title=candidate.title,
            venue=candidate.venue_name or "Unknown venue",
            date=candidate.date_key,
            city=candidate.city or "Unknown city",
            source_line=source_line,
        )

    async def _invoke_tool(self, call: ToolCall) -> ToolResult:
        handler = self._handlers.get(call.name)
        if handler is None:
            content: dict[str, Any] = {"error": f"Unknown tool: {call.name}"}
        else:
            try:
                content = await handler(call.input)
            except Exception as e:
                # Handlers are expected to return errors as data
                self._logger.warning("tool_failed", tool=call.name, error=str(e))
                content = {"error": str(e)}
        return ToolResult(call_id=call.id, name=call.name, content=content)

    def _recover(
        self,
        candidate: EventCandidate,
        cause: str,
        error: Exception,
    ) -> VerificationResult:
        self._logger.warning(
            "verification_recovered",
            title=candidate.title,
            cause=cause,
            policy=self.recovery.value,
            error=str(error),
        )
        return VerificationResult.recovery_default(cause, self.recovery)
