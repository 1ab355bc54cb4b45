"""LLM client interface consumed by the verification agents.

The pipeline depends only on this capability, never on a vendor SDK.
Agents receive a client through their constructor so tests can script
replies deterministically.
"""

from typing import Protocol, Sequence, runtime_checkable

from event_trust.llm.messages import Message, ModelResponse, ToolSpec


@runtime_checkable
class LLMClient(Protocol):
    """Message-completion capability with optional tools."""

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[Message],
        tools: Sequence[ToolSpec] = (),
    ) -> ModelResponse:
        """
        Produce the next assistant turn.

        Args:
            system_prompt: Instructions for the model
            messages: Conversation so far, including tool results
            tools: Tools the model may call

        Returns:
            ModelResponse with text and any requested tool calls

        Raises:
            ProviderError: If the provider cannot produce a reply
        """
        ...
