"""LLM access: client interface, conversation messages, Gemini client, rate limiting.

GeminiClient is not imported here so that importing the interface never
requires the provider SDK to be configured.
"""

from event_trust.llm.base import LLMClient
from event_trust.llm.messages import (
    AssistantMessage,
    Message,
    ModelResponse,
    ToolCall,
    ToolResult,
    ToolResultMessage,
    ToolSpec,
    UserMessage,
)
from event_trust.llm.rate_limiter import RateLimiter, TokenBucket

__all__ = [
    "LLMClient",
    "AssistantMessage",
    "Message",
    "ModelResponse",
    "ToolCall",
    "ToolResult",
    "ToolResultMessage",
    "ToolSpec",
    "UserMessage",
    "RateLimiter",
    "TokenBucket",
]
