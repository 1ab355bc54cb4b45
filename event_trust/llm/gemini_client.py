"""Gemini implementation of the LLMClient interface, with retry and backoff."""

from typing import Any, Optional, Sequence

import google.generativeai as genai
from google.generativeai.types.generation_types import BlockedPromptException
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from event_trust.config.settings import settings
from event_trust.errors import ProviderError
from event_trust.llm.messages import (
    AssistantMessage,
    Message,
    ModelResponse,
    ToolResultMessage,
    ToolSpec,
    UserMessage,
    parse_tool_calls,
    render_tool_instructions,
    render_tool_results,
)
from event_trust.llm.rate_limiter import RateLimiter


class GeminiClient:
    """
    Google Gemini client for agent loops.

    Tools are described in the system instruction and called through the
    text protocol in event_trust.llm.messages. Transient failures are retried
    with exponential backoff; blocked prompts are not retried. Anything that
    still fails surfaces as ProviderError.

    Attributes:
        model_name: Gemini model identifier
        temperature: Sampling temperature
        max_attempts: Attempts per completion before giving up
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: int = 1024,
        max_attempts: int = 3,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (defaults to settings)
            model_name: Model identifier (defaults to settings)
            temperature: Sampling temperature (defaults to settings)
            max_output_tokens: Reply length cap
            max_attempts: Attempts per completion
            rate_limiter: Optional limiter awaited before each request

        Raises:
            ValueError: If no API key is configured
        """
        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GEMINI_API_KEY not configured in environment")

        genai.configure(api_key=api_key)

        self.model_name = model_name or settings.gemini_model
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_output_tokens = max_output_tokens
        self.max_attempts = max_attempts
        self._rate_limiter = rate_limiter

        logger.info(f"Gemini client initialized with model {self.model_name}")

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[Message],
        tools: Sequence[ToolSpec] = (),
    ) -> ModelResponse:
        """
        Generate the next assistant turn.

        Args:
            system_prompt: Instructions for the model
            messages: Conversation so far
            tools: Tools the model may call

        Returns:
            ModelResponse with reply text and parsed tool calls

        Raises:
            ProviderError: If the request fails after retries or is blocked
        """
        model = genai.GenerativeModel(
            self.model_name,
            system_instruction=system_prompt + render_tool_instructions(list(tools)),
        )
        contents = [self._to_content(m) for m in messages]

        try:
            text = await self._generate(model, contents)
        except BlockedPromptException as e:
            logger.error(f"Prompt blocked by safety filters: {e}")
            raise ProviderError(f"prompt blocked: {e}") from e
        except RetryError as e:
            raise ProviderError(f"retries exhausted: {e.last_attempt.exception()}") from e
        except Exception as e:
            logger.error(f"Gemini request failed after {self.max_attempts} attempts: {e}")
            raise ProviderError(str(e)) from e

        return ModelResponse(text=text, tool_calls=parse_tool_calls(text) if tools else [])

    async def _generate(self, model: Any, contents: list[dict[str, Any]]) -> str:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_not_exception_type(BlockedPromptException),
            reraise=True,
        ):
            with attempt:
                if self._rate_limiter:
                    await self._rate_limiter.acquire()
                response = await model.generate_content_async(
                    contents,
                    generation_config=genai.types.GenerationConfig(
                        temperature=self.temperature,
                        max_output_tokens=self.max_output_tokens,
                    ),
                )
                return response.text
        raise ProviderError("no completion attempts were made")

    @staticmethod
    def _to_content(message: Message) -> dict[str, Any]:
        if isinstance(message, UserMessage):
            return {"role": "user", "parts": [message.content]}
        if isinstance(message, AssistantMessage):
            return {"role": "model", "parts": [message.content]}
        if isinstance(message, ToolResultMessage):
            return {"role": "user", "parts": [render_tool_results(message)]}
        raise TypeError(f"Unsupported message type: {type(message).__name__}")
