"""Batch LLM verification: the alternate, search-free strategy.

Ambiguous candidates are sent to the LLM in groups (25 by default) with a
request for the 1-based indices of the events that look real. A fixed delay
between groups keeps the provider within its rate limits.

When a group cannot be judged (provider or client error, or no well-formed
index array in the reply) the RecoveryPolicy decides:
- fail_open: keep the whole group
- fail_closed: keep only candidates whose quality score reaches the
  stricter fallback threshold (55 by default)

High-tier candidates are never sent to the LLM.
"""

import asyncio
import json
import re
from typing import Optional

from event_trust.agents.sifters.credibility.source_registry import SourceConfidenceRegistry
from event_trust.agents.sifters.quality.quality_scorer import QualityScorer
from event_trust.config.prompts.verification_prompts import (
    BATCH_EVENT_LINE,
    BATCH_VERIFICATION_PROMPT,
)
from event_trust.config.settings import settings
from event_trust.data_management.schemas import (
    EventCandidate,
    RecoveryPolicy,
    SourceConfidence,
)
from event_trust.errors import AgentParseError, ProviderError
from event_trust.llm.base import LLMClient
from event_trust.llm.messages import UserMessage
from event_trust.utils.logging import get_structured_logger

BATCH_SYSTEM_PROMPT = "You review event listings and answer with a JSON array only."

_INDEX_ARRAY = re.compile(r"\[[\d,\s]*\]")


def parse_indices(text: str) -> list[int]:
    """
    Extract the first JSON array of integers from a reply.

    Raises:
        AgentParseError: If the reply holds no well-formed array
    """
    match = _INDEX_ARRAY.search(text)
    if not match:
        raise AgentParseError(f"no index array in reply: {text[:80]!r}")
    try:
        values = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AgentParseError(f"malformed index array: {match.group(0)!r}") from e
    return [int(i) for i in values]


class BatchLLMVerifier:
    """Asks the LLM which candidates in a group are real events.

    Usage:
        verifier = BatchLLMVerifier(llm_client=GeminiClient())
        kept = await verifier.verify(candidates)
    """

    def __init__(
        self,
        llm_client: LLMClient,
        scorer: Optional[QualityScorer] = None,
        registry: Optional[SourceConfidenceRegistry] = None,
        batch_size: Optional[int] = None,
        delay: Optional[float] = None,
        recovery: Optional[RecoveryPolicy] = None,
        fallback_min_score: Optional[int] = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            llm_client: Any LLMClient implementation.
            scorer: Quality scorer used by the fail_closed fallback.
            registry: Tier classifier (taken from scorer if None).
            batch_size: Candidates per request (defaults to settings).
            delay: Seconds between requests (defaults to settings).
            recovery: RecoveryPolicy (defaults to settings).
            fallback_min_score: Threshold for the fail_closed fallback.
        """
        self.llm_client = llm_client
        self.scorer = scorer or QualityScorer(registry=registry)
        self.registry = registry or self.scorer.registry
        self.batch_size = batch_size or settings.llm_batch_size
        self.delay = settings.llm_batch_delay if delay is None else delay
        self.recovery = RecoveryPolicy(recovery or settings.recovery_policy)
        self.fallback_min_score = (
            settings.fallback_min_score if fallback_min_score is None else fallback_min_score
        )
        self._logger = get_structured_logger("BatchLLMVerifier")

    async def verify(self, candidates: list[EventCandidate]) -> list[EventCandidate]:
        """
        Keep the candidates the LLM judges real.

        Args:
            candidates: Candidates that already passed the quality gate

        Returns:
            High-tier candidates followed by the kept ambiguous ones, in input order
        """
        high_confidence = [
            c for c in candidates
            if self.registry.classify(c.source_name) == SourceConfidence.HIGH
        ]
        ambiguous = [
            c for c in candidates
            if self.registry.classify(c.source_name) != SourceConfidence.HIGH
        ]

        self._logger.info(
            "batch_verification_started",
            high_confidence=len(high_confidence),
            to_verify=len(ambiguous),
        )

        kept = list(high_confidence)
        for start in range(0, len(ambiguous), self.batch_size):
            group = ambiguous[start:start + self.batch_size]
            kept.extend(await self.verify_group(group))
            if start + self.batch_size < len(ambiguous) and self.delay > 0:
                await asyncio.sleep(self.delay)

        self._logger.info(
            "batch_verification_completed",
            kept=len(kept),
            rejected=len(candidates) - len(kept),
        )
        return kept

    async def verify_group(self, group: list[EventCandidate]) -> list[EventCandidate]:
        """One LLM request for up to batch_size candidates."""
        if not group:
            return []

        prompt = BATCH_VERIFICATION_PROMPT.format(event_list=self.format_group(group))
        try:
            response = await self.llm_client.complete(
                BATCH_SYSTEM_PROMPT,
                [UserMessage(content=prompt)],
            )
            indices = set(parse_indices(response.text))
        except (ProviderError, AgentParseError) as e:
            return self._recover(group, e)
        except Exception as e:
            self._logger.error(
                "batch_group_failed",
                group_size=len(group),
                error=str(e),
                exc_info=True,
            )
            return self._recover(group, e)

        return [c for i, c in enumerate(group, start=1) if i in indices]

    @staticmethod
    def format_group(group: list[EventCandidate]) -> str:
        return "\n".join(
            BATCH_EVENT_LINE.format(
                index=i,
                title=c.title,
                place=c.venue_name or c.neighborhood or "unknown venue",
                date=c.date_key,
                source=c.source_name,
            )
            for i, c in enumerate(group, start=1)
        )

    def _recover(
        self,
        group: list[EventCandidate],
        error: Exception,
    ) -> list[EventCandidate]:
        if self.recovery is RecoveryPolicy.FAIL_OPEN:
            kept = list(group)
        else:
            kept = [
                c for c in group
                if self.scorer.score_event(c) >= self.fallback_min_score
            ]
        self._logger.warning(
            "batch_verification_recovered",
            policy=self.recovery.value,
            group_size=len(group),
            kept=len(kept),
            error=str(error),
        )
        return kept
