"""Classify -> quality gate -> skip trusted -> cache or corroborate -> report.

verify_event_batch is the verification stage on its own. run is the full
flow, used by the CLI.

Output ordering is trusted, then kept checked candidates, then deferred
ones, each in input order. Consumers must not assume the original
interleaving survives.

Cost is bounded by the per-run check cap and the agent's turn cap; there
is no wall-clock deadline. Candidates are verified one at a time so the
LLM provider and search endpoint see sequential traffic only.

Usage:
    from event_trust.pipeline import build_default_pipeline

    pipeline = build_default_pipeline()
    outcome = await pipeline.run(candidates)
    print(outcome.report.model_dump())
"""

from typing import Optional

from pydantic import BaseModel, Field

from event_trust.agents.sifters.credibility.source_registry import SourceConfidenceRegistry
from event_trust.agents.sifters.quality.quality_scorer import QualityScorer
from event_trust.agents.sifters.verification.corroboration_agent import CorroborationAgent
from event_trust.agents.sifters.verification.search_tool import WebSearchTool
from event_trust.config.settings import settings
from event_trust.config.trust_policy import TrustPolicy, load_policy
from event_trust.data_management.schemas import (
    AnnotatedEvent,
    EventCandidate,
    PipelineReport,
    RecoveryPolicy,
    VerificationResult,
    VerifierReport,
)
from event_trust.data_management.verification_cache import PersistentVerificationCache
from event_trust.llm.base import LLMClient
from event_trust.llm.rate_limiter import RateLimiter
from event_trust.utils.logging import (
    bind_batch_context,
    clear_batch_context,
    get_structured_logger,
)


class BatchOutcome(BaseModel):
    """Result of verify_event_batch."""

    events: list[AnnotatedEvent] = Field(default_factory=list)
    report: VerifierReport = Field(default_factory=VerifierReport)


class PipelineOutcome(BaseModel):
    """Result of a full run."""

    events: list[AnnotatedEvent] = Field(default_factory=list)
    report: PipelineReport = Field(default_factory=PipelineReport)


class TrustPipelineOrchestrator:
    """Composes registry, quality gate, cache and corroboration agent.

    The agent is built lazily from settings on the first cache miss, so
    runs that never need the LLM do not require provider credentials.
    """

    def __init__(
        self,
        agent: Optional[CorroborationAgent] = None,
        registry: Optional[SourceConfidenceRegistry] = None,
        scorer: Optional[QualityScorer] = None,
        cache: Optional[PersistentVerificationCache] = None,
        policy: Optional[TrustPolicy] = None,
        recovery: Optional[RecoveryPolicy] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            agent: Corroboration agent. Built from settings on first use if None.
            registry: Tier classifier (built from policy if None).
            scorer: Quality scorer (built from policy and registry if None).
            cache: Verdict cache. Taken from the agent, else in-memory. Shared
                with the agent; a different agent cache raises ValueError.
            policy: TrustPolicy shared by registry and scorer.
            recovery: Policy for candidates whose verification fails unexpectedly.
        """
        self.policy = policy or (registry.policy if registry else TrustPolicy.default())
        self.registry = registry or SourceConfidenceRegistry(self.policy)
        self.scorer = scorer or QualityScorer(policy=self.policy, registry=self.registry)
        if cache is None and agent is not None:
            cache = agent.cache
        self.cache = cache if cache is not None else PersistentVerificationCache()
        if agent is not None:
            # hit checks here and writes in the agent must share one store
            if agent.cache is None:
                agent.cache = self.cache
            elif agent.cache is not self.cache:
                raise ValueError(
                    "agent.cache and cache must be the same PersistentVerificationCache"
                )
        self._agent = agent
        self.recovery = RecoveryPolicy(recovery or settings.recovery_policy)
        self._logger = get_structured_logger("TrustPipeline")

    def _get_agent(self) -> CorroborationAgent:
        """Lazy-init CorroborationAgent with the shared cache."""
        if self._agent is None:
            from event_trust.llm.gemini_client import GeminiClient

            self._agent = CorroborationAgent(
                llm_client=GeminiClient(),
                search_tool=WebSearchTool(rate_limiter=RateLimiter(settings.search_rpm)),
                cache=self.cache,
                recovery=self.recovery,
            )
        return self._agent

    async def aclose(self) -> None:
        """Release the agent's HTTP client, if one was created."""
        if self._agent is not None:
            await self._agent.search_tool.aclose()

    async def verify_event_batch(
        self,
        candidates: list[EventCandidate],
        max_checks: Optional[int] = None,
    ) -> BatchOutcome:
        """
        Verify up to max_checks non-trusted candidates.

        Trusted candidates skip verification. Candidates beyond the cap are
        deferred and pass through unchanged. A checked candidate is dropped
        only for a high-confidence cancellation. No failure for a single
        candidate aborts the batch.

        Args:
            candidates: Candidates to verify
            max_checks: Per-run cap on checked candidates (defaults to settings)

        Returns:
            BatchOutcome with trusted + kept + deferred events and the report
        """
        max_checks = settings.verify_max if max_checks is None else max_checks
        correlation_id = bind_batch_context()
        try:
            return await self._verify_event_batch(candidates, max_checks, correlation_id)
        finally:
            clear_batch_context()

    async def _verify_event_batch(
        self,
        candidates: list[EventCandidate],
        max_checks: int,
        correlation_id: str,
    ) -> BatchOutcome:
        report = VerifierReport(total=len(candidates))

        trusted: list[EventCandidate] = []
        to_evaluate: list[EventCandidate] = []
        for candidate in candidates:
            if self.registry.is_trusted(candidate.source_name):
                trusted.append(candidate)
                report.skipped_trusted += 1
            else:
                to_evaluate.append(candidate)

        to_check = to_evaluate[:max_checks]
        deferred = to_evaluate[max_checks:]
        report.deferred = len(deferred)

        cache_stats = self.cache.stats()
        self._logger.info(
            "batch_started",
            correlation_id=correlation_id,
            to_check=len(to_check),
            deferred=len(deferred),
            trusted=len(trusted),
            cache_valid=cache_stats.valid,
        )

        kept: list[AnnotatedEvent] = []
        for candidate in to_check:
            report.checked += 1
            result = self.cache.get(candidate.cache_key)
            if result is not None:
                report.cache_hits += 1
            else:
                result = await self._corroborate(candidate)

            if result.should_remove:
                report.cancelled += 1
                report.removed += 1
                self._logger.info(
                    "event_removed",
                    title=candidate.title,
                    reasoning=result.reasoning,
                )
                continue

            if result.verified:
                report.verified += 1
            else:
                report.unverified += 1
                self._logger.info(
                    "event_unverified",
                    title=candidate.title,
                    reasoning=result.reasoning,
                )
            kept.append(self._annotate(candidate, "checked", result))

        self.cache.flush()

        events = (
            [self._annotate(c, "trusted") for c in trusted]
            + kept
            + [self._annotate(c, "deferred") for c in deferred]
        )
        self._logger.info("batch_completed", **report.model_dump())
        return BatchOutcome(events=events, report=report)

    async def run(
        self,
        candidates: list[EventCandidate],
        max_checks: Optional[int] = None,
        min_score: Optional[int] = None,
        verify: bool = True,
    ) -> PipelineOutcome:
        """
        Full flow: classify, gate, then verify.

        Trusted candidates bypass the quality gate. With verify=False the
        gate's survivors are returned as deferred without any network call.

        Args:
            candidates: Raw candidates from upstream sources
            max_checks: Per-run cap on checked candidates (defaults to settings)
            min_score: Quality gate threshold (defaults to settings)
            verify: Run the verification stage

        Returns:
            PipelineOutcome with annotated events and the PipelineReport
        """
        min_score = settings.min_quality_score if min_score is None else min_score

        tier_counts = self.registry.classify_many(candidates)
        trusted = [c for c in candidates if self.registry.is_trusted(c.source_name)]
        untrusted = [c for c in candidates if not self.registry.is_trusted(c.source_name)]
        gate = self.scorer.filter_by_quality(untrusted, min_score=min_score)

        if verify:
            batch = await self.verify_event_batch(trusted + gate.passed, max_checks=max_checks)
        else:
            batch = BatchOutcome(
                events=[self._annotate(c, "trusted") for c in trusted]
                + [self._annotate(c, "deferred") for c in gate.passed],
                report=VerifierReport(
                    total=len(trusted) + len(gate.passed),
                    skipped_trusted=len(trusted),
                    deferred=len(gate.passed),
                ),
            )

        report = PipelineReport(
            total_in=len(candidates),
            total_out=len(batch.events),
            quality_rejected=len(gate.failed),
            tier_counts=tier_counts,
            verifier=batch.report,
        )
        self._logger.info(
            "pipeline_completed",
            total_in=report.total_in,
            total_out=report.total_out,
            quality_rejected=report.quality_rejected,
            removed=report.verifier.removed,
        )
        return PipelineOutcome(events=batch.events, report=report)

    async def _corroborate(self, candidate: EventCandidate) -> VerificationResult:
        try:
            return await self._get_agent().verify_event(candidate)
        except Exception as e:
            self._logger.error(
                "verification_failed",
                title=candidate.title,
                error=str(e),
                error_type=type(e).__name__,
            )
            return VerificationResult.recovery_default("internal error", self.recovery)

    def _annotate(
        self,
        candidate: EventCandidate,
        status: str,
        result: Optional[VerificationResult] = None,
    ) -> AnnotatedEvent:
        return AnnotatedEvent(
            event=candidate,
            tier=self.registry.classify(candidate.source_name),
            status=status,
            verification=result,
        )


def build_default_pipeline(
    llm_client: Optional[LLMClient] = None,
    policy_dir: Optional[str] = None,
) -> TrustPipelineOrchestrator:
    """
    Pipeline wired from settings.

    Args:
        llm_client: LLM client for the agent. A GeminiClient is built lazily if None.
        policy_dir: Directory of policy tables (defaults to settings.policy_dir)

    Returns:
        TrustPipelineOrchestrator with a file-backed cache
    """
    policy = load_policy(policy_dir or settings.policy_dir)
    cache = PersistentVerificationCache(settings.cache_path, ttl_days=settings.cache_ttl_days)
    agent = None
    if llm_client is not None:
        agent = CorroborationAgent(
            llm_client=llm_client,
            search_tool=WebSearchTool(rate_limiter=RateLimiter(settings.search_rpm)),
            cache=cache,
        )
    return TrustPipelineOrchestrator(agent=agent, policy=policy, cache=cache)
