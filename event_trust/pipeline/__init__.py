"""Trust pipeline orchestration.

Classification, the quality gate and corroboration compose into a single
run here.

Usage:
    from event_trust.pipeline import TrustPipelineOrchestrator

    pipeline = TrustPipelineOrchestrator(agent=agent, cache=cache)
    outcome = await pipeline.verify_event_batch(candidates, max_checks=20)
"""

from event_trust.pipeline.trust_pipeline import (
    BatchOutcome,
    PipelineOutcome,
    TrustPipelineOrchestrator,
    build_default_pipeline,
)

__all__ = [
    "BatchOutcome",
    "PipelineOutcome",
    "TrustPipelineOrchestrator",
    "build_default_pipeline",
]
