"""Deterministic quality scoring and the pre-verification quality gate."""

from event_trust.agents.sifters.quality.quality_scorer import (
    QualityAssessment,
    QualityGateResult,
    QualityScorer,
)

__all__ = ["QualityAssessment", "QualityGateResult", "QualityScorer"]
