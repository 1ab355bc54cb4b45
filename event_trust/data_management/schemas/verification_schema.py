"""Verification verdict, report and output schemas.

VerificationResult is the only record persisted across runs (in the
verification cache). Reports are run-scoped and exist for operators.

Removal rule: a checked candidate leaves the output only when its verdict
is cancelled with high confidence. Missing corroboration never removes.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from event_trust.data_management.schemas.event_schema import (
    EventCandidate,
    SourceConfidence,
)


class RecoveryPolicy(str, Enum):
    """What a verifier does with a candidate when verification itself fails.

    FAIL_OPEN: Keep the candidate (marked verified with low confidence).
    FAIL_CLOSED: Mark it unverified (agent) or fall back to the stricter
        quality threshold (batch strategy).
    """

    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"


class VerificationResult(BaseModel):
    """Structured verdict for one candidate."""

    verified: bool = Field(..., description="Concrete evidence the event is happening")
    confidence: SourceConfidence = Field(..., description="Confidence in the verdict")
    reasoning: str = Field(default="", description="One concise sentence")
    cancelled: bool = Field(
        default=False,
        description="Explicit cancellation notice found",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "verified": True,
                    "confidence": "high",
                    "reasoning": "Venue Instagram and Dice listing confirm the date.",
                    "cancelled": False,
                }
            ]
        }
    }

    @property
    def should_remove(self) -> bool:
        """True only for a high-confidence cancellation."""
        return self.cancelled and self.confidence == SourceConfidence.HIGH

    @classmethod
    def recovery_default(
        cls,
        cause: str,
        policy: RecoveryPolicy = RecoveryPolicy.FAIL_OPEN,
    ) -> "VerificationResult":
        """Verdict used when verification fails for internal reasons."""
        return cls(
            verified=policy == RecoveryPolicy.FAIL_OPEN,
            confidence=SourceConfidence.LOW,
            reasoning=f"Verification skipped ({cause})",
            cancelled=False,
        )


class VerifierReport(BaseModel):
    """Run-scoped counters for one verify_event_batch call.

    Accounting: checked + skipped_trusted + deferred == total, checked <= max.
    """

    total: int = 0
    skipped_trusted: int = 0
    checked: int = 0
    cache_hits: int = 0
    verified: int = 0
    unverified: int = 0
    cancelled: int = 0
    removed: int = 0
    deferred: int = 0


class AnnotatedEvent(BaseModel):
    """A candidate as it leaves the pipeline, with its verdict attached."""

    event: EventCandidate
    tier: SourceConfidence
    status: Literal["trusted", "checked", "deferred"]
    verification: Optional[VerificationResult] = None


class PipelineReport(BaseModel):
    """Report for a full classify -> gate -> verify run."""

    total_in: int = 0
    total_out: int = 0
    quality_rejected: int = 0
    tier_counts: dict[str, int] = Field(default_factory=dict)
    verifier: VerifierReport = Field(default_factory=VerifierReport)


class CacheStats(BaseModel):
    """Entry counts for the verification cache."""

    total: int = 0
    valid: int = 0
    expired: int = 0
