"""Schema package for candidate events and verification outcomes.

Primary exports:
- EventCandidate: immutable upstream candidate
- SourceConfidence: high/medium/low source tier
- VerificationResult: persisted verdict
- VerifierReport / PipelineReport: run-scoped counters
- AnnotatedEvent: candidate plus verdict on the way out

Usage:
    from event_trust.data_management.schemas import EventCandidate
    candidate = EventCandidate.model_validate(raw_dict)
"""

from event_trust.data_management.schemas.event_schema import (
    EventCandidate,
    SourceConfidence,
    cache_key,
    normalize_key_part,
)
from event_trust.data_management.schemas.verification_schema import (
    AnnotatedEvent,
    CacheStats,
    PipelineReport,
    RecoveryPolicy,
    VerificationResult,
    VerifierReport,
)

__all__ = [
    "EventCandidate",
    "SourceConfidence",
    "cache_key",
    "normalize_key_part",
    "AnnotatedEvent",
    "CacheStats",
    "PipelineReport",
    "RecoveryPolicy",
    "VerificationResult",
    "VerifierReport",
]
