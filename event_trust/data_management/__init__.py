"""Data management package for the event trust pipeline.

Provides schemas and the persistent verification cache:
- Candidates (EventCandidate) - immutable upstream input
- Verdicts (VerificationResult) - cached for a TTL window
- PersistentVerificationCache - JSON-file backed verdict store
"""

from event_trust.data_management.verification_cache import PersistentVerificationCache

__all__ = [
    "PersistentVerificationCache",
]
