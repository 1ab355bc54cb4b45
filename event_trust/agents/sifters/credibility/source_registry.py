"""Source confidence classification.

A source name maps to a tier through static tables carried by the
injected TrustPolicy:
- exact match in the verified list -> HIGH
- exact match in the synthetic list -> LOW
- anything else -> policy default (MEDIUM)

The verified list is checked first, so a name on both lists is HIGH.
"""

from collections import Counter
from typing import Dict, Iterable, Optional

from loguru import logger

from event_trust.config.trust_policy import TrustPolicy
from event_trust.data_management.schemas import EventCandidate, SourceConfidence


class SourceConfidenceRegistry:
    """
    Classifies source names into trust tiers.

    Pure and O(1): lookups against frozensets built once from the policy.

    Usage:
        registry = SourceConfidenceRegistry()
        tier = registry.classify("Resident Advisor")  # SourceConfidence.HIGH

    Attributes:
        policy: TrustPolicy the tables were built from
    """

    def __init__(self, policy: Optional[TrustPolicy] = None):
        """
        Initialize registry from a trust policy.

        Args:
            policy: Tier tables and trusted set (uses defaults if None)
        """
        self.policy = policy or TrustPolicy.default()
        self._verified = frozenset(self.policy.verified_sources)
        self._synthetic = frozenset(self.policy.synthetic_sources)
        self._trusted = frozenset(self.policy.trusted_sources)
        self.logger = logger.bind(component="SourceConfidenceRegistry")

    def classify(self, source_name: str) -> SourceConfidence:
        """Tier for a source name."""
        if source_name in self._verified:
            return SourceConfidence.HIGH
        if source_name in self._synthetic:
            return SourceConfidence.LOW
        return self.policy.default_tier

    def is_trusted(self, source_name: str) -> bool:
        """True if candidates from this source skip corroboration."""
        return source_name in self._trusted

    def classify_many(self, candidates: Iterable[EventCandidate]) -> Dict[str, int]:
        """
        Count candidates per tier.

        Args:
            candidates: Candidates to classify

        Returns:
            Mapping of tier value to count (all tiers present, possibly 0)
        """
        counts = Counter(self.classify(c.source_name).value for c in candidates)
        tier_counts = {tier.value: counts.get(tier.value, 0) for tier in SourceConfidence}
        self.logger.debug("Classified candidates", **tier_counts)
        return tier_counts
