"""Deterministic, network-free quality scoring and gating.

Evaluation order:

| Step | Rule                                           | Result                 |
|------|------------------------------------------------|------------------------|
| 1    | venue/title blacklist, government, tour        | 0 (any tier)           |
|      | pattern banks                                  |                        |
|      | generic-title pattern bank                     | 0 (tier below HIGH)    |
| 2    | source tier LOW                                | 0                      |
| 3    | base 70, +10 source URL, +5 description > 100, | clamped to [0, 100]    |
|      | +10 named performer, -15 description < 30      |                        |

The gate runs before any LLM call, so only ambiguous candidates that
survive it cost a corroboration round trip.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from event_trust.agents.sifters.credibility.source_registry import SourceConfidenceRegistry
from event_trust.config.trust_policy import TrustPolicy
from event_trust.data_management.schemas import EventCandidate, SourceConfidence

REJECT_LOG_SAMPLE = 10


@dataclass
class QualityAssessment:
    """Result of quality evaluation.

    Attributes:
        score: Final score 0-100 (0 when any rejection fired).
        tier: Source confidence tier of the candidate.
        rejections: Names of every rejection rule that fired.
        adjustments: (signal, delta) pairs applied on top of the base score.
    """

    score: int
    tier: SourceConfidence
    rejections: List[str] = field(default_factory=list)
    adjustments: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def rejected(self) -> bool:
        return bool(self.rejections)


@dataclass
class QualityGateResult:
    """Partition produced by filter_by_quality."""

    passed: List[EventCandidate] = field(default_factory=list)
    failed: List[Tuple[EventCandidate, int]] = field(default_factory=list)


class QualityScorer:
    """
    Scores candidates from deterministic signals and gates on a threshold.

    Rejection rules are evaluated exhaustively so the assessment lists every
    rule that fired, but any single one zeroes the score.

    Usage:
        scorer = QualityScorer()
        score = scorer.score_event(candidate)
        gate = scorer.filter_by_quality(candidates, min_score=50)

    Example:
        >>> scorer = QualityScorer()
        >>> scorer.evaluate(happy_hour_from_synthetic_source).rejections
        ['generic_title', 'low_tier']
    """

    DEFAULT_MIN_SCORE = 50

    def __init__(
        self,
        policy: Optional[TrustPolicy] = None,
        registry: Optional[SourceConfidenceRegistry] = None,
    ):
        """
        Initialize scorer.

        Args:
            policy: Blacklists, pattern banks and weights (defaults if None)
            registry: Tier classifier (built from policy if None)
        """
        self.policy = policy or (registry.policy if registry else TrustPolicy.default())
        self.registry = registry or SourceConfidenceRegistry(self.policy)
        self._venue_blacklist = [v.lower() for v in self.policy.venue_blacklist]
        self._title_blacklist = [t.lower() for t in self.policy.title_blacklist]
        self._government = self.policy.patterns("government_patterns")
        self._tour = self.policy.patterns("tour_patterns")
        self._generic = self.policy.patterns("generic_title_patterns")
        self._performer = self.policy.patterns("named_performer_patterns")
        self._logger = logger.bind(component="QualityScorer")

    def score_event(self, candidate: EventCandidate) -> int:
        """Quality score 0-100."""
        return self.evaluate(candidate).score

    def evaluate(self, candidate: EventCandidate) -> QualityAssessment:
        """
        Evaluate a candidate and record which rules fired.

        Args:
            candidate: Candidate to score

        Returns:
            QualityAssessment with score, tier, rejections and adjustments
        """
        tier = self.registry.classify(candidate.source_name)
        assessment = QualityAssessment(score=0, tier=tier)

        # Step 1: content rejections, regardless of tier
        if self._is_blacklisted_venue(candidate.venue_name):
            assessment.rejections.append("venue_blacklist")
        if self._is_blacklisted_title(candidate.title):
            assessment.rejections.append("title_blacklist")
        if self._is_government_content(candidate.title, candidate.description):
            assessment.rejections.append("government")
        if self._is_tour(candidate.title, candidate.description):
            assessment.rejections.append("tour")
        # generic titles are only rejected below HIGH tier
        if tier != SourceConfidence.HIGH and self._is_generic_title(candidate.title):
            assessment.rejections.append("generic_title")

        # Step 2: synthetic sources structurally produce unconfirmed content
        if tier == SourceConfidence.LOW:
            assessment.rejections.append("low_tier")

        if assessment.rejections:
            return assessment

        # Step 3: additive signals
        weights = self.policy.adjustments
        description_length = len(candidate.description)
        signals = [
            ("source_url", bool(candidate.source_url)),
            ("long_description", description_length > self.policy.long_description_chars),
            ("named_performer", self._has_named_performer(candidate.title)),
            ("short_description", description_length < self.policy.short_description_chars),
        ]
        score = self.policy.base_score
        for signal, present in signals:
            if present:
                delta = weights.get(signal, 0)
                score += delta
                assessment.adjustments.append((signal, delta))

        assessment.score = max(0, min(100, score))
        return assessment

    def filter_by_quality(
        self,
        candidates: Iterable[EventCandidate],
        min_score: int = DEFAULT_MIN_SCORE,
    ) -> QualityGateResult:
        """
        Partition candidates on a score threshold.

        Logs a bounded sample of rejects plus the total count.

        Args:
            candidates: Candidates to gate
            min_score: Minimum passing score (inclusive)

        Returns:
            QualityGateResult with passed candidates and (candidate, score) failures
        """
        result = QualityGateResult()
        for candidate in candidates:
            score = self.score_event(candidate)
            if score >= min_score:
                result.passed.append(candidate)
            else:
                result.failed.append((candidate, score))

        if result.failed:
            self._logger.info(
                f"Quality filter removed {len(result.failed)} low-scoring events",
                min_score=min_score,
            )
            for candidate, score in result.failed[:REJECT_LOG_SAMPLE]:
                self._logger.info(
                    f"  - [{score}] {candidate.title} ({candidate.source_name})"
                )
            if len(result.failed) > REJECT_LOG_SAMPLE:
                self._logger.info(f"  ... and {len(result.failed) - REJECT_LOG_SAMPLE} more")

        return result

    def _is_blacklisted_venue(self, venue_name: Optional[str]) -> bool:
        if not venue_name:
            return False
        lower = venue_name.lower()
        return any(v in lower for v in self._venue_blacklist)

    def _is_blacklisted_title(self, title: str) -> bool:
        lower = title.lower()
        return any(t in lower for t in self._title_blacklist)

    def _is_government_content(self, title: str, description: str) -> bool:
        text = f"{title} {description}"
        return any(p.search(text) for p in self._government)

    def _is_tour(self, title: str, description: str) -> bool:
        return any(p.search(title) or p.search(description) for p in self._tour)

    def _is_generic_title(self, title: str) -> bool:
        stripped = title.strip()
        return any(p.search(stripped) for p in self._generic)

    def _has_named_performer(self, title: str) -> bool:
        return any(p.search(title) for p in self._performer)
