"""Tests for QualityScorer and the quality gate.

Tests cover:
- Content rejections regardless of tier (blacklists, government, tour)
- Generic-title rejection below HIGH tier
- Low-tier auto-reject
- Additive scoring and clamping
- Gate partitioning and threshold inclusivity
"""

import pytest

from event_trust.agents.sifters.quality.quality_scorer import QualityScorer
from event_trust.config.trust_policy import TrustPolicy
from event_trust.data_management.schemas import EventCandidate, SourceConfidence

LONG_DESCRIPTION = (
    "An evening of standards and originals from a local quartet, "
    "with two sets and a late jam session open to musicians in the room."
)
assert len(LONG_DESCRIPTION) > 100

MEDIUM_SOURCE = "Neighborhood Blog"
LOW_SOURCE = "Music Venues"
HIGH_SOURCE = "Resident Advisor"


def _candidate(**overrides) -> EventCandidate:
    data = {
        "title": "Late Night Sessions",
        "start_at": "2026-03-14T20:00:00",
        "venue_name": "Lagniappe",
        "city": "Miami",
        "description": "A relaxed evening of live sets in the backyard.",
        "source_name": MEDIUM_SOURCE,
    }
    data.update(overrides)
    return EventCandidate(**data)


@pytest.fixture
def scorer() -> QualityScorer:
    return QualityScorer()


# ── Rejections ────────────────────────────────────────────────────────────


class TestRejections:
    def test_deny_listed_source_scores_zero(self, scorer):
        candidate = _candidate(
            title="Jazz Night with the Miami Quartet",
            description=LONG_DESCRIPTION,
            source_url="https://example.com/jazz",
            source_name=LOW_SOURCE,
        )
        assessment = scorer.evaluate(candidate)
        assert assessment.score == 0
        assert assessment.rejections == ["low_tier"]
        assert assessment.tier == SourceConfidence.LOW

    def test_scenario_b_generic_title_from_deny_list(self, scorer):
        candidate = _candidate(title="Happy Hour at Spillover", source_name=LOW_SOURCE)
        assessment = scorer.evaluate(candidate)
        assert scorer.score_event(candidate) == 0
        assert assessment.rejections == ["generic_title", "low_tier"]

    def test_blacklisted_venue_even_for_high_tier(self, scorer):
        candidate = _candidate(
            venue_name="Hard Rock Cafe Miami",
            source_name=HIGH_SOURCE,
            source_url="https://ra.co/events/1",
            description=LONG_DESCRIPTION,
        )
        assessment = scorer.evaluate(candidate)
        assert assessment.score == 0
        assert assessment.rejections == ["venue_blacklist"]

    def test_blacklisted_title(self, scorer):
        candidate = _candidate(title="Big Bus Tour of South Beach")
        assessment = scorer.evaluate(candidate)
        assert assessment.score == 0
        assert "title_blacklist" in assessment.rejections
        assert "tour" in assessment.rejections

    def test_government_meeting_regardless_of_tier(self, scorer):
        candidate = _candidate(
            title="City Commission Regular Meeting",
            source_name=HIGH_SOURCE,
        )
        assert scorer.evaluate(candidate).rejections == ["government"]

    def test_government_pattern_in_description(self, scorer):
        candidate = _candidate(
            title="Community Update",
            description="Agenda for the planning board and public hearing on parking.",
        )
        assert scorer.score_event(candidate) == 0

    def test_tour_in_description(self, scorer):
        candidate = _candidate(
            title="Sunset on the Bay",
            description="Ninety-minute speedboat ride past Star Island.",
        )
        assert scorer.evaluate(candidate).rejections == ["tour"]

    @pytest.mark.parametrize(
        "title",
        ["Happy Hour", "Weekly Yoga at Bayfront Park", "sunday brunch @ Pura Vida", "Open Mic"],
    )
    def test_generic_titles(self, scorer, title):
        assert scorer.evaluate(_candidate(title=title)).rejections == ["generic_title"]

    @pytest.mark.parametrize(
        "title",
        ["Live Music at Broken Shaker", "Sunday Brunch at The Esme"],
    )
    def test_generic_title_from_allow_list_passes(self, scorer, title):
        candidate = _candidate(title=title, source_name="Curated Recurring")
        assessment = scorer.evaluate(candidate)

        assert assessment.tier == SourceConfidence.HIGH
        assert assessment.rejections == []
        assert assessment.score >= 50
        assert scorer.filter_by_quality([candidate]).passed == [candidate]

    def test_specific_title_is_not_generic(self, scorer):
        candidate = _candidate(title="Happy Hour Showcase: Local Songwriters")
        assert scorer.evaluate(candidate).rejected is False


# ── Scoring ───────────────────────────────────────────────────────────────


class TestScoring:
    def test_scenario_c_full_score(self, scorer):
        candidate = _candidate(
            title="Jazz Night with the Miami Quartet",
            description=LONG_DESCRIPTION,
            source_url="https://example.com/jazz",
        )
        assessment = scorer.evaluate(candidate)
        assert assessment.tier == SourceConfidence.MEDIUM
        assert assessment.score == 95
        assert dict(assessment.adjustments) == {
            "source_url": 10,
            "long_description": 5,
            "named_performer": 10,
        }

    def test_base_score(self, scorer):
        assert scorer.score_event(_candidate()) == 70

    def test_short_description_penalty(self, scorer):
        assert scorer.score_event(_candidate(description="Live sets.")) == 55

    def test_missing_description_penalized(self, scorer):
        assert scorer.score_event(_candidate(description=None)) == 55

    @pytest.mark.parametrize(
        "title",
        [
            "Heat vs. Celtics",
            "Heat versus Celtics",
            "Dirtybird presents Claude VonStroke",
            "Sunset Session ft. Local DJs",
            "Sunset Session feat. Local DJs",
            "An Evening featuring Strings",
        ],
    )
    def test_named_performer_bonus(self, scorer, title):
        assert scorer.score_event(_candidate(title=title)) == 80

    def test_performer_words_inside_other_words_ignored(self, scorer):
        assert scorer.score_event(_candidate(title="Without Limits Showcase")) == 70

    def test_score_clamped_to_100(self):
        scorer = QualityScorer(policy=TrustPolicy(base_score=95))
        candidate = _candidate(
            title="Jazz Night with the Miami Quartet",
            description=LONG_DESCRIPTION,
            source_url="https://example.com/jazz",
        )
        assert scorer.score_event(candidate) == 100

    def test_score_clamped_to_0(self):
        scorer = QualityScorer(policy=TrustPolicy(base_score=5))
        assert scorer.score_event(_candidate(description="")) == 0

    def test_high_tier_scored_like_medium(self, scorer):
        assert scorer.score_event(_candidate(source_name="Shotgun")) == 70


# ── Gate ──────────────────────────────────────────────────────────────────


class TestFilterByQuality:
    def test_partitions_candidates(self, scorer):
        good = _candidate(title="Jazz Night with the Miami Quartet")
        generic = _candidate(title="Happy Hour at Spillover", source_name=LOW_SOURCE)
        tour = _candidate(title="Miami Speedboat Adventure")

        result = scorer.filter_by_quality([good, generic, tour], min_score=50)

        assert result.passed == [good]
        assert result.failed == [(generic, 0), (tour, 0)]

    def test_threshold_is_inclusive(self, scorer):
        candidate = _candidate(description="short")
        assert scorer.filter_by_quality([candidate], min_score=55).passed == [candidate]
        assert scorer.filter_by_quality([candidate], min_score=56).passed == []

    def test_default_threshold(self, scorer):
        assert QualityScorer.DEFAULT_MIN_SCORE == 50
        result = scorer.filter_by_quality([_candidate()])
        assert len(result.passed) == 1

    def test_many_rejects_do_not_fail(self, scorer):
        rejects = [_candidate(title=f"Happy Hour at Bar {i}") for i in range(25)]
        result = scorer.filter_by_quality(rejects)
        assert len(result.failed) == 25
        assert result.passed == []

    def test_empty_input(self, scorer):
        result = scorer.filter_by_quality([])
        assert result.passed == []
        assert result.failed == []
