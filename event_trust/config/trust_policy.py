"""Trust policy tables for source classification and quality rules.

Source hierarchy:
1. Verified sources (real API scrapes, real calendars, hand-curated): high
2. Unknown sources (benefit of the doubt): medium
3. Synthetic sources (generate assumed recurring events): low

A separate trusted set skips web corroboration entirely. Membership in the
verified list does not imply it.

Pattern banks are plain regex source strings, compiled case-insensitively
when a TrustPolicy is built. Each table can be overridden by a line-delimited
text file of the same name (see TrustPolicy.from_directory).
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Tuple

from pydantic import BaseModel, Field, PrivateAttr

from event_trust.config.logging import get_logger
from event_trust.data_management.schemas.event_schema import SourceConfidence
from event_trust.errors import PolicyError

# Real API scrapes, real calendars, or manually curated real events
VERIFIED_SOURCES: Tuple[str, ...] = (
    "Miami New Times",
    "Professional Sports",
    "III Points",
    "SOBEWFF",
    "World Cup 2026",
    "Miami Festivals",
    "Resident Advisor",
    "Dice.fm",
    "Dice.fm Real",
    "Shotgun",
    "Farmers Markets",
    "Beach Cleanups",
    "Don't Tell Comedy",
    "Coffee & Chill",
    "Free Yoga Miami",
    "Run Clubs",
    "Cycling Group Rides",
    "Cultural Attractions",
    "Real Venue Events",
    "Pop-Ups",
    "Curated Recurring",
    "Miami Improv",
    "Fort Lauderdale Improv",
    "Broward Center",
    "Coral Gables",
    "Verified Recurring",
)

# Generators that emit generic, unconfirmed recurrence. Auto-rejected.
SYNTHETIC_SOURCES: Tuple[str, ...] = (
    "Adrienne Arsht Center",
    "Fillmore Miami Beach",
    "Miami Improv",  # also verified; the allow-list wins
    "Dania Beach Improv",
    "Candlelight Concerts",
    "Music Venues",
    "Cultural Venues",
    "Nightlife & Clubs",
    "Hotels & Hospitality",
    "Wellness & Fitness",
    "Wine Tastings",
    "Food Events",
    "SoFlo Popups",
    "Design District",
    "Deering Estate",
    "Regatta Grove",
    "South Pointe Park",
    "Fort Lauderdale",
    "Instagram Sources",
    "Latin Parties",
    "Coral Gables & Neighborhood Venues",
    "Coconut Grove",
    "Brickell Venues",
)

# Already confirmed upstream; corroboration is skipped
TRUSTED_SOURCES: Tuple[str, ...] = (
    "Resident Advisor",
    "Miami Improv",
    "Fort Lauderdale Improv",
    "Broward Center",
    "World Cup 2026",
    "III Points",
    "South Beach Wine & Food Festival",
    "Miami Spice",
    "Dice.fm Real",
)

# Low-signal chains (substring match, lowercase)
VENUE_BLACKLIST: Tuple[str, ...] = (
    "hard rock cafe",
    "hard rock café",
    "rainforest cafe",
    "bubba gump",
    "senor frogs",
    "señor frogs",
    "hooters",
    "dave & busters",
    "dave and busters",
    "topgolf",
)

# Low-signal listings (substring match, lowercase)
TITLE_BLACKLIST: Tuple[str, ...] = (
    "backstage & burgers",
    "backstage and burgers",
    "ride and dine",
    "big bus tour",
    "hop on hop off",
    "segway tour",
    "jet ski rental",
    "parasailing",
)

# Government/administrative meetings, matched against title + description
GOVERNMENT_PATTERNS: Tuple[str, ...] = (
    r"\bboard\s+(of|meeting)",
    r"\badvisory\s+board",
    r"\bcommittee\s+meeting",
    r"\bcouncil\s+meeting",
    r"\bcity\s+commission",
    r"\bplanning\s+(board|commission|meeting)",
    r"\bzoning\s+(board|hearing|meeting)",
    r"\bdevelopment\s+review",
    r"\bpublic\s+hearing",
    r"\btown\s+hall\s+meeting",
    r"\bbudget\s+(hearing|meeting|workshop)",
    r"\bcode\s+enforcement",
    r"\bpermit\s+(hearing|review)",
    r"\bvariance\s+hearing",
    r"\barchitects.*board",
    r"\bhistoric\s+preservation\s+(board|commission)",
)

# Tours and rentals are activities, not events; matched against title or description
TOUR_PATTERNS: Tuple[str, ...] = (
    r"speedboat",
    r"boat tour",
    r"bus tour",
    r"walking tour",
    r"helicopter",
    r"jet ski",
    r"kayak rental",
    r"ride and dine",
    r"segway",
)

# Whole-title templates produced by recurrence generators (not applied to HIGH tier)
GENERIC_TITLE_PATTERNS: Tuple[str, ...] = (
    r"^(happy hour|weekly yoga|sunday brunch|bottomless brunch|live music|live jazz|dj night|ladies night|trivia night|karaoke night|open mic)(\s+(at|@)\s+.+)?$",
)

# Named performer or head-to-head in the title
NAMED_PERFORMER_PATTERNS: Tuple[str, ...] = (
    r"\b(with|featuring|presents|ft\.?|feat\.?)(?=\s|$)",
    r"\b(vs\.?|versus)(?=\s|$)",
)

# Quality scoring weights
BASE_QUALITY_SCORE: int = 70
QUALITY_ADJUSTMENTS: Dict[str, int] = {
    "source_url": 10,
    "long_description": 5,
    "named_performer": 10,
    "short_description": -15,
}
LONG_DESCRIPTION_CHARS: int = 100
SHORT_DESCRIPTION_CHARS: int = 30

# Table name -> TrustPolicy field, for line-delimited overrides
POLICY_FILES: Dict[str, str] = {
    "verified_sources.txt": "verified_sources",
    "synthetic_sources.txt": "synthetic_sources",
    "trusted_sources.txt": "trusted_sources",
    "venue_blacklist.txt": "venue_blacklist",
    "title_blacklist.txt": "title_blacklist",
    "government_patterns.txt": "government_patterns",
    "tour_patterns.txt": "tour_patterns",
    "generic_title_patterns.txt": "generic_title_patterns",
    "named_performer_patterns.txt": "named_performer_patterns",
}

_PATTERN_FIELDS = (
    "government_patterns",
    "tour_patterns",
    "generic_title_patterns",
    "named_performer_patterns",
)

_log = get_logger("config.trust_policy")


def load_lines(path: Path) -> List[str]:
    """Read a line-delimited table, skipping blank lines and # comments."""
    lines = []
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if line and not line.startswith("#"):
            lines.append(line)
    return lines


class TrustPolicy(BaseModel):
    """
    Injected configuration for classification and quality rules.

    Passed into SourceConfidenceRegistry, QualityScorer and the pipeline at
    construction, so tests can substitute fixtures without patching
    module state.

    Raises:
        PolicyError: If any pattern bank contains an invalid regex.
    """

    verified_sources: Tuple[str, ...] = VERIFIED_SOURCES
    synthetic_sources: Tuple[str, ...] = SYNTHETIC_SOURCES
    trusted_sources: Tuple[str, ...] = TRUSTED_SOURCES
    default_tier: SourceConfidence = SourceConfidence.MEDIUM
    venue_blacklist: Tuple[str, ...] = VENUE_BLACKLIST
    title_blacklist: Tuple[str, ...] = TITLE_BLACKLIST
    government_patterns: Tuple[str, ...] = GOVERNMENT_PATTERNS
    tour_patterns: Tuple[str, ...] = TOUR_PATTERNS
    generic_title_patterns: Tuple[str, ...] = GENERIC_TITLE_PATTERNS
    named_performer_patterns: Tuple[str, ...] = NAMED_PERFORMER_PATTERNS
    base_score: int = BASE_QUALITY_SCORE
    adjustments: Dict[str, int] = Field(default_factory=lambda: dict(QUALITY_ADJUSTMENTS))
    long_description_chars: int = LONG_DESCRIPTION_CHARS
    short_description_chars: int = SHORT_DESCRIPTION_CHARS

    _compiled: Dict[str, List[Pattern[str]]] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        for name in _PATTERN_FIELDS:
            compiled = []
            for source in getattr(self, name):
                try:
                    compiled.append(re.compile(source, re.IGNORECASE))
                except re.error as e:
                    raise PolicyError(f"Invalid pattern in {name}: {source!r} ({e})") from e
            self._compiled[name] = compiled

        overlap = set(self.verified_sources) & set(self.synthetic_sources)
        if overlap:
            _log.warning(
                "Sources on both verified and synthetic lists resolve to high",
                sources=sorted(overlap),
            )

    def patterns(self, name: str) -> List[Pattern[str]]:
        """Compiled patterns for one of the pattern bank fields."""
        return self._compiled[name]

    @classmethod
    def default(cls) -> "TrustPolicy":
        return cls()

    @classmethod
    def from_directory(cls, directory: str | Path) -> "TrustPolicy":
        """
        Build a policy from line-delimited tables in a directory.

        Tables that are absent fall back to the shipped defaults.

        Args:
            directory: Directory containing any of the POLICY_FILES

        Returns:
            TrustPolicy with overrides applied

        Raises:
            PolicyError: If the directory is missing or a pattern is invalid
        """
        path = Path(directory)
        if not path.is_dir():
            raise PolicyError(f"Policy directory not found: {path}")

        overrides: Dict[str, Tuple[str, ...]] = {}
        for filename, field_name in POLICY_FILES.items():
            table = path / filename
            if table.exists():
                overrides[field_name] = tuple(load_lines(table))

        _log.info(
            "Loaded trust policy overrides",
            directory=str(path),
            tables=sorted(overrides),
        )
        return cls(**overrides)


def load_policy(policy_dir: Optional[str] = None) -> TrustPolicy:
    """Policy from policy_dir when given, otherwise the shipped defaults."""
    if policy_dir:
        return TrustPolicy.from_directory(policy_dir)
    return TrustPolicy.default()
