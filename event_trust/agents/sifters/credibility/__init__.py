"""Source credibility: static tier classification of source names."""

from event_trust.agents.sifters.credibility.source_registry import SourceConfidenceRegistry

__all__ = ["SourceConfidenceRegistry"]
