"""Verification stage: web corroboration agent and batch LLM strategy.

Components:
- WebSearchTool: search_web tool, failures returned as data
- CorroborationAgent: bounded tool-use loop producing one verdict
- BatchLLMVerifier: search-free alternate strategy over groups of candidates
"""

from event_trust.agents.sifters.verification.batch_verifier import BatchLLMVerifier
from event_trust.agents.sifters.verification.corroboration_agent import (
    AgentState,
    CorroborationAgent,
    LoopTrace,
    parse_verdict,
)
from event_trust.agents.sifters.verification.search_tool import WebSearchTool

__all__ = [
    "AgentState",
    "BatchLLMVerifier",
    "CorroborationAgent",
    "LoopTrace",
    "WebSearchTool",
    "parse_verdict",
]
