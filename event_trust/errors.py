"""Exception hierarchy for the event trust pipeline.

Only PolicyError is allowed to escape to callers. Everything raised inside
the verification stage is caught there and turned into a recovery verdict.
"""


class EventTrustError(Exception):
    """Base class for all event trust errors."""


class PolicyError(EventTrustError):
    """Trust policy tables or pattern banks are invalid."""


class ProviderError(EventTrustError):
    """LLM provider call failed after retries."""


class AgentParseError(EventTrustError):
    """Agent output was not a valid JSON verdict."""


class ToolError(EventTrustError):
    """A tool handler failed. Converted to a no-evidence result at the tool boundary."""
