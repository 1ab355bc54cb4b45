"""Prompt templates for the verification agents.

Modules:
    verification_prompts: Corroboration system/user prompts and the batch verification prompt
"""

from event_trust.config.prompts.verification_prompts import (
    BATCH_EVENT_LINE,
    BATCH_VERIFICATION_PROMPT,
    CORROBORATION_SYSTEM_PROMPT,
    CORROBORATION_USER_PROMPT,
)

__all__ = [
    "BATCH_EVENT_LINE",
    "BATCH_VERIFICATION_PROMPT",
    "CORROBORATION_SYSTEM_PROMPT",
    "CORROBORATION_USER_PROMPT",
]
