"""Event trust and verification pipeline.

Decides whether candidate event listings from low-trust sources are
trustworthy enough to show: source-confidence tiers, deterministic quality
rules, then cached LLM web corroboration with a conservative removal rule.
"""

__version__ = "0.1.0"
