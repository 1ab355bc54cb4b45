"""Agents for the event trust pipeline.

Sifters run in order of cost: credibility tiers and quality rules are pure
code; the verification sifters call the LLM and the web.
"""
