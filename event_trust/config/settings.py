"""Application settings using Pydantic BaseSettings for environment variable management."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Attributes:
        gemini_api_key: Google Gemini API key (LLM verification disabled without it)
        gemini_model: Gemini model used by the corroboration agent
        llm_temperature: Sampling temperature for verification calls
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
        cache_path: JSON file backing the verification cache
        cache_ttl_days: Validity window of cached verdicts
        verify_max: Per-run cap on candidates sent to corroboration
        agent_max_turns: Per-candidate cap on model turns
        search_endpoint: Public HTML search endpoint for the search_web tool
        search_timeout: Timeout in seconds for one search request
        search_max_results: Titles/snippets kept per search
        search_rpm: Search requests allowed per minute
        min_quality_score: Quality gate threshold
        fallback_min_score: Stricter threshold used when batch verification fails closed
        llm_batch_size: Candidates per request in the batch LLM strategy
        llm_batch_delay: Seconds to wait between batch LLM requests
        recovery_policy: fail_open keeps candidates on verifier failure, fail_closed does not
        policy_dir: Optional directory of line-delimited trust policy tables
    """

    gemini_api_key: str | None = Field(
        default=None,
        description="Google Gemini API key"
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model identifier"
    )
    llm_temperature: float = Field(
        default=0.0,
        description="Sampling temperature for verification calls"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )
    cache_path: str = Field(
        default="cache/event-verification.json",
        description="Verification cache file"
    )
    cache_ttl_days: int = Field(
        default=7,
        description="Days a cached verdict stays valid"
    )
    verify_max: int = Field(
        default=20,
        description="Maximum candidates corroborated per run"
    )
    agent_max_turns: int = Field(
        default=4,
        description="Maximum model turns per candidate"
    )
    search_endpoint: str = Field(
        default="https://html.duckduckgo.com/html/",
        description="HTML search endpoint queried by search_web"
    )
    search_timeout: float = Field(
        default=8.0,
        description="Search request timeout in seconds"
    )
    search_max_results: int = Field(
        default=5,
        description="Search results kept per query"
    )
    search_rpm: int = Field(
        default=30,
        description="Search requests per minute"
    )
    min_quality_score: int = Field(
        default=50,
        description="Minimum quality score to reach corroboration"
    )
    fallback_min_score: int = Field(
        default=55,
        description="Quality threshold applied when batch verification fails closed"
    )
    llm_batch_size: int = Field(
        default=25,
        description="Candidates per batch verification request"
    )
    llm_batch_delay: float = Field(
        default=0.5,
        description="Delay between batch verification requests in seconds"
    )
    recovery_policy: Literal["fail_open", "fail_closed"] = Field(
        default="fail_open",
        description="What happens to a candidate when verification itself fails"
    )
    policy_dir: str | None = Field(
        default=None,
        description="Directory of line-delimited trust policy tables"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance - import this throughout the application
settings = Settings()
