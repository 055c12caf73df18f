"""Application configuration powered by pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Runtime configuration for the CV agent and its guardrails."""

    app_name: str = Field(default="CV Agent", alias="APP_NAME")

    # LLM Configuration
    llm_provider: Literal["openai", "anthropic"] = Field(
        default="openai",
        alias="LLM_PROVIDER",
        description="LLM provider to use (openai or anthropic)",
    )
    llm_model: str = Field(
        default="gpt-4o",
        alias="LLM_MODEL",
        description="Model name (e.g., gpt-4o, claude-sonnet-3.5)",
    )
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    llm_max_retries: int = Field(
        default=3,
        alias="LLM_MAX_RETRIES",
        description="Maximum attempts for LLM requests",
    )
    llm_timeout_seconds: int = Field(default=60, alias="LLM_TIMEOUT_SECONDS")
    llm_temperature: float = Field(
        default=0.4,
        alias="LLM_TEMPERATURE",
        description="Temperature for LLM sampling (0.0-2.0)",
    )
    llm_max_tokens: int = Field(default=2048, alias="LLM_MAX_TOKENS")

    # Guardrail pipeline
    guardrail_fail_fast: bool = Field(
        default=False,
        alias="GUARDRAIL_FAIL_FAST",
        description="Stop after the first priority group that trips a guardrail",
    )
    guardrail_parallel_same_priority: bool = Field(
        default=True,
        alias="GUARDRAIL_PARALLEL_SAME_PRIORITY",
        description="Run guardrails sharing a priority concurrently",
    )

    # Guardrail thresholds
    cv_max_file_bytes: int = Field(
        default=10 * 1024 * 1024,
        alias="CV_MAX_FILE_BYTES",
        description="Largest accepted CV upload",
    )
    cv_min_content_length: int = Field(default=100, alias="CV_MIN_CONTENT_LENGTH")
    document_min_length: int = Field(default=200, alias="DOCUMENT_MIN_LENGTH")
    document_max_length: int = Field(default=10_000, alias="DOCUMENT_MAX_LENGTH")
    session_retention_hours: int = Field(
        default=24,
        alias="SESSION_RETENTION_HOURS",
        description="Maximum hours candidate data may be retained",
    )
    truthfulness_llm_check: bool = Field(
        default=False,
        alias="TRUTHFULNESS_LLM_CHECK",
        description="Ask the LLM to flag unsupported claims in generated output",
    )
    trusted_job_domains: list[str] = Field(
        default=[
            "linkedin.com",
            "indeed.com",
            "glassdoor.com",
            "monster.com",
            "careerbuilder.com",
            "ziprecruiter.com",
            "angel.co",
            "wellfound.com",
            "dice.com",
            "simplyhired.com",
            "jobs.com",
            "careerjet.com",
        ],
        alias="TRUSTED_JOB_DOMAINS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="CVAGENT_",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("llm_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate temperature is in valid range."""
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"Temperature must be between 0.0 and 2.0, got {v}")
        return v

    @field_validator("llm_max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        """At least one attempt is always made."""
        if v < 1:
            raise ValueError(f"LLM_MAX_RETRIES must be >= 1, got {v}")
        return v

    @model_validator(mode="after")
    def validate_document_bounds(self) -> AppSettings:
        """Ensure the document length window is not inverted."""
        if self.document_min_length > self.document_max_length:
            raise ValueError(
                "DOCUMENT_MIN_LENGTH must not exceed DOCUMENT_MAX_LENGTH "
                f"({self.document_min_length} > {self.document_max_length})"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached settings instance."""

    return AppSettings()
