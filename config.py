"""
Configuration settings for the learning-path engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Scheduling
    # ========================================
    daily_study_minutes: int = Field(
        default=30,
        ge=1,
        description="Fixed study budget per day used for completion estimates",
    )
    baseline_pace: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Learning pace treated as neutral (1=slow, 10=fast)",
    )

    # ========================================
    # Assessment Thresholds
    # ========================================
    completion_score: float = Field(
        default=80.0,
        ge=0,
        le=100,
        description="Minimum score that completes a unit and unlocks the next one",
    )
    remediation_score: float = Field(
        default=50.0,
        ge=0,
        le=100,
        description="Scores below this narrow the unit to easier resources",
    )
    remedial_max_difficulty: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Hardest resource difficulty kept during remediation",
    )

    # ========================================
    # Adaptation
    # ========================================
    default_adaptation_intensity: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Adaptation intensity used when a request does not set one",
    )
    unknown_topic_policy: Literal["skip", "raise"] = Field(
        default="skip",
        description="What to do with an assessment result for a topic not in the path",
    )
    completed_regression_policy: Literal["terminal", "needs_review"] = Field(
        default="terminal",
        description="Whether a low score on a completed unit demotes it to needs_review",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
