"""Pydantic configuration models for versionwatch."""

import os
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_LLM_PROVIDERS = {"auto", "claude", "openai"}


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "auto"
    model: Optional[str] = None  # None = use provider default
    api_key: Optional[str] = None
    max_tokens: int = 4000

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in VALID_LLM_PROVIDERS:
            raise ValueError(f"Invalid LLM provider: {v}. Must be one of {VALID_LLM_PROVIDERS}")
        return v


class PathsConfig(BaseModel):
    """File paths configuration."""

    db: Path = Path("~/versionwatch/versionwatch.db")
    log_file: Path = Path("~/versionwatch/versionwatch.log")

    @model_validator(mode="after")
    def expand_paths(self):
        """Expand ~ in all paths."""
        self.db = self.db.expanduser()
        self.log_file = self.log_file.expanduser()
        return self


def validate_cron(expr: str) -> str:
    """Validate cron expression format (5 fields)."""
    parts = expr.split()
    if len(parts) != 5:
        raise ValueError(f"Cron must have 5 fields, got {len(parts)}: {expr}")
    for i, part in enumerate(parts):
        if not re.match(r"^[\d\-,\*/]+$", part):
            raise ValueError(f"Invalid cron field {i}: {part}")
    return expr


class ChecksConfig(BaseModel):
    """Check run concurrency, timeouts and schedule."""

    max_concurrency: int = 5
    target_timeout: float = 120.0
    run_timeout: float = 1800.0
    scrape_timeout: float = 30.0
    max_content_chars: int = 50_000
    schedule: str = "0 */6 * * *"
    manual_cooldown_seconds: float = 30.0

    @field_validator("max_concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {v}")
        return v

    @field_validator("target_timeout", "run_timeout", "scrape_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeouts must be positive, got {v}")
        return v

    @field_validator("schedule")
    @classmethod
    def validate_schedule(cls, v: str) -> str:
        return validate_cron(v)


class ScoringConfig(BaseModel):
    """Confidence thresholds for publishing versus review."""

    review_threshold: int = 70
    min_valid_confidence: int = 70
    anomaly_ceiling: int = 50
    max_major_step: int = 2

    @field_validator("review_threshold", "min_valid_confidence", "anomaly_ceiling")
    @classmethod
    def validate_percent(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"Score thresholds must be 0-100, got {v}")
        return v


class RateLimitSourceConfig(BaseModel):
    """Per-collaborator rate limit."""

    requests_per_second: float = 2.0
    burst: int = 5


class RateLimitsConfig(BaseModel):
    """Rate limits for the scraper and extraction endpoints."""

    scraper: RateLimitSourceConfig = Field(default_factory=RateLimitSourceConfig)
    extractor: RateLimitSourceConfig = Field(
        default_factory=lambda: RateLimitSourceConfig(requests_per_second=1.0, burst=2)
    )


class RetryConfig(BaseModel):
    """Retry/backoff configuration."""

    max_attempts: int = 3
    min_wait: float = 2.0
    max_wait: float = 10.0
    llm_max_wait: float = 30.0


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class AppConfig(BaseModel):
    """Main configuration model."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    rate_limits: RateLimitsConfig = Field(default_factory=RateLimitsConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def expand_env_vars(self):
        """Expand ${VAR} patterns in API keys."""
        if self.llm.api_key:
            key = self.llm.api_key
            if key.startswith("${") and key.endswith("}"):
                env_var = key[2:-1]
                self.llm.api_key = os.getenv(env_var, "") or None
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python")
