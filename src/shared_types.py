"""Shared enums and types for versionwatch."""

from enum import StrEnum


class CheckState(StrEnum):
    PENDING = "pending"
    SCRAPING = "scraping"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CheckState.DONE, CheckState.FAILED)


class VersionType(StrEnum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class AnomalyKind(StrEnum):
    DOWNGRADE = "downgrade"
    FORMAT_CHANGE = "format_change"
    MAJOR_JUMP = "major_jump"
    FUTURE_DATE = "future_date"


class ExtractionMethod(StrEnum):
    LLM = "llm"
    MANUAL = "manual"


class LLMProviderName(StrEnum):
    CLAUDE = "claude"
    OPENAI = "openai"
