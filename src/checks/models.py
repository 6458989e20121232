"""Check data model: targets, stored versions, extraction payloads, results."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared_types import CheckState, ExtractionMethod, VersionType
from versioning.compare import split_version


@dataclass
class Target:
    """A tracked software product."""

    id: str
    name: str
    website: str = ""
    version_check_url: Optional[str] = None
    current_version: Optional[str] = None
    release_date: Optional[str] = None
    last_checked: Optional[str] = None


@dataclass
class VersionRecord:
    """One persisted release of a target. Unique per (software_id, version)."""

    software_id: str
    version: str
    release_date: Optional[str] = None
    notes: str = ""
    type: VersionType = VersionType.PATCH
    confidence_score: int = 0
    requires_manual_review: bool = False
    newsletter_verified: bool = False
    validation_notes: Optional[str] = None
    extraction_method: ExtractionMethod = ExtractionMethod.LLM
    is_current_override: bool = False
    detected_at: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


def infer_version_type(version: str) -> VersionType:
    """X.0.0 -> major, X.Y.0 -> minor, anything else -> patch."""
    segments, _ = split_version(version)
    segments = (segments + [0, 0, 0])[:3]
    if segments[1] == 0 and segments[2] == 0:
        return VersionType.MAJOR
    if segments[2] == 0:
        return VersionType.MINOR
    return VersionType.PATCH


def _parse_loose_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if value is None or isinstance(value, date):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


class VersionCandidate(BaseModel):
    """One version the model found on the page."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: str
    release_date: Optional[date] = Field(default=None, alias="releaseDate")
    notes: list[str] = Field(default_factory=list)
    type: Optional[VersionType] = None
    build_number: Optional[str] = Field(default=None, alias="buildNumber")

    @field_validator("version", mode="before")
    @classmethod
    def validate_version(cls, v: Any) -> str:
        if isinstance(v, (int, float)):
            v = str(v)
        if not isinstance(v, str) or not v.strip():
            raise ValueError("version must be a non-empty string")
        return v.strip()

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Optional[date]:
        return _parse_loose_date(v)

    @field_validator("notes", mode="before")
    @classmethod
    def wrap_notes(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        return v

    @field_validator("type", mode="before")
    @classmethod
    def lower_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return v if v in {t.value for t in VersionType} else None
        return v

    @field_validator("build_number", mode="before")
    @classmethod
    def stringify_build(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @model_validator(mode="after")
    def fill_type(self):
        if self.type is None:
            self.type = infer_version_type(self.version)
        return self

    @property
    def notes_markdown(self) -> str:
        return "\n".join(self.notes)


class ExtractionResult(BaseModel):
    """Structured payload returned by the extraction call."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_version: Optional[str] = Field(default=None, alias="currentVersion")
    release_date: Optional[date] = Field(default=None, alias="releaseDate")
    versions: list[VersionCandidate]
    ai_confidence: int = Field(alias="confidence")
    product_name_found: Optional[bool] = Field(default=None, alias="productNameFound")

    @field_validator("current_version", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Optional[date]:
        return _parse_loose_date(v)

    @field_validator("ai_confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("confidence must be a number")
        return max(0, min(100, int(round(v))))


@dataclass
class CheckResult:
    """Outcome of one target's check."""

    software_id: str
    name: str
    success: bool = False
    versions_found: int = 0
    versions_added: int = 0
    error: Optional[str] = None
    state: CheckState = CheckState.PENDING
    score: Optional[int] = None
    requires_manual_review: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CheckSummary:
    total_checked: int = 0
    successful: int = 0
    failed: int = 0
    total_versions_added: int = 0
    results: list[CheckResult] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: list[CheckResult]) -> "CheckSummary":
        successful = sum(1 for r in results if r.success)
        return cls(
            total_checked=len(results),
            successful=successful,
            failed=len(results) - successful,
            total_versions_added=sum(r.versions_added for r in results),
            results=list(results),
        )

    def to_dict(self) -> dict:
        return asdict(self)
