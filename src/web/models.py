"""Pydantic request/response schemas for the web API."""

from typing import Optional

from pydantic import BaseModel, Field

# --- Checks ---


class CheckResultOut(BaseModel):
    software_id: str
    name: str
    success: bool
    versions_found: int
    versions_added: int
    error: Optional[str] = None
    state: str
    score: Optional[int] = None
    requires_manual_review: bool = False


class CheckSummaryOut(BaseModel):
    total_checked: int
    successful: int
    failed: int
    total_versions_added: int
    results: list[CheckResultOut] = []


# --- Versions / review ---


class VersionRecordOut(BaseModel):
    id: int
    software_id: str
    version: str
    release_date: Optional[str] = None
    notes: str = ""
    type: str
    confidence_score: int
    requires_manual_review: bool
    newsletter_verified: bool
    validation_notes: Optional[str] = None
    extraction_method: str
    is_current_override: bool = False
    detected_at: Optional[str] = None


class ReviewEdit(BaseModel):
    version: Optional[str] = Field(None, min_length=1, max_length=100)
    release_date: Optional[str] = Field(None, pattern=r"^(\d{4}-\d{2}-\d{2})?$")
    notes: Optional[str] = Field(None, max_length=100_000)


# --- Targets ---


class TargetOut(BaseModel):
    id: str
    name: str
    website: str = ""
    version_check_url: Optional[str] = None
    current_version: Optional[str] = None
    release_date: Optional[str] = None
    last_checked: Optional[str] = None
