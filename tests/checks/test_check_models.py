"""Tests for extraction payload models and result aggregation."""

from datetime import date

import pytest
from pydantic import ValidationError

from checks.models import (
    CheckResult,
    CheckSummary,
    ExtractionResult,
    VersionCandidate,
    infer_version_type,
)
from shared_types import VersionType


class TestVersionCandidate:
    def test_wire_aliases(self):
        c = VersionCandidate.model_validate(
            {"version": "1.5.0", "releaseDate": "2024-11-29", "notes": ["a", "b"], "type": "Minor"}
        )
        assert c.release_date == date(2024, 11, 29)
        assert c.type == VersionType.MINOR
        assert c.notes_markdown == "a\nb"

    def test_numeric_version_stringified(self):
        assert VersionCandidate.model_validate({"version": 32}).version == "32"

    def test_blank_version_rejected(self):
        with pytest.raises(ValidationError):
            VersionCandidate.model_validate({"version": "  "})

    def test_bad_date_dropped(self):
        c = VersionCandidate.model_validate({"version": "1.0", "releaseDate": "November 2024"})
        assert c.release_date is None

    def test_type_inferred(self):
        assert VersionCandidate.model_validate({"version": "2.0.0"}).type == VersionType.MAJOR
        assert VersionCandidate.model_validate({"version": "2.1"}).type == VersionType.MINOR
        assert VersionCandidate.model_validate({"version": "2.1.3", "type": "huge"}).type == VersionType.PATCH


class TestExtractionResult:
    def test_valid_payload(self):
        result = ExtractionResult.model_validate(
            {"currentVersion": " 1.5.0 ", "confidence": 87.6, "versions": [{"version": "1.5.0"}]}
        )
        assert result.current_version == "1.5.0"
        assert result.ai_confidence == 88
        assert result.product_name_found is None

    def test_confidence_clamped(self):
        result = ExtractionResult.model_validate({"confidence": 250, "versions": []})
        assert result.ai_confidence == 100

    @pytest.mark.parametrize(
        "payload",
        [
            {"versions": []},
            {"confidence": 80},
            {"confidence": "high", "versions": []},
            {"confidence": True, "versions": []},
            {"confidence": 80, "versions": "1.0"},
        ],
    )
    def test_missing_or_wrong_fields_rejected(self, payload):
        with pytest.raises(ValidationError):
            ExtractionResult.model_validate(payload)

    def test_empty_current_version_is_none(self):
        result = ExtractionResult.model_validate({"currentVersion": "", "confidence": 10, "versions": []})
        assert result.current_version is None


def test_infer_version_type():
    assert infer_version_type("v3") == VersionType.MAJOR
    assert infer_version_type("3.4") == VersionType.MINOR
    assert infer_version_type("3.4.1") == VersionType.PATCH


def test_summary_from_results():
    results = [
        CheckResult(software_id="a", name="A", success=True, versions_added=2),
        CheckResult(software_id="b", name="B", success=False, error="x"),
        CheckResult(software_id="c", name="C", success=True, versions_added=1),
    ]
    summary = CheckSummary.from_results(results)
    assert summary.total_checked == 3
    assert summary.successful == 2
    assert summary.failed == 1
    assert summary.total_versions_added == 3
    assert summary.to_dict()["results"][1]["error"] == "x"
