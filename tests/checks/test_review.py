"""Tests for the manual review queue."""

import pytest

from checks.errors import TargetNotFoundError, VersionConflictError
from checks.models import VersionRecord
from checks.review import APPROVED_NOTE, ReviewQueue
from shared_types import ExtractionMethod
from versioning import current_version_from_history


@pytest.fixture
def flagged(store, resolve_target):
    record_id = store.insert_version_record(
        VersionRecord(
            software_id="resolve",
            version="25.1",
            confidence_score=0,
            requires_manual_review=True,
            validation_notes="Likely wrong product.",
        )
    )
    return record_id


class TestReviewQueue:
    def test_pending(self, store, flagged):
        assert [r.id for r in ReviewQueue(store).pending()] == [flagged]

    def test_approve(self, store, flagged):
        record = ReviewQueue(store).approve(flagged)
        assert record.requires_manual_review is False
        assert record.newsletter_verified is True
        assert record.validation_notes == APPROVED_NOTE
        assert ReviewQueue(store).pending() == []

    def test_edit_and_approve(self, store, flagged):
        record = ReviewQueue(store).edit_and_approve(
            flagged, version="19.1", release_date="2024-11-12", notes="- Fixes"
        )
        assert record.version == "19.1"
        assert record.release_date == "2024-11-12"
        assert record.confidence_score == 100
        assert record.extraction_method == ExtractionMethod.MANUAL
        assert store.find_version_record("resolve", "25.1") is None

    def test_edit_blank_date_clears(self, store, flagged):
        store.update_version_record(flagged, {"release_date": "2024-01-01"})
        record = ReviewQueue(store).edit_and_approve(flagged, release_date="")
        assert record.release_date is None

    def test_edit_to_existing_version_conflicts(self, store, flagged):
        other = store.insert_version_record(VersionRecord(software_id="resolve", version="19.2"))
        with pytest.raises(VersionConflictError):
            ReviewQueue(store).edit_and_approve(flagged, version="19.2")
        assert store.get_version_record(flagged).version == "25.1"
        assert store.get_version_record(other).version == "19.2"

    def test_edit_to_same_version_is_not_a_conflict(self, store, flagged):
        record = ReviewQueue(store).edit_and_approve(flagged, version="25.1", notes="- Fixed")
        assert record.version == "25.1"
        assert record.notes == "- Fixed"

    def test_reject(self, store, flagged):
        ReviewQueue(store).reject(flagged)
        assert store.get_version_record(flagged) is None

    @pytest.mark.parametrize(
        "action", ["approve", "reject", "edit_and_approve", "set_current_override"]
    )
    def test_missing_record(self, store, action):
        with pytest.raises(TargetNotFoundError):
            getattr(ReviewQueue(store), action)(999)


class TestCurrentOverride:
    @pytest.fixture
    def history(self, store, resolve_target):
        ids = {}
        for version in ("2.0", "1.0"):
            ids[version] = store.insert_version_record(
                VersionRecord(software_id="resolve", version=version, newsletter_verified=True)
            )
        return ids

    def test_pins_version_and_publishes_it(self, store, history):
        record = ReviewQueue(store).set_current_override(history["1.0"])
        assert record.is_current_override is True
        assert store.get_target("resolve").current_version == "1.0"
        current = current_version_from_history(store.list_versions("resolve"))
        assert current.version == "1.0"

    def test_only_one_pin_per_target(self, store, history):
        queue = ReviewQueue(store)
        queue.set_current_override(history["1.0"])
        queue.set_current_override(history["2.0"])

        pinned = [r.version for r in store.list_versions("resolve") if r.is_current_override]
        assert pinned == ["2.0"]
        assert store.get_target("resolve").current_version == "2.0"

    def test_pin_approves_flagged_row(self, store, flagged):
        record = ReviewQueue(store).set_current_override(flagged)
        assert record.newsletter_verified is True
        assert record.requires_manual_review is False

    def test_editing_pinned_row_republishes(self, store, history):
        queue = ReviewQueue(store)
        queue.set_current_override(history["1.0"])
        queue.edit_and_approve(history["1.0"], version="1.0.1")
        assert store.get_target("resolve").current_version == "1.0.1"
