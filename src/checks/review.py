"""Admin review queue for versions flagged during checks."""

from typing import Optional

import structlog

from shared_types import ExtractionMethod

from .errors import TargetNotFoundError, VersionConflictError
from .models import VersionRecord
from .storage import VersionStore

logger = structlog.get_logger().bind(source="review_queue")

APPROVED_NOTE = "Manually approved by admin"
EDITED_NOTE = "Manually edited and approved by admin"


class ReviewQueue:
    def __init__(self, store: VersionStore):
        self.store = store

    def pending(self, limit: int = 50) -> list[VersionRecord]:
        return self.store.list_flagged(limit=limit)

    def _require(self, record_id: int) -> VersionRecord:
        record = self.store.get_version_record(record_id)
        if record is None:
            raise TargetNotFoundError(f"Version record {record_id} not found")
        return record

    def approve(self, record_id: int) -> VersionRecord:
        """Clear the review flag and publish the version as verified."""
        self._require(record_id)
        self.store.update_version_record(
            record_id,
            {
                "requires_manual_review": False,
                "newsletter_verified": True,
                "validation_notes": APPROVED_NOTE,
            },
        )
        logger.info("version_approved", record_id=record_id)
        return self._require(record_id)

    def edit_and_approve(
        self,
        record_id: int,
        version: Optional[str] = None,
        release_date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> VersionRecord:
        """Correct a flagged record, then approve it with full confidence.

        Raises:
            TargetNotFoundError: unknown record id.
            VersionConflictError: the target already has a row for ``version``.
        """
        record = self._require(record_id)
        if version and version != record.version:
            clash = self.store.find_version_record(record.software_id, version)
            if clash is not None:
                raise VersionConflictError(
                    f"{record.software_id} already has version {version} (record {clash.id})"
                )
        fields = {
            "requires_manual_review": False,
            "newsletter_verified": True,
            "confidence_score": 100,
            "validation_notes": EDITED_NOTE,
            "extraction_method": ExtractionMethod.MANUAL,
        }
        if version and version != record.version:
            fields["version"] = version
        if release_date is not None:
            fields["release_date"] = release_date or None
        if notes is not None:
            fields["notes"] = notes
        self.store.update_version_record(record_id, fields)
        logger.info("version_edited", record_id=record_id, fields=sorted(fields))
        updated = self._require(record_id)
        if updated.is_current_override:
            self.store.set_current_override(updated)
        return updated

    def set_current_override(self, record_id: int) -> VersionRecord:
        """Pin a version as its target's current one, whatever its number says.

        For products whose numbering does not sort, such as a rebrand that
        restarted at 1.0. Any earlier pin for the same target is cleared.
        """
        record = self._require(record_id)
        self.store.set_current_override(record)
        logger.info("current_override_set", record_id=record_id, software_id=record.software_id)
        return self._require(record_id)

    def reject(self, record_id: int) -> None:
        """Delete a wrongly extracted version."""
        self._require(record_id)
        self.store.delete_version_record(record_id)
        logger.info("version_rejected", record_id=record_id)
