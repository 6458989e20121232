"""SQLite store for tracked targets, their versions and the check audit log."""

import sqlite3
import uuid
from pathlib import Path
from typing import Any, Optional

import structlog

from db import utc_now, wal_connect
from shared_types import ExtractionMethod, VersionType

from .errors import PersistenceError
from .models import CheckResult, Target, VersionRecord

logger = structlog.get_logger().bind(source="version_store")

# Columns a re-observation or a review action may change. The current-version
# override goes through set_current_override only.
UPDATABLE_VERSION_FIELDS = {
    "version",
    "release_date",
    "notes",
    "type",
    "confidence_score",
    "requires_manual_review",
    "newsletter_verified",
    "validation_notes",
    "extraction_method",
}


class VersionStore:
    """SQLite persistence for targets and version records.

    Every public method raises ``PersistenceError`` on a database failure.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with wal_connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS targets (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    website TEXT DEFAULT '',
                    version_check_url TEXT,
                    current_version TEXT,
                    release_date TEXT,
                    last_checked TIMESTAMP,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS software_versions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    software_id TEXT NOT NULL REFERENCES targets(id) ON DELETE CASCADE,
                    version TEXT NOT NULL,
                    release_date TEXT,
                    notes TEXT DEFAULT '',
                    type TEXT DEFAULT 'patch',
                    confidence_score INTEGER DEFAULT 0,
                    requires_manual_review INTEGER DEFAULT 0,
                    newsletter_verified INTEGER DEFAULT 0,
                    validation_notes TEXT,
                    extraction_method TEXT DEFAULT 'llm',
                    detected_at TIMESTAMP,
                    updated_at TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_versions_unique
                ON software_versions(software_id, version)
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_versions_review
                ON software_versions(requires_manual_review)
            """)
            # Add columns if not exists (for existing DBs)
            for col, typedef in [("is_current_override", "INTEGER DEFAULT 0")]:
                try:
                    conn.execute(f"ALTER TABLE software_versions ADD COLUMN {col} {typedef}")
                except sqlite3.OperationalError:
                    pass  # Column already exists

            conn.execute("""
                CREATE TABLE IF NOT EXISTS version_checks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    software_id TEXT NOT NULL,
                    run_id TEXT,
                    checked_at TIMESTAMP,
                    success INTEGER,
                    state TEXT,
                    versions_found INTEGER DEFAULT 0,
                    versions_added INTEGER DEFAULT 0,
                    score INTEGER,
                    requires_manual_review INTEGER DEFAULT 0,
                    error TEXT
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_checks_software
                ON version_checks(software_id, checked_at)
            """)

    def _execute(self, sql: str, params: tuple = (), fetch: str | None = None) -> Any:
        conn = None
        try:
            conn = wal_connect(self.db_path, row_factory=True)
            with conn:
                cursor = conn.execute(sql, params)
                if fetch == "one":
                    return cursor.fetchone()
                if fetch == "all":
                    return cursor.fetchall()
                return cursor
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            logger.error("db_error", error=str(e), error_type=type(e).__name__)
            raise PersistenceError(f"Database error: {e}") from e
        finally:
            if conn is not None:
                conn.close()

    # --- targets ---

    @staticmethod
    def _row_to_target(row: sqlite3.Row) -> Target:
        return Target(
            id=row["id"],
            name=row["name"],
            website=row["website"] or "",
            version_check_url=row["version_check_url"],
            current_version=row["current_version"],
            release_date=row["release_date"],
            last_checked=row["last_checked"],
        )

    def add_target(
        self,
        name: str,
        version_check_url: Optional[str] = None,
        website: str = "",
        current_version: Optional[str] = None,
        target_id: Optional[str] = None,
    ) -> Target:
        """Register a product to track."""
        target = Target(
            id=target_id or uuid.uuid4().hex[:12],
            name=name.strip(),
            website=website,
            version_check_url=version_check_url,
            current_version=current_version,
        )
        try:
            self._execute(
                """INSERT INTO targets (id, name, website, version_check_url, current_version)
                   VALUES (?, ?, ?, ?, ?)""",
                (target.id, target.name, target.website, target.version_check_url,
                 target.current_version),
            )
        except sqlite3.IntegrityError as e:
            raise PersistenceError(f"Target {target.id} already exists") from e
        return target

    def get_target(self, target_id: str) -> Optional[Target]:
        row = self._execute("SELECT * FROM targets WHERE id = ?", (target_id,), fetch="one")
        return self._row_to_target(row) if row else None

    def list_targets(self) -> list[Target]:
        rows = self._execute("SELECT * FROM targets ORDER BY name COLLATE NOCASE", fetch="all")
        return [self._row_to_target(r) for r in rows]

    def list_targets_with_version_url(self) -> list[Target]:
        """Targets that can be checked automatically."""
        rows = self._execute(
            """SELECT * FROM targets
               WHERE version_check_url IS NOT NULL AND TRIM(version_check_url) != ''
               ORDER BY name COLLATE NOCASE""",
            fetch="all",
        )
        return [self._row_to_target(r) for r in rows]

    def update_target_current_version(
        self, target_id: str, version: str, release_date: Optional[str] = None
    ) -> None:
        """Publish ``version`` as current and stamp ``last_checked``."""
        self._execute(
            """UPDATE targets
               SET current_version = ?, release_date = COALESCE(?, release_date),
                   last_checked = ?
               WHERE id = ?""",
            (version, release_date, utc_now(), target_id),
        )

    def touch_target(self, target_id: str) -> None:
        self._execute(
            "UPDATE targets SET last_checked = ? WHERE id = ?", (utc_now(), target_id)
        )

    # --- version records ---

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> VersionRecord:
        return VersionRecord(
            id=row["id"],
            software_id=row["software_id"],
            version=row["version"],
            release_date=row["release_date"],
            notes=row["notes"] or "",
            type=VersionType(row["type"] or VersionType.PATCH),
            confidence_score=row["confidence_score"] or 0,
            requires_manual_review=bool(row["requires_manual_review"]),
            newsletter_verified=bool(row["newsletter_verified"]),
            validation_notes=row["validation_notes"],
            extraction_method=ExtractionMethod(row["extraction_method"] or ExtractionMethod.LLM),
            is_current_override=bool(row["is_current_override"]),
            detected_at=row["detected_at"],
        )

    def find_version_record(self, software_id: str, version: str) -> Optional[VersionRecord]:
        row = self._execute(
            "SELECT * FROM software_versions WHERE software_id = ? AND version = ?",
            (software_id, version),
            fetch="one",
        )
        return self._row_to_record(row) if row else None

    def get_version_record(self, record_id: int) -> Optional[VersionRecord]:
        row = self._execute(
            "SELECT * FROM software_versions WHERE id = ?", (record_id,), fetch="one"
        )
        return self._row_to_record(row) if row else None

    def insert_version_record(self, record: VersionRecord) -> Optional[int]:
        """Insert a new version row.

        Returns the new row id, or None when a concurrent writer stored the
        same ``(software_id, version)`` first; in that case the existing row
        receives this record's notes, release date and type instead.
        """
        now = utc_now()
        try:
            cursor = self._execute(
                """
                INSERT INTO software_versions
                (software_id, version, release_date, notes, type, confidence_score,
                 requires_manual_review, newsletter_verified, validation_notes,
                 extraction_method, is_current_override, detected_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.software_id,
                    record.version,
                    record.release_date,
                    record.notes,
                    str(record.type),
                    record.confidence_score,
                    int(record.requires_manual_review),
                    int(record.newsletter_verified),
                    record.validation_notes,
                    str(record.extraction_method),
                    int(record.is_current_override),
                    record.detected_at or now,
                    now,
                ),
            )
            return cursor.lastrowid
        except sqlite3.IntegrityError:
            existing = self.find_version_record(record.software_id, record.version)
            if existing is None:
                raise PersistenceError(
                    f"Insert of {record.software_id}/{record.version} violated a constraint"
                )
            logger.info(
                "version_insert_race",
                software_id=record.software_id,
                version=record.version,
            )
            self.update_version_record(
                existing.id,
                {"notes": record.notes, "release_date": record.release_date, "type": record.type},
            )
            return None

    def update_version_record(self, record_id: int, fields: dict) -> None:
        """Update whitelisted columns of one version row."""
        unknown = set(fields) - UPDATABLE_VERSION_FIELDS
        if unknown:
            raise PersistenceError(f"Cannot update fields: {sorted(unknown)}")
        if not fields:
            return

        values = []
        for key, value in fields.items():
            if isinstance(value, bool):
                value = int(value)
            elif isinstance(value, (VersionType, ExtractionMethod)):
                value = str(value)
            values.append(value)

        assignments = ", ".join(f"{key} = ?" for key in fields)
        try:
            self._execute(
                f"UPDATE software_versions SET {assignments}, updated_at = ? WHERE id = ?",
                (*values, utc_now(), record_id),
            )
        except sqlite3.IntegrityError as e:
            raise PersistenceError(f"Update of version row {record_id} conflicts: {e}") from e

    def set_current_override(self, record: VersionRecord) -> None:
        """Pin ``record`` as its target's current version.

        At most one row per target carries the override. The pinned row counts
        as verified and the target's ``current_version`` follows it.
        """
        now = utc_now()
        conn = None
        try:
            conn = wal_connect(self.db_path)
            with conn:
                conn.execute(
                    """UPDATE software_versions SET is_current_override = 0, updated_at = ?
                       WHERE software_id = ? AND id != ? AND is_current_override = 1""",
                    (now, record.software_id, record.id),
                )
                conn.execute(
                    """UPDATE software_versions
                       SET is_current_override = 1, newsletter_verified = 1,
                           requires_manual_review = 0, updated_at = ?
                       WHERE id = ?""",
                    (now, record.id),
                )
                conn.execute(
                    """UPDATE targets
                       SET current_version = ?, release_date = COALESCE(?, release_date)
                       WHERE id = ?""",
                    (record.version, record.release_date, record.software_id),
                )
        except sqlite3.Error as e:
            logger.error("db_error", error=str(e), error_type=type(e).__name__)
            raise PersistenceError(f"Database error: {e}") from e
        finally:
            if conn is not None:
                conn.close()

    def delete_version_record(self, record_id: int) -> bool:
        cursor = self._execute("DELETE FROM software_versions WHERE id = ?", (record_id,))
        return cursor.rowcount > 0

    def list_versions(self, software_id: str, limit: int = 50) -> list[VersionRecord]:
        """Stored versions of one target, most recently detected first."""
        rows = self._execute(
            """SELECT * FROM software_versions WHERE software_id = ?
               ORDER BY detected_at DESC, id DESC LIMIT ?""",
            (software_id, limit),
            fetch="all",
        )
        return [self._row_to_record(r) for r in rows]

    def list_flagged(self, limit: int = 50) -> list[VersionRecord]:
        """Versions awaiting manual review, newest first."""
        rows = self._execute(
            """SELECT * FROM software_versions WHERE requires_manual_review = 1
               ORDER BY detected_at DESC, id DESC LIMIT ?""",
            (limit,),
            fetch="all",
        )
        return [self._row_to_record(r) for r in rows]

    # --- audit log ---

    def record_check(self, result: CheckResult, run_id: Optional[str] = None) -> None:
        self._execute(
            """
            INSERT INTO version_checks
            (software_id, run_id, checked_at, success, state, versions_found,
             versions_added, score, requires_manual_review, error)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                result.software_id,
                run_id,
                utc_now(),
                int(result.success),
                str(result.state),
                result.versions_found,
                result.versions_added,
                result.score,
                int(result.requires_manual_review),
                result.error,
            ),
        )

    def recent_checks(self, software_id: Optional[str] = None, limit: int = 20) -> list[dict]:
        if software_id:
            rows = self._execute(
                """SELECT * FROM version_checks WHERE software_id = ?
                   ORDER BY checked_at DESC, id DESC LIMIT ?""",
                (software_id, limit),
                fetch="all",
            )
        else:
            rows = self._execute(
                "SELECT * FROM version_checks ORDER BY checked_at DESC, id DESC LIMIT ?",
                (limit,),
                fetch="all",
            )
        checks = []
        for row in rows:
            item = dict(row)
            item["success"] = bool(item["success"])
            item["requires_manual_review"] = bool(item["requires_manual_review"])
            checks.append(item)
        return checks
