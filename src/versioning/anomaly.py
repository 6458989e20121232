"""Suspicious version transitions and release dates."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Optional

from shared_types import AnomalyKind

from .compare import compare_versions, leading_number
from .format import classify_version_format, format_changed

# Largest major-number increase between two checks that still looks routine
MAX_MAJOR_STEP = 2
FUTURE_DATE_TOLERANCE = timedelta(days=30)
STALE_RELEASE_AGE = timedelta(days=5 * 365)


@dataclass
class AnomalyOutcome:
    has_anomaly: bool
    reason: str
    kinds: list[AnomalyKind] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _target_name(target: Any) -> Optional[str]:
    if target is None:
        return None
    if isinstance(target, dict):
        return target.get("name")
    return getattr(target, "name", None)


def detect_version_anomaly(
    old_version: Optional[str],
    new_version: Optional[str],
    target: Any = None,
    max_major_step: int = MAX_MAJOR_STEP,
) -> AnomalyOutcome:
    """Flag a transition from the stored version that looks like a wrong product.

    Every cause is collected; the first one found leads the reason. The
    checks run in order: downgrade, format change, major jump.
    """
    if not old_version:
        return AnomalyOutcome(False, "No previous version to compare")
    if not new_version:
        return AnomalyOutcome(False, "No new version extracted")

    kinds: list[AnomalyKind] = []
    causes: list[str] = []

    if compare_versions(new_version, old_version) < 0:
        kinds.append(AnomalyKind.DOWNGRADE)
        causes.append(f"Version DOWNGRADE detected: {old_version} -> {new_version}")

    if format_changed(old_version, new_version):
        kinds.append(AnomalyKind.FORMAT_CHANGE)
        causes.append(
            f"Version format changed from {classify_version_format(old_version)}"
            f" to {classify_version_format(new_version)}"
        )

    old_major = leading_number(old_version)
    new_major = leading_number(new_version)
    if new_major - old_major > max_major_step:
        kinds.append(AnomalyKind.MAJOR_JUMP)
        causes.append(f"Major version jumped from {old_major} to {new_major}")

    if not kinds:
        return AnomalyOutcome(False, "No anomalies detected")

    name = _target_name(target)
    reason = "; ".join(causes)
    if name:
        reason = f"{reason} (for {name})"
    return AnomalyOutcome(True, f"{reason}. May indicate wrong product.", kinds)


def detect_suspicious_release_date(
    release_date: Optional[date], today: Optional[date] = None
) -> AnomalyOutcome:
    """Future dates beyond a month are anomalies; very old dates only warn."""
    if release_date is None:
        return AnomalyOutcome(False, "No release date")

    today = today or date.today()
    if release_date - today > FUTURE_DATE_TOLERANCE:
        return AnomalyOutcome(
            True,
            f"Release date {release_date.isoformat()} is in the future",
            [AnomalyKind.FUTURE_DATE],
        )

    warnings = []
    if today - release_date > STALE_RELEASE_AGE:
        warnings.append(f"Release date {release_date.isoformat()} is more than five years old")
    return AnomalyOutcome(False, "Release date looks plausible", warnings=warnings)
