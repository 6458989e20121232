"""Pure version comparison, validation and confidence scoring."""

from .anomaly import (
    MAX_MAJOR_STEP,
    AnomalyOutcome,
    detect_suspicious_release_date,
    detect_version_anomaly,
)
from .compare import (
    compare_versions,
    current_version_from_history,
    is_beta_version,
    is_newer_version,
    normalize_version,
    should_ignore_version,
    sort_versions_descending,
)
from .format import UNKNOWN_FORMAT, classify_version_format, format_changed
from .scoring import (
    ANOMALY_CEILING,
    REVIEW_THRESHOLD,
    calculate_confidence_score,
    requires_manual_review,
)
from .validation import (
    MIN_VALID_CONFIDENCE,
    ValidationOutcome,
    calculate_proximity,
    validate_extraction,
    validate_product_name,
)

__all__ = [
    "compare_versions",
    "is_newer_version",
    "sort_versions_descending",
    "normalize_version",
    "is_beta_version",
    "should_ignore_version",
    "current_version_from_history",
    "classify_version_format",
    "format_changed",
    "UNKNOWN_FORMAT",
    "AnomalyOutcome",
    "detect_version_anomaly",
    "detect_suspicious_release_date",
    "MAX_MAJOR_STEP",
    "calculate_confidence_score",
    "requires_manual_review",
    "ANOMALY_CEILING",
    "REVIEW_THRESHOLD",
    "ValidationOutcome",
    "validate_product_name",
    "calculate_proximity",
    "validate_extraction",
    "MIN_VALID_CONFIDENCE",
]
