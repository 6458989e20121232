"""Version "shape" tokens used to spot format drift between checks."""

import re
from typing import Optional

from .compare import strip_prefix

UNKNOWN_FORMAT = "UNKNOWN"

# A leading 4-digit segment inside these bounds reads as a calendar year
DEFAULT_YEAR_BOUNDS = (1990, 2099)

_DIGITS_RE = re.compile(r"\d+")


def classify_version_format(
    version: Optional[str], year_bounds: tuple[int, int] = DEFAULT_YEAR_BOUNDS
) -> str:
    """Derive the structural shape of a version string.

    ``"1.2.3"`` -> ``"X.X.X"``, ``"2024.10.1"`` -> ``"YYYY.X.X"``,
    ``"v5.4"`` -> ``"X.X"``, ``"3.0-beta"`` -> ``"X.X-beta"``.
    """
    if not version or not version.strip():
        return UNKNOWN_FORMAT

    cleaned = strip_prefix(version)
    if not cleaned:
        return UNKNOWN_FORMAT

    lo, hi = year_bounds
    shaped = []
    for i, segment in enumerate(cleaned.split(".")):
        if i == 0 and len(segment) == 4 and segment.isdigit() and lo <= int(segment) <= hi:
            shaped.append("YYYY")
        else:
            shaped.append(_DIGITS_RE.sub("X", segment))
    return ".".join(shaped)


def format_changed(old_version: Optional[str], new_version: Optional[str]) -> bool:
    """True when both shapes are known and differ."""
    old_format = classify_version_format(old_version)
    new_format = classify_version_format(new_version)
    if UNKNOWN_FORMAT in (old_format, new_format):
        return False
    return old_format != new_format
