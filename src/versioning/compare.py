"""Version comparison across semantic, year-based, prefixed and prerelease formats."""

import re
from datetime import date, datetime
from functools import cmp_to_key
from typing import Iterable, Optional, Sequence, TypeVar

# One leading prefix token: "v", "r" or the word "version"
_PREFIX_RE = re.compile(r"^\s*(?:version\s*|[vr])", re.IGNORECASE)
_PRERELEASE_RE = re.compile(r"[-_]")
_LEADING_INT_RE = re.compile(r"\d+")
_BETA_TAG_RE = re.compile(r"^(alpha|beta|rc|preview|pre|dev|canary)", re.IGNORECASE)
_NORMALIZE_PREFIX_RE = re.compile(r"^(?:v|r|version|ver|release)[\s\-_]*(?=\d)", re.IGNORECASE)
_NUMERIC_START_RE = re.compile(r"^\d+(\.\d+)*")

T = TypeVar("T")


def strip_prefix(version: str) -> str:
    """Remove a single leading ``v``/``r``/``version`` token."""
    return _PREFIX_RE.sub("", version, count=1).strip()


def split_version(version: str) -> tuple[list[int], str]:
    """Numeric main segments and the prerelease tag ("" when untagged)."""
    clean = strip_prefix(version)
    parts = _PRERELEASE_RE.split(clean, maxsplit=1)
    main = parts[0]
    prerelease = parts[1] if len(parts) > 1 else ""
    segments = []
    for seg in main.split("."):
        m = _LEADING_INT_RE.match(seg.strip())
        segments.append(int(m.group()) if m else 0)
    return segments, prerelease


def compare_versions(v1: Optional[str], v2: Optional[str]) -> int:
    """Compare two version strings.

    Returns:
        -1 if v1 < v2, 0 if equal, 1 if v1 > v2. Empty sorts below any
        non-empty version; a release sorts above its prereleases.
    """
    if not v1 and not v2:
        return 0
    if not v1:
        return -1
    if not v2:
        return 1

    parts1, pre1 = split_version(v1)
    parts2, pre2 = split_version(v2)

    for i in range(max(len(parts1), len(parts2))):
        a = parts1[i] if i < len(parts1) else 0
        b = parts2[i] if i < len(parts2) else 0
        if a != b:
            return 1 if a > b else -1

    if not pre1 and pre2:
        return 1
    if pre1 and not pre2:
        return -1
    if pre1 and pre2:
        return (pre1 > pre2) - (pre1 < pre2)
    return 0


def is_newer_version(new_version: Optional[str], current_version: Optional[str]) -> bool:
    return compare_versions(new_version, current_version) > 0


def sort_versions_descending(versions: Iterable[str]) -> list[str]:
    """Sort newest first. Equal versions keep their input order."""
    return sorted(versions, key=cmp_to_key(lambda a, b: compare_versions(b, a)))


def leading_number(version: Optional[str]) -> int:
    """Leading numeric segment (the major number), 0 when absent."""
    if not version:
        return 0
    parts, _ = split_version(version)
    return parts[0] if parts else 0


def is_beta_version(version: Optional[str]) -> bool:
    """True when the prerelease tag looks like alpha/beta/rc/preview/dev."""
    if not version:
        return False
    _, prerelease = split_version(version)
    return bool(prerelease) and bool(_BETA_TAG_RE.match(prerelease))


def should_ignore_version(software_name: str, version: str) -> bool:
    """Filter prerelease builds for stable products and vice versa.

    A product whose name contains "beta" tracks only prerelease versions;
    every other product tracks only stable ones.
    """
    if not software_name or not version:
        return False
    if "beta" in software_name.lower():
        return not is_beta_version(version)
    return is_beta_version(version)


def normalize_version(version: str, software_name: str = "") -> str:
    """Collapse cosmetic variations so one release maps to one stored row.

    ``"cobra_v125"`` -> ``"125"``, ``"v1.2.3"`` -> ``"1.2.3"``,
    ``"Version 32"`` -> ``"32"``. Name-based versions such as
    ``"Config 2025"`` are left alone.
    """
    if not version:
        return version
    normalized = version.strip()
    compact_name = re.sub(r"[^a-z0-9]", "", (software_name or "").lower())
    if compact_name:
        name_prefix = re.compile(
            rf"^{re.escape(compact_name)}[_\-\s]*(?:v|version)?[_\-\s]*", re.IGNORECASE
        )
        stripped = name_prefix.sub("", normalized, count=1)
        if stripped:
            normalized = stripped
    normalized = _NORMALIZE_PREFIX_RE.sub("", normalized, count=1)
    return normalized.strip()


def looks_numeric(version: str) -> bool:
    return bool(_NUMERIC_START_RE.match(version.strip()))


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value[:19]).date()
        except ValueError:
            pass
    return date(1970, 1, 1)


def current_version_from_history(records: Sequence[T], only_verified: bool = True) -> Optional[T]:
    """Pick the record that represents a product's current release.

    Priority: a manual override, then the highest version when every entry
    is numeric, otherwise the most recent release (or detection) date.
    Records may be dicts or objects exposing ``version``,
    ``newsletter_verified``, ``release_date``, ``detected_at`` and
    ``is_current_override``.
    """

    def get(rec, key, default=None):
        if isinstance(rec, dict):
            return rec.get(key, default)
        return getattr(rec, key, default)

    if not records:
        return None

    if only_verified:
        pool = [r for r in records if get(r, "newsletter_verified") is not False]
    else:
        pool = list(records)
    if not pool:
        return None

    for rec in pool:
        if get(rec, "is_current_override") is True:
            return rec

    if all(looks_numeric(get(r, "version") or "") for r in pool):
        ordered = sorted(
            pool,
            key=cmp_to_key(lambda a, b: compare_versions(get(b, "version"), get(a, "version"))),
        )
        return ordered[0]

    return max(pool, key=lambda r: _as_date(get(r, "release_date") or get(r, "detected_at")))
