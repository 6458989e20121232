"""Checks that an extracted version really belongs to the tracked product."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .scoring import calculate_confidence_score

MIN_VALID_CONFIDENCE = 70
# Confidence ceiling when the model itself says the product name was absent
AI_NAME_MISSING_CEILING = 50
SIGNIFICANT_WORD_MIN_LEN = 3


@dataclass
class ValidationOutcome:
    valid: bool
    confidence: int
    reason: str
    warnings: list[str] = field(default_factory=list)
    product_name_found: bool = False
    proximity: int = -1


def _field(obj: Any, name: str, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _significant_words(name: str) -> list[str]:
    return [w for w in name.lower().split() if len(w) >= SIGNIFICANT_WORD_MIN_LEN]


def validate_product_name(product_name: Optional[str], content: Optional[str]) -> bool:
    """True when the page mentions the product.

    Either the full name appears (case-insensitive) or more than half of its
    significant words do, which tolerates reordered names such as
    "New DaVinci features in Resolve" for "DaVinci Resolve".
    """
    if not product_name or not product_name.strip() or not content:
        return False

    haystack = content.lower()
    if product_name.lower().strip() in haystack:
        return True

    words = _significant_words(product_name)
    if not words:
        return False
    present = sum(1 for w in words if w in haystack)
    return present > len(words) / 2


def calculate_proximity(product_name: str, version: str, content: str) -> int:
    """Character distance between the first mentions of name and version.

    Returns -1 when the version text is absent. If the full name is absent
    the earliest significant word of the name anchors the distance.
    """
    if not product_name or not version or not content:
        return -1

    haystack = content.lower()
    version_index = haystack.find(version.lower())
    if version_index == -1:
        return -1

    name_index = haystack.find(product_name.lower().strip())
    if name_index == -1:
        hits = [haystack.find(w) for w in _significant_words(product_name)]
        hits = [h for h in hits if h != -1]
        if not hits:
            return -1
        name_index = min(hits)

    return abs(name_index - version_index)


def validate_extraction(
    target: Any,
    extracted: Any,
    content: str,
    min_valid_confidence: int = MIN_VALID_CONFIDENCE,
) -> ValidationOutcome:
    """Decide whether an extraction can be trusted.

    ``target`` needs a ``name``; ``extracted`` needs ``current_version``,
    ``ai_confidence`` and optionally ``product_name_found``. Both may be
    objects or dicts.
    """
    name = _field(target, "name") or ""
    current_version = _field(extracted, "current_version")
    ai_confidence = int(_field(extracted, "ai_confidence", 0) or 0)

    if not current_version:
        return ValidationOutcome(
            valid=True,
            confidence=ai_confidence,
            reason="No version found - nothing to contradict",
            product_name_found=validate_product_name(name, content),
        )

    if not validate_product_name(name, content):
        return ValidationOutcome(
            valid=False,
            confidence=0,
            reason=(
                f'Product name "{name}" not found on page, but version '
                f'"{current_version}" was extracted. Likely wrong product.'
            ),
            warnings=["Product name not found on page"],
            product_name_found=False,
        )

    warnings = []
    proximity = calculate_proximity(name, current_version, content)
    if proximity == -1:
        warnings.append(f'Version "{current_version}" does not appear verbatim on the page')
    elif proximity > 500:
        warnings.append(
            f'Version "{current_version}" found {proximity} characters away from product name'
        )
    elif proximity > 200:
        warnings.append(f"Version found {proximity} characters from product name")

    confidence = calculate_confidence_score(ai_confidence, True, proximity, has_anomaly=False)

    if _field(extracted, "product_name_found") is False:
        warnings.append("AI reported product name not found in content")
        confidence = min(confidence, AI_NAME_MISSING_CEILING)

    valid = confidence >= min_valid_confidence
    if valid:
        reason = "All validation checks passed"
    elif warnings:
        reason = f"Validation concerns: {'; '.join(warnings)}"
    else:
        reason = f"Confidence {confidence} below minimum {min_valid_confidence}"

    return ValidationOutcome(
        valid=valid,
        confidence=confidence,
        reason=reason,
        warnings=warnings,
        product_name_found=True,
        proximity=proximity,
    )
