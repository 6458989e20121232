"""Confidence scoring for extracted versions."""

# Scores at or above this publish without review
REVIEW_THRESHOLD = 70
# Ceiling applied whenever an anomaly was detected
ANOMALY_CEILING = 50

NEAR_PROXIMITY = 100
MODERATE_PROXIMITY = 200
FAR_PROXIMITY = 500

NEAR_BONUS = 5
MODERATE_PENALTY = 15
FAR_PENALTY = 30


def calculate_confidence_score(
    ai_confidence: int,
    product_name_found: bool,
    proximity: int,
    has_anomaly: bool,
    anomaly_ceiling: int = ANOMALY_CEILING,
) -> int:
    """Combine extraction signals into one 0-100 trust score.

    A missing product name is disqualifying and yields 0. Otherwise the AI's
    confidence is adjusted by how close the version sits to the product name
    (``proximity == -1`` means the version text was not on the page at all),
    then capped when an anomaly was detected.
    """
    if not product_name_found:
        return 0

    score = ai_confidence
    if proximity < 0 or proximity > FAR_PROXIMITY:
        score -= FAR_PENALTY
    elif proximity > MODERATE_PROXIMITY:
        score -= MODERATE_PENALTY
    elif proximity <= NEAR_PROXIMITY:
        score += NEAR_BONUS

    if has_anomaly:
        score = min(score, anomaly_ceiling)

    return max(0, min(100, int(round(score))))


def requires_manual_review(
    valid: bool, has_anomaly: bool, score: int, threshold: int = REVIEW_THRESHOLD
) -> bool:
    return not valid or has_anomaly or score < threshold
