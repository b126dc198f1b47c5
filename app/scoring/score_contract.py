from __future__ import annotations

import logging
import math

from app.schemas.analysis import SCORE_MAX, SCORE_MIN, AnalysisResult, Weights

logger = logging.getLogger(__name__)

POLICY_TRUST = "trust"
POLICY_RECOMPUTE = "recompute"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_overall_score(
    skills_score: float,
    experience_score: float,
    education_score: float,
    weights: Weights,
) -> int:
    """Weighted average of the three section scores, rounded and clamped to [0, 100].

    Weights are relative (they need not sum to 100). All-zero or non-finite
    weights yield 0.
    """
    raw_weights = (
        max(0.0, weights.skills),
        max(0.0, weights.experience),
        max(0.0, weights.education),
    )
    largest = max(raw_weights)
    if largest <= 0 or not math.isfinite(largest):
        return 0

    # Power-of-two scaling is exact and keeps the sums below from overflowing.
    _, exponent = math.frexp(largest)
    pairs = tuple(
        zip(
            (skills_score, experience_score, education_score),
            (math.ldexp(weight, -exponent) for weight in raw_weights),
        )
    )
    total_weight = sum(weight for _, weight in pairs)
    weighted = sum(score * weight for score, weight in pairs) / total_weight
    if not math.isfinite(weighted):
        return 0
    rounded = _round_half_up(weighted)
    return int(max(SCORE_MIN, min(SCORE_MAX, rounded)))


def apply_score_policy(
    result: AnalysisResult,
    weights: Weights,
    *,
    policy: str = POLICY_TRUST,
    tolerance: float = 1.0,
) -> AnalysisResult:
    if policy == POLICY_TRUST:
        return result
    if policy != POLICY_RECOMPUTE:
        raise ValueError(f"Unsupported score policy '{policy}'")

    expected = compute_overall_score(*result.section_scores(), weights)
    if abs(result.overall_score - expected) <= tolerance:
        return result

    logger.info(
        "overall_score_recomputed declared=%s expected=%s tolerance=%s",
        result.overall_score,
        expected,
        tolerance,
    )
    return result.model_copy(update={"overall_score": expected})
