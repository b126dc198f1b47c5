from .score_contract import (
    POLICY_RECOMPUTE,
    POLICY_TRUST,
    apply_score_policy,
    compute_overall_score,
)

__all__ = [
    "POLICY_RECOMPUTE",
    "POLICY_TRUST",
    "apply_score_policy",
    "compute_overall_score",
]
