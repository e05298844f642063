import math
from dataclasses import dataclass
from typing import Optional

from allotment.config import AllotmentConfig, DEFAULT_CONFIG
from allotment.eligibility import EligibilityResult, check_eligibility
from allotment.entities import Delegate


@dataclass(frozen=True)
class ScoreResult:
    """Comparable claim strength of a delegate on one portfolio."""
    score: int
    eligible: bool
    eligibility: EligibilityResult
    preference_rank: int
    reason: Optional[str] = None

    @property
    def tier(self) -> str:
        return self.eligibility.tier


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_allocation(portfolio: str,
                     committee: str,
                     delegate: Delegate,
                     preference_rank: int,
                     subgroup: Optional[str] = None,
                     config: AllotmentConfig = DEFAULT_CONFIG) -> ScoreResult:
    """
    Score a delegate's claim on a portfolio.

    score = tier points x committee multiplier x rank penalty + points bonus,
    where the rank penalty is ``1 - (rank - 1) * preference_penalty`` and the
    bonus is ``user_points * experience_bonus_weight``. Ineligible claims score 0.

    Args:
        portfolio (str): Portfolio name.
        committee (str): Committee code (e.g. ``UNSC``).
        delegate (Delegate): The claimant.
        preference_rank (int): 1 for the first preference.
        subgroup (str, optional): Department / party for MOM and AIPPM.
        config (AllotmentConfig): Scoring parameters and catalog.

    Returns:
        ScoreResult: Rounded score, eligibility and, when ineligible, the reason.
    """
    eligibility = check_eligibility(portfolio, committee, delegate, subgroup, config)

    if not eligibility.is_eligible:
        return ScoreResult(
            score=0,
            eligible=False,
            eligibility=eligibility,
            preference_rank=preference_rank,
            reason=eligibility.reason,
        )

    score = eligibility.points * eligibility.multiplier
    score *= 1 - (preference_rank - 1) * config.preference_penalty
    score += eligibility.user_points * config.experience_bonus_weight

    return ScoreResult(
        score=round_half_up(score),
        eligible=True,
        eligibility=eligibility,
        preference_rank=preference_rank,
    )
