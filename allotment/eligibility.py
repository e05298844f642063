from dataclasses import dataclass
from typing import Optional

from allotment.config import AllotmentConfig, DEFAULT_CONFIG
from allotment.entities import Delegate
from allotment.scoring import compute_experience_points, experience_lower_bound


@dataclass(frozen=True)
class EligibilityResult:
    """
    Tier membership of a portfolio and whether a delegate qualifies for it.

    Attributes:
        tier (str): Tier name of the portfolio (``tier5`` when not catalogued).
        points (int): Base points of that tier.
        is_eligible (bool): Delegate meets both thresholds.
        required_experience (int): Tier's minimum experience.
        required_best_delegates (int): Tier's minimum Best Delegate awards.
        user_experience (int): Lower bound of the delegate's experience band.
        user_best_delegates (int): Delegate's Best Delegate awards.
        user_points (int): Delegate's experience points.
        multiplier (float): Committee difficulty multiplier.
    """
    tier: str
    points: int
    is_eligible: bool
    required_experience: int
    required_best_delegates: int
    user_experience: int
    user_best_delegates: int
    user_points: int
    multiplier: float

    @property
    def reason(self) -> str:
        return (
            f"Requires {self.required_experience}+ MUNs and "
            f"{self.required_best_delegates}+ Best Delegates"
        )


def check_eligibility(portfolio: str,
                      committee: str,
                      delegate: Delegate,
                      subgroup: Optional[str] = None,
                      config: AllotmentConfig = DEFAULT_CONFIG) -> EligibilityResult:
    """
    Determine a portfolio's tier and whether the delegate meets its thresholds.

    Always returns a verdict: portfolios or committees missing from the
    catalog fall back to the default tier.
    """
    tier = config.catalog.tier_for(committee, portfolio, subgroup)
    user_experience = experience_lower_bound(delegate)
    user_best = max(0, delegate.best_delegate_awards)

    return EligibilityResult(
        tier=tier.name,
        points=tier.points,
        is_eligible=user_experience >= tier.min_experience and user_best >= tier.min_best_delegate,
        required_experience=tier.min_experience,
        required_best_delegates=tier.min_best_delegate,
        user_experience=user_experience,
        user_best_delegates=user_best,
        user_points=compute_experience_points(delegate, config),
        multiplier=config.multiplier_for(committee),
    )
