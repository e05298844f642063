from dataclasses import dataclass, field
from typing import Dict

from allotment.allocation.base import AllocationStrategy
from allotment.allocation.best_score import BestScoreAllocation
from allotment.catalog import DEFAULT_CATALOG, TierCatalog


# Points for the declared number of conferences attended.
DEFAULT_BAND_POINTS: Dict[str, int] = {
    "0": 0,
    "1": 5,
    "2": 10,
    "3": 15,
    "4": 20,
    "5": 25,
    "6-10": 35,
    "11-20": 50,
    "21-30": 70,
    "30+": 100,
}

# Committee difficulty; unlisted committees use 1.0.
DEFAULT_COMMITTEE_MULTIPLIERS: Dict[str, float] = {
    "UNSC": 1.5,
    "AIPPM": 1.4,
    "MOM": 1.4,
    "UNHRC": 1.2,
    "UNCSW": 1.1,
    "WHO": 1.1,
    "UNGA": 1.0,
}

# Committees whose portfolios are qualified by a department / party.
SUBGROUP_COMMITTEES = ("MOM", "AIPPM")


@dataclass
class AwardWeights:
    """Points per award."""
    best_delegate: int = 5
    special_mention: int = 3
    verbal_mention: int = 1


@dataclass
class AllotmentConfig:
    """
    Configuration for scoring and allotting portfolios.

    Attributes:
        award_weights: Points per Best Delegate / Special Mention / Verbal Mention.
        band_points: Points per experience band label; unknown labels score 0.
        committee_multipliers: Difficulty factor per committee (1.0 when absent).
        preference_penalty: Score reduction per preference rank below the first.
        experience_bonus_weight: Share of the delegate's points added to every score.
        allotted_cap: Fraction of registrations that may hold an Allotted seat.
        confirmed_cap: Fraction of registrations reported as the confirmation ceiling.
        confirmation_window_hours: Age after which unconfirmed claims may be expired.
        claim_retries: Attempts before a lost claim race is reported to the caller.
        strategy: How the winning candidate is chosen.
        catalog: Tier catalog to score against.
    """
    award_weights: AwardWeights = field(default_factory=AwardWeights)
    band_points: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_BAND_POINTS))
    committee_multipliers: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_COMMITTEE_MULTIPLIERS)
    )
    preference_penalty: float = 0.15
    experience_bonus_weight: float = 0.5
    allotted_cap: float = 0.25
    confirmed_cap: float = 0.10
    confirmation_window_hours: float = 48.0
    claim_retries: int = 3
    strategy: AllocationStrategy = field(default_factory=BestScoreAllocation)
    catalog: TierCatalog = DEFAULT_CATALOG

    def multiplier_for(self, committee: str) -> float:
        return self.committee_multipliers.get(committee, 1.0)


DEFAULT_CONFIG = AllotmentConfig()
