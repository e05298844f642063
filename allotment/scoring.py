"""
Experience points for a delegate.

Pure functions of the delegate record: declared experience band plus weighted
award counts. Unknown bands and missing counts contribute nothing.
"""

from dataclasses import dataclass

from allotment.config import AllotmentConfig, DEFAULT_CONFIG
from allotment.entities import Delegate


@dataclass(frozen=True)
class PointsBreakdown:
    experience: int
    best_delegate: int
    special_mention: int
    verbal_mention: int

    @property
    def awards(self) -> int:
        return self.best_delegate + self.special_mention + self.verbal_mention

    @property
    def total(self) -> int:
        return self.experience + self.awards


def experience_lower_bound(delegate: Delegate) -> int:
    """Integer lower bound of the delegate's experience band ("6-10" -> 6), 0 if unknown."""
    if delegate.experience_band is None:
        return 0
    return delegate.experience_band.lower_bound


def points_breakdown(delegate: Delegate, config: AllotmentConfig = DEFAULT_CONFIG) -> PointsBreakdown:
    band = delegate.experience_band
    weights = config.award_weights
    return PointsBreakdown(
        experience=config.band_points.get(band.value, 0) if band is not None else 0,
        best_delegate=max(0, delegate.best_delegate_awards) * weights.best_delegate,
        special_mention=max(0, delegate.special_mention_awards) * weights.special_mention,
        verbal_mention=max(0, delegate.verbal_mention_awards) * weights.verbal_mention,
    )


def compute_experience_points(delegate: Delegate, config: AllotmentConfig = DEFAULT_CONFIG) -> int:
    """
    Aggregate experience points of a delegate.

    Args:
        delegate (Delegate): The delegate to score.
        config (AllotmentConfig): Band points and award weights.

    Returns:
        int: Non-negative, uncapped point total.
    """
    return points_breakdown(delegate, config).total
