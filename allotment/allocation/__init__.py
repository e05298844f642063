"""
Selection strategies for choosing one portfolio among a delegate's candidates.

Each strategy implements the AllocationStrategy interface and picks at most
one winner from the scored, currently-open candidates of a single delegate.
"""

from allotment.allocation.base import AllocationStrategy, Candidate
from allotment.allocation.best_score import BestScoreAllocation
from allotment.allocation.first_eligible import FirstEligibleAllocation

__all__ = [
    "AllocationStrategy",
    "Candidate",
    "BestScoreAllocation",
    "FirstEligibleAllocation",
]
