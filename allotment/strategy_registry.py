"""
Default allocation strategy registry.

Maps the strategy names used in configuration files and on the command line
to concrete AllocationStrategy classes.
"""

from typing import Callable, Dict, Union

from allotment.allocation.base import AllocationStrategy
from allotment.allocation.best_score import BestScoreAllocation
from allotment.allocation.first_eligible import FirstEligibleAllocation

StrategyFactory = Callable[[], AllocationStrategy]


DEFAULT_ALLOCATION_STRATEGIES: Dict[str, StrategyFactory] = {
    "best_score": BestScoreAllocation,
    "first_eligible": FirstEligibleAllocation,
}


def resolve_strategy(strategy: Union[str, AllocationStrategy]) -> AllocationStrategy:
    """Return a strategy instance for a registered name, or the instance itself."""
    if isinstance(strategy, AllocationStrategy):
        return strategy
    factory = DEFAULT_ALLOCATION_STRATEGIES.get(strategy)
    if factory is None:
        raise ValueError(f"Unknown allocation strategy: {strategy}")
    return factory()
