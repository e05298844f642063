"""
Allocation selector.

Turns a delegate's ranked preferences into at most one claimed portfolio:
1. Skip preferences whose seat is not open (or not in the inventory)
2. Score the remaining ones
3. Let the configured strategy pick the winner
4. Claim it atomically, falling back to the runner-up if the claim is lost
"""

import logging
from typing import Iterable, List, Optional

from allotment.allocation.base import Candidate
from allotment.capacity import CapacityTracker
from allotment.config import AllotmentConfig, DEFAULT_CONFIG
from allotment.entities import Allocation, Delegate, Preference
from allotment.errors import AlreadyAllocatedError, ClaimConflictError
from allotment.scorer import score_allocation

logger = logging.getLogger(__name__)


class AllocationSelector:
    """
    Greedy, per-delegate allocation against a shared capacity store.

    Stateless apart from its configuration; one instance can serve any number
    of delegates and threads.
    """

    def __init__(self, config: AllotmentConfig = DEFAULT_CONFIG):
        self.config = config

    def candidates(self, delegate: Delegate, preferences: Iterable[Preference],
                   capacity: CapacityTracker) -> List[Candidate]:
        """
        Score every preference whose seat is currently open.

        Args:
            delegate: The delegate being allotted.
            preferences: Ranked nominations (any order).
            capacity: Claim store to check availability against.

        Returns:
            Candidates in preference-rank order.
        """
        result = []
        for pref in sorted(preferences, key=lambda p: p.rank):
            if pref.key not in capacity:
                logger.debug("%s: %s is not in the inventory, skipping", delegate.delegate_id, pref.key)
                continue
            if not capacity.is_open(pref.key):
                logger.debug("%s: %s is already taken, skipping", delegate.delegate_id, pref.key)
                continue
            scored = score_allocation(pref.portfolio, pref.committee, delegate, pref.rank,
                                      subgroup=pref.subgroup, config=self.config)
            result.append(Candidate(
                preference=pref,
                score=scored.score,
                eligible=scored.eligible,
                tier=scored.tier,
                catalog_index=self.config.catalog.declaration_index(
                    pref.committee, pref.portfolio, pref.subgroup),
            ))
        return result

    def allocate(self, delegate: Delegate, preferences: Iterable[Preference],
                 capacity: CapacityTracker) -> Optional[Allocation]:
        """
        Claim the best eligible, available portfolio for a delegate.

        Returns:
            Optional[Allocation]: The claimed portfolio, or None when no
            preference is both eligible and available (capacity unchanged).

        Raises:
            AlreadyAllocatedError: The delegate already holds a portfolio.
            ClaimConflictError: Every attempt lost its claim race; retry later.
        """
        preferences = list(preferences)
        if capacity.allocation_for(delegate.delegate_id) is not None:
            raise AlreadyAllocatedError(f"{delegate.delegate_id} already holds a portfolio")

        for attempt in range(1, self.config.claim_retries + 1):
            ranked = self.config.strategy.rank_candidates(
                self.candidates(delegate, preferences, capacity))
            if not ranked:
                logger.info("%s: no eligible portfolio available", delegate.delegate_id)
                return None

            for candidate in ranked:
                pref = candidate.preference
                if capacity.try_claim(pref.key, delegate.delegate_id, delegate.name,
                                      tier=candidate.tier, score=candidate.score,
                                      preference_rank=pref.rank):
                    return Allocation(
                        delegate_id=delegate.delegate_id,
                        committee=pref.committee,
                        portfolio=pref.portfolio,
                        subgroup=pref.subgroup,
                        tier=candidate.tier,
                        score=candidate.score,
                        preference_rank=pref.rank,
                    )
                logger.warning("%s: lost claim on %s (attempt %d)",
                               delegate.delegate_id, pref.key, attempt)

        raise ClaimConflictError(
            f"{delegate.delegate_id}: portfolio no longer available after "
            f"{self.config.claim_retries} attempts"
        )


def allocate(delegate: Delegate, preferences: Iterable[Preference],
             capacity: CapacityTracker,
             config: AllotmentConfig = DEFAULT_CONFIG) -> Optional[Allocation]:
    """Allocate with a one-off selector; see AllocationSelector.allocate."""
    return AllocationSelector(config).allocate(delegate, preferences, capacity)
