from typing import List, Optional

from allotment.allocation.base import AllocationStrategy, Candidate


class FirstEligibleAllocation(AllocationStrategy):
    """
    First-eligible allocation strategy.

    Walks the preferences in rank order and takes the first one the delegate
    is eligible for. Scores are ignored except as a record of the claim, so a
    delegate always gets their most preferred reachable portfolio.
    """

    name = "first_eligible"

    def select(self, candidates: List[Candidate]) -> Optional[Candidate]:
        for candidate in sorted(candidates, key=lambda c: (c.rank, c.catalog_index)):
            if candidate.eligible:
                return candidate
        return None
