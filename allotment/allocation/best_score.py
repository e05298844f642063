from typing import List, Optional

from allotment.allocation.base import AllocationStrategy, Candidate


class BestScoreAllocation(AllocationStrategy):
    """
    Highest-score allocation strategy.

    Considers every eligible candidate across the whole preference list, not
    only rank 1, and picks the maximum score. A lower-ranked preference can win
    when it simply scores higher (e.g. a UNSC seat with its 1.5 multiplier).

    Tie-break:
    1. Higher score
    2. Lower preference rank
    3. Earlier catalog declaration
    """

    name = "best_score"

    @staticmethod
    def _sort_key(candidate: Candidate):
        return (-candidate.score, candidate.rank, candidate.catalog_index)

    def select(self, candidates: List[Candidate]) -> Optional[Candidate]:
        eligible = [c for c in candidates if c.eligible]
        if not eligible:
            return None
        return min(eligible, key=self._sort_key)

    def rank_candidates(self, candidates: List[Candidate]) -> List[Candidate]:
        return sorted((c for c in candidates if c.eligible), key=self._sort_key)
