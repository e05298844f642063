from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from allotment.entities import Preference


@dataclass(frozen=True)
class Candidate:
    """
    One preference of a delegate, scored against an open portfolio.

    Attributes:
        preference (Preference): The nominated committee/portfolio.
        score (int): Allocation score (0 when ineligible).
        eligible (bool): Whether the delegate meets the portfolio's tier thresholds.
        tier (str): Tier name of the portfolio.
        catalog_index (int): Declaration order of the portfolio in the catalog.
    """
    preference: Preference
    score: int
    eligible: bool
    tier: str
    catalog_index: int

    @property
    def rank(self) -> int:
        return self.preference.rank


class AllocationStrategy(ABC):
    """
    Abstract base class for selection strategies.

    A strategy sees only candidates whose portfolio is still open; it decides
    which single one (if any) the delegate should claim.
    """

    name = "base"

    @abstractmethod
    def select(self, candidates: List[Candidate]) -> Optional[Candidate]:
        """
        Choose the candidate to claim.

        Args:
            candidates (List[Candidate]): Open candidates, in preference order.

        Returns:
            Optional[Candidate]: The winner, or None when no candidate is eligible.
        """
        pass

    def rank_candidates(self, candidates: List[Candidate]) -> List[Candidate]:
        """
        Eligible candidates ordered best first.

        Used to fall back to the runner-up when the winner's claim is lost.
        """
        remaining = list(candidates)
        ordered = []
        while remaining:
            winner = self.select(remaining)
            if winner is None:
                break
            ordered.append(winner)
            remaining.remove(winner)
        return ordered
