"""
Arrival-order simulation of a registration window.

This module provides:
- AllotmentRun: Replays registrations in a given order through a fresh desk
- run_monte_carlo: Shuffles arrival order many times and computes statistics

Allotment is greedy per delegate, so who registers first matters; these
statistics show by how much.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from collections import Counter
import logging
import random

from allotment.capacity import CapacityTracker
from allotment.config import AllotmentConfig, DEFAULT_CONFIG
from allotment.entities import PortfolioKey
from allotment.errors import AllotmentError
from allotment.registration import RegistrationDesk, RegistrationOutcome, RegistrationStatus

logger = logging.getLogger(__name__)


@dataclass
class SimulationStats:
    """Aggregated statistics over many simulated registration windows."""

    total_runs: int
    mean_allotted: float
    mean_waitlisted: float
    mean_unallocated: float
    mean_score: float
    # Per-tier and per-preference-rank allotment counts, averaged over runs
    tier_counts: Dict[str, float] = field(default_factory=dict)
    rank_counts: Dict[int, float] = field(default_factory=dict)
    # Probability that the delegate at this index of the input list gets a seat
    allot_probs: Dict[int, float] = field(default_factory=dict)

    @property
    def first_choice_share(self) -> float:
        allotted = sum(self.rank_counts.values())
        return self.rank_counts.get(1, 0.0) / allotted if allotted else 0.0


class AllotmentRun:
    """
    Replays one registration window.

    Registrations are processed strictly in the order given; each one gets a
    single allotment attempt, exactly as at the live desk.
    """

    def __init__(self, inventory: Sequence[PortfolioKey], config: AllotmentConfig = DEFAULT_CONFIG):
        self.inventory = list(inventory)
        self.config = config

    def run(self, records: Sequence[Dict[str, Any]]) -> List[Optional[RegistrationOutcome]]:
        """
        Register every record in order.

        Args:
            records: Raw registration form records.

        Returns:
            One outcome per record; None where the record was rejected at the boundary.
        """
        desk = RegistrationDesk(CapacityTracker(self.inventory), self.config)
        outcomes: List[Optional[RegistrationOutcome]] = []
        for record in records:
            try:
                outcomes.append(desk.register_record(record))
            except AllotmentError as exc:
                logger.warning("Rejected registration for %s: %s", record.get("email"), exc)
                outcomes.append(None)
        return outcomes


def run_monte_carlo(
    records: Sequence[Dict[str, Any]],
    inventory: Sequence[PortfolioKey],
    config: AllotmentConfig = DEFAULT_CONFIG,
    num_runs: int = 1000,
    seed: Optional[int] = None,
) -> SimulationStats:
    """
    Run many registration windows with shuffled arrival order.

    Args:
        records: Registration records (each run shuffles a copy)
        inventory: Seats available at the start of every run
        config: Allotment configuration
        num_runs: Number of iterations
        seed: Random seed for reproducibility

    Returns:
        SimulationStats object with aggregated metrics.
    """
    rng = random.Random(seed)
    runner = AllotmentRun(inventory, config)

    allot_counts = Counter()
    tier_counts = Counter()
    rank_counts = Counter()
    total_allotted = 0
    total_waitlisted = 0
    total_unallocated = 0
    score_sum = 0

    if not records or num_runs <= 0:
        return SimulationStats(0, 0.0, 0.0, 0.0, 0.0)

    for _ in range(num_runs):
        order = list(range(len(records)))
        rng.shuffle(order)
        outcomes = runner.run([records[i] for i in order])

        for position, outcome in zip(order, outcomes):
            if outcome is None:
                continue
            if outcome.status == RegistrationStatus.WAITLISTED:
                total_waitlisted += 1
            elif outcome.status == RegistrationStatus.NO_ELIGIBLE_PORTFOLIO:
                total_unallocated += 1
            else:
                total_allotted += 1
                allot_counts[position] += 1
                tier_counts[outcome.allocation.tier] += 1
                rank_counts[outcome.allocation.preference_rank] += 1
                score_sum += outcome.allocation.score

    return SimulationStats(
        total_runs=num_runs,
        mean_allotted=total_allotted / num_runs,
        mean_waitlisted=total_waitlisted / num_runs,
        mean_unallocated=total_unallocated / num_runs,
        mean_score=score_sum / total_allotted if total_allotted else 0.0,
        tier_counts={tier: count / num_runs for tier, count in tier_counts.items()},
        rank_counts={rank: count / num_runs for rank, count in rank_counts.items()},
        allot_probs={idx: count / num_runs for idx, count in allot_counts.items()},
    )
