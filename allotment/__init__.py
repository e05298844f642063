"""
Portfolio allotment for a Model United Nations conference.

Scores delegate experience, checks tier eligibility and greedily allots each
delegate at most one portfolio from a fixed inventory.
"""

from allotment.capacity import AdmissionLimits, CapacityTracker, ConfirmOutcome
from allotment.catalog import DEFAULT_CATALOG, TierCatalog, TierSpec
from allotment.config import AllotmentConfig, DEFAULT_CONFIG
from allotment.eligibility import EligibilityResult, check_eligibility
from allotment.entities import (
    Allocation,
    ClaimState,
    Delegate,
    DelegateStatus,
    ExperienceBand,
    PortfolioKey,
    Preference,
)
from allotment.scorer import ScoreResult, score_allocation
from allotment.scoring import compute_experience_points
from allotment.selector import AllocationSelector, allocate

__all__ = [
    "AdmissionLimits",
    "Allocation",
    "AllocationSelector",
    "AllotmentConfig",
    "CapacityTracker",
    "ClaimState",
    "ConfirmOutcome",
    "DEFAULT_CATALOG",
    "DEFAULT_CONFIG",
    "Delegate",
    "DelegateStatus",
    "EligibilityResult",
    "ExperienceBand",
    "PortfolioKey",
    "Preference",
    "ScoreResult",
    "TierCatalog",
    "TierSpec",
    "allocate",
    "check_eligibility",
    "compute_experience_points",
    "score_allocation",
]
