"""
Portfolio claim bookkeeping.

The CapacityTracker owns the claim state of every seat in the inventory
(Open / Allotted / Confirmed) and the index from delegate to claimed seat. It
also derives the percentage-based admission caps from the claim counts.

Thread Safety: check-then-claim on a seat runs under that seat's lock; the
delegate index has its own lock, always taken after a seat lock.
"""

import logging
import math
import threading
from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from allotment.entities import (
    Allocation,
    ClaimState,
    DelegateStatus,
    PortfolioKey,
    PortfolioSlot,
)
from allotment.errors import (
    AlreadyAllocatedError,
    InvalidTransitionError,
    NotAllottedError,
    UnknownPortfolioError,
)

logger = logging.getLogger(__name__)


class ConfirmOutcome(Enum):
    CONFIRMED = "confirmed"
    ALREADY_CONFIRMED = "already confirmed"


@dataclass(frozen=True)
class AdmissionLimits:
    """
    Percentage caps on allotted and confirmed delegates.

    ``can_allot`` gates new allotments; the confirmed cap is reported only.
    """
    total_registrations: int
    allotted_count: int
    confirmed_count: int
    allotted_percentage: float
    confirmed_percentage: float
    allotted_limit: int
    confirmed_limit: int
    remaining_allotments: int
    can_allot: bool
    confirmed_cap_reached: bool


class CapacityTracker:
    """
    Claim store for a fixed portfolio inventory.

    Seats are created once from the inventory and are only claimed and
    released afterwards.
    """

    def __init__(self, keys: Iterable[PortfolioKey],
                 clock: Callable[[], datetime] = datetime.now):
        """
        Args:
            keys: Every seat of the conference, in matrix order.
            clock: Source of claim/confirm timestamps.

        Raises:
            ValueError: A seat appears twice.
        """
        self._clock = clock
        self._slots: Dict[PortfolioKey, PortfolioSlot] = {}
        for index, key in enumerate(keys):
            if key in self._slots:
                raise ValueError(f"Duplicate portfolio in inventory: {key}")
            self._slots[key] = PortfolioSlot(key=key, index=index)
        self._slot_locks: Dict[PortfolioKey, threading.Lock] = {
            key: threading.Lock() for key in self._slots
        }
        self._index_lock = threading.Lock()
        self._claims: Dict[str, PortfolioKey] = {}

    def __contains__(self, key: PortfolioKey) -> bool:
        return key in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def _get(self, key: PortfolioKey) -> PortfolioSlot:
        slot = self._slots.get(key)
        if slot is None:
            raise UnknownPortfolioError(f"Not in inventory: {key}")
        return slot

    def slot(self, key: PortfolioKey) -> PortfolioSlot:
        """Snapshot of one seat."""
        slot = self._get(key)
        with self._slot_locks[key]:
            return replace(slot)

    def slots(self) -> List[PortfolioSlot]:
        """Snapshots of all seats in inventory order."""
        return [self.slot(key) for key in self._slots]

    def is_open(self, key: PortfolioKey) -> bool:
        """True when the seat exists and nobody holds it."""
        slot = self._slots.get(key)
        return slot is not None and slot.is_open

    def try_claim(self,
                  key: PortfolioKey,
                  delegate_id: str,
                  delegate_name: str = "",
                  tier: Optional[str] = None,
                  score: Optional[int] = None,
                  preference_rank: Optional[int] = None) -> bool:
        """
        Atomically claim an open seat for a delegate.

        Returns:
            bool: False when the seat was no longer open.

        Raises:
            UnknownPortfolioError: The seat is not in the inventory.
            AlreadyAllocatedError: The delegate already holds a seat.
        """
        slot = self._get(key)
        with self._slot_locks[key]:
            if not slot.is_open:
                return False
            with self._index_lock:
                held = self._claims.get(delegate_id)
                if held is not None:
                    raise AlreadyAllocatedError(f"{delegate_id} already holds {held}")
                self._claims[delegate_id] = key
            slot.state = ClaimState.ALLOTTED
            slot.delegate_id = delegate_id
            slot.delegate_name = delegate_name or delegate_id
            slot.tier = tier
            slot.score = score
            slot.preference_rank = preference_rank
            slot.claimed_at = self._clock()

        logger.info("Allotted %s to %s (tier=%s, score=%s, preference=%s)",
                    key, delegate_id, tier, score, preference_rank)
        return True

    def restore(self, key: PortfolioKey, state: ClaimState, delegate_id: str,
                delegate_name: str = "", claimed_at: Optional[datetime] = None,
                tier: Optional[str] = None) -> None:
        """Re-apply a claim recorded in a saved matrix."""
        if state == ClaimState.OPEN:
            return
        if not self.try_claim(key, delegate_id, delegate_name, tier=tier):
            raise AlreadyAllocatedError(f"{key} is already held by {self._slots[key].delegate_id}")
        slot = self._slots[key]
        with self._slot_locks[key]:
            if claimed_at is not None:
                slot.claimed_at = claimed_at
            if state == ClaimState.CONFIRMED:
                slot.state = ClaimState.CONFIRMED
                slot.confirmed_at = slot.claimed_at

    def _key_for(self, delegate_id: str) -> PortfolioKey:
        with self._index_lock:
            key = self._claims.get(delegate_id)
        if key is None:
            raise NotAllottedError(f"No portfolio has been allotted to {delegate_id}")
        return key

    @staticmethod
    def _to_allocation(slot: PortfolioSlot) -> Allocation:
        return Allocation(
            delegate_id=slot.delegate_id,
            committee=slot.key.committee,
            portfolio=slot.key.name,
            subgroup=slot.key.subgroup,
            tier=slot.tier or "",
            score=slot.score or 0,
            preference_rank=slot.preference_rank or 0,
        )

    def allocation_for(self, delegate_id: str) -> Optional[Allocation]:
        with self._index_lock:
            key = self._claims.get(delegate_id)
        if key is None:
            return None
        with self._slot_locks[key]:
            slot = self._slots[key]
            if slot.delegate_id != delegate_id:
                return None
            return self._to_allocation(slot)

    def status_of(self, delegate_id: str) -> DelegateStatus:
        with self._index_lock:
            key = self._claims.get(delegate_id)
        if key is None:
            return DelegateStatus.PENDING
        state = self._slots[key].state
        return DelegateStatus.CONFIRMED if state == ClaimState.CONFIRMED else DelegateStatus.ALLOTTED

    def confirm(self, delegate_id: str) -> ConfirmOutcome:
        """
        Move a delegate's seat from Allotted to Confirmed.

        Confirming twice is a no-op reported as ALREADY_CONFIRMED.

        Raises:
            NotAllottedError: The delegate holds no seat.
        """
        key = self._key_for(delegate_id)
        slot = self._slots[key]
        with self._slot_locks[key]:
            if slot.delegate_id != delegate_id:
                raise NotAllottedError(f"No portfolio has been allotted to {delegate_id}")
            if slot.state == ClaimState.CONFIRMED:
                return ConfirmOutcome.ALREADY_CONFIRMED
            slot.state = ClaimState.CONFIRMED
            slot.confirmed_at = self._clock()

        logger.info("Confirmed %s for %s", key, delegate_id)
        return ConfirmOutcome.CONFIRMED

    def cancel(self, delegate_id: str) -> Allocation:
        """
        Release an Allotted seat back to Open.

        Returns:
            Allocation: The claim that was released.

        Raises:
            NotAllottedError: The delegate holds no seat.
            InvalidTransitionError: The seat is already Confirmed.
        """
        key = self._key_for(delegate_id)
        slot = self._slots[key]
        with self._slot_locks[key]:
            if slot.delegate_id != delegate_id:
                raise NotAllottedError(f"No portfolio has been allotted to {delegate_id}")
            if slot.state == ClaimState.CONFIRMED:
                raise InvalidTransitionError(f"{delegate_id} has already confirmed {key}")
            released = self._release(slot)

        logger.info("Cancelled %s for %s", key, delegate_id)
        return released

    def _release(self, slot: PortfolioSlot) -> Allocation:
        # Caller holds the slot lock.
        released = self._to_allocation(slot)
        with self._index_lock:
            self._claims.pop(slot.delegate_id, None)
        slot.clear()
        return released

    def expire_stale_claims(self, max_age: timedelta,
                            now: Optional[datetime] = None) -> List[Allocation]:
        """
        Release Allotted seats that stayed unconfirmed for longer than max_age.

        Returns:
            List[Allocation]: The released claims, in inventory order.
        """
        now = now or self._clock()
        expired = []
        for key, slot in self._slots.items():
            with self._slot_locks[key]:
                if slot.state != ClaimState.ALLOTTED or slot.claimed_at is None:
                    continue
                if now - slot.claimed_at <= max_age:
                    continue
                expired.append(self._release(slot))
            logger.warning("Expired unconfirmed claim on %s", key)
        return expired

    def counts(self) -> Counter:
        return Counter(slot.state for slot in self._slots.values())

    def admission_limits(self, total_registrations: int,
                         allotted_cap: float = 0.25,
                         confirmed_cap: float = 0.10) -> AdmissionLimits:
        """
        Derive the admission caps for the current registration total.

        Only Allotted (not yet Confirmed) seats count against the allotment cap.
        """
        counts = self.counts()
        allotted = counts[ClaimState.ALLOTTED]
        confirmed = counts[ClaimState.CONFIRMED]

        if total_registrations > 0:
            allotted_pct = allotted / total_registrations * 100
            confirmed_pct = confirmed / total_registrations * 100
        else:
            allotted_pct = confirmed_pct = 0.0

        allotted_limit = math.floor(total_registrations * allotted_cap)
        return AdmissionLimits(
            total_registrations=total_registrations,
            allotted_count=allotted,
            confirmed_count=confirmed,
            allotted_percentage=allotted_pct,
            confirmed_percentage=confirmed_pct,
            allotted_limit=allotted_limit,
            confirmed_limit=math.floor(total_registrations * confirmed_cap),
            remaining_allotments=max(0, allotted_limit - allotted),
            can_allot=allotted_pct < allotted_cap * 100,
            confirmed_cap_reached=confirmed_pct >= confirmed_cap * 100,
        )

    def tier_distribution(self) -> Dict[str, Dict[str, Any]]:
        """
        Count and average allocation score per tier over claimed seats.

        Seats restored without a score count towards the tier but not its
        average; ``average_score`` is None when no seat of the tier has one.
        """
        scores: Dict[str, List[int]] = {}
        counts: Counter = Counter()
        for slot in self._slots.values():
            if slot.is_open:
                continue
            tier = slot.tier or ""
            counts[tier] += 1
            if slot.score is not None:
                scores.setdefault(tier, []).append(slot.score)
        return {
            tier: {
                "count": counts[tier],
                "average_score": sum(scores[tier]) / len(scores[tier]) if tier in scores else None,
            }
            for tier in sorted(counts)
        }

    def summary(self) -> Dict[str, Dict[str, int]]:
        """Open / Allotted / Confirmed counts per committee."""
        result: Dict[str, Dict[str, int]] = {}
        for slot in self._slots.values():
            row = result.setdefault(slot.key.committee, {s.value: 0 for s in ClaimState})
            row[slot.state.value] += 1
        return result
