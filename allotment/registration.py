"""
Registration desk.

The in-memory service around the allotment engine. It handles:
- Validating registrations at the boundary (experience band, preference ranks, duplicates)
- Gating allotment on the admission cap
- Running the selector and tracking each delegate's lifecycle
- Admin actions: manual allotment, retrying the pending pool, confirm, cancel, expiry
- Payment confirmation against the code issued at registration
- Reports: enriched registrations, leaderboard, statistics, CSV export

Notification, persistence and HTTP handling belong to callers of this class.
"""

import csv
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from allotment.capacity import AdmissionLimits, CapacityTracker, ConfirmOutcome
from allotment.config import AllotmentConfig, DEFAULT_CONFIG, SUBGROUP_COMMITTEES
from allotment.eligibility import EligibilityResult, check_eligibility
from allotment.entities import (
    Allocation,
    Delegate,
    DelegateStatus,
    Preference,
    Registration,
)
from allotment.errors import (
    AlreadyAllocatedError,
    CapacityExceededError,
    ClaimConflictError,
    DuplicateRegistrationError,
    InvalidPaymentCodeError,
    InvalidPreferenceError,
    UnknownDelegateError,
    UnknownPortfolioError,
)
from allotment.scoring import compute_experience_points, points_breakdown
from allotment.selector import AllocationSelector

logger = logging.getLogger(__name__)

MAX_PREFERENCES = 3
REGISTRATION_PREFIX = "MUN2025"
LEADERBOARD_SIZE = 50

CSV_COLUMNS = [
    "Name", "Email", "Phone", "Institution", "MUNs Attended", "Best Delegate",
    "Special Mention", "Verbal Mention", "Committee", "Portfolio", "Status",
]


class RegistrationStatus(Enum):
    ALLOTTED = "allotted"
    NO_ELIGIBLE_PORTFOLIO = "no eligible portfolio available"
    WAITLISTED = "waitlisted"


@dataclass
class EligibilityWarning:
    committee: str
    portfolio: str
    reason: str


@dataclass
class RegistrationOutcome:
    """What happened to one registration."""
    delegate_id: str
    status: RegistrationStatus
    payment_code: str
    user_points: int
    allocation: Optional[Allocation] = None
    warnings: List[EligibilityWarning] = field(default_factory=list)


def validate_preferences(preferences: Iterable[Preference]) -> List[Preference]:
    """
    Check a preference list at the registration boundary.

    Rules:
    1. Between 1 and 3 preferences
    2. Ranks are 1..3 and unique
    3. Rank 1 is present
    4. MOM and AIPPM preferences name their department / party

    Returns:
        The preferences sorted by rank.
    """
    prefs = sorted(preferences, key=lambda p: p.rank)
    if not prefs or len(prefs) > MAX_PREFERENCES:
        raise InvalidPreferenceError(f"Expected 1 to {MAX_PREFERENCES} preferences, got {len(prefs)}")
    ranks = [p.rank for p in prefs]
    if len(set(ranks)) != len(ranks):
        raise InvalidPreferenceError(f"Duplicate preference ranks: {ranks}")
    if any(r < 1 or r > MAX_PREFERENCES for r in ranks):
        raise InvalidPreferenceError(f"Preference ranks must be 1..{MAX_PREFERENCES}: {ranks}")
    if ranks[0] != 1:
        raise InvalidPreferenceError("Preference 1 is mandatory")
    for p in prefs:
        if p.committee in SUBGROUP_COMMITTEES and not p.subgroup:
            raise InvalidPreferenceError(f"{p.committee} preference {p.rank} needs a department or party")
    return prefs


def preferences_from_record(record: Dict[str, Any]) -> List[Preference]:
    """
    Read ``preference1``..``preference3`` from a form record.

    Accepts both ``{"preferences": {"preference1": {...}}}`` and a list of
    ``{"preferenceNumber": n, "committee": ..., "portfolio": ...}``.
    """
    raw = record.get("preferences") or {}
    prefs = []
    if isinstance(raw, dict):
        for rank in range(1, MAX_PREFERENCES + 1):
            entry = raw.get(f"preference{rank}")
            if entry and entry.get("committee") and entry.get("portfolio"):
                prefs.append(Preference.from_record(rank, entry))
    else:
        for entry in raw:
            if entry.get("committee") and entry.get("portfolio"):
                prefs.append(Preference.from_record(int(entry["preferenceNumber"]), entry))
    return prefs


class RegistrationDesk:
    """
    Registers delegates and drives their allotment lifecycle.

    Registrations are handled in arrival order; each one triggers at most one
    allotment attempt.

    Thread Safety: the admission-cap check and the claim it admits run under
    one lock, so concurrent registrations cannot overshoot the cap.
    """

    def __init__(self, capacity: CapacityTracker, config: AllotmentConfig = DEFAULT_CONFIG):
        self.capacity = capacity
        self.config = config
        self.selector = AllocationSelector(config)
        self._registrations: Dict[str, Registration] = {}
        self._emails: Dict[str, str] = {}
        self._lock = threading.Lock()
        # Serialises the admission gate with the claim it lets through
        self._allot_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._registrations)

    def registrations(self) -> List[Registration]:
        return sorted(self._registrations.values(), key=lambda r: r.sequence)

    def get(self, delegate_id: str) -> Registration:
        registration = self._registrations.get(delegate_id)
        if registration is None:
            raise UnknownDelegateError(f"Registration not found: {delegate_id}")
        return registration

    def admission_limits(self) -> AdmissionLimits:
        return self.capacity.admission_limits(
            len(self._registrations),
            allotted_cap=self.config.allotted_cap,
            confirmed_cap=self.config.confirmed_cap,
        )

    def _sync(self, registration: Registration) -> None:
        registration.allocation = self.capacity.allocation_for(registration.delegate_id)
        registration.status = self.capacity.status_of(registration.delegate_id)

    def _warnings(self, delegate: Delegate, preferences: List[Preference]) -> List[EligibilityWarning]:
        warnings = []
        for pref in preferences:
            result = check_eligibility(pref.portfolio, pref.committee, delegate,
                                       subgroup=pref.subgroup, config=self.config)
            if not result.is_eligible:
                warnings.append(EligibilityWarning(pref.committee, pref.portfolio, result.reason))
        return warnings

    def add(self, delegate: Delegate, preferences: Iterable[Preference]) -> Registration:
        """
        Record a registration without attempting allotment.

        Raises:
            DuplicateRegistrationError: The e-mail address is already registered.
            InvalidPreferenceError: The preference list is malformed.
        """
        prefs = validate_preferences(preferences)
        email = delegate.email.strip().lower()
        with self._lock:
            if email and email in self._emails:
                raise DuplicateRegistrationError(f"Email already registered: {delegate.email}")
            sequence = len(self._registrations) + 1
            delegate_id = f"{REGISTRATION_PREFIX}-{sequence}"
            registration = Registration(
                delegate=delegate.with_id(delegate_id),
                preferences=prefs,
                payment_code="PAY-" + uuid.uuid4().hex[:8].upper(),
                sequence=sequence,
            )
            self._registrations[delegate_id] = registration
            if email:
                self._emails[email] = delegate_id
        logger.info("Registered %s (%s)", delegate_id, delegate.name)
        return registration

    def register(self, delegate: Delegate, preferences: Iterable[Preference]) -> RegistrationOutcome:
        """
        Register a delegate and try to allot them one portfolio.

        The registration is kept even when no portfolio is allotted, so the
        delegate stays in the pending pool for a later retry.
        """
        registration = self.add(delegate, preferences)
        return self._attempt(registration)

    def register_record(self, record: Dict[str, Any]) -> RegistrationOutcome:
        """Register from a raw form record, validating the experience band strictly."""
        delegate = Delegate.from_record(record, strict=True)
        return self.register(delegate, preferences_from_record(record))

    def _attempt(self, registration: Registration) -> RegistrationOutcome:
        delegate = registration.delegate
        outcome = RegistrationOutcome(
            delegate_id=registration.delegate_id,
            status=RegistrationStatus.WAITLISTED,
            payment_code=registration.payment_code,
            user_points=compute_experience_points(delegate, self.config),
        )

        with self._allot_lock:
            limits = self.admission_limits()
            if not limits.can_allot:
                logger.info("%s waitlisted: %d/%d seats allotted", registration.delegate_id,
                            limits.allotted_count, limits.total_registrations)
                return outcome
            allocation = self.selector.allocate(delegate, registration.preferences, self.capacity)

        self._sync(registration)
        if allocation is None:
            outcome.status = RegistrationStatus.NO_ELIGIBLE_PORTFOLIO
            outcome.warnings = self._warnings(delegate, registration.preferences)
        else:
            outcome.status = RegistrationStatus.ALLOTTED
            outcome.allocation = allocation
        return outcome

    def allocate_pending(self) -> List[RegistrationOutcome]:
        """Retry allotment for every pending delegate, in arrival order."""
        outcomes = []
        for registration in self.registrations():
            self._sync(registration)
            if registration.status != DelegateStatus.PENDING:
                continue
            outcome = self._attempt(registration)
            outcomes.append(outcome)
            if outcome.status == RegistrationStatus.WAITLISTED:
                break
        return outcomes

    def allot(self, delegate_id: str, preference_rank: int = 1) -> Allocation:
        """
        Admin allotment of one specific preference.

        Raises:
            AlreadyAllocatedError: The delegate already holds a portfolio.
            InvalidPreferenceError: The delegate has no such preference, or is not eligible for it.
            CapacityExceededError: The allotment cap is reached.
            ClaimConflictError: The seat is held by another delegate.
        """
        registration = self.get(delegate_id)
        if self.capacity.allocation_for(delegate_id) is not None:
            raise AlreadyAllocatedError(f"{delegate_id} already holds a portfolio")
        pref = next((p for p in registration.preferences if p.rank == preference_rank), None)
        if pref is None:
            raise InvalidPreferenceError(f"{delegate_id} has no preference {preference_rank}")
        if pref.key not in self.capacity:
            raise UnknownPortfolioError(f"Not in inventory: {pref.key}")
        with self._allot_lock:
            if not self.admission_limits().can_allot:
                raise CapacityExceededError("Allotment limit reached")

            candidate = next(iter(self.selector.candidates(registration.delegate, [pref], self.capacity)), None)
            if candidate is None:
                raise ClaimConflictError(f"{pref.key} is no longer available")
            if not candidate.eligible:
                result = check_eligibility(pref.portfolio, pref.committee, registration.delegate,
                                           subgroup=pref.subgroup, config=self.config)
                raise InvalidPreferenceError(f"Not eligible for {pref.key}: {result.reason}")
            if not self.capacity.try_claim(pref.key, delegate_id, registration.delegate.name,
                                           tier=candidate.tier, score=candidate.score,
                                           preference_rank=pref.rank):
                raise ClaimConflictError(f"{pref.key} is no longer available")
        self._sync(registration)
        return registration.allocation

    def confirm(self, delegate_id: str) -> ConfirmOutcome:
        registration = self.get(delegate_id)
        outcome = self.capacity.confirm(delegate_id)
        self._sync(registration)
        return outcome

    def find_by_email(self, email: str) -> Registration:
        delegate_id = self._emails.get(email.strip().lower())
        if delegate_id is None:
            raise UnknownDelegateError(f"No registration found for {email}")
        return self._registrations[delegate_id]

    def confirm_payment(self, email: str, payment_code: str) -> ConfirmOutcome:
        """
        Confirm an allotted delegate's seat once they quote their payment code.

        Raises:
            UnknownDelegateError: No registration uses this e-mail address.
            InvalidPaymentCodeError: The code differs from the one issued at registration.
            NotAllottedError: The delegate holds no portfolio.
        """
        registration = self.find_by_email(email)
        if payment_code.strip().upper() != registration.payment_code:
            logger.warning("Rejected payment code for %s", registration.delegate_id)
            raise InvalidPaymentCodeError(f"Invalid payment code for {email}")
        return self.confirm(registration.delegate_id)

    def cancel(self, delegate_id: str) -> Allocation:
        """Release the delegate's Allotted portfolio; the delegate returns to Pending."""
        registration = self.get(delegate_id)
        released = self.capacity.cancel(delegate_id)
        self._sync(registration)
        return released

    def expire_unconfirmed(self, now: Optional[datetime] = None) -> List[Allocation]:
        """Release claims left unconfirmed past the confirmation window."""
        window = timedelta(hours=self.config.confirmation_window_hours)
        expired = self.capacity.expire_stale_claims(window, now=now)
        for allocation in expired:
            registration = self._registrations.get(allocation.delegate_id)
            if registration is not None:
                self._sync(registration)
        return expired

    def eligibility_by_preference(self, delegate_id: str) -> Dict[int, EligibilityResult]:
        registration = self.get(delegate_id)
        return {
            pref.rank: check_eligibility(pref.portfolio, pref.committee, registration.delegate,
                                         subgroup=pref.subgroup, config=self.config)
            for pref in registration.preferences
        }

    def report(self) -> List[Dict[str, Any]]:
        """Registrations enriched with points and per-preference eligibility."""
        rows = []
        for registration in self.registrations():
            self._sync(registration)
            breakdown = points_breakdown(registration.delegate, self.config)
            rows.append({
                "id": registration.delegate_id,
                "name": registration.delegate.name,
                "email": registration.delegate.email,
                "status": registration.status.value,
                "total_points": breakdown.total,
                "points": {
                    "experience": breakdown.experience,
                    "awards": breakdown.awards,
                    "best_delegate": breakdown.best_delegate,
                    "special_mention": breakdown.special_mention,
                    "verbal_mention": breakdown.verbal_mention,
                },
                "eligibility": self.eligibility_by_preference(registration.delegate_id),
                "allocation": registration.allocation,
            })
        return rows

    def statistics(self) -> Dict[str, Any]:
        return {
            "limits": self.admission_limits(),
            "committees": self.capacity.summary(),
            "tier_distribution": self.capacity.tier_distribution(),
        }

    def leaderboard(self, limit: int = LEADERBOARD_SIZE) -> List[Dict[str, Any]]:
        """
        Allotted and confirmed delegates ranked by total points, best first.

        Ties keep arrival order.
        """
        rows = []
        for registration in self.registrations():
            self._sync(registration)
            if registration.status == DelegateStatus.PENDING:
                continue
            rows.append({
                "id": registration.delegate_id,
                "name": registration.delegate.name,
                "institution": registration.delegate.institution,
                "total_points": points_breakdown(registration.delegate, self.config).total,
                "status": registration.status.value,
                "allocation": registration.allocation,
            })
        rows.sort(key=lambda row: -row["total_points"])
        return rows[:limit]

    def export_csv(self, path: Union[str, Path]) -> int:
        """
        Write every registration to a CSV file, one row per delegate.

        Returns:
            int: Number of registrations written.
        """
        registrations = self.registrations()
        with open(path, "w", newline="") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL)
            writer.writerow(CSV_COLUMNS)
            for registration in registrations:
                self._sync(registration)
                delegate = registration.delegate
                allocation = registration.allocation
                writer.writerow([
                    delegate.name,
                    delegate.email,
                    delegate.phone,
                    delegate.institution,
                    delegate.experience_band.value if delegate.experience_band else "",
                    delegate.best_delegate_awards,
                    delegate.special_mention_awards,
                    delegate.verbal_mention_awards,
                    allocation.committee if allocation else "Not Allotted",
                    allocation.portfolio if allocation else "Not Allotted",
                    registration.status.value,
                ])
        logger.info("Exported %d registrations to %s", len(registrations), path)
        return len(registrations)
