import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from allotment.errors import InvalidExperienceBandError


class ExperienceBand(Enum):
    """
    Self-reported number of MUN conferences attended.

    The value is the label used on the registration form; ``lower_bound`` is
    the integer the tier thresholds are compared against.
    """

    NONE = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX_TO_TEN = "6-10"
    ELEVEN_TO_TWENTY = "11-20"
    TWENTY_ONE_TO_THIRTY = "21-30"
    THIRTY_PLUS = "30+"

    @property
    def lower_bound(self) -> int:
        return int(self.value.rstrip("+").split("-")[0])

    @classmethod
    def from_label(cls, label: Any, strict: bool = False) -> Optional["ExperienceBand"]:
        """
        Parse a form label into a band.

        Args:
            label: Raw label (``"6-10"``), an ExperienceBand, or None.
            strict: Raise on unknown labels instead of returning None.

        Returns:
            The matching band, or None for empty/unknown labels when not strict.
        """
        if isinstance(label, cls):
            return label
        text = "" if label is None else str(label).strip()
        for band in cls:
            if band.value == text:
                return band
        if strict:
            raise InvalidExperienceBandError(f"Unknown experience band: {label!r}")
        return None


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _to_count(value: Any) -> int:
    # Form values arrive as strings; the leading integer counts ("3 awards" -> 3),
    # anything without one counts as zero.
    if isinstance(value, (int, float)):
        return max(0, int(value))
    match = _LEADING_INT.match("" if value is None else str(value))
    return max(0, int(match.group(1))) if match else 0


@dataclass(frozen=True)
class Delegate:
    """
    A registered delegate.

    Attributes:
        delegate_id (str): Registration id (e.g. ``MUN2025-7``).
        name (str): Full name.
        experience_band (ExperienceBand): Declared conference count, None if unknown.
        best_delegate_awards (int): Number of Best Delegate awards.
        special_mention_awards (int): Number of Special Mentions.
        verbal_mention_awards (int): Number of Verbal Mentions.
        participations (int): Participation certificates (not scored).
    """
    delegate_id: str
    name: str
    email: str = ""
    phone: str = ""
    institution: str = ""
    grade: str = ""
    experience_band: Optional[ExperienceBand] = None
    best_delegate_awards: int = 0
    special_mention_awards: int = 0
    verbal_mention_awards: int = 0
    participations: int = 0

    @classmethod
    def from_record(cls, record: Dict[str, Any], delegate_id: Optional[str] = None,
                    strict: bool = False) -> "Delegate":
        """Build a delegate from a raw registration form record."""
        return cls(
            delegate_id=str(delegate_id or record.get("id") or record.get("email", "")),
            name=record.get("name") or record.get("fullName", ""),
            email=record.get("email", ""),
            phone=str(record.get("phone", "")),
            institution=record.get("school") or record.get("institution", ""),
            grade=str(record.get("class") or record.get("grade", "")),
            experience_band=ExperienceBand.from_label(record.get("experience"), strict=strict),
            best_delegate_awards=_to_count(record.get("bestDelegate")),
            special_mention_awards=_to_count(record.get("specialMention")),
            verbal_mention_awards=_to_count(record.get("verbalMention")),
            participations=_to_count(record.get("participation")),
        )

    def with_id(self, delegate_id: str) -> "Delegate":
        return replace(self, delegate_id=delegate_id)


class PortfolioKey(NamedTuple):
    """Identity of one seat. ``subgroup`` is the MOM department / AIPPM party, else None."""
    committee: str
    subgroup: Optional[str]
    name: str

    def __str__(self) -> str:
        if self.subgroup:
            return f"{self.committee}/{self.subgroup}/{self.name}"
        return f"{self.committee}/{self.name}"


@dataclass(frozen=True)
class Preference:
    """A ranked nomination (rank 1 is the first choice)."""
    rank: int
    committee: str
    portfolio: str
    subgroup: Optional[str] = None

    @property
    def key(self) -> PortfolioKey:
        return PortfolioKey(self.committee, self.subgroup, self.portfolio)

    @classmethod
    def from_record(cls, rank: int, record: Dict[str, Any]) -> "Preference":
        return cls(
            rank=rank,
            committee=record["committee"],
            portfolio=record["portfolio"],
            subgroup=record.get("subCommittee") or record.get("subgroup") or None,
        )


class ClaimState(Enum):
    OPEN = "Open"
    ALLOTTED = "Allotted"
    CONFIRMED = "Confirmed"


class DelegateStatus(Enum):
    PENDING = "Pending"
    ALLOTTED = "Allotted"
    CONFIRMED = "Confirmed"


@dataclass
class PortfolioSlot:
    """
    One claimable seat in the inventory and its current claim.

    Mutated only by CapacityTracker while holding the slot's lock.
    """
    key: PortfolioKey
    index: int
    state: ClaimState = ClaimState.OPEN
    delegate_id: Optional[str] = None
    delegate_name: Optional[str] = None
    tier: Optional[str] = None
    score: Optional[int] = None
    preference_rank: Optional[int] = None
    claimed_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.state == ClaimState.OPEN

    def clear(self) -> None:
        self.state = ClaimState.OPEN
        self.delegate_id = None
        self.delegate_name = None
        self.tier = None
        self.score = None
        self.preference_rank = None
        self.claimed_at = None
        self.confirmed_at = None


@dataclass(frozen=True)
class Allocation:
    """The single portfolio resolved for one delegate."""
    delegate_id: str
    committee: str
    portfolio: str
    subgroup: Optional[str]
    tier: str
    score: int
    preference_rank: int

    @property
    def key(self) -> PortfolioKey:
        return PortfolioKey(self.committee, self.subgroup, self.portfolio)


@dataclass
class Registration:
    """A delegate, their preferences and where they are in the lifecycle."""
    delegate: Delegate
    preferences: List[Preference]
    payment_code: str
    sequence: int
    status: DelegateStatus = DelegateStatus.PENDING
    allocation: Optional[Allocation] = None
    registered_at: datetime = field(default_factory=datetime.now)

    @property
    def delegate_id(self) -> str:
        return self.delegate.delegate_id
