"""
Static tier catalog.

Maps every ``(committee, subgroup, portfolio)`` entry to one of six prestige
tiers. Each tier carries its base points and the minimum experience /
Best Delegate thresholds a delegate must meet to be eligible for it.

The catalog is built once at import time (``DEFAULT_CATALOG``) and is read-only
afterwards.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from allotment.entities import PortfolioKey
from allotment.errors import CatalogError


@dataclass(frozen=True)
class TierSpec:
    """
    One prestige tier.

    Attributes:
        name (str): ``tier1`` (most prestigious) .. ``tier6``.
        points (int): Base points awarded for a portfolio of this tier.
        min_experience (int): Minimum experience-band lower bound.
        min_best_delegate (int): Minimum number of Best Delegate awards.
    """
    name: str
    points: int
    min_experience: int
    min_best_delegate: int

    @property
    def rank(self) -> int:
        return int(self.name[len("tier"):])


DEFAULT_TIERS: Tuple[TierSpec, ...] = (
    TierSpec("tier1", points=100, min_experience=10, min_best_delegate=5),
    TierSpec("tier2", points=75, min_experience=7, min_best_delegate=3),
    TierSpec("tier3", points=50, min_experience=5, min_best_delegate=2),
    TierSpec("tier4", points=30, min_experience=3, min_best_delegate=1),
    TierSpec("tier5", points=15, min_experience=1, min_best_delegate=0),
    TierSpec("tier6", points=10, min_experience=0, min_best_delegate=0),
)

# Tier a portfolio falls into when the catalog has no entry for it.
DEFAULT_TIER_NAME = "tier5"


@dataclass(frozen=True)
class CatalogEntry:
    key: PortfolioKey
    tier: TierSpec
    order: int


class TierCatalog:
    """
    Read-only lookup from portfolio to tier.

    Entries registered without a subgroup apply to every subgroup of their
    committee (the MOM/AIPPM lists name people, not departments or parties).
    """

    def __init__(self, tiers: Iterable[TierSpec], entries: Iterable[Tuple[str, PortfolioKey]]):
        """
        Args:
            tiers: Tier definitions, most prestigious first.
            entries: ``(tier_name, PortfolioKey)`` pairs in declaration order.

        Raises:
            CatalogError: Unknown tier name, or a portfolio listed twice.
        """
        self._tiers: Dict[str, TierSpec] = {}
        for tier in tiers:
            self._tiers[tier.name] = tier
        if DEFAULT_TIER_NAME not in self._tiers:
            raise CatalogError(f"Catalog must define {DEFAULT_TIER_NAME}")

        self._entries: List[CatalogEntry] = []
        self._exact: Dict[PortfolioKey, CatalogEntry] = {}
        # (committee, name) -> entries across subgroups
        self._by_name: Dict[Tuple[str, str], List[CatalogEntry]] = {}

        for order, (tier_name, key) in enumerate(entries):
            tier = self._tiers.get(tier_name)
            if tier is None:
                raise CatalogError(f"Unknown tier {tier_name!r} for {key}")
            entry = CatalogEntry(key=key, tier=tier, order=order)
            for other in self._by_name.get((key.committee, key.name), []):
                if other.key.subgroup is None or key.subgroup is None or other.key.subgroup == key.subgroup:
                    raise CatalogError(
                        f"{key} is listed under both {other.tier.name} and {tier.name}"
                    )
            self._entries.append(entry)
            self._exact[key] = entry
            self._by_name.setdefault((key.committee, key.name), []).append(entry)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, object]],
                     tiers: Iterable[TierSpec] = DEFAULT_TIERS) -> "TierCatalog":
        """
        Build a catalog from the nested literal form::

            {"tier1": {"UNSC": ["China (P5)", ...],
                       "MOM": {"Aurors": ["Harry Potter - Head Auror"]}}}

        A committee maps either to a list of names, or to a dict of
        subgroup -> list of names.
        """
        tiers = list(tiers)
        entries: List[Tuple[str, PortfolioKey]] = []
        # Walk tiers in their prestige order so declaration order follows it.
        ordered_names = [t.name for t in tiers] + [n for n in data if n not in {t.name for t in tiers}]
        for tier_name in ordered_names:
            for committee, portfolios in data.get(tier_name, {}).items():
                if isinstance(portfolios, Mapping):
                    for subgroup, names in portfolios.items():
                        entries.extend((tier_name, PortfolioKey(committee, subgroup, n)) for n in names)
                else:
                    entries.extend((tier_name, PortfolioKey(committee, None, n)) for n in portfolios)
        return cls(tiers, entries)

    @property
    def tiers(self) -> List[TierSpec]:
        return list(self._tiers.values())

    @property
    def default_tier(self) -> TierSpec:
        return self._tiers[DEFAULT_TIER_NAME]

    def tier(self, name: str) -> TierSpec:
        return self._tiers[name]

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def committees(self) -> List[str]:
        seen: Dict[str, None] = {}
        for entry in self._entries:
            seen.setdefault(entry.key.committee, None)
        return list(seen)

    def find(self, committee: str, portfolio: str,
             subgroup: Optional[str] = None) -> Optional[CatalogEntry]:
        """
        Return the catalog entry for a portfolio, or None when it is not listed.

        Tiers are mutually exclusive by construction, so at most one entry
        can match; the search order only matters for the subgroup fallbacks.
        """
        entry = self._exact.get(PortfolioKey(committee, subgroup, portfolio))
        if entry is not None:
            return entry
        if subgroup is not None:
            return self._exact.get(PortfolioKey(committee, None, portfolio))
        candidates = self._by_name.get((committee, portfolio))
        if candidates:
            return min(candidates, key=lambda e: (e.tier.rank, e.order))
        return None

    def tier_for(self, committee: str, portfolio: str,
                 subgroup: Optional[str] = None) -> TierSpec:
        """Tier of a portfolio, falling back to the default tier for unlisted ones."""
        entry = self.find(committee, portfolio, subgroup)
        return entry.tier if entry is not None else self.default_tier

    def declaration_index(self, committee: str, portfolio: str,
                          subgroup: Optional[str] = None) -> int:
        """Position of the portfolio in the catalog; unlisted portfolios sort last."""
        entry = self.find(committee, portfolio, subgroup)
        return entry.order if entry is not None else len(self._entries)


DEFAULT_TIER_PORTFOLIOS = {
    # Tier 1: Most prestigious - 10+ MUNs, 5+ Best Delegates
    "tier1": {
        "UNSC": ["United States (P5)", "China (P5)", "Russia (P5)", "United Kingdom (P5)", "France (P5)"],
        "UNGA": ["United States", "China", "Russia", "United Kingdom", "India"],
        "UNHRC": ["United States", "China", "United Kingdom", "Germany", "France"],
        "MOM": ["Albus Dumbledore - Chief Warlock", "Harry Potter - Head Auror",
                "Saul Croaker - Head Unspeakable"],
        "AIPPM": ["Narendra Modi - Prime Minister", "Rahul Gandhi - Party Leader",
                  "Arvind Kejriwal - Party Convener"],
    },
    # Tier 2: 7+ MUNs, 3+ Best Delegates
    "tier2": {
        "UNSC": ["Japan", "Germany", "India", "Brazil", "South Africa"],
        "UNGA": ["Germany", "Japan", "France", "Brazil", "Canada", "Australia", "Israel", "Saudi Arabia"],
        "UNHRC": ["Japan", "India", "Brazil", "Canada", "Australia", "Israel"],
        "UNCSW": ["Germany", "Japan", "Canada", "Australia", "India"],
        "WHO": ["United States", "China", "Germany", "United Kingdom", "Japan"],
        "MOM": ["Kingsley Shacklebolt - Senior Auror", "Amelia Bones - Department Head",
                "Cornelius Fudge - Minister"],
        "AIPPM": ["Amit Shah - Home Minister", "Mamata Banerjee - Party Chief & CM",
                  "M.K. Stalin - Chief Minister"],
    },
    # Tier 3: 5+ MUNs, 2+ Best Delegates
    "tier3": {
        "UNSC": ["Algeria", "Ecuador", "Malta", "Switzerland", "Slovenia"],
        "UNGA": ["South Korea", "Mexico", "Indonesia", "Turkey", "Argentina", "Egypt", "Nigeria", "Pakistan"],
        "UNHRC": ["Mexico", "Argentina", "South Africa", "South Korea", "Indonesia"],
        "UNCSW": ["Brazil", "Mexico", "South Africa", "Egypt", "Nigeria"],
        "WHO": ["India", "Brazil", "France", "Canada", "Australia", "South Korea"],
        "MOM": ["Nymphadora Tonks - Auror", "Ron Weasley - Auror", "Arthur Weasley - Muggle Protection"],
        "AIPPM": ["Rajnath Singh - Defence Minister", "Shashi Tharoor - MP", "Bhagwant Mann - Punjab CM"],
    },
    # Tier 4: 3+ MUNs, 1+ Best Delegate
    "tier4": {
        "UNSC": ["Guyana", "Mozambique", "Sierra Leone", "Republic of Korea"],
        "UNGA": ["Ukraine", "Poland", "Netherlands", "Belgium", "Sweden", "Norway", "Denmark", "Finland"],
        "UNHRC": ["Poland", "Netherlands", "Belgium", "Czech Republic", "Romania"],
        "UNCSW": ["Poland", "Denmark", "Belgium", "Ireland", "Spain"],
        "WHO": ["Mexico", "Italy", "Spain", "Netherlands", "Belgium", "Sweden"],
        "MOM": ["Gawain Robards - Office Head", "Ludovic Bagman - Department Head",
                "Percy Weasley - Junior Assistant"],
        "AIPPM": ["Mallikarjun Kharge - Party President", "Sharad Pawar - Party President",
                  "Akhilesh Yadav - Party President"],
    },
    # Tiers 5 and 6 have no explicit entries: every unlisted portfolio is tier5.
    "tier5": {},
    "tier6": {},
}

DEFAULT_CATALOG = TierCatalog.from_mapping(DEFAULT_TIER_PORTFOLIOS)
