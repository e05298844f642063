"""
Portfolio inventory: reading and writing the conference matrix.

The matrix is the ``portfolios.json`` document the registration site serves::

    {"UNGA": [{"name": "India", "status": "Allotted", "delegate": "A. Rao"}, ...],
     "MOM":  {"auror": [{"name": "Harry Potter - Head Auror", "status": "Available"}]}}

Committees map to a list of seats, or (MOM, AIPPM) to subgroup -> list.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from bs4 import BeautifulSoup

from allotment.capacity import CapacityTracker
from allotment.catalog import DEFAULT_CATALOG, TierCatalog
from allotment.config import SUBGROUP_COMMITTEES
from allotment.entities import ClaimState, PortfolioKey

logger = logging.getLogger(__name__)

# tbody ids on the public matrix page that belong to a subgroup table
MOM_DEPARTMENTS = ("auror", "mysteries", "law", "games", "wizengamot")
AIPPM_PARTIES = ("bjp", "inc", "aap", "tmc", "dmk", "sp", "bsp", "ncp", "cpi", "tdp")

# Person -> department / party, for portfolios catalogued without one
SUBGROUP_MEMBERS = {
    "MOM": {
        "Harry Potter": "auror", "Kingsley Shacklebolt": "auror", "Nymphadora Tonks": "auror",
        "Ron Weasley": "auror", "Gawain Robards": "auror",
        "Albus Dumbledore": "wizengamot", "Cornelius Fudge": "wizengamot", "Percy Weasley": "wizengamot",
        "Saul Croaker": "mysteries",
        "Amelia Bones": "law", "Arthur Weasley": "law",
        "Ludovic Bagman": "games",
    },
    "AIPPM": {
        "Narendra Modi": "bjp", "Amit Shah": "bjp", "Rajnath Singh": "bjp",
        "Rahul Gandhi": "inc", "Mallikarjun Kharge": "inc", "Shashi Tharoor": "inc",
        "Arvind Kejriwal": "aap", "Bhagwant Mann": "aap",
        "Mamata Banerjee": "tmc", "M.K. Stalin": "dmk", "Akhilesh Yadav": "sp",
        "Mayawati": "bsp", "Sharad Pawar": "ncp",
    },
}
FALLBACK_SUBGROUPS = {"MOM": "ministry", "AIPPM": "independent"}

# Matrix key for the subgroup-less seats of a committee that also has subgroups
UNGROUPED = ""

Matrix = Dict[str, Union[List[Dict[str, Any]], Dict[str, List[Dict[str, Any]]]]]


def parse_status(value: Optional[str]) -> ClaimState:
    """Map a matrix status ("Allotted", "Confirmed", "Available", ...) to a claim state."""
    text = (value or "").strip().lower()
    if text.startswith("confirmed"):
        return ClaimState.CONFIRMED
    if text.startswith("allotted") or text.startswith("occupied"):
        return ClaimState.ALLOTTED
    return ClaimState.OPEN


def iter_matrix(matrix: Matrix) -> Iterable[Tuple[PortfolioKey, Dict[str, Any]]]:
    for committee, seats in matrix.items():
        if isinstance(seats, Mapping):
            for subgroup, rows in seats.items():
                for row in rows:
                    yield PortfolioKey(committee, subgroup or None, row["name"]), row
        else:
            for row in seats:
                yield PortfolioKey(committee, None, row["name"]), row


def tracker_from_matrix(matrix: Matrix, catalog: TierCatalog = DEFAULT_CATALOG) -> CapacityTracker:
    """
    Build a CapacityTracker from a matrix, restoring existing claims.

    Claimed rows only carry the delegate's name, which then doubles as the
    claimant id.
    """
    rows = list(iter_matrix(matrix))
    tracker = CapacityTracker(key for key, _ in rows)
    restored = 0
    for key, row in rows:
        state = parse_status(row.get("status"))
        if state == ClaimState.OPEN:
            continue
        delegate = row.get("delegate") or f"unknown:{key}"
        tracker.restore(key, state, delegate_id=row.get("delegateId") or delegate,
                        delegate_name=delegate,
                        tier=catalog.tier_for(key.committee, key.name, key.subgroup).name)
        restored += 1
    logger.info("Loaded %d portfolios (%d already claimed)", len(rows), restored)
    return tracker


def load_inventory(path: Union[str, Path], catalog: TierCatalog = DEFAULT_CATALOG) -> CapacityTracker:
    with open(path, "r") as f:
        matrix = json.load(f)
    return tracker_from_matrix(matrix, catalog)


def dump_matrix(tracker: CapacityTracker) -> Matrix:
    """
    Current claim state in the matrix shape, seats in inventory order.

    Subgroup-less seats of a committee that also has subgroup seats are
    written under the ``UNGROUPED`` key.
    """
    slots = tracker.slots()
    grouped = {slot.key.committee for slot in slots if slot.key.subgroup is not None}
    matrix: Matrix = {}
    for slot in slots:
        row: Dict[str, Any] = {
            "name": slot.key.name,
            "status": "Available" if slot.is_open else slot.state.value,
        }
        if not slot.is_open:
            row["delegate"] = slot.delegate_name
            row["delegateId"] = slot.delegate_id
            if slot.score is not None:
                row["allocationScore"] = slot.score
        if slot.key.committee in grouped:
            subgroup = slot.key.subgroup or UNGROUPED
            matrix.setdefault(slot.key.committee, {}).setdefault(subgroup, []).append(row)
        else:
            matrix.setdefault(slot.key.committee, []).append(row)
    return matrix


def save_inventory(tracker: CapacityTracker, path: Union[str, Path]) -> None:
    with open(path, "w") as f:
        json.dump(dump_matrix(tracker), f, indent=2)


def subgroup_for(committee: str, portfolio: str) -> Optional[str]:
    """
    Department or party of a MOM / AIPPM portfolio, matched on the person's name.

    Returns None for committees without subgroups.
    """
    if committee not in SUBGROUP_COMMITTEES:
        return None
    for person, subgroup in SUBGROUP_MEMBERS.get(committee, {}).items():
        if person in portfolio:
            return subgroup
    return FALLBACK_SUBGROUPS.get(committee)


def inventory_from_catalog(catalog: TierCatalog = DEFAULT_CATALOG,
                           extra: Optional[Iterable[PortfolioKey]] = None) -> List[PortfolioKey]:
    """
    Seat list covering every catalogued portfolio plus extra (tier5/6) seats.

    Committee-wide MOM / AIPPM entries are seated under their department or
    party, so delegates naming one can claim them.
    """
    keys: List[PortfolioKey] = []
    seen = set()
    for key in [entry.key for entry in catalog] + list(extra or []):
        if key.subgroup is None and key.committee in SUBGROUP_COMMITTEES:
            key = key._replace(subgroup=subgroup_for(key.committee, key.name))
        if key not in seen:
            keys.append(key)
            seen.add(key)
    return keys


def _subgroup_tables() -> Dict[str, Tuple[str, str]]:
    tables = {dept: ("MOM", dept) for dept in MOM_DEPARTMENTS}
    tables.update({party: ("AIPPM", party) for party in AIPPM_PARTIES})
    return tables


def parse_matrix_html(html: str) -> Matrix:
    """
    Parse the rendered portfolio matrix page into the matrix shape.

    Every ``<tbody id="<name>-tbody">`` is one table. Department and party
    tables are folded under MOM / AIPPM; any other table is a committee.
    Rows are ``serial | name | [detail] | status``, where the status cell
    reads ``"Allotted - <delegate>"`` for claimed seats.
    """
    soup = BeautifulSoup(html, "html.parser")
    subgroup_tables = _subgroup_tables()
    matrix: Matrix = {}

    for tbody in soup.find_all("tbody"):
        table_id = tbody.get("id", "")
        if not table_id.endswith("-tbody"):
            continue
        prefix = table_id[: -len("-tbody")]

        rows = []
        for tr in tbody.find_all("tr"):
            cells = tr.find_all("td")
            if len(cells) < 3:
                continue
            name = cells[1].get_text(strip=True)
            status_text = cells[-1].get_text(strip=True)
            status, _, delegate = status_text.partition(" - ")
            row: Dict[str, Any] = {"name": name, "status": status.strip() or "Available"}
            if delegate.strip():
                row["delegate"] = delegate.strip()
            rows.append(row)

        if prefix in subgroup_tables:
            committee, subgroup = subgroup_tables[prefix]
            matrix.setdefault(committee, {})[subgroup] = rows
        else:
            matrix[prefix.upper()] = rows

    return matrix
