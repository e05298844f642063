"""Tests for reading and writing the portfolio matrix."""

import json

import pytest

from allotment.entities import ClaimState, DelegateStatus, PortfolioKey
from allotment.capacity import CapacityTracker
from allotment.errors import AlreadyAllocatedError
from allotment.inventory import (
    UNGROUPED,
    dump_matrix,
    inventory_from_catalog,
    load_inventory,
    parse_matrix_html,
    parse_status,
    save_inventory,
    subgroup_for,
    tracker_from_matrix,
)
from allotment.catalog import DEFAULT_CATALOG

MATRIX = {
    "UNGA": [
        {"name": "India", "status": "Allotted", "delegate": "Aanya Rao"},
        {"name": "Nepal", "status": "Available"},
    ],
    "MOM": {
        "auror": [
            {"name": "Harry Potter - Head Auror", "status": "Confirmed", "delegate": "Kabir"},
            {"name": "Ron Weasley - Auror", "status": "Available"},
        ],
    },
}

MATRIX_HTML = """
<html><body>
<table>
  <tbody id="unga-tbody">
    <tr class="status-available"><td class="serial-no">1</td><td>Nepal</td><td>Available</td></tr>
    <tr class="status-occupied"><td class="serial-no">2</td><td>India</td><td>Allotted - Aanya Rao</td></tr>
  </tbody>
</table>
<table>
  <tbody id="auror-tbody">
    <tr class="status-confirmed">
      <td class="serial-no">1</td><td>Harry Potter - Head Auror</td><td>Head</td><td>Confirmed - Kabir</td>
    </tr>
  </tbody>
</table>
<table><tbody id="legend"><tr><td>x</td></tr></tbody></table>
</body></html>
"""


class TestParseStatus:
    @pytest.mark.parametrize("text,state", [
        ("Allotted", ClaimState.ALLOTTED),
        ("Confirmed", ClaimState.CONFIRMED),
        ("Available", ClaimState.OPEN),
        ("", ClaimState.OPEN),
        (None, ClaimState.OPEN),
    ])
    def test_statuses(self, text, state):
        assert parse_status(text) == state


class TestTrackerFromMatrix:
    def test_restores_claims(self):
        tracker = tracker_from_matrix(MATRIX)

        assert len(tracker) == 4
        india = tracker.slot(PortfolioKey("UNGA", None, "India"))
        assert india.state == ClaimState.ALLOTTED
        assert india.delegate_name == "Aanya Rao"
        assert india.tier == "tier1"
        assert tracker.status_of("Kabir") == DelegateStatus.CONFIRMED
        assert tracker.is_open(PortfolioKey("MOM", "auror", "Ron Weasley - Auror"))

    def test_same_delegate_on_two_rows_is_rejected(self):
        matrix = {"UNGA": [
            {"name": "India", "status": "Allotted", "delegate": "Aanya"},
            {"name": "Nepal", "status": "Allotted", "delegate": "Aanya"},
        ]}
        with pytest.raises(AlreadyAllocatedError):
            tracker_from_matrix(matrix)

    def test_dump_keeps_the_matrix_shape(self):
        tracker = tracker_from_matrix(MATRIX)
        tracker.try_claim(PortfolioKey("UNGA", None, "Nepal"), "MUN2025-3", "Meera", score=18)

        matrix = dump_matrix(tracker)

        assert [row["name"] for row in matrix["UNGA"]] == ["India", "Nepal"]
        assert matrix["UNGA"][1] == {
            "name": "Nepal", "status": "Allotted", "delegate": "Meera",
            "delegateId": "MUN2025-3", "allocationScore": 18,
        }
        assert matrix["MOM"]["auror"][1] == {"name": "Ron Weasley - Auror", "status": "Available"}

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "portfolios.json"
        save_inventory(tracker_from_matrix(MATRIX), path)

        with open(path) as f:
            assert json.load(f)["MOM"]["auror"][0]["status"] == "Confirmed"
        tracker = load_inventory(path)
        assert tracker.status_of("Kabir") == DelegateStatus.CONFIRMED

    def test_dump_of_the_full_inventory(self, tracker):
        matrix = dump_matrix(tracker)

        assert isinstance(matrix["UNGA"], list)
        assert {"name": "Harry Potter - Head Auror", "status": "Available"} in matrix["MOM"]["auror"]
        assert {"name": "Narendra Modi - Prime Minister", "status": "Available"} in matrix["AIPPM"]["bjp"]
        reloaded = tracker_from_matrix(matrix)
        assert {s.key for s in reloaded.slots()} == {s.key for s in tracker.slots()}

    def test_dump_of_a_committee_with_and_without_subgroups(self):
        minister = PortfolioKey("MOM", None, "Minister for Magic")
        auror = PortfolioKey("MOM", "auror", "Harry Potter - Head Auror")
        tracker = CapacityTracker([minister, auror])
        tracker.try_claim(minister, "MUN2025-1", "Meera")

        matrix = dump_matrix(tracker)

        assert matrix["MOM"][UNGROUPED][0]["delegate"] == "Meera"
        assert matrix["MOM"]["auror"] == [{"name": "Harry Potter - Head Auror", "status": "Available"}]
        reloaded = tracker_from_matrix(matrix)
        assert reloaded.slot(minister).state == ClaimState.ALLOTTED
        assert reloaded.is_open(auror)


class TestInventoryFromCatalog:
    def test_covers_catalog_and_extras(self):
        extra = [PortfolioKey("UNGA", None, "Nepal"), PortfolioKey("UNGA", None, "India")]

        keys = inventory_from_catalog(DEFAULT_CATALOG, extra)

        assert len(keys) == len(DEFAULT_CATALOG) + 1
        assert keys[-1] == PortfolioKey("UNGA", None, "Nepal")

    def test_subgroup_committees_are_seated_by_department_and_party(self):
        keys = inventory_from_catalog()

        assert PortfolioKey("MOM", "wizengamot", "Albus Dumbledore - Chief Warlock") in keys
        assert PortfolioKey("AIPPM", "inc", "Rahul Gandhi - Party Leader") in keys
        assert not [k for k in keys if k.committee in ("MOM", "AIPPM") and k.subgroup is None]

    def test_catalogued_extras_are_not_repeated(self):
        keys = inventory_from_catalog(extra=[PortfolioKey("MOM", "auror", "Harry Potter - Head Auror")])
        assert len(keys) == len(DEFAULT_CATALOG)

    @pytest.mark.parametrize("committee,portfolio,subgroup", [
        ("MOM", "Amelia Bones - Department Head", "law"),
        ("MOM", "Luna Lovegood - Intern", "ministry"),
        ("AIPPM", "Bhagwant Mann - Punjab CM", "aap"),
        ("AIPPM", "Asaduddin Owaisi - MP", "independent"),
        ("UNGA", "India", None),
    ])
    def test_subgroup_for(self, committee, portfolio, subgroup):
        assert subgroup_for(committee, portfolio) == subgroup


class TestParseMatrixHtml:
    def test_parses_committee_and_subgroup_tables(self):
        matrix = parse_matrix_html(MATRIX_HTML)

        assert matrix["UNGA"] == [
            {"name": "Nepal", "status": "Available"},
            {"name": "India", "status": "Allotted", "delegate": "Aanya Rao"},
        ]
        assert matrix["MOM"]["auror"] == [
            {"name": "Harry Potter - Head Auror", "status": "Confirmed", "delegate": "Kabir"},
        ]
        assert "LEGEND" not in matrix

    def test_parsed_matrix_loads_into_a_tracker(self):
        tracker = tracker_from_matrix(parse_matrix_html(MATRIX_HTML))

        assert tracker.status_of("Aanya Rao") == DelegateStatus.ALLOTTED
        assert tracker.is_open(PortfolioKey("UNGA", None, "Nepal"))
