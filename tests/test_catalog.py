"""Tests for the tier catalog."""

import pytest

from allotment.catalog import DEFAULT_CATALOG, DEFAULT_TIERS, TierCatalog
from allotment.entities import PortfolioKey
from allotment.errors import CatalogError


class TestDefaultCatalog:
    def test_each_portfolio_belongs_to_exactly_one_tier(self):
        seen = {}
        for entry in DEFAULT_CATALOG:
            pair = (entry.key.committee, entry.key.subgroup, entry.key.name)
            assert pair not in seen, f"{pair} in {seen.get(pair)} and {entry.tier.name}"
            seen[pair] = entry.tier.name
        assert len(seen) == len(DEFAULT_CATALOG)

    def test_lookup_returns_the_declared_tier_for_every_entry(self):
        for entry in DEFAULT_CATALOG:
            found = DEFAULT_CATALOG.find(entry.key.committee, entry.key.name, entry.key.subgroup)
            assert found.tier.name == entry.tier.name

    def test_membership_is_committee_qualified(self):
        # "India" is tier1 in UNGA but tier2 in UNSC
        assert DEFAULT_CATALOG.tier_for("UNGA", "India").name == "tier1"
        assert DEFAULT_CATALOG.tier_for("UNSC", "India").name == "tier2"

    def test_unlisted_portfolio_defaults_to_tier5(self):
        assert DEFAULT_CATALOG.find("UNGA", "Nepal") is None
        assert DEFAULT_CATALOG.tier_for("UNGA", "Nepal").name == "tier5"
        assert DEFAULT_CATALOG.tier_for("DISEC", "India").name == "tier5"

    def test_subgroup_seats_use_committee_wide_entries(self):
        tier = DEFAULT_CATALOG.tier_for("MOM", "Harry Potter - Head Auror", subgroup="auror")
        assert tier.name == "tier1"

    def test_unlisted_portfolios_sort_after_catalogued_ones(self):
        listed = DEFAULT_CATALOG.declaration_index("UNSC", "United States (P5)")
        assert listed == 0
        assert DEFAULT_CATALOG.declaration_index("UNGA", "Nepal") == len(DEFAULT_CATALOG)


class TestTierCatalogConstruction:
    def test_duplicate_across_tiers_is_rejected(self):
        with pytest.raises(CatalogError):
            TierCatalog.from_mapping({
                "tier1": {"UNGA": ["India"]},
                "tier2": {"UNGA": ["India"]},
            })

    def test_committee_wide_entry_conflicts_with_subgroup_entry(self):
        with pytest.raises(CatalogError):
            TierCatalog.from_mapping({
                "tier1": {"MOM": ["Harry Potter"]},
                "tier3": {"MOM": {"auror": ["Harry Potter"]}},
            })

    def test_same_name_in_different_subgroups_is_allowed(self):
        catalog = TierCatalog.from_mapping({
            "tier2": {"AIPPM": {"bjp": ["Party President"]}},
            "tier4": {"AIPPM": {"inc": ["Party President"]}},
        })

        assert catalog.tier_for("AIPPM", "Party President", "bjp").name == "tier2"
        assert catalog.tier_for("AIPPM", "Party President", "inc").name == "tier4"
        # Without a subgroup the most prestigious match is reported
        assert catalog.tier_for("AIPPM", "Party President").name == "tier2"

    def test_unknown_tier_is_rejected(self):
        with pytest.raises(CatalogError):
            TierCatalog(DEFAULT_TIERS, [("tier9", PortfolioKey("UNGA", None, "India"))])

    def test_explicit_tier6_entries(self):
        catalog = TierCatalog.from_mapping({"tier6": {"UNGA": ["Tuvalu"]}})
        assert catalog.tier_for("UNGA", "Tuvalu").name == "tier6"
        assert catalog.tier_for("UNGA", "Fiji").name == "tier5"
