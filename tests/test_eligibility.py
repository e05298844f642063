"""Tests for tier membership and eligibility checks."""

from allotment.config_builder import ConfigBuilder
from allotment.eligibility import check_eligibility
from tests.factories import make_delegate


class TestCheckEligibility:
    def test_experienced_delegate_is_eligible_for_tier2(self):
        delegate = make_delegate(band="11-20", best=4)

        result = check_eligibility("Japan", "UNSC", delegate)

        assert result.tier == "tier2"
        assert result.is_eligible is True
        assert result.required_experience == 7
        assert result.required_best_delegates == 3
        assert result.user_experience == 11
        assert result.user_best_delegates == 4
        assert result.user_points == 70
        assert result.multiplier == 1.5

    def test_beginner_is_not_eligible_for_p5(self):
        result = check_eligibility("United States (P5)", "UNSC", make_delegate(band="0"))

        assert result.tier == "tier1"
        assert result.is_eligible is False
        assert "10+ MUNs" in result.reason
        assert "5+ Best Delegates" in result.reason

    def test_both_thresholds_must_be_met(self):
        # Plenty of conferences but not enough Best Delegate awards for tier1
        result = check_eligibility("India", "UNGA", make_delegate(band="30+", best=4))
        assert result.is_eligible is False

    def test_unlisted_portfolio_falls_back_to_tier5(self):
        result = check_eligibility("Nepal", "UNGA", make_delegate(band="1"))

        assert result.tier == "tier5"
        assert result.points == 15
        assert result.is_eligible is True
        assert result.required_experience == 1
        assert result.required_best_delegates == 0

    def test_tier5_needs_at_least_one_conference(self):
        result = check_eligibility("Nepal", "UNGA", make_delegate(band="0"))
        assert result.is_eligible is False

    def test_unknown_committee_never_raises(self):
        result = check_eligibility("Atlantis", "NOT-A-COMMITTEE", make_delegate(band="2"))

        assert result.tier == "tier5"
        assert result.multiplier == 1.0

    def test_malformed_band_counts_as_no_experience(self):
        result = check_eligibility("Nepal", "UNGA", make_delegate(band="a few"))

        assert result.user_experience == 0
        assert result.is_eligible is False

    def test_subgroup_seat(self):
        delegate = make_delegate(band="6-10", best=2)

        result = check_eligibility("Ron Weasley - Auror", "MOM", delegate, subgroup="auror")

        assert result.tier == "tier3"
        assert result.is_eligible is True
        assert result.multiplier == 1.4

    def test_custom_multipliers(self):
        config = ConfigBuilder().with_committee_multipliers({"UNGA": 1.3}).build()
        result = check_eligibility("India", "UNGA", make_delegate(), config=config)
        assert result.multiplier == 1.3
