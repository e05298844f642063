"""Tests for configuration assembly."""

import pytest

from allotment.allocation import BestScoreAllocation, FirstEligibleAllocation
from allotment.catalog import DEFAULT_CATALOG
from allotment.config import AllotmentConfig
from allotment.config_builder import ConfigBuilder
from allotment.strategy_registry import resolve_strategy


class TestConfigBuilder:
    def test_defaults(self):
        config = ConfigBuilder().build()

        assert isinstance(config.strategy, BestScoreAllocation)
        assert config.allotted_cap == 0.25
        assert config.confirmed_cap == 0.10
        assert config.confirmation_window_hours == 48.0
        assert config.catalog is DEFAULT_CATALOG

    def test_builders_do_not_share_state(self):
        base = ConfigBuilder()
        flat = base.with_committee_multipliers({"UNSC": 1.0})

        assert base.build().multiplier_for("UNSC") == 1.5
        assert flat.build().multiplier_for("UNSC") == 1.0
        assert flat.build().multiplier_for("MOM") == 1.4

    def test_built_configs_are_independent(self):
        builder = ConfigBuilder().with_caps(allotted=0.5)
        first = builder.build()
        first.committee_multipliers["UNGA"] = 9.0

        assert builder.build().multiplier_for("UNGA") == 1.0
        assert builder.build().allotted_cap == 0.5

    def test_strategy_by_name(self):
        config = ConfigBuilder().with_strategy("first_eligible").build()
        assert isinstance(config.strategy, FirstEligibleAllocation)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            resolve_strategy("random")

    def test_base_config_is_copied(self):
        base = AllotmentConfig(claim_retries=5)
        config = ConfigBuilder(base).with_confirmation_window(24).build()

        assert config.claim_retries == 5
        assert config.confirmation_window_hours == 24
        assert base.confirmation_window_hours == 48.0
