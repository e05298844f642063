"""
Utilities for assembling AllotmentConfig instances.
"""

from copy import deepcopy
from dataclasses import replace
from typing import Dict, Optional, Union

from allotment.allocation.base import AllocationStrategy
from allotment.catalog import TierCatalog
from allotment.config import AllotmentConfig
from allotment.strategy_registry import resolve_strategy


def _copy_config(config: AllotmentConfig) -> AllotmentConfig:
    # The catalog is read-only and shared; everything else is copied.
    catalog = config.catalog
    return replace(deepcopy(replace(config, catalog=None)), catalog=catalog)


class ConfigBuilder:
    """
    Immutable helper for constructing AllotmentConfig objects.
    """

    def __init__(self, base: Optional[AllotmentConfig] = None):
        self._config = _copy_config(base) if base is not None else AllotmentConfig()

    def clone(self) -> "ConfigBuilder":
        return ConfigBuilder(self._config)

    def _with(self, **changes) -> "ConfigBuilder":
        builder = self.clone()
        builder._config = replace(builder._config, **changes)
        return builder

    def with_strategy(self, strategy: Union[str, AllocationStrategy]) -> "ConfigBuilder":
        return self._with(strategy=resolve_strategy(strategy))

    def with_caps(self, allotted: Optional[float] = None,
                  confirmed: Optional[float] = None) -> "ConfigBuilder":
        changes = {}
        if allotted is not None:
            changes["allotted_cap"] = allotted
        if confirmed is not None:
            changes["confirmed_cap"] = confirmed
        return self._with(**changes)

    def with_committee_multipliers(self, multipliers: Dict[str, float]) -> "ConfigBuilder":
        merged = dict(self._config.committee_multipliers)
        merged.update(multipliers)
        return self._with(committee_multipliers=merged)

    def with_catalog(self, catalog: TierCatalog) -> "ConfigBuilder":
        return self._with(catalog=catalog)

    def with_confirmation_window(self, hours: float) -> "ConfigBuilder":
        return self._with(confirmation_window_hours=hours)

    def build(self) -> AllotmentConfig:
        return _copy_config(self._config)
