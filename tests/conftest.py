"""Pytest configuration and fixtures."""

import pytest

from allotment.capacity import CapacityTracker
from allotment.config_builder import ConfigBuilder
from allotment.inventory import inventory_from_catalog
from tests.factories import EXTRA_SEATS, T0, make_delegate


@pytest.fixture
def seats():
    """Every catalogued portfolio plus a few uncatalogued and subgroup seats."""
    return inventory_from_catalog(extra=EXTRA_SEATS)


@pytest.fixture
def tracker(seats):
    return CapacityTracker(seats, clock=lambda: T0)


@pytest.fixture
def veteran():
    """Meets every tier threshold."""
    return make_delegate(band="30+", best=6, special=2, delegate_id="veteran")


@pytest.fixture
def newcomer():
    """No experience: fails even the default tier's 1+ MUN requirement."""
    return make_delegate(band="0", delegate_id="newcomer")


@pytest.fixture
def uncapped_config():
    return ConfigBuilder().with_caps(allotted=1.0).build()
