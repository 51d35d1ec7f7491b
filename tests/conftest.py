from datetime import datetime, timezone

import pytest

from clockboard.config.timezones import get_catalog
from clockboard.data.store import InMemoryStore
from clockboard.engine.offsets import OffsetResolver
from clockboard.engine.registry import ClockRegistry
from clockboard.engine.simulation import TimeSimulation

WINTER_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
SUMMER_NOW = datetime(2024, 7, 15, 12, 0, tzinfo=timezone.utc)


class FakeFormatter:
    """Locale formatter with canned (offset, long name, short name) per season."""

    def __init__(self, zones):
        self.zones = zones
        self.calls = []

    def _entry(self, timezone_id, instant):
        self.calls.append((timezone_id, instant))
        if timezone_id not in self.zones:
            raise KeyError(timezone_id)
        season = "summer" if 4 <= instant.month <= 10 else "winter"
        return self.zones[timezone_id][season]

    def long_offset(self, timezone_id, instant):
        return self._entry(timezone_id, instant)[0]

    def long_name(self, timezone_id, instant):
        return self._entry(timezone_id, instant)[1]

    def short_name(self, timezone_id, instant):
        return self._entry(timezone_id, instant)[2]


EASTERN = {
    "winter": ("GMT-05:00", "Eastern Standard Time", "EST"),
    "summer": ("GMT-04:00", "Eastern Daylight Time", "EDT"),
}


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def resolver():
    return OffsetResolver()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def simulation():
    return TimeSimulation(clock=lambda: WINTER_NOW)


@pytest.fixture
def registry(store, resolver, simulation):
    return ClockRegistry(store, resolver, now=simulation.current, local_timezone="America/New_York")
