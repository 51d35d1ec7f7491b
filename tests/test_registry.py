from datetime import datetime, timezone

import pytest

from clockboard.data.store import CLOCKS_KEY, InMemoryStore
from clockboard.engine.errors import ProtectedClockError
from clockboard.engine.registry import AddResult, ClockRegistry, TrackedClock

from conftest import SUMMER_NOW, WINTER_NOW


def _offsets(registry, resolver, instant=WINTER_NOW):
    return [resolver.resolve(clock.timezone_id, instant).offset_minutes for clock in registry.clocks]


def _entries(*zones, local=None):
    return [{"timezone": zone, "isLocal": zone == local} for zone in zones]


@pytest.mark.parametrize("persisted", [None, []])
def test_empty_state_yields_default_pair(registry, store, persisted):
    clocks = registry.load(persisted)

    assert set(clocks) == {TrackedClock("America/New_York", is_local=True), TrackedClock("Etc/GMT+6")}
    assert len(clocks) == 2
    assert store.get(CLOCKS_KEY) == [clock.to_dict() for clock in clocks]


def test_duplicates_are_removed_keeping_first_seen(registry):
    registry.load(
        [
            {"timezone": "Europe/Berlin", "isLocal": False},
            {"timezone": "America/New_York", "isLocal": True},
            {"timezone": "Europe/Paris", "isLocal": False},
            {"timezone": "Europe/Berlin", "isLocal": True},
        ]
    )

    assert registry.timezone_ids == ["America/New_York", "Europe/Berlin", "Europe/Paris"]
    assert registry.clocks[1].is_local is False


def test_tie_order_follows_persisted_order(registry):
    registry.load(_entries("America/New_York", "Europe/Paris", "Europe/Berlin", local="America/New_York"))
    assert registry.timezone_ids[-2:] == ["Europe/Paris", "Europe/Berlin"]

    registry.load(_entries("America/New_York", "Europe/Berlin", "Europe/Paris", local="America/New_York"))
    assert registry.timezone_ids[-2:] == ["Europe/Berlin", "Europe/Paris"]


def test_missing_local_clock_is_injected(registry):
    clocks = registry.load(_entries("Asia/Tokyo"))

    assert [clock.timezone_id for clock in clocks] == ["America/New_York", "Asia/Tokyo"]
    assert clocks[0].is_local is True
    assert "Etc/GMT+6" not in registry


def test_host_zone_tracked_as_ordinary_clock_becomes_local(registry):
    clocks = registry.load(_entries("America/New_York", "Asia/Tokyo"))

    assert [clock.timezone_id for clock in clocks] == ["America/New_York", "Asia/Tokyo"]
    assert clocks[0].is_local is True


def test_only_first_local_clock_stays_local(registry):
    registry.load(
        [
            {"timezone": "Asia/Tokyo", "isLocal": True},
            {"timezone": "Europe/London", "isLocal": True},
        ]
    )

    assert [clock.is_local for clock in registry.clocks] == [False, True]
    assert sum(clock.is_local for clock in registry.clocks) == 1


def test_invalid_entries_are_ignored(registry):
    clocks = registry.load(["Asia/Tokyo", {"timezone": ""}, {"isLocal": True}, None])

    assert len(clocks) == 2
    assert "Etc/GMT+6" in registry


def test_oversized_list_is_trimmed_keeping_local(resolver, simulation):
    store = InMemoryStore()
    registry = ClockRegistry(store, resolver, now=simulation.current, local_timezone="UTC", max_clocks=3)
    registry.load(_entries("Asia/Tokyo", "Europe/London", "Asia/Dubai", "UTC", local="UTC"))

    assert len(registry) == 3
    assert "UTC" in registry
    assert "Asia/Dubai" not in registry


def test_restore_reads_persisted_clocks(resolver, simulation):
    store = InMemoryStore({CLOCKS_KEY: _entries("Asia/Tokyo", "America/New_York", local="America/New_York")})
    registry = ClockRegistry(store, resolver, now=simulation.current, local_timezone="America/New_York")

    registry.restore()

    assert registry.timezone_ids == ["America/New_York", "Asia/Tokyo"]


def test_add_appends_sorts_and_persists(registry, store, resolver):
    registry.load(None)

    assert registry.add("Asia/Tokyo") is AddResult.ADDED
    assert registry.add("Pacific/Honolulu") is AddResult.ADDED

    assert registry.timezone_ids == ["Pacific/Honolulu", "Etc/GMT+6", "America/New_York", "Asia/Tokyo"]
    assert [entry["timezone"] for entry in store.get(CLOCKS_KEY)] == registry.timezone_ids
    offsets = _offsets(registry, resolver)
    assert all(a <= b for a, b in zip(offsets, offsets[1:]))


def test_add_rejects_already_tracked(registry, store):
    registry.load(None)
    before = store.get(CLOCKS_KEY)

    assert registry.add("Etc/GMT+6") is AddResult.ALREADY_TRACKED
    assert store.get(CLOCKS_KEY) == before


def test_add_rejects_ninth_clock(registry):
    registry.load(None)
    for zone in ("UTC", "Asia/Tokyo", "Europe/Paris", "Asia/Dubai", "Asia/Kolkata", "Pacific/Auckland"):
        assert registry.add(zone) is AddResult.ADDED
    before = registry.clocks

    assert registry.add("Europe/London") is AddResult.LIMIT_REACHED
    assert registry.clocks == before
    assert len(registry) == 8


def test_limit_is_checked_before_duplicates(registry):
    registry.load(None)
    for zone in ("UTC", "Asia/Tokyo", "Europe/Paris", "Asia/Dubai", "Asia/Kolkata", "Pacific/Auckland"):
        registry.add(zone)

    assert registry.add("Asia/Tokyo") is AddResult.LIMIT_REACHED


def test_remove_then_add_restores_membership(registry, resolver):
    registry.load(_entries("America/New_York", "Etc/GMT+6", "Asia/Tokyo", "Europe/London", local="America/New_York"))
    before = set(registry.timezone_ids)

    removed = registry.remove(registry.timezone_ids.index("Europe/London"))
    assert removed.timezone_id == "Europe/London"
    assert "Europe/London" not in registry

    registry.add("Europe/London")
    assert set(registry.timezone_ids) == before
    offsets = _offsets(registry, resolver)
    assert offsets == sorted(offsets)


def test_remove_guards_local_clock_and_bounds(registry):
    registry.load(None)
    local_index = next(index for index, clock in enumerate(registry.clocks) if clock.is_local)

    with pytest.raises(ProtectedClockError):
        registry.remove(local_index)
    with pytest.raises(IndexError):
        registry.remove(5)
    with pytest.raises(IndexError):
        registry.remove(-1)
    assert len(registry) == 2


def test_fixed_reference_clock_is_derived(registry):
    registry.load(None)
    fixed = [clock for clock in registry.clocks if clock.is_fixed_reference]

    assert [clock.timezone_id for clock in fixed] == ["Etc/GMT+6"]


def test_resort_follows_dst_changes(registry, store):
    # Halifax and Santiago swap order between January and July
    registry.load(_entries("America/New_York", "America/Santiago", "America/Halifax", local="America/New_York"))
    assert registry.timezone_ids == ["America/New_York", "America/Halifax", "America/Santiago"]

    assert registry.resort(WINTER_NOW) is False
    assert registry.resort(SUMMER_NOW) is True

    assert registry.timezone_ids == ["America/New_York", "America/Santiago", "America/Halifax"]
    assert [entry["timezone"] for entry in store.get(CLOCKS_KEY)] == registry.timezone_ids


def test_mutations_use_injected_now(store, resolver):
    now = [WINTER_NOW]
    registry = ClockRegistry(store, resolver, now=lambda: now[0], local_timezone="America/Halifax")
    registry.load(_entries("America/Halifax", "America/Santiago", local="America/Halifax"))
    assert registry.timezone_ids == ["America/Halifax", "America/Santiago"]

    now[0] = datetime(2024, 7, 1, tzinfo=timezone.utc)
    registry.add("UTC")

    assert registry.timezone_ids == ["America/Santiago", "America/Halifax", "UTC"]
