"""Ordered, deduplicated set of tracked clocks."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional

from clockboard.config.settings import MAX_TRACKED_CLOCKS
from clockboard.config.timezones import FIXED_REFERENCE_TIMEZONE
from clockboard.data.store import CLOCKS_KEY, KeyValueStore
from clockboard.engine.errors import ProtectedClockError
from clockboard.engine.offsets import OffsetResolver

logger = logging.getLogger("clockboard.registry")


@dataclass(frozen=True)
class TrackedClock:
    timezone_id: str
    is_local: bool = False

    @property
    def is_fixed_reference(self) -> bool:
        return self.timezone_id == FIXED_REFERENCE_TIMEZONE

    def to_dict(self) -> dict[str, Any]:
        return {"timezone": self.timezone_id, "isLocal": self.is_local}


class AddResult(str, enum.Enum):
    ADDED = "added"
    LIMIT_REACHED = "limit-reached"
    ALREADY_TRACKED = "already-tracked"


def _parse_entries(persisted: Iterable[Any]) -> List[TrackedClock]:
    clocks: List[TrackedClock] = []
    for entry in persisted:
        if not isinstance(entry, dict):
            continue
        timezone_id = entry.get("timezone")
        if not isinstance(timezone_id, str) or not timezone_id:
            continue
        clocks.append(TrackedClock(timezone_id=timezone_id, is_local=bool(entry.get("isLocal"))))
    return clocks


class ClockRegistry:
    """Owns the tracked clocks; every mutation re-sorts by offset and persists.

    Invariants: unique zone ids, exactly one local clock after ``load``, at
    most ``max_clocks`` members.
    """

    def __init__(
        self,
        store: KeyValueStore,
        resolver: OffsetResolver,
        now: Callable[[], datetime],
        local_timezone: str,
        max_clocks: int = MAX_TRACKED_CLOCKS,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._now = now
        self.local_timezone = local_timezone
        self.max_clocks = max_clocks
        self._clocks: List[TrackedClock] = []

    @property
    def clocks(self) -> tuple[TrackedClock, ...]:
        return tuple(self._clocks)

    @property
    def timezone_ids(self) -> List[str]:
        return [clock.timezone_id for clock in self._clocks]

    def __len__(self) -> int:
        return len(self._clocks)

    def __contains__(self, timezone_id: object) -> bool:
        return any(clock.timezone_id == timezone_id for clock in self._clocks)

    def default_clocks(self) -> List[TrackedClock]:
        return [
            TrackedClock(self.local_timezone, is_local=True),
            TrackedClock(FIXED_REFERENCE_TIMEZONE),
        ]

    def load(self, persisted: Optional[Iterable[Any]]) -> List[TrackedClock]:
        """Rebuild the tracked set from persisted entries and write the cleaned list back."""
        entries = _parse_entries(persisted) if isinstance(persisted, (list, tuple)) else []
        if not entries:
            clocks = self.default_clocks()
        else:
            clocks = []
            seen: set[str] = set()
            has_local = False
            for clock in entries:
                if clock.timezone_id in seen:
                    continue
                seen.add(clock.timezone_id)
                if clock.is_local:
                    if has_local:
                        clock = TrackedClock(clock.timezone_id, is_local=False)
                    has_local = True
                clocks.append(clock)
            if not has_local:
                # The host zone may already be tracked as an ordinary clock
                clocks = [clock for clock in clocks if clock.timezone_id != self.local_timezone]
                clocks.insert(0, TrackedClock(self.local_timezone, is_local=True))
            if len(clocks) > self.max_clocks:
                logger.warning("Persisted clock list has %d entries, keeping %d", len(clocks), self.max_clocks)
                clocks = self._trim(clocks)

        self._clocks = clocks
        self._commit()
        return list(self._clocks)

    def restore(self) -> List[TrackedClock]:
        return self.load(self._store.get(CLOCKS_KEY))

    def persist(self) -> None:
        self._store.set(CLOCKS_KEY, [clock.to_dict() for clock in self._clocks])

    def add(self, timezone_id: str) -> AddResult:
        if len(self._clocks) >= self.max_clocks:
            logger.info("Clock limit of %d reached, not adding %s", self.max_clocks, timezone_id)
            return AddResult.LIMIT_REACHED
        if timezone_id in self:
            return AddResult.ALREADY_TRACKED
        self._clocks.append(TrackedClock(timezone_id))
        logger.info("Added clock %s", timezone_id)
        self._commit()
        return AddResult.ADDED

    def remove(self, index: int) -> TrackedClock:
        if not 0 <= index < len(self._clocks):
            raise IndexError(f"No clock at position {index}")
        clock = self._clocks[index]
        if clock.is_local:
            raise ProtectedClockError(f"The local clock ({clock.timezone_id}) cannot be removed")
        del self._clocks[index]
        logger.info("Removed clock %s", clock.timezone_id)
        self._commit()
        return clock

    def resort(self, instant: datetime) -> bool:
        """Stable ascending sort by offset at ``instant``; persist if the order changed."""
        offsets = {
            clock.timezone_id: self._resolver.resolve(clock.timezone_id, instant).offset_minutes
            for clock in self._clocks
        }
        ordered = sorted(self._clocks, key=lambda clock: offsets[clock.timezone_id])
        if ordered == self._clocks:
            return False
        self._clocks = ordered
        self.persist()
        return True

    def _commit(self) -> None:
        if not self.resort(self._now()):
            self.persist()

    def _trim(self, clocks: List[TrackedClock]) -> List[TrackedClock]:
        kept: List[TrackedClock] = []
        remaining = self.max_clocks - 1
        for clock in clocks:
            if clock.is_local:
                kept.append(clock)
            elif remaining > 0:
                kept.append(clock)
                remaining -= 1
        return kept
