"""Process-wide "now", optionally pinned to a simulated instant.

A simulated instant is entered as the wall-clock reading of the fixed
reference zone (Marketing Cloud system time, UTC-06:00) and stored as an
absolute UTC instant. Every component reads "now" through ``current()``.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from dateutil import parser as date_parser

from clockboard.config.timezones import FIXED_REFERENCE_OFFSET_MINUTES
from clockboard.engine.errors import MalformedInputError

logger = logging.getLogger("clockboard.simulation")

FIXED_REFERENCE_TZ = timezone(timedelta(minutes=FIXED_REFERENCE_OFFSET_MINUTES))

SimulationListener = Callable[[Optional[datetime]], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimeSimulation:
    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._simulated: Optional[datetime] = None
        self._listeners: List[SimulationListener] = []

    @property
    def simulated(self) -> Optional[datetime]:
        return self._simulated

    @property
    def is_active(self) -> bool:
        return self._simulated is not None

    def current(self) -> datetime:
        """Active simulated instant, else the real current time (aware, UTC)."""
        if self._simulated is not None:
            return self._simulated
        return self._clock().astimezone(timezone.utc)

    def set_from_nominal(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
    ) -> datetime:
        """Pin "now" to the instant whose UTC-06:00 reading is the given fields.

        ``month`` is 1-based.
        """
        try:
            nominal = datetime(
                year, month, day, hour, minute, second, millisecond * 1000, tzinfo=FIXED_REFERENCE_TZ
            )
        except (TypeError, ValueError) as exc:
            raise MalformedInputError(f"Invalid simulated time: {exc}") from exc
        return self._activate(nominal.astimezone(timezone.utc))

    def set_from_text(self, text: str) -> datetime:
        """Parse free text loosely and pin "now" to it as a UTC-06:00 reading.

        Missing fields default from the current reference-zone calendar day.
        A timezone in the text is ignored.
        """
        default = self.current().astimezone(FIXED_REFERENCE_TZ).replace(
            hour=0, minute=0, second=0, microsecond=0, tzinfo=None
        )
        try:
            parsed = date_parser.parse((text or "").strip(), default=default)
        except (ValueError, OverflowError) as exc:
            logger.info("Rejected simulated time input %r", text)
            raise MalformedInputError(f"Could not parse '{text}' as a date/time") from exc
        return self.set_from_nominal(
            parsed.year,
            parsed.month,
            parsed.day,
            parsed.hour,
            parsed.minute,
            parsed.second,
            parsed.microsecond // 1000,
        )

    def clear(self) -> None:
        if self._simulated is None:
            return
        self._simulated = None
        logger.info("Simulated time cleared")
        self._notify(None)

    def subscribe(self, listener: SimulationListener) -> None:
        self._listeners.append(listener)

    def _activate(self, instant: datetime) -> datetime:
        self._simulated = instant
        logger.info("Simulated time set to %s", instant.isoformat())
        self._notify(instant)
        return instant

    def _notify(self, instant: Optional[datetime]) -> None:
        for listener in list(self._listeners):
            listener(instant)
