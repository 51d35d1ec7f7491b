"""Resolve UTC offset and daylight-saving status for a zone at an instant.

Offsets come from the locale formatter's long GMT string (``GMT-05:00``) and
DST status from the long zone name (``Eastern Daylight Time``). Text parsing
stays in this module; everything downstream works with ``OffsetSnapshot``.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Optional, Protocol, Union
from zoneinfo import ZoneInfo

from babel.dates import get_timezone_name

from clockboard.config.timezones import (
    FIXED_REFERENCE_OFFSET_MINUTES,
    FIXED_REFERENCE_TIMEZONE,
    UTC_TIMEZONE,
)

logger = logging.getLogger("clockboard.offsets")

NOT_APPLICABLE = "not-applicable"
MIN_OFFSET_MINUTES = -720
MAX_OFFSET_MINUTES = 840

_OFFSET_PATTERN = re.compile(r"GMT([+-])(\d{2}):(\d{2})")
_DST_MARKERS = ("daylight", "summer")

DstStatus = Union[bool, Literal["not-applicable"]]


@dataclass(frozen=True)
class OffsetSnapshot:
    offset_minutes: int
    offset_label: str
    is_dst: DstStatus

    @property
    def season(self) -> str:
        if self.is_dst == NOT_APPLICABLE:
            return "No DST"
        return "SUMMER" if self.is_dst is True else "WINTER"


class LocaleFormatter(Protocol):
    def long_offset(self, timezone_id: str, instant: datetime) -> str: ...

    def long_name(self, timezone_id: str, instant: datetime) -> str: ...

    def short_name(self, timezone_id: str, instant: datetime) -> str: ...


def ensure_aware(instant: datetime) -> datetime:
    # Naive datetimes are treated as UTC
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


class BabelFormatter:
    """CLDR-backed formatter built on ``babel.dates``."""

    def __init__(self, locale: str = "en_US") -> None:
        self.locale = locale

    def long_offset(self, timezone_id: str, instant: datetime) -> str:
        # babel.dates.get_timezone_gmt mis-rounds negative fractional offsets (-03:30 -> -04:30)
        offset = self._localize(timezone_id, instant).utcoffset()
        return format_offset(int(offset.total_seconds()) // 60)

    def long_name(self, timezone_id: str, instant: datetime) -> str:
        return get_timezone_name(self._localize(timezone_id, instant), width="long", locale=self.locale)

    def short_name(self, timezone_id: str, instant: datetime) -> str:
        return get_timezone_name(self._localize(timezone_id, instant), width="short", locale=self.locale)

    @staticmethod
    def _localize(timezone_id: str, instant: datetime) -> datetime:
        return ensure_aware(instant).astimezone(ZoneInfo(timezone_id))


def format_offset(offset_minutes: int) -> str:
    sign = "+" if offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"GMT{sign}{hours:02d}:{minutes:02d}"


def parse_offset(text: str) -> Optional[int]:
    """Return signed minutes from a ``GMT±HH:MM`` string, or None."""
    match = _OFFSET_PATTERN.search(text or "")
    if not match:
        return None
    sign = 1 if match.group(1) == "+" else -1
    minutes = sign * (int(match.group(2)) * 60 + int(match.group(3)))
    if not MIN_OFFSET_MINUTES <= minutes <= MAX_OFFSET_MINUTES:
        return None
    return minutes


_UTC_SNAPSHOT = OffsetSnapshot(0, format_offset(0), NOT_APPLICABLE)
_FIXED_REFERENCE_SNAPSHOT = OffsetSnapshot(
    FIXED_REFERENCE_OFFSET_MINUTES,
    format_offset(FIXED_REFERENCE_OFFSET_MINUTES),
    NOT_APPLICABLE,
)


class OffsetResolver:
    """Turn (zone, instant) into an ``OffsetSnapshot``; never raises on lookup failures."""

    def __init__(self, formatter: LocaleFormatter | None = None) -> None:
        self._formatter = formatter or BabelFormatter()

    def resolve(self, timezone_id: str, instant: datetime) -> OffsetSnapshot:
        if timezone_id == UTC_TIMEZONE:
            return _UTC_SNAPSHOT
        if timezone_id == FIXED_REFERENCE_TIMEZONE:
            return _FIXED_REFERENCE_SNAPSHOT

        try:
            text = self._formatter.long_offset(timezone_id, instant)
        except Exception:
            logger.warning("Offset lookup failed for %s, falling back to UTC", timezone_id, exc_info=True)
            return _UTC_SNAPSHOT

        minutes = parse_offset(text)
        if minutes is None:
            logger.warning("Unparsable offset %r for %s, falling back to UTC", text, timezone_id)
            return _UTC_SNAPSHOT

        return OffsetSnapshot(minutes, format_offset(minutes), self._dst_status(timezone_id, instant))

    def short_name(self, timezone_id: str, instant: datetime) -> str:
        """Short display alias such as ``EDT``; falls back to the offset label."""
        if timezone_id == UTC_TIMEZONE:
            return UTC_TIMEZONE
        name = ""
        if timezone_id != FIXED_REFERENCE_TIMEZONE:
            try:
                name = self._formatter.short_name(timezone_id, instant)
            except Exception:
                logger.warning("Short name lookup failed for %s", timezone_id, exc_info=True)
        return name or self.resolve(timezone_id, instant).offset_label

    def _dst_status(self, timezone_id: str, instant: datetime) -> DstStatus:
        try:
            long_name = self._formatter.long_name(timezone_id, instant)
        except Exception:
            logger.warning("Zone name lookup failed for %s", timezone_id, exc_info=True)
            return NOT_APPLICABLE
        lowered = (long_name or "").lower()
        return any(marker in lowered for marker in _DST_MARKERS)
