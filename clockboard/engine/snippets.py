"""Generate Marketing Cloud snippets that convert system time to a target zone.

Marketing Cloud's system clock is fixed at UTC-06:00 with no DST, so each
snippet adds an offset delta (hours) to a system timestamp. Three artifacts are
produced per zone: a SQL query expression, an AMPscript block and a
server-side JavaScript block. All three share one ``SnippetContext``.
"""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

from clockboard.config.timezones import (
    FIXED_REFERENCE_OFFSET_MINUTES,
    FIXED_REFERENCE_TIMEZONE,
    UTC_TIMEZONE,
    TimezoneCatalog,
)
from clockboard.engine.offsets import OffsetResolver
from clockboard.engine.simulation import TimeSimulation

logger = logging.getLogger("clockboard.snippets")

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

# Fixed calendar dates, not the real transition rules. Every generated
# artifact says so; users correct them per zone and year.
DST_WINDOW_PLACEHOLDER = ("03-10", "11-03")
DEFAULT_REFERENCE_NAME = "Central America Standard Time"


class ZoneKind(str, enum.Enum):
    LOCAL = "local"
    FIXED_UTC = "fixed-utc"
    GENERAL = "general"


_TEMPLATE_PREFIX = {
    ZoneKind.LOCAL: "local",
    ZoneKind.FIXED_UTC: "utc",
    ZoneKind.GENERAL: "general",
}


@dataclass(frozen=True)
class SnippetContext:
    timezone_id: str
    kind: ZoneKind
    display_name: str
    alias: str
    token: str
    alternate_name: str
    winter_delta_hours: float
    summer_delta_hours: float
    dst_start: str
    dst_end: str


@dataclass(frozen=True)
class GeneratedSnippetSet:
    query_expression: str
    script_variant_a: str
    script_variant_b: str
    context: SnippetContext


def format_hours(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def sanitize_token(alias: str) -> str:
    """Make ``alias`` usable inside SQL column and script variable names."""
    text = alias.replace("+", "plus").replace("-", "minus")
    token = re.sub(r"[^A-Za-z0-9]+", "_", text).strip("_")
    if not token:
        return "TZ"
    if token[0].isdigit():
        token = f"TZ{token}"
    return token


@lru_cache(maxsize=None)
def _read_template(name: str) -> str:
    return (TEMPLATE_DIR / name).read_text(encoding="utf-8").rstrip("\n")


class SnippetGenerator:
    def __init__(
        self,
        resolver: OffsetResolver,
        catalog: TimezoneCatalog,
        simulation: TimeSimulation,
        local_timezone: str,
    ) -> None:
        self._resolver = resolver
        self._catalog = catalog
        self._simulation = simulation
        self.local_timezone = local_timezone

    def zone_kind(self, timezone_id: str) -> ZoneKind:
        if timezone_id == UTC_TIMEZONE:
            return ZoneKind.FIXED_UTC
        if timezone_id == self.local_timezone:
            return ZoneKind.LOCAL
        return ZoneKind.GENERAL

    def seasonal_deltas(self, timezone_id: str, year: int) -> tuple[float, float]:
        """(winter, summer) hours to add to a UTC-06:00 timestamp, from Jan 1 and Jul 1."""
        winter = self._resolver.resolve(timezone_id, datetime(year, 1, 1, 12, tzinfo=timezone.utc))
        summer = self._resolver.resolve(timezone_id, datetime(year, 7, 1, 12, tzinfo=timezone.utc))
        return (
            (winter.offset_minutes - FIXED_REFERENCE_OFFSET_MINUTES) / 60,
            (summer.offset_minutes - FIXED_REFERENCE_OFFSET_MINUTES) / 60,
        )

    def build_context(self, timezone_id: str, reference: datetime) -> SnippetContext:
        winter, summer = self.seasonal_deltas(timezone_id, reference.year)
        alias = self._resolver.short_name(timezone_id, reference)
        descriptor = self._catalog.describe(timezone_id)
        start, end = DST_WINDOW_PLACEHOLDER
        return SnippetContext(
            timezone_id=timezone_id,
            kind=self.zone_kind(timezone_id),
            display_name=self._catalog.display_name(timezone_id),
            alias=alias,
            token=sanitize_token(alias),
            alternate_name=descriptor.alternate_name or timezone_id,
            winter_delta_hours=winter,
            summer_delta_hours=summer,
            dst_start=f"{reference.year}-{start}",
            dst_end=f"{reference.year}-{end}",
        )

    def generate(self, timezone_id: str) -> GeneratedSnippetSet:
        reference = self._simulation.current()
        context = self.build_context(timezone_id, reference)
        prefix = _TEMPLATE_PREFIX[context.kind]
        fields = {
            "zone_id": context.timezone_id,
            "display": context.display_name,
            "token": context.token,
            "alternate_name": context.alternate_name,
            "reference_name": self._reference_name(),
            "winter": format_hours(context.winter_delta_hours),
            "summer": format_hours(context.summer_delta_hours),
            "dst_start": context.dst_start,
            "dst_end": context.dst_end,
        }
        logger.debug("Generating %s snippets for %s", context.kind.value, timezone_id)
        return GeneratedSnippetSet(
            query_expression=_read_template(f"{prefix}_query.sql").format(**fields),
            script_variant_a=_read_template(f"{prefix}_ampscript.txt").format(**fields),
            script_variant_b=_read_template(f"{prefix}_ssjs.txt").format(**fields),
            context=context,
        )

    def _reference_name(self) -> str:
        return self._catalog.describe(FIXED_REFERENCE_TIMEZONE).alternate_name or DEFAULT_REFERENCE_NAME
