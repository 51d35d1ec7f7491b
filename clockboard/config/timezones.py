"""Curated timezone catalog for the clock picker."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterator, List, Optional

import yaml

CATALOG_FILE = Path(__file__).resolve().parent / "timezones.yml"

UTC_TIMEZONE = "UTC"
# Marketing Cloud system time: UTC-06:00 all year (POSIX sign is inverted).
FIXED_REFERENCE_TIMEZONE = "Etc/GMT+6"
FIXED_REFERENCE_OFFSET_MINUTES = -360


@dataclass(frozen=True)
class TimezoneDescriptor:
    id: str
    alternate_name: Optional[str] = None
    label: Optional[str] = None
    aliases: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TimezoneOption:
    value: str
    label: str
    offset_minutes: int
    offset_label: str


def city_name(timezone_id: str) -> str:
    return timezone_id.split("/")[-1].replace("_", " ")


class TimezoneCatalog:
    """Immutable lookup over the catalogued zones, in file order."""

    def __init__(self, entries: List[TimezoneDescriptor]) -> None:
        self._entries: tuple[TimezoneDescriptor, ...] = tuple(entries)
        self._by_id: dict[str, TimezoneDescriptor] = {}
        for entry in self._entries:
            if entry.id in self._by_id:
                raise ValueError(f"Duplicate timezone '{entry.id}' in catalog")
            self._by_id[entry.id] = entry

    def __iter__(self) -> Iterator[TimezoneDescriptor]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, timezone_id: object) -> bool:
        return timezone_id in self._by_id

    def get(self, timezone_id: str) -> Optional[TimezoneDescriptor]:
        return self._by_id.get(timezone_id)

    def describe(self, timezone_id: str) -> TimezoneDescriptor:
        """Return the catalog entry, or a bare descriptor for uncatalogued zones."""
        return self._by_id.get(timezone_id) or TimezoneDescriptor(id=timezone_id)

    def display_name(self, timezone_id: str) -> str:
        entry = self._by_id.get(timezone_id)
        if entry and entry.label:
            return entry.label
        return " / ".join(timezone_id.replace("_", " ").split("/"))

    def search_text(self, timezone_id: str) -> str:
        entry = self.describe(timezone_id)
        parts = [city_name(timezone_id), timezone_id, entry.label or "", *entry.aliases]
        return " ".join(part for part in parts if part).lower()

    def options(self, resolver, instant: datetime, query: str = "") -> List[TimezoneOption]:
        """Picker entries matching ``query``, sorted ascending by offset at ``instant``."""
        needle = query.strip().lower()
        options: List[TimezoneOption] = []
        for entry in self._entries:
            if needle and needle not in self.search_text(entry.id):
                continue
            snapshot = resolver.resolve(entry.id, instant)
            options.append(
                TimezoneOption(
                    value=entry.id,
                    label=f"{self.display_name(entry.id)} ({snapshot.offset_label})",
                    offset_minutes=snapshot.offset_minutes,
                    offset_label=snapshot.offset_label,
                )
            )
        options.sort(key=lambda option: option.offset_minutes)
        return options


def load_catalog(catalog_path: Path | None = None) -> TimezoneCatalog:
    """Load the catalog from YAML."""
    path = catalog_path or CATALOG_FILE
    if not path.exists():
        raise FileNotFoundError(f"Timezone catalog not found at {path}")
    data = yaml.safe_load(path.read_text())
    entries = data.get("timezones") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ValueError("Timezone catalog must contain a 'timezones' list")
    descriptors: List[TimezoneDescriptor] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        aliases = entry.get("aliases") or ""
        descriptors.append(
            TimezoneDescriptor(
                id=str(entry["id"]),
                alternate_name=entry.get("alternate_name"),
                label=entry.get("label"),
                aliases=tuple(str(aliases).split()),
            )
        )
    if not descriptors:
        raise ValueError("No timezones could be loaded from the catalog")
    return TimezoneCatalog(descriptors)


@lru_cache(maxsize=1)
def get_catalog() -> TimezoneCatalog:
    return load_catalog()
