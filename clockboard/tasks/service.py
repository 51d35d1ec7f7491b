"""Wire the clock engine components into one runtime."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from clockboard.config.settings import Settings, get_settings
from clockboard.config.timezones import TimezoneCatalog, get_catalog
from clockboard.data.database import build_engine, build_sessionmaker, init_db
from clockboard.data.store import DISPLAY_MODE_KEY, THEME_KEY, KeyValueStore, SqlPreferenceStore
from clockboard.engine.offsets import BabelFormatter, OffsetResolver
from clockboard.engine.registry import ClockRegistry
from clockboard.engine.simulation import TimeSimulation, utc_now
from clockboard.engine.snippets import SnippetGenerator
from clockboard.tasks.ticker import ClockTicker

logger = logging.getLogger("clockboard.service")

THEMES = ("light", "dark")
DISPLAY_MODES = ("analog", "digital")


@dataclass
class ClockRuntime:
    settings: Settings
    catalog: TimezoneCatalog
    store: KeyValueStore
    resolver: OffsetResolver
    simulation: TimeSimulation
    registry: ClockRegistry
    snippets: SnippetGenerator
    ticker: ClockTicker


def build_store(settings: Settings) -> SqlPreferenceStore:
    engine = build_engine(settings.database_url)
    init_db(engine)
    return SqlPreferenceStore(build_sessionmaker(engine))


def build_runtime(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    clock: Callable[[], datetime] = utc_now,
    catalog: Optional[TimezoneCatalog] = None,
) -> ClockRuntime:
    """Create the engine instances and restore the tracked clocks from ``store``."""
    settings = settings or get_settings()
    catalog = catalog or get_catalog()
    store = store if store is not None else build_store(settings)

    resolver = OffsetResolver(BabelFormatter(settings.display_locale))
    simulation = TimeSimulation(clock)
    registry = ClockRegistry(
        store,
        resolver,
        now=simulation.current,
        local_timezone=settings.local_timezone,
        max_clocks=settings.max_clocks,
    )
    registry.restore()
    logger.info("Restored %d clocks (local zone %s)", len(registry), settings.local_timezone)

    snippets = SnippetGenerator(resolver, catalog, simulation, settings.local_timezone)
    ticker = ClockTicker(
        registry,
        resolver,
        simulation,
        catalog,
        interval_seconds=settings.tick_interval_seconds,
    )
    return ClockRuntime(
        settings=settings,
        catalog=catalog,
        store=store,
        resolver=resolver,
        simulation=simulation,
        registry=registry,
        snippets=snippets,
        ticker=ticker,
    )


def read_preferences(store: KeyValueStore) -> dict[str, Any]:
    theme = store.get(THEME_KEY)
    display_mode = store.get(DISPLAY_MODE_KEY)
    return {
        "theme": theme if theme in THEMES else THEMES[0],
        "displayMode": display_mode if display_mode in DISPLAY_MODES else DISPLAY_MODES[0],
    }


def update_preferences(
    store: KeyValueStore,
    theme: Optional[str] = None,
    display_mode: Optional[str] = None,
) -> dict[str, Any]:
    if theme is not None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme '{theme}'")
        store.set(THEME_KEY, theme)
    if display_mode is not None:
        if display_mode not in DISPLAY_MODES:
            raise ValueError(f"Unknown display mode '{display_mode}'")
        store.set(DISPLAY_MODE_KEY, display_mode)
    return read_preferences(store)
