"""APScheduler-driven render loop for the tracked clocks."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from clockboard.config.timezones import TimezoneCatalog
from clockboard.engine.offsets import OffsetResolver, OffsetSnapshot
from clockboard.engine.registry import ClockRegistry, TrackedClock
from clockboard.engine.simulation import TimeSimulation

logger = logging.getLogger("clockboard.ticker")

DAY_START_HOUR = 6
NIGHT_START_HOUR = 18


@dataclass(frozen=True)
class ClockFace:
    index: int
    timezone_id: str
    is_local: bool
    is_fixed_reference: bool
    removable: bool
    display_name: str
    snapshot: OffsetSnapshot
    local_time: datetime
    date_label: str
    is_daytime: bool


def build_face(
    index: int,
    clock: TrackedClock,
    snapshot: OffsetSnapshot,
    instant: datetime,
    catalog: TimezoneCatalog,
) -> ClockFace:
    # Wall time follows the resolved offset, including the UTC fallback
    wall = instant.astimezone(timezone(timedelta(minutes=snapshot.offset_minutes)))
    return ClockFace(
        index=index,
        timezone_id=clock.timezone_id,
        is_local=clock.is_local,
        is_fixed_reference=clock.is_fixed_reference,
        removable=not (clock.is_local or clock.is_fixed_reference),
        display_name=catalog.display_name(clock.timezone_id).upper(),
        snapshot=snapshot,
        local_time=wall,
        date_label=f"{wall.strftime('%b').upper()} {wall.day}",
        is_daytime=DAY_START_HOUR <= wall.hour < NIGHT_START_HOUR,
    )


class ClockTicker:
    """Renders a frame per interval; suspends while a simulated instant is pinned."""

    JOB_ID = "clock-tick"

    def __init__(
        self,
        registry: ClockRegistry,
        resolver: OffsetResolver,
        simulation: TimeSimulation,
        catalog: TimezoneCatalog,
        interval_seconds: float = 1.0,
        on_frame: Optional[Callable[[List[ClockFace]], None]] = None,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._simulation = simulation
        self._catalog = catalog
        self.interval_seconds = interval_seconds
        self._on_frame = on_frame
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._started = False
        self._suspended = False
        self.latest_frame: List[ClockFace] = []
        simulation.subscribe(self._on_simulation_change)

    @property
    def suspended(self) -> bool:
        return self._suspended

    @property
    def running(self) -> bool:
        return self._started

    def render_frame(self) -> List[ClockFace]:
        instant = self._simulation.current()
        self._registry.resort(instant)
        return [
            build_face(index, clock, self._resolver.resolve(clock.timezone_id, instant), instant, self._catalog)
            for index, clock in enumerate(self._registry.clocks)
        ]

    def tick(self) -> List[ClockFace]:
        frame = self.render_frame()
        self.latest_frame = frame
        if self._on_frame is not None:
            self._on_frame(frame)
        if self._simulation.is_active:
            self._suspend()
        return frame

    async def start(self) -> None:
        if self.running:
            return
        # Created here so the scheduler binds to the running event loop
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        job_options = {"next_run_time": None} if self._suspended else {}
        self.scheduler.add_job(
            self._run_tick,
            "interval",
            seconds=self.interval_seconds,
            id=self.JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **job_options,
        )
        self.scheduler.start()
        self._started = True
        logger.info("Clock ticker started (every %ss)", self.interval_seconds)

    async def shutdown(self) -> None:
        if self._started:
            self.scheduler.shutdown(wait=False)
            self._started = False
            logger.info("Clock ticker stopped")

    async def _run_tick(self) -> None:
        try:
            self.tick()
        except Exception:
            logger.exception("Clock tick failed")

    def _on_simulation_change(self, instant: Optional[datetime]) -> None:
        if instant is None:
            self._resume()
        else:
            # Publish the frozen frame for the new instant, then stay paused
            self.tick()

    def _suspend(self) -> None:
        if self._suspended:
            return
        self._suspended = True
        if self.running:
            self.scheduler.pause_job(self.JOB_ID)
        logger.info("Clock ticker suspended while simulated time is active")

    def _resume(self) -> None:
        if not self._suspended:
            return
        self._suspended = False
        if self.running:
            self.scheduler.resume_job(self.JOB_ID)
        logger.info("Clock ticker resumed")
