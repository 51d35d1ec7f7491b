"""Health and status endpoints."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from clockboard.tasks.service import ClockRuntime

from . import deps

router = APIRouter(tags=["status"])


@router.get("/health")
async def healthcheck(runtime: ClockRuntime = Depends(deps.get_runtime)) -> dict:
    simulated = runtime.simulation.simulated
    ticker = runtime.ticker
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "clocks": {
            "count": len(runtime.registry),
            "limit": runtime.registry.max_clocks,
            "timezones": runtime.registry.timezone_ids,
        },
        "simulation": {
            "active": simulated is not None,
            "instant": simulated.isoformat() if simulated else None,
        },
        "ticker": {
            "running": ticker.running,
            "suspended": ticker.suspended,
            "interval_seconds": ticker.interval_seconds,
        },
    }
