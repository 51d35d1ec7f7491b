"""Metadata endpoints for UI configuration options."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from clockboard.config.timezones import FIXED_REFERENCE_TIMEZONE
from clockboard.tasks.service import ClockRuntime

from . import deps

router = APIRouter(prefix="/api/meta", tags=["meta"])


@router.get("/options", response_model=dict)
async def get_options(
    q: str = Query(default="", max_length=64, description="Case-insensitive search over city, id and aliases."),
    runtime: ClockRuntime = Depends(deps.get_runtime),
) -> dict:
    options = runtime.catalog.options(runtime.resolver, runtime.simulation.current(), query=q)
    tracked = set(runtime.registry.timezone_ids)
    return {
        "timezones": [
            {
                "value": option.value,
                "label": option.label,
                "offset_minutes": option.offset_minutes,
                "offset_label": option.offset_label,
                "tracked": option.value in tracked,
            }
            for option in options
        ],
        "local_timezone": runtime.settings.local_timezone,
        "fixed_reference_timezone": FIXED_REFERENCE_TIMEZONE,
        "max_clocks": runtime.registry.max_clocks,
        "can_add": len(runtime.registry) < runtime.registry.max_clocks,
    }
