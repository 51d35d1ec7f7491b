"""Theme and display-mode preferences."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from clockboard.tasks import service as clock_service
from clockboard.tasks.service import ClockRuntime

from . import deps, schemas

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


@router.get("", response_model=schemas.PreferencesResponse)
async def get_preferences(runtime: ClockRuntime = Depends(deps.get_runtime)):
    return clock_service.read_preferences(runtime.store)


@router.put("", response_model=schemas.PreferencesResponse)
async def update_preferences(payload: schemas.PreferencesUpdate, runtime: ClockRuntime = Depends(deps.get_runtime)):
    return clock_service.update_preferences(runtime.store, theme=payload.theme, display_mode=payload.displayMode)
