"""Routes for pinning and clearing the simulated time."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from clockboard.engine.errors import MalformedInputError
from clockboard.engine.simulation import FIXED_REFERENCE_TZ
from clockboard.tasks.service import ClockRuntime

from . import deps, schemas

router = APIRouter(prefix="/api/simulation", tags=["simulation"])


def _state(runtime: ClockRuntime) -> schemas.SimulationState:
    instant = runtime.simulation.simulated
    return schemas.SimulationState(
        active=instant is not None,
        instant=instant,
        reference_time=instant.astimezone(FIXED_REFERENCE_TZ) if instant else None,
    )


@router.get("", response_model=schemas.SimulationState)
async def get_simulation(runtime: ClockRuntime = Depends(deps.get_runtime)):
    return _state(runtime)


@router.put("", response_model=schemas.SimulationState)
async def set_simulation(payload: schemas.SimulationInput, runtime: ClockRuntime = Depends(deps.get_runtime)):
    try:
        runtime.simulation.set_from_text(payload.input)
    except MalformedInputError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="invalid-format") from exc
    return _state(runtime)


@router.delete("", response_model=schemas.SimulationState)
async def reset_simulation(runtime: ClockRuntime = Depends(deps.get_runtime)):
    runtime.simulation.clear()
    return _state(runtime)
