"""Routes for the tracked clock set."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from clockboard.engine.errors import ProtectedClockError
from clockboard.engine.registry import AddResult
from clockboard.tasks.service import ClockRuntime

from . import deps, schemas

router = APIRouter(prefix="/api/clocks", tags=["clocks"])


def _frame(runtime: ClockRuntime) -> List[schemas.ClockFaceResponse]:
    return [schemas.ClockFaceResponse.from_face(face) for face in runtime.ticker.render_frame()]


@router.get("", response_model=List[schemas.ClockFaceResponse])
async def list_clocks(runtime: ClockRuntime = Depends(deps.get_runtime)):
    return _frame(runtime)


@router.post("", response_model=schemas.ClockMutationResponse, status_code=status.HTTP_201_CREATED)
async def add_clock(
    payload: schemas.ClockCreate,
    response: Response,
    runtime: ClockRuntime = Depends(deps.get_runtime),
):
    result = runtime.registry.add(payload.timezone)
    if result is AddResult.LIMIT_REACHED:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.value)
    if result is AddResult.ALREADY_TRACKED:
        response.status_code = status.HTTP_200_OK
    return schemas.ClockMutationResponse(result=result.value, clocks=_frame(runtime))


@router.delete("/{index}", response_model=schemas.ClockMutationResponse)
async def remove_clock(index: int, runtime: ClockRuntime = Depends(deps.get_runtime)):
    clocks = runtime.registry.clocks
    if not 0 <= index < len(clocks):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Clock not found")
    if clocks[index].is_fixed_reference:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="The system time clock cannot be removed")
    try:
        runtime.registry.remove(index)
    except ProtectedClockError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return schemas.ClockMutationResponse(result="removed", clocks=_frame(runtime))
