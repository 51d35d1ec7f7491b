"""Per-zone offset snapshots and Marketing Cloud snippets."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from clockboard.tasks.service import ClockRuntime

from . import deps, schemas

router = APIRouter(prefix="/api/timezones", tags=["timezones"])


def _zone_or_404(zone_id: str) -> str:
    try:
        return schemas.validate_timezone_id(zone_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/{zone_id:path}/snapshot", response_model=schemas.OffsetSnapshotResponse)
async def get_snapshot(
    zone_id: str,
    at: Optional[datetime] = Query(default=None, description="Instant to resolve; defaults to the current (or simulated) time."),
    runtime: ClockRuntime = Depends(deps.get_runtime),
):
    zone_id = _zone_or_404(zone_id)
    instant = at or runtime.simulation.current()
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return schemas.OffsetSnapshotResponse.from_snapshot(runtime.resolver.resolve(zone_id, instant))


@router.get("/{zone_id:path}/snippets", response_model=schemas.SnippetResponse)
async def get_snippets(zone_id: str, runtime: ClockRuntime = Depends(deps.get_runtime)):
    zone_id = _zone_or_404(zone_id)
    return schemas.SnippetResponse.from_snippets(runtime.snippets.generate(zone_id))
