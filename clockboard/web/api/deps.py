"""FastAPI dependencies used across routers."""
from __future__ import annotations

from fastapi import HTTPException, Request, status

from clockboard.tasks.service import ClockRuntime


def get_runtime(request: Request) -> ClockRuntime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Clock runtime not initialised")
    return runtime
