"""FastAPI application entry point."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from clockboard.config.settings import get_settings
from clockboard.tasks.service import ClockRuntime, build_runtime
from clockboard.utils.logging import setup_logging
from .api import (
    clocks as clock_routes,
    meta as meta_routes,
    preferences as preference_routes,
    simulation as simulation_routes,
    status as status_routes,
    timezones as timezone_routes,
)

logger = logging.getLogger("clockboard.web")


def create_app(runtime: Optional[ClockRuntime] = None, start_ticker: bool = True) -> FastAPI:
    """Build the API; the runtime is created at startup unless one is supplied."""
    settings = get_settings()
    setup_logging(level=settings.log_level)

    app = FastAPI(title=settings.app_name)
    app.state.runtime = runtime

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add API routes first, before static file mounting
    app.include_router(status_routes.router)
    app.include_router(clock_routes.router)
    app.include_router(simulation_routes.router)
    app.include_router(timezone_routes.router)
    app.include_router(meta_routes.router)
    app.include_router(preference_routes.router)

    static_dir = Path(__file__).parent / "static"
    index_file = static_dir / "index.html"
    if static_dir.exists() and index_file.exists():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        @app.get("/")
        async def index() -> dict:
            return {"message": "Clockboard API running", "docs": "/docs", "health": "/health"}

    @app.on_event("startup")
    async def on_startup() -> None:
        if app.state.runtime is None:
            logger.info("Initialising clock runtime")
            app.state.runtime = build_runtime(settings)
        if start_ticker:
            await app.state.runtime.ticker.start()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if app.state.runtime is not None:
            await app.state.runtime.ticker.shutdown()

    return app


app = create_app()
