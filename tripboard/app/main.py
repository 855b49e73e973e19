"""FastAPI application."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tripboard.app.adapters.maps_client import close_maps_client
from tripboard.app.api.routes.health import router as health_router
from tripboard.app.api.routes.metrics import router as metrics_router
from tripboard.app.api.routes.trip import router as trip_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    yield
    await close_maps_client()


app = FastAPI(title="Tripboard API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trip_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Tripboard API", "version": "0.1.0"}
