"""Health check endpoints.

- /health: liveness, always 200 while the app runs
- /healthz: checks the trip store and reports which providers are configured
"""

from typing import Any

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse

from tripboard.app.api.deps import get_store
from tripboard.app.config import Settings, get_settings
from tripboard.app.db.store import TripNotFoundError

router = APIRouter()


async def check_store() -> tuple[bool, str]:
    """Check that the trip snapshot can be loaded.

    Returns:
        (is_ok, status_message)
    """
    try:
        await get_store().get_trip()
        return (True, "ok")
    except TripNotFoundError:
        return (True, "empty")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


def check_providers(settings: Settings) -> dict[str, str]:
    """Report which external providers have credentials configured."""
    return {
        "google_maps": "configured" if settings.google_maps_api_key else "not_configured",
        "navitime": "configured" if settings.navitime_api_key else "not_configured",
    }


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s."""
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Health check with component status.

    Returns:
        200 with component status if the store is readable
        503 otherwise
    """
    store_ok, store_status = await check_store()

    response_body = {
        "status": "ok" if store_ok else "degraded",
        "components": {
            "store": store_status,
            "providers": check_providers(get_settings()),
        },
    }

    if not store_ok:
        return JSONResponse(content=response_body, status_code=503)

    return response_body
