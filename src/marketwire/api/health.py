"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and
Redis (the only dependency of the real-time layer) is reachable.
"""

from fastapi import APIRouter, Request

from marketwire import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and Redis connectivity."""
    checks = {"server": "ok", "version": __version__}

    store = getattr(request.app.state, "channel_store", None)
    if store is None:
        checks["redis"] = "error: not connected"
    else:
        try:
            await store.ping()
            checks["redis"] = "ok"
        except Exception as e:
            checks["redis"] = f"error: {e}"

    status = "healthy" if all(
        v == "ok" for k, v in checks.items() if k != "version"
    ) else "degraded"

    return {"status": status, **checks}
