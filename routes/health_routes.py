"""
Health check endpoint.

GET /health - checks MongoDB connectivity and the expiry reaper.
Rules:
- MongoDB failure → "unhealthy" (503); the app cannot function without it.
- Reaper not running → "degraded" (200); pending entries still expire on
  read, they just are not evicted.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        db = request.app.state.db
        await db.client.admin.command("ping")
        checks["mongodb"] = "ok"
    except Exception:
        checks["mongodb"] = "error"
        overall = "unhealthy"

    reaper = getattr(request.app.state, "reaper", None)
    if reaper is not None and reaper.running:
        checks["expiry_reaper"] = "ok"
    else:
        checks["expiry_reaper"] = "stopped"
        if overall == "healthy":
            overall = "degraded"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content={"status": overall, "checks": checks},
    )
