from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from score_publisher.infrastructure.db.session import AsyncSessionLocal

router = APIRouter(tags=["health"])


async def _check_postgres(request: Request) -> None:
    async with AsyncSessionLocal() as session:
        await session.execute(text("SELECT 1"))


async def _check_redis(request: Request) -> None:
    await request.app.state.redis.ping()


_READINESS_CHECKS: dict[str, Callable[[Request], Awaitable[None]]] = {
    "postgres": _check_postgres,
    "redis": _check_redis,
}


@router.get("/healthz")
async def healthz(request: Request) -> dict[str, object]:
    scheduler = getattr(request.app.state, "scheduler", None)
    reconciler = getattr(request.app.state, "reconciler", None)
    return {
        "status": "ok",
        "live_jobs": len(scheduler.running_jobs()) if scheduler is not None else 0,
        "reconciler": reconciler is not None and reconciler.running,
    }


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    for name, check in _READINESS_CHECKS.items():
        try:
            await check(request)
        except Exception as exc:  # noqa: BLE001
            checks[name] = f"error: {exc}"
        else:
            checks[name] = "ok"

    if any(result != "ok" for result in checks.values()):
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "checks": checks},
        )
    return JSONResponse(content={"status": "ready", "checks": checks})
