from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator

import httpx
import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from score_publisher.api.middleware.correlation_id import CorrelationIdMiddleware
from score_publisher.api.v1.routers import events, health, outbox
from score_publisher.application.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from score_publisher.config import settings
from score_publisher.infrastructure.db.uow import uow_scope
from score_publisher.infrastructure.provider.http_score_provider import HttpScoreProvider
from score_publisher.infrastructure.scheduling.job_scheduler import JobScheduler
from score_publisher.services import event_service
from score_publisher.services.score_poll_service import poll_event_score
from score_publisher.workers.outbox_worker import build_outbox_service, build_reconciler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    app.state.http = httpx.AsyncClient(timeout=settings.SCORE_PROVIDER_TIMEOUT)
    logger.info("Redis and provider clients created")

    outbox_service = build_outbox_service(app.state.redis)
    provider = HttpScoreProvider(app.state.http, settings.SCORE_PROVIDER_URL)
    scheduler = JobScheduler(
        partial(
            poll_event_score,
            provider=provider,
            outbox=outbox_service,
            uow_factory=uow_scope,
        ),
        interval=settings.POLL_INTERVAL,
        initial_delay=settings.POLL_INITIAL_DELAY,
        max_concurrency=settings.POLL_MAX_CONCURRENCY,
    )
    app.state.scheduler = scheduler

    async with uow_scope() as uow:
        await event_service.resume_live_jobs(uow, scheduler)

    reconciler = None
    if settings.RUN_RECONCILER_IN_APP:
        reconciler = build_reconciler(outbox_service)
        reconciler.start()
    app.state.reconciler = reconciler

    yield

    if reconciler is not None:
        reconciler.cancel()
    await scheduler.shutdown()
    await app.state.http.aclose()
    await app.state.redis.aclose()
    logger.info("Redis and provider clients closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Score Publisher",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(events.router)
    app.include_router(outbox.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
