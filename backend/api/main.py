"""Banshee HTTP service: wiring of routers, stores, middleware and error mapping."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from banshee.errors import NoActiveSessionError, TrackError
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from backend.api.dependencies import get_settings
from backend.api.routers import activities, pacing, personal_bests
from backend.api.services import ledger_store, session_store

logger = logging.getLogger(__name__)

# Responses smaller than this (bytes) are sent uncompressed
GZIP_MIN_BYTES = 1000


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Restore persisted state on startup and drop it from memory on shutdown."""
    logging.basicConfig(level=settings.log_level.upper())

    ledger_store.init_ledger_dir(settings.data_dir, settings.timestamp_tolerance_ms)
    n_activities = ledger_store.load_persisted()
    logger.info(
        "Ledger ready: %d activities, %d personal bests",
        n_activities,
        len(ledger_store.get_ledger()),
    )

    session_store.init_session_store(
        settings.data_dir,
        distance_mode=settings.live_distance_mode,
        timestamp_tolerance_ms=settings.timestamp_tolerance_ms,
    )
    if session_store.load_persisted_session():
        logger.info("Resumed pacing against %s", session_store.get_session().record.id)

    yield

    # Disk copies stay; only in-memory state is dropped
    session_store.reset()
    ledger_store.clear_all()


# Shared with request handlers through the get_settings dependency
load_dotenv()
settings = get_settings()

app = FastAPI(
    title="Banshee API",
    description="Race a recorded run in real time and keep personal bests per milestone",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
    redirect_slashes=False,
)


# -- Error mapping ---------------------------------------------------------------


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    """500 with an opaque body; the traceback only goes to the log."""
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(TrackError)
async def track_error(request: Request, exc: TrackError) -> JSONResponse:
    """422 for tracks that are too short or structurally malformed."""
    logger.info("Rejected track on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def bad_value(request: Request, exc: ValueError) -> JSONResponse:
    """422 for any other invalid input that slipped past schema validation."""
    logger.warning("ValueError in %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NoActiveSessionError)
async def no_active_session(request: Request, exc: NoActiveSessionError) -> JSONResponse:
    """409 when an endpoint needs a reference run and none is loaded."""
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# -- Middleware (the last one added runs first) -----------------------------------

app.add_middleware(GZipMiddleware, minimum_size=GZIP_MIN_BYTES)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# -- Routes -----------------------------------------------------------------------

app.include_router(pacing.router, prefix="/api/pacing", tags=["pacing"])
app.include_router(activities.router, prefix="/api/activities", tags=["activities"])
app.include_router(personal_bests.router, prefix="/api/personal-bests", tags=["personal-bests"])


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "ok"}
