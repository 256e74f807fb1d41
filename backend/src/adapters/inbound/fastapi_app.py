"""
FastAPI application - primary inbound adapter.
"""
from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.src.infrastructure.config import Settings
from backend.src.infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"

settings = Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    setup_logging(settings.logging.level)
    settings.validate_production()
    logger.info("Framegrab starting up (sampler=%s)...", settings.sampling.backend)
    from backend.src.infrastructure.container import ApplicationContainer
    container = ApplicationContainer(settings)
    container.prepare_storage()
    app.state.container = container
    yield
    logger.info("Framegrab shutting down...")


app = FastAPI(
    title="Framegrab API",
    description="Video to still-frame extraction service",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS: restrict origins in production
_allowed_origin = os.environ.get("ALLOWED_ORIGIN", "")
if settings.app_env == "production" and _allowed_origin:
    _origins = [o.strip() for o in _allowed_origin.split(",") if o.strip()]
else:
    _origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log each request with method, path, status, and duration."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["cache-control"] = "no-store, no-cache, must-revalidate"
    logger.info(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


from backend.src.adapters.inbound.api.extraction import error_response
from backend.src.core.exceptions import FramegrabError


@app.exception_handler(FramegrabError)
async def framegrab_error_handler(request: Request, exc: FramegrabError):
    logger.info("Rejected %s %s: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    return error_response(exc.kind, exc.message, exc.detail)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "kind": "HTTPError"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Failed to process video", "kind": "InternalError"})


# ── API routes ─────────────────────────────────────────────────

from backend.src.adapters.inbound.api.extraction import router as extraction_router

app.include_router(extraction_router, tags=["extraction"])
# Path used by existing web clients
app.include_router(extraction_router, prefix="/api", tags=["extraction"], include_in_schema=False)


@app.get("/api/health")
async def health(request: Request):
    sampler = request.app.state.container.frame_sampler()
    return {
        "status": "ok",
        "version": APP_VERSION,
        "sampler": getattr(sampler, "name", type(sampler).__name__),
    }


@app.get("/api/mounts")
async def list_mounts(request: Request):
    """Allow-listed output mounts, for the folder picker."""
    resolver = request.app.state.container.path_resolver()
    return {
        "mounts": resolver.mount_names,
        "defaultSubFolder": resolver.default_sub_folder,
    }
