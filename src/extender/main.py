"""Main entry point for the Track Extender application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from extender.api.routes import audio, health, jobs, tracks
from extender.config import Settings, settings as default_settings
from extender.errors import ExtenderError, RangeNotSatisfiableError
from extender.jobs.manager import JobManager
from extender.security.paths import PathGuard
from extender.services.ingest import MediaIngestor
from extender.services.interfaces import IWorker
from extender.services.orchestrator import ExtensionOrchestrator
from extender.services.status import StatusReporter
from extender.services.streaming import MediaStreamer
from extender.services.tracks import TrackService
from extender.services.worker import SubprocessWorker
from extender.store import InMemoryTrackStore, JsonTrackStore, TrackStore

logger = logging.getLogger(__name__)


def build_store(cfg: Settings) -> TrackStore:
    """Pick the track store from configuration."""
    if cfg.store_path is not None:
        return JsonTrackStore(cfg.store_path)
    return InMemoryTrackStore()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize services on startup, stop background jobs on shutdown."""
    cfg: Settings = app.state.settings
    guard: PathGuard = app.state.guard
    guard.uploads_root.mkdir(parents=True, exist_ok=True)
    guard.results_root.mkdir(parents=True, exist_ok=True)

    store = app.state.store or build_store(cfg)
    worker = app.state.worker or SubprocessWorker(
        transform_command=cfg.transform_command,
        analyze_command=cfg.analyze_command,
        timeout=cfg.worker_timeout,
    )
    job_manager = JobManager(max_concurrent=cfg.max_concurrent_jobs, max_history=cfg.job_history_limit)

    app.state.store = store
    app.state.job_manager = job_manager
    app.state.track_service = TrackService(store, guard)
    app.state.status_reporter = StatusReporter(store)
    app.state.streamer = MediaStreamer(store, guard)
    app.state.ingestor = MediaIngestor(
        store, worker, guard, job_manager, max_upload_bytes=cfg.max_upload_bytes
    )
    app.state.orchestrator = ExtensionOrchestrator(
        store, worker, guard, job_manager, max_versions=cfg.max_versions
    )
    logger.info("Serving uploads from %s, results from %s", guard.uploads_root, guard.results_root)
    yield
    await job_manager.shutdown()


async def _extender_error_handler(request: Request, exc: ExtenderError) -> JSONResponse:
    headers = None
    if isinstance(exc, RangeNotSatisfiableError):
        headers = {"Content-Range": f"bytes */{exc.file_size}"}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app(
    settings: Settings | None = None,
    store: TrackStore | None = None,
    worker: IWorker | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The media roots are canonicalized here, so a malformed root stops the
    process before it serves any traffic.

    Raises:
        ConfigurationError: If a configured root is invalid.
    """
    cfg = settings or default_settings
    uploads_root, results_root = cfg.resolve_roots()

    app = FastAPI(
        title="Track Extender",
        description="Upload audio tracks and generate extended versions",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.guard = PathGuard(uploads_root, results_root)
    app.state.store = store
    app.state.worker = worker

    app.add_exception_handler(ExtenderError, _extender_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    # Include API routes
    app.include_router(health.router)
    app.include_router(tracks.router)
    app.include_router(audio.router)
    app.include_router(jobs.router)

    return app


app = create_app()


def main() -> None:
    """Run the application."""
    logging.basicConfig(
        level=default_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    default_settings.ensure_directories()
    uvicorn.run(
        "extender.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )


if __name__ == "__main__":
    main()
