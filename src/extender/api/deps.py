"""FastAPI dependencies.

Services are built once in the application lifespan and kept on
``app.state``; these functions hand them to route handlers.
"""

from __future__ import annotations

from fastapi import Header, Request

from extender.jobs.manager import JobManager
from extender.services.ingest import MediaIngestor
from extender.services.orchestrator import ExtensionOrchestrator
from extender.services.status import StatusReporter
from extender.services.streaming import MediaStreamer
from extender.services.tracks import TrackService


def get_owner_id(
    request: Request,
    x_owner_id: str | None = Header(None),
) -> str:
    """Owner for this request: the X-Owner-Id header or the configured default."""
    if x_owner_id and x_owner_id.strip():
        return x_owner_id.strip()
    return request.app.state.settings.default_owner_id


def get_job_manager(request: Request) -> JobManager:
    return request.app.state.job_manager


def get_track_service(request: Request) -> TrackService:
    return request.app.state.track_service


def get_ingestor(request: Request) -> MediaIngestor:
    return request.app.state.ingestor


def get_orchestrator(request: Request) -> ExtensionOrchestrator:
    return request.app.state.orchestrator


def get_status_reporter(request: Request) -> StatusReporter:
    return request.app.state.status_reporter


def get_streamer(request: Request) -> MediaStreamer:
    return request.app.state.streamer
