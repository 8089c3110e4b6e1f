"""Health check endpoint."""

import os

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    uploads_writable: bool
    results_writable: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Return the health status of the application and its media roots."""
    from extender import __version__

    guard = request.app.state.guard
    return HealthResponse(
        status="healthy",
        version=__version__,
        uploads_writable=os.access(guard.uploads_root, os.W_OK),
        results_writable=os.access(guard.results_root, os.W_OK),
    )
