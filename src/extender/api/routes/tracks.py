"""Track management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse

from extender.api.deps import (
    get_ingestor,
    get_orchestrator,
    get_owner_id,
    get_status_reporter,
    get_streamer,
    get_track_service,
)
from extender.api.schemas import (
    ClearResponse,
    ProcessResponse,
    StatusResponse,
    TrackResponse,
)
from extender.errors import InvalidInputError
from extender.models.track import ProcessingSettings
from extender.services.ingest import MediaIngestor
from extender.services.orchestrator import ExtensionOrchestrator
from extender.services.status import StatusReporter
from extender.services.streaming import MediaStreamer
from extender.services.tracks import TrackService

router = APIRouter(prefix="/api/tracks", tags=["tracks"])

UPLOAD_CHUNK_SIZE = 1024 * 1024


async def _read_upload(upload: UploadFile, limit: int) -> bytes:
    """Read at most one chunk past ``limit`` so oversized uploads are detectable."""
    buffer = bytearray()
    while len(buffer) <= limit:
        chunk = await upload.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
    return bytes(buffer)


# ------------------------------------------------------------------
# Upload / list / clear
# ------------------------------------------------------------------


@router.post("/upload", response_model=TrackResponse, status_code=201)
async def upload_track(
    audio: UploadFile | None = File(None),
    owner_id: str = Depends(get_owner_id),
    ingestor: MediaIngestor = Depends(get_ingestor),
) -> TrackResponse:
    if audio is None or not audio.filename:
        raise InvalidInputError("No file uploaded")
    data = await _read_upload(audio, ingestor.max_upload_bytes)
    track = await ingestor.ingest(data, audio.content_type, audio.filename, owner_id)
    return TrackResponse.from_track(track)


@router.get("", response_model=list[TrackResponse])
async def list_tracks(
    owner_id: str = Depends(get_owner_id),
    tracks: TrackService = Depends(get_track_service),
) -> list[TrackResponse]:
    return [TrackResponse.from_track(t) for t in await tracks.list_tracks(owner_id)]


@router.delete("", response_model=ClearResponse)
async def clear_tracks(
    owner_id: str = Depends(get_owner_id),
    tracks: TrackService = Depends(get_track_service),
) -> ClearResponse:
    deleted = await tracks.clear(owner_id)
    return ClearResponse(message="All tracks cleared", deleted=deleted)


# ------------------------------------------------------------------
# Single track
# ------------------------------------------------------------------


@router.get("/{track_id}", response_model=TrackResponse)
async def get_track(
    track_id: int,
    owner_id: str = Depends(get_owner_id),
    tracks: TrackService = Depends(get_track_service),
) -> TrackResponse:
    return TrackResponse.from_track(await tracks.get(track_id, owner_id))


@router.post("/{track_id}/process", response_model=ProcessResponse, status_code=202)
async def process_track(
    track_id: int,
    settings: ProcessingSettings,
    owner_id: str = Depends(get_owner_id),
    orchestrator: ExtensionOrchestrator = Depends(get_orchestrator),
) -> ProcessResponse:
    track = await orchestrator.start(track_id, owner_id, settings)
    return ProcessResponse(track_id=track.id, status=track.status.value)


@router.get("/{track_id}/status", response_model=StatusResponse)
async def get_status(
    track_id: int,
    owner_id: str = Depends(get_owner_id),
    reporter: StatusReporter = Depends(get_status_reporter),
) -> StatusResponse:
    snapshot = await reporter.get_status(track_id, owner_id)
    return StatusResponse(status=snapshot.status.value, version_count=snapshot.version_count)


@router.get("/{track_id}/download")
async def download_track(
    track_id: int,
    version: int = Query(0, ge=0, description="Zero-based version index"),
    owner_id: str = Depends(get_owner_id),
    streamer: MediaStreamer = Depends(get_streamer),
) -> FileResponse:
    path, filename = await streamer.resolve_download(track_id, owner_id, version)
    return FileResponse(path=path, filename=filename)
