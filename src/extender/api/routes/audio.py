"""Audio streaming endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import StreamingResponse

from extender.api.deps import get_owner_id, get_streamer
from extender.services.streaming import MediaKind, MediaStreamer

router = APIRouter(prefix="/api/audio", tags=["audio"])


@router.get("/{track_id}/{kind}")
async def stream_audio(
    track_id: int,
    kind: MediaKind,
    version: int = Query(0, ge=0, description="Zero-based version index"),
    range_header: str | None = Header(None, alias="Range"),
    owner_id: str = Depends(get_owner_id),
    streamer: MediaStreamer = Depends(get_streamer),
) -> StreamingResponse:
    payload = await streamer.open(track_id, owner_id, kind, version, range_header)
    return StreamingResponse(
        payload.iter_bytes(),
        status_code=206 if payload.partial else 200,
        media_type=payload.media_type,
        headers=payload.headers,
    )
