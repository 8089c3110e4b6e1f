"""Request and response schemas for the Track Extender API.

All payloads use camelCase keys on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from extender.jobs.models import Job
from extender.models.track import ProcessingSettings, Track


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------
# Track responses
# ------------------------------------------------------------------


class TrackResponse(CamelModel):
    id: int
    owner_id: str
    original_filename: str
    original_path: str
    format: str | None = None
    bitrate: int | None = None
    duration: float | None = None
    bpm: float | None = None
    key: str | None = None
    status: str
    settings: ProcessingSettings | None = None
    extended_paths: list[str] = Field(default_factory=list)
    extended_durations: list[float | None] = Field(default_factory=list)
    version_count: int = 0
    created_at: datetime

    @classmethod
    def from_track(cls, track: Track) -> TrackResponse:
        return cls(
            id=track.id,
            owner_id=track.owner_id,
            original_filename=track.original_filename,
            original_path=track.original_path,
            format=track.format,
            bitrate=track.bitrate,
            duration=track.duration,
            bpm=track.bpm,
            key=track.key,
            status=track.status.value,
            settings=track.settings,
            extended_paths=track.extended_paths,
            extended_durations=track.extended_durations,
            version_count=track.version_count,
            created_at=track.created_at,
        )


class ClearResponse(CamelModel):
    message: str
    deleted: int


# ------------------------------------------------------------------
# Processing
# ------------------------------------------------------------------


class ProcessResponse(CamelModel):
    message: str = "Processing started"
    track_id: int
    status: str


class StatusResponse(CamelModel):
    status: str
    version_count: int


# ------------------------------------------------------------------
# Jobs
# ------------------------------------------------------------------


class JobListItem(CamelModel):
    job_id: str
    type: str
    track_id: int
    status: str
    message: str = ""
    error: str | None = None
    created_at: datetime
    completed_at: datetime | None = None

    @classmethod
    def from_job(cls, job: Job) -> JobListItem:
        return cls(
            job_id=job.id,
            type=job.type.value,
            track_id=job.track_id,
            status=job.status.value,
            message=job.message,
            error=job.error,
            created_at=job.created_at,
            completed_at=job.completed_at,
        )
