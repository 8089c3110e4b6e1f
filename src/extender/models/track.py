"""Track-related data models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SECTION_STEP = 8
MIN_SECTION_LENGTH = 8
MAX_SECTION_LENGTH = 64

BeatDetection = Literal["auto", "librosa", "madmom"]


class TrackStatus(str, Enum):
    """Lifecycle status of a track."""

    UPLOADED = "uploaded"
    PROCESSING = "processing"
    REGENERATE = "regenerate"
    COMPLETED = "completed"
    ERROR = "error"


class ProcessingSettings(BaseModel):
    """Parameters for one extension run.

    Section lengths are in beats and move in steps of 8.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    intro_length: int = Field(16, description="Intro length in beats")
    outro_length: int = Field(16, description="Outro length in beats")
    preserve_vocals: bool = Field(True, description="Keep vocals in extended sections")
    beat_detection: BeatDetection = Field("auto", description="Beat detection algorithm")

    @field_validator("intro_length", "outro_length")
    @classmethod
    def _check_section_length(cls, value: int) -> int:
        if not MIN_SECTION_LENGTH <= value <= MAX_SECTION_LENGTH:
            raise ValueError(
                f"must be between {MIN_SECTION_LENGTH} and {MAX_SECTION_LENGTH}"
            )
        if value % SECTION_STEP:
            raise ValueError(f"must be a multiple of {SECTION_STEP}")
        return value


class TrackVersion(BaseModel):
    """One successfully generated extended version."""

    path: str
    duration: float | None = None


class Track(BaseModel):
    """An uploaded audio file and its extended versions.

    Versions are kept as one ordered list of ``TrackVersion`` records, so
    ``extended_paths`` and ``extended_durations`` always line up.
    """

    id: int
    owner_id: str
    original_filename: str
    original_path: str

    format: str | None = None
    bitrate: int | None = None
    duration: float | None = None
    bpm: float | None = None
    key: str | None = None

    status: TrackStatus = TrackStatus.UPLOADED
    settings: ProcessingSettings | None = None
    versions: list[TrackVersion] = Field(default_factory=list)
    version_count: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def extended_paths(self) -> list[str]:
        return [v.path for v in self.versions]

    @property
    def extended_durations(self) -> list[float | None]:
        return [v.duration for v in self.versions]

    @property
    def has_versions(self) -> bool:
        """Check if at least one extended version exists."""
        return bool(self.versions)
