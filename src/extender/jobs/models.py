"""Job domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


class JobStatus(str, Enum):
    """Status of a job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobType(str, Enum):
    """Type of job."""

    METADATA = "metadata"
    TRANSFORM = "transform"


@dataclass
class Job:
    """A background task tied to one track."""

    id: str = field(default_factory=lambda: str(uuid4()))
    type: JobType = JobType.METADATA
    track_id: int = 0
    status: JobStatus = JobStatus.PENDING
    message: str = ""
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None
