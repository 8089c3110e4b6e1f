"""Upload admission and storage."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePath

from extender.errors import AccessDeniedError, InvalidInputError
from extender.jobs.manager import JobManager
from extender.jobs.models import Job, JobType
from extender.models.media import AUDIO_MEDIA_TYPES, MIME_EXTENSIONS
from extender.models.track import Track
from extender.security.filenames import build_storage_name, sanitize_filename
from extender.security.paths import PathGuard
from extender.services.interfaces import IWorker
from extender.store.base import TrackStore

logger = logging.getLogger(__name__)


class MediaIngestor:
    """Validates uploads, stores them and creates Track records.

    The stored file always gets a generated name; the client's filename is
    only kept (sanitized) for display and for naming extended versions.
    """

    def __init__(
        self,
        store: TrackStore,
        worker: IWorker,
        guard: PathGuard,
        jobs: JobManager,
        max_upload_bytes: int = 15 * 1024 * 1024,
    ) -> None:
        self.store = store
        self.worker = worker
        self.guard = guard
        self.jobs = jobs
        self.max_upload_bytes = max_upload_bytes

    async def ingest(
        self,
        data: bytes,
        content_type: str | None,
        filename: str,
        owner_id: str,
    ) -> Track:
        """Store an uploaded file and create its track.

        Args:
            data: File content
            content_type: MIME type declared by the client
            filename: Filename declared by the client
            owner_id: Owner of the new track

        Returns:
            The new Track (status=uploaded). Metadata fields are filled in
            later by a background job.

        Raises:
            InvalidInputError: Disallowed MIME type or file too large
            AccessDeniedError: Stored path failed validation
        """
        if content_type not in MIME_EXTENSIONS:
            raise InvalidInputError(
                "Invalid file type. Only MP3, WAV, FLAC, and AIFF files are allowed."
            )
        if len(data) > self.max_upload_bytes:
            raise InvalidInputError(
                f"File too large. Maximum size is {self.max_upload_bytes // (1024 * 1024)} MB."
            )

        display_name = sanitize_filename(filename)
        extension = PurePath(display_name).suffix.lower()
        if extension not in AUDIO_MEDIA_TYPES:
            extension = MIME_EXTENSIONS[content_type]

        storage_path = self.guard.uploads_root / build_storage_name(extension)
        await asyncio.to_thread(storage_path.write_bytes, data)

        if not self.guard.is_upload(storage_path):
            storage_path.unlink(missing_ok=True)
            logger.warning("Security violation: upload stored outside uploads directory")
            raise AccessDeniedError()

        try:
            track = await self.store.create(
                owner_id=owner_id,
                original_filename=display_name or storage_path.name,
                original_path=str(storage_path),
            )
        except Exception:
            storage_path.unlink(missing_ok=True)
            raise
        logger.info("Stored upload for track %d (%d bytes)", track.id, len(data))

        self.jobs.submit(JobType.METADATA, track.id, self._metadata_job(track.id, storage_path))
        return track

    def _metadata_job(self, track_id: int, path: Path):
        async def run(job: Job) -> None:
            job.message = "Analyzing audio..."
            info = await self.worker.extract_metadata(path)
            await self.store.update(track_id, **info.model_dump(exclude_none=True))

        return run
