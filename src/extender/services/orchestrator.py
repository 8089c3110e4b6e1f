"""Extension job orchestration.

State machine per track::

    uploaded --start--> processing --ok--> completed
    completed --start--> regenerate --ok--> completed
    processing/regenerate --worker failure--> error

Admission (version limit, in-flight check, status transition) runs under
a per-track lock, so concurrent start requests for the same track cannot
both pass the version check. The transform itself runs as a background job;
callers observe the outcome only by polling the track status.

Each track writes its versions into its own subdirectory of the results
root, so tracks uploaded under the same name never overwrite each other.
A failed transform leaves ``version_count`` untouched, so it does not use
up one of the allowed versions. There is no user-facing cancellation: once
started, a transform runs to completion or failure. A transform cancelled
by shutdown is recorded as a failure.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from extender.errors import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    OutputPathError,
    VersionLimitError,
)
from extender.jobs.manager import JobManager
from extender.jobs.models import Job, JobType
from extender.models.track import ProcessingSettings, Track, TrackStatus, TrackVersion
from extender.security.filenames import derive_extended_filename
from extender.security.paths import PathGuard
from extender.services.interfaces import IWorker
from extender.services.tracks import load_owned_track
from extender.store.base import TrackStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_VERSIONS = 3


class ExtensionOrchestrator:
    """Starts extension jobs and applies their results to tracks."""

    def __init__(
        self,
        store: TrackStore,
        worker: IWorker,
        guard: PathGuard,
        jobs: JobManager,
        max_versions: int = DEFAULT_MAX_VERSIONS,
    ) -> None:
        self.store = store
        self.worker = worker
        self.guard = guard
        self.jobs = jobs
        self.max_versions = max_versions
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}
        self._in_flight: set[int] = set()

    def is_processing(self, track_id: int) -> bool:
        """Check if a transform is running for the track in this process."""
        return track_id in self._in_flight

    async def start(
        self,
        track_id: int,
        owner_id: str,
        settings: ProcessingSettings,
    ) -> Track:
        """Admit an extension request and launch the transform.

        Returns as soon as the new status is persisted.

        Returns:
            The track snapshot with status processing or regenerate.

        Raises:
            NotFoundError: Unknown track or owned by someone else
            ConflictError: A transform is already running for the track
            VersionLimitError: The track has no version slots left
            AccessDeniedError: The original file lies outside the uploads root
            OutputPathError: The derived output path is invalid
        """
        async with self._lock(track_id):
            track = await load_owned_track(self.store, track_id, owner_id)

            if track_id in self._in_flight:
                raise ConflictError("Track is already being processed")
            if track.version_count >= self.max_versions:
                raise VersionLimitError(track.version_count, self.max_versions)
            if not self.guard.is_upload(track.original_path):
                logger.warning("Security violation: process attempted on file outside uploads (track %d)", track_id)
                raise AccessDeniedError()

            version = track.version_count + 1
            output_path = self.guard.results_root / str(track_id) / derive_extended_filename(
                track.original_filename, version, Path(track.original_path).suffix.lower()
            )
            if not self.guard.is_result(output_path):
                logger.error("Derived output path rejected for track %d", track_id)
                raise OutputPathError("Error: Generated output path is invalid")

            status = TrackStatus.REGENERATE if track.has_versions else TrackStatus.PROCESSING
            track = await self.store.update(track_id, status=status, settings=settings)
            self._in_flight.add(track_id)
            try:
                self.jobs.submit(
                    JobType.TRANSFORM,
                    track_id,
                    self._transform_job(track, settings, output_path),
                )
            except Exception:
                self._in_flight.discard(track_id)
                raise

        logger.info("Started %s of track %d as version %d", status.value, track_id, version)
        return track

    @asynccontextmanager
    async def _lock(self, track_id: int) -> AsyncIterator[None]:
        """Hold the track's lock; the entry is dropped once no one holds or awaits it."""
        lock = self._locks.get(track_id)
        if lock is None:
            lock = self._locks[track_id] = asyncio.Lock()
        self._lock_users[track_id] = self._lock_users.get(track_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[track_id] -= 1
            if not self._lock_users[track_id]:
                del self._lock_users[track_id]
                del self._locks[track_id]

    def _transform_job(self, track: Track, settings: ProcessingSettings, output_path: Path):
        async def run(job: Job) -> None:
            try:
                job.message = "Extending track..."
                try:
                    output_path.parent.mkdir(parents=True, exist_ok=True)
                    await self.worker.transform(Path(track.original_path), output_path, settings)
                except Exception:
                    await self._record_failure(track.id, output_path)
                    raise

                job.message = "Reading extended audio info..."
                duration = await self._read_duration(output_path)
                await self._record_version(track.id, output_path, duration)
            except asyncio.CancelledError:
                # Shutdown; never leave the track stuck in processing
                logger.warning("Transform of track %d cancelled", track.id)
                await self._record_failure(track.id, output_path)
                raise
            finally:
                self._in_flight.discard(track.id)

        return run

    async def _read_duration(self, output_path: Path) -> float | None:
        """Duration of the new file; analysis failures degrade to None."""
        try:
            info = await self.worker.extract_metadata(output_path)
        except Exception as e:
            logger.warning("Could not read extended audio info for %s: %s", output_path.name, e)
            return None
        return info.duration

    async def _record_version(self, track_id: int, output_path: Path, duration: float | None) -> None:
        async with self._lock(track_id):
            current = await self.store.get(track_id)
            if current is None:
                # Track was cleared while the transform ran
                output_path.unlink(missing_ok=True)
                logger.info("Track %d removed during processing; discarded output", track_id)
                return

            await self.store.update(
                track_id,
                status=TrackStatus.COMPLETED,
                versions=[*current.versions, TrackVersion(path=str(output_path), duration=duration)],
                version_count=current.version_count + 1,
            )
        logger.info("Track %d completed version %d", track_id, current.version_count + 1)

    async def _record_failure(self, track_id: int, output_path: Path) -> None:
        if self.guard.is_result(output_path):
            output_path.unlink(missing_ok=True)
        async with self._lock(track_id):
            try:
                await self.store.update(track_id, status=TrackStatus.ERROR)
            except NotFoundError:
                logger.info("Track %d removed during processing", track_id)
