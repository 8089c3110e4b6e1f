"""Tests for upload ingestion."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from extender.errors import AccessDeniedError, InvalidInputError
from extender.jobs.models import JobStatus, JobType
from extender.models.track import TrackStatus
from extender.services.ingest import MediaIngestor

WAV_BYTES = b"RIFF" + b"\x00" * 2048


@pytest.fixture
def ingestor(store, worker, guard, job_manager) -> MediaIngestor:
    return MediaIngestor(store, worker, guard, job_manager, max_upload_bytes=4096)


class TestIngest:
    @pytest.mark.asyncio
    async def test_valid_upload(self, ingestor, guard, job_manager) -> None:
        track = await ingestor.ingest(WAV_BYTES, "audio/wav", "My Song.wav", "demo")

        assert track.status == TrackStatus.UPLOADED
        assert track.owner_id == "demo"
        assert track.original_filename == "My Song.wav"
        assert guard.is_upload(track.original_path)
        assert not track.original_path.endswith("My Song.wav")
        with open(track.original_path, "rb") as f:
            assert f.read() == WAV_BYTES
        await job_manager.wait_idle()

    @pytest.mark.asyncio
    async def test_metadata_filled_in_background(self, ingestor, store, worker, job_manager) -> None:
        track = await ingestor.ingest(WAV_BYTES, "audio/wav", "song.wav", "demo")
        await job_manager.wait_idle()

        filled = await store.get(track.id)
        assert filled.format == "wav"
        assert filled.duration == 42.0
        assert filled.bpm == 120.0
        assert filled.key == "A minor"
        assert filled.status == TrackStatus.UPLOADED
        assert len(worker.metadata_calls) == 1

    @pytest.mark.asyncio
    async def test_metadata_failure_is_swallowed(self, ingestor, store, worker, job_manager) -> None:
        worker.fail_metadata = True
        track = await ingestor.ingest(WAV_BYTES, "audio/wav", "song.wav", "demo")
        await job_manager.wait_idle()

        stored = await store.get(track.id)
        assert stored is not None
        assert stored.duration is None
        [job] = job_manager.list_jobs(track.id)
        assert job.type == JobType.METADATA
        assert job.status == JobStatus.FAILED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mime", ["audio/ogg", "video/mp4", "text/plain", None])
    async def test_rejects_mime_type(self, ingestor, guard, mime) -> None:
        with pytest.raises(InvalidInputError):
            await ingestor.ingest(WAV_BYTES, mime, "song.wav", "demo")
        assert list(guard.uploads_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_rejects_oversized(self, ingestor, guard) -> None:
        with pytest.raises(InvalidInputError):
            await ingestor.ingest(b"\x00" * 4097, "audio/wav", "song.wav", "demo")
        assert list(guard.uploads_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_traversal_filename_is_sanitized(self, ingestor, guard, job_manager) -> None:
        track = await ingestor.ingest(WAV_BYTES, "audio/mpeg", "../../etc/evil.mp3", "demo")
        assert track.original_filename == "etcevil.mp3"
        assert guard.is_upload(track.original_path)
        assert track.original_path.endswith(".mp3")
        await job_manager.wait_idle()

    @pytest.mark.asyncio
    async def test_unknown_extension_uses_mime_suffix(self, ingestor, job_manager) -> None:
        track = await ingestor.ingest(WAV_BYTES, "audio/x-aiff", "take1.aif", "demo")
        assert track.original_path.endswith(".aiff")
        await job_manager.wait_idle()

    @pytest.mark.asyncio
    async def test_denied_path_removes_file(self, ingestor, guard, store) -> None:
        with patch.object(guard, "is_upload", return_value=False):
            with pytest.raises(AccessDeniedError):
                await ingestor.ingest(WAV_BYTES, "audio/wav", "song.wav", "demo")
        assert list(guard.uploads_root.iterdir()) == []
        assert await store.list_by_owner("demo") == []

    @pytest.mark.asyncio
    async def test_store_failure_removes_file(self, ingestor, guard, store) -> None:
        with patch.object(store, "create", side_effect=RuntimeError("store unavailable")):
            with pytest.raises(RuntimeError):
                await ingestor.ingest(WAV_BYTES, "audio/wav", "song.wav", "demo")
        assert list(guard.uploads_root.iterdir()) == []
