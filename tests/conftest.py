"""Shared fixtures for Track Extender tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from extender.config import Settings
from extender.errors import WorkerError
from extender.jobs.manager import JobManager
from extender.models.media import AudioInfo
from extender.models.track import ProcessingSettings, Track
from extender.security.paths import PathGuard
from extender.store.memory import InMemoryTrackStore


class FakeWorker:
    """In-process stand-in for the external audio worker."""

    def __init__(self) -> None:
        self.info = AudioInfo(format="wav", bitrate=1_411_000, duration=42.0, bpm=120.0, key="A minor")
        self.fail_transform = False
        self.fail_metadata = False
        self.gate: asyncio.Event | None = None
        self.transform_calls: list[tuple[Path, Path, ProcessingSettings]] = []
        self.metadata_calls: list[Path] = []

    async def transform(self, input_path: Path, output_path: Path, settings: ProcessingSettings) -> None:
        self.transform_calls.append((Path(input_path), Path(output_path), settings))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_transform:
            raise WorkerError("audio processor failed")
        Path(output_path).write_bytes(b"EXTENDED" + Path(input_path).read_bytes())

    async def extract_metadata(self, path: Path) -> AudioInfo:
        self.metadata_calls.append(Path(path))
        if self.fail_metadata:
            raise WorkerError("audio analyzer failed")
        return self.info


@pytest.fixture
def roots(tmp_path: Path) -> tuple[Path, Path]:
    uploads = tmp_path / "uploads"
    results = tmp_path / "results"
    uploads.mkdir()
    results.mkdir()
    return uploads.resolve(), results.resolve()


@pytest.fixture
def guard(roots: tuple[Path, Path]) -> PathGuard:
    return PathGuard(*roots)


@pytest.fixture
def store() -> InMemoryTrackStore:
    return InMemoryTrackStore()


@pytest.fixture
def worker() -> FakeWorker:
    return FakeWorker()


@pytest.fixture
def job_manager() -> JobManager:
    return JobManager(max_concurrent=2)


@pytest.fixture
def settings(roots: tuple[Path, Path]) -> Settings:
    uploads, results = roots
    return Settings(
        _env_file=None,
        uploads_dir=uploads,
        results_dir=results,
        default_owner_id="demo",
    )


@pytest.fixture
def make_track(store: InMemoryTrackStore, guard: PathGuard):
    """Create a track whose original file exists in the uploads root."""

    async def _make(
        filename: str = "song.wav",
        owner_id: str = "demo",
        content: bytes = b"RIFF" + bytes(range(256)) * 4,
    ) -> Track:
        path = guard.uploads_root / f"stored-{len(await store.list_by_owner(owner_id))}-{owner_id}.wav"
        path.write_bytes(content)
        return await store.create(owner_id=owner_id, original_filename=filename, original_path=str(path))

    return _make
