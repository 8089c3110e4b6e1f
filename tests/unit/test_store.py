"""Tests for track stores."""

from pathlib import Path

import pytest

from extender.errors import NotFoundError
from extender.models.track import TrackStatus, TrackVersion
from extender.store.json_file import JsonTrackStore
from extender.store.memory import InMemoryTrackStore


class TestInMemoryTrackStore:
    @pytest.mark.asyncio
    async def test_create_assigns_ids(self) -> None:
        store = InMemoryTrackStore()
        first = await store.create("demo", "a.wav", "/u/a.wav")
        second = await store.create("demo", "b.wav", "/u/b.wav")
        assert (first.id, second.id) == (1, 2)
        assert first.status == TrackStatus.UPLOADED
        assert first.version_count == 0

    @pytest.mark.asyncio
    async def test_get_returns_copy(self) -> None:
        store = InMemoryTrackStore()
        track = await store.create("demo", "a.wav", "/u/a.wav")
        snapshot = await store.get(track.id)
        snapshot.versions.append(TrackVersion(path="/r/x.wav"))
        assert (await store.get(track.id)).versions == []

    @pytest.mark.asyncio
    async def test_get_missing(self) -> None:
        assert await InMemoryTrackStore().get(99) is None

    @pytest.mark.asyncio
    async def test_update(self) -> None:
        store = InMemoryTrackStore()
        track = await store.create("demo", "a.wav", "/u/a.wav")
        updated = await store.update(track.id, status=TrackStatus.PROCESSING, bpm=128.0)
        assert updated.status == TrackStatus.PROCESSING
        assert (await store.get(track.id)).bpm == 128.0

    @pytest.mark.asyncio
    async def test_update_missing(self) -> None:
        with pytest.raises(NotFoundError):
            await InMemoryTrackStore().update(1, status=TrackStatus.ERROR)

    @pytest.mark.asyncio
    async def test_delete_by_owner_is_scoped(self) -> None:
        store = InMemoryTrackStore()
        await store.create("alice", "a.wav", "/u/a.wav")
        await store.create("bob", "b.wav", "/u/b.wav")
        removed = await store.delete_by_owner("alice")
        assert [t.original_filename for t in removed] == ["a.wav"]
        assert await store.list_by_owner("alice") == []
        assert len(await store.list_by_owner("bob")) == 1


class TestJsonTrackStore:
    @pytest.mark.asyncio
    async def test_survives_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "tracks.json"
        store = JsonTrackStore(path)
        track = await store.create("demo", "a.wav", "/u/a.wav")
        await store.update(
            track.id,
            status=TrackStatus.COMPLETED,
            versions=[TrackVersion(path="/r/1/a_extended_v1.wav", duration=None)],
            version_count=1,
        )

        reloaded = JsonTrackStore(path)
        loaded = await reloaded.get(track.id)
        assert loaded.status == TrackStatus.COMPLETED
        assert loaded.extended_paths == ["/r/1/a_extended_v1.wav"]
        assert loaded.extended_durations == [None]

        another = await reloaded.create("demo", "b.wav", "/u/b.wav")
        assert another.id == track.id + 1

    @pytest.mark.asyncio
    async def test_missing_file_starts_empty(self, tmp_path: Path) -> None:
        store = JsonTrackStore(tmp_path / "absent.json")
        assert await store.list_by_owner("demo") == []
