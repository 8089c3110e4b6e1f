"""In-memory track store."""

from __future__ import annotations

import copy
from typing import Any

from extender.errors import NotFoundError
from extender.models.track import Track


class InMemoryTrackStore:
    """Keeps tracks in a dict keyed by id.

    Every read returns a deep copy, so callers never see a record change
    underneath them and can't mutate stored state by accident.
    """

    def __init__(self) -> None:
        self._tracks: dict[int, Track] = {}
        self._next_id = 1

    async def create(self, owner_id: str, original_filename: str, original_path: str) -> Track:
        track = Track(
            id=self._next_id,
            owner_id=owner_id,
            original_filename=original_filename,
            original_path=original_path,
        )
        self._next_id += 1
        self._tracks[track.id] = track
        self._changed()
        return track.model_copy(deep=True)

    async def get(self, track_id: int) -> Track | None:
        track = self._tracks.get(track_id)
        return track.model_copy(deep=True) if track is not None else None

    async def list_by_owner(self, owner_id: str) -> list[Track]:
        tracks = [t for t in self._tracks.values() if t.owner_id == owner_id]
        tracks.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        return [t.model_copy(deep=True) for t in tracks]

    async def update(self, track_id: int, **changes: Any) -> Track:
        current = self._tracks.get(track_id)
        if current is None:
            raise NotFoundError("Track not found")
        updated = current.model_copy(update=copy.deepcopy(changes))
        self._tracks[track_id] = updated
        self._changed()
        return updated.model_copy(deep=True)

    async def delete_by_owner(self, owner_id: str) -> list[Track]:
        removed = [t for t in self._tracks.values() if t.owner_id == owner_id]
        for track in removed:
            del self._tracks[track.id]
        if removed:
            self._changed()
        return removed

    def _changed(self) -> None:
        """Hook called after every mutation."""
        pass
