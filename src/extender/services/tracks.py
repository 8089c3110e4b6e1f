"""Track lookup and bulk removal."""

from __future__ import annotations

import logging
from pathlib import Path

from extender.errors import NotFoundError
from extender.models.track import Track
from extender.security.paths import PathGuard
from extender.store.base import TrackStore

logger = logging.getLogger(__name__)


async def load_owned_track(store: TrackStore, track_id: int, owner_id: str) -> Track:
    """Fetch a track, treating another owner's track as missing."""
    track = await store.get(track_id)
    if track is None or track.owner_id != owner_id:
        raise NotFoundError("Track not found")
    return track


class TrackService:
    """Read access to tracks and the owner-scoped bulk clear."""

    def __init__(self, store: TrackStore, guard: PathGuard) -> None:
        self.store = store
        self.guard = guard

    async def get(self, track_id: int, owner_id: str) -> Track:
        return await load_owned_track(self.store, track_id, owner_id)

    async def list_tracks(self, owner_id: str) -> list[Track]:
        return await self.store.list_by_owner(owner_id)

    async def clear(self, owner_id: str) -> int:
        """Delete all of an owner's tracks and their files.

        Only files that pass the path guard for their root are unlinked;
        anything else is skipped and logged.

        Returns:
            Number of track records removed.
        """
        for track in await self.store.list_by_owner(owner_id):
            if self.guard.is_upload(track.original_path):
                _unlink(Path(track.original_path))
            else:
                logger.warning("Security violation: delete attempted outside uploads (track %d)", track.id)

            for path in track.extended_paths:
                if self.guard.is_result(path):
                    _unlink(Path(path))
                else:
                    logger.warning("Security violation: delete attempted outside results (track %d)", track.id)

            track_dir = self.guard.results_root / str(track.id)
            if track_dir.is_dir() and not any(track_dir.iterdir()):
                track_dir.rmdir()

        removed = await self.store.delete_by_owner(owner_id)
        logger.info("Cleared %d tracks for owner %s", len(removed), owner_id)
        return len(removed)


def _unlink(path: Path) -> None:
    path.unlink(missing_ok=True)
