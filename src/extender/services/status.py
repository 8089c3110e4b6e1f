"""Read-only status projection for polling clients."""

from dataclasses import dataclass

from extender.models.track import TrackStatus
from extender.services.tracks import load_owned_track
from extender.store.base import TrackStore


@dataclass(frozen=True)
class StatusSnapshot:
    status: TrackStatus
    version_count: int


class StatusReporter:
    """Reports a track's processing status.

    Reads take no lock, so a poll may observe a track mid-transition
    (e.g. ``processing`` with the previous version list).
    """

    def __init__(self, store: TrackStore) -> None:
        self.store = store

    async def get_status(self, track_id: int, owner_id: str) -> StatusSnapshot:
        track = await load_owned_track(self.store, track_id, owner_id)
        return StatusSnapshot(status=track.status, version_count=track.version_count)
