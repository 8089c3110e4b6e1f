"""Track store interface.

The store is an external collaborator; these protocols define the contract
the services rely on so implementations can be swapped.
"""

from typing import Any, Protocol

from extender.models.track import Track


class TrackStore(Protocol):
    """CRUD access to Track records."""

    async def create(self, owner_id: str, original_filename: str, original_path: str) -> Track:
        """Create a track with ``status=uploaded`` and a fresh id."""
        ...

    async def get(self, track_id: int) -> Track | None:
        """Return a snapshot of the track, or None if it doesn't exist."""
        ...

    async def list_by_owner(self, owner_id: str) -> list[Track]:
        """List an owner's tracks, most recent first."""
        ...

    async def update(self, track_id: int, **changes: Any) -> Track:
        """Apply field changes atomically and return the updated snapshot.

        Raises:
            NotFoundError: If the track doesn't exist.
        """
        ...

    async def delete_by_owner(self, owner_id: str) -> list[Track]:
        """Delete all of an owner's tracks and return what was removed."""
        ...
