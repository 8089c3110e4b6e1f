"""Track record storage."""

from extender.store.base import TrackStore
from extender.store.json_file import JsonTrackStore
from extender.store.memory import InMemoryTrackStore

__all__ = ["InMemoryTrackStore", "JsonTrackStore", "TrackStore"]
