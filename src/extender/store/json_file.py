"""Track store persisted to a single JSON file."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from extender.models.track import Track
from extender.store.memory import InMemoryTrackStore

logger = logging.getLogger(__name__)


class JsonTrackStore(InMemoryTrackStore):
    """In-memory store that writes its content to disk after each change.

    The file is rewritten through a temporary sibling and ``os.replace`` so
    a crash mid-write leaves the previous content intact.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        for item in data.get("tracks", []):
            track = Track.model_validate(item)
            self._tracks[track.id] = track
        self._next_id = max(data.get("next_id", 1), max(self._tracks, default=0) + 1)
        logger.info("Loaded %d tracks from %s", len(self._tracks), self.path)

    def _changed(self) -> None:
        payload = {
            "next_id": self._next_id,
            "tracks": [t.model_dump(mode="json") for t in self._tracks.values()],
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)
