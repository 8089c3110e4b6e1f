"""Media delivery with single byte-range support."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath

from extender.errors import (
    InvalidInputError,
    NotFoundError,
    RangeNotSatisfiableError,
)
from extender.models.media import AUDIO_MEDIA_TYPES
from extender.models.track import Track
from extender.security.paths import PathGuard
from extender.services.tracks import load_owned_track
from extender.store.base import TrackStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1 << 16


class MediaKind(str, Enum):
    """Which file of a track to serve."""

    ORIGINAL = "original"
    EXTENDED = "extended"


def parse_byte_range(range_value: str, file_size: int) -> tuple[int, int]:
    """Return the inclusive byte range requested by ``range_value``.

    Accepts ``bytes=start-end``, ``bytes=start-`` and the suffix form
    ``bytes=-N``. ``end`` is clamped to the last byte of the file.

    Raises:
        InvalidInputError: The header is malformed.
        RangeNotSatisfiableError: The range lies entirely outside the file.
    """
    header = range_value.strip()
    if not header.lower().startswith("bytes="):
        raise InvalidInputError("Malformed Range header")

    spec = header[len("bytes="):].strip()
    if "-" not in spec:
        raise InvalidInputError("Malformed Range header")

    start_token, end_token = (token.strip() for token in spec.split("-", 1))
    if not start_token:
        # suffix-byte-range-spec: bytes=-N
        if not end_token.isdigit():
            raise InvalidInputError("Malformed Range header")
        length = int(end_token)
        if length == 0 or file_size == 0:
            raise RangeNotSatisfiableError(file_size)
        return max(file_size - length, 0), file_size - 1

    if not start_token.isdigit() or (end_token and not end_token.isdigit()):
        raise InvalidInputError("Malformed Range header")
    start = int(start_token)
    if end_token and int(end_token) < start:
        raise InvalidInputError("Malformed Range header")
    end = int(end_token) if end_token else file_size - 1
    if start >= file_size:
        raise RangeNotSatisfiableError(file_size)
    return start, min(end, file_size - 1)


def iter_file_chunks(path: Path, start: int, end: int, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the bytes of ``path`` between ``start`` and ``end`` (inclusive).

    The file is opened lazily and closed when the iterator finishes or is
    closed early (client disconnect).
    """
    remaining = end - start + 1
    if remaining <= 0:
        return

    with path.open("rb") as stream:
        stream.seek(start)
        while remaining > 0:
            chunk = stream.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


@dataclass(frozen=True)
class MediaPayload:
    """A resolved, validated file plus the span of it to send."""

    path: Path
    file_size: int
    media_type: str
    start: int
    end: int
    partial: bool

    @property
    def content_length(self) -> int:
        return max(self.end - self.start + 1, 0)

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "Accept-Ranges": "bytes",
            "Content-Length": str(self.content_length),
        }
        if self.partial:
            headers["Content-Range"] = f"bytes {self.start}-{self.end}/{self.file_size}"
        return headers

    def iter_bytes(self) -> Iterator[bytes]:
        return iter_file_chunks(self.path, self.start, self.end)


class MediaStreamer:
    """Resolves track files for streaming and download."""

    def __init__(self, store: TrackStore, guard: PathGuard) -> None:
        self.store = store
        self.guard = guard

    async def open(
        self,
        track_id: int,
        owner_id: str,
        kind: MediaKind,
        version: int = 0,
        range_header: str | None = None,
    ) -> MediaPayload:
        """Resolve a track file and the byte span to serve.

        Raises:
            NotFoundError: Missing track, version or file
            InvalidInputError: Bad extension or malformed range
            AccessDeniedError: Path outside both managed roots
            RangeNotSatisfiableError: Range beyond end of file
        """
        track = await load_owned_track(self.store, track_id, owner_id)
        if kind is MediaKind.ORIGINAL:
            raw_path = track.original_path
        else:
            raw_path = _extended_path(track, version)
        if not raw_path:
            raise NotFoundError(f"{kind.value} audio file not found")

        media_type = _media_type(raw_path)
        path = self.guard.require_managed(raw_path, "read")
        file_size = _file_size(path)

        # Multiple ranges are not supported; serve the whole file instead
        if range_header and "," in range_header:
            range_header = None

        if range_header:
            start, end = parse_byte_range(range_header, file_size)
            return MediaPayload(path, file_size, media_type, start, end, partial=True)
        return MediaPayload(path, file_size, media_type, 0, file_size - 1, partial=False)

    async def resolve_download(self, track_id: int, owner_id: str, version: int = 0) -> tuple[Path, str]:
        """Resolve an extended version for download.

        Returns:
            (file path, attachment filename)
        """
        track = await load_owned_track(self.store, track_id, owner_id)
        raw_path = _extended_path(track, version)
        if not raw_path:
            raise NotFoundError("Extended version not found")

        _media_type(raw_path)
        path = self.guard.require_result(raw_path, "download")
        _file_size(path)

        original = PurePath(track.original_filename)
        filename = f"{original.stem}_extended_v{version + 1}{original.suffix}"
        return path, filename


def _extended_path(track: Track, version: int) -> str | None:
    if version < 0:
        raise InvalidInputError("Invalid version")
    paths = track.extended_paths
    return paths[version] if version < len(paths) else None


def _media_type(path: str) -> str:
    media_type = AUDIO_MEDIA_TYPES.get(PurePath(path).suffix.lower())
    if media_type is None:
        raise InvalidInputError("Invalid file type")
    return media_type


def _file_size(path: Path) -> int:
    if not path.is_file():
        raise NotFoundError("Audio file not found on disk")
    return path.stat().st_size
