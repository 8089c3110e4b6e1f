"""Media-related data models."""

from pydantic import BaseModel, Field


class AudioInfo(BaseModel):
    """Metadata reported by the analysis step of the worker."""

    format: str | None = Field(None, description="Container/codec name (e.g. 'mp3')")
    bitrate: int | None = Field(None, description="Bitrate in bits per second")
    duration: float | None = Field(None, description="Duration in seconds")
    bpm: float | None = Field(None, description="Detected tempo")
    key: str | None = Field(None, description="Detected musical key")


# Upload MIME types accepted by the ingestor, with the storage suffix used
# when the client-supplied filename has no usable extension.
MIME_EXTENSIONS: dict[str, str] = {
    "audio/mpeg": ".mp3",
    "audio/wav": ".wav",
    "audio/flac": ".flac",
    "audio/aiff": ".aiff",
    "audio/x-aiff": ".aiff",
}

# Extensions the streamer will serve, with their response content type.
AUDIO_MEDIA_TYPES: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".aiff": "audio/aiff",
}
