"""Data models for Track Extender."""

from extender.models.media import AUDIO_MEDIA_TYPES, MIME_EXTENSIONS, AudioInfo
from extender.models.track import (
    BeatDetection,
    ProcessingSettings,
    Track,
    TrackStatus,
    TrackVersion,
)

__all__ = [
    # Media
    "AUDIO_MEDIA_TYPES",
    "MIME_EXTENSIONS",
    "AudioInfo",
    # Track
    "BeatDetection",
    "ProcessingSettings",
    "Track",
    "TrackStatus",
    "TrackVersion",
]
