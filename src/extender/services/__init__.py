"""Service layer for Track Extender."""

from extender.services.ingest import MediaIngestor
from extender.services.orchestrator import ExtensionOrchestrator
from extender.services.status import StatusReporter
from extender.services.streaming import MediaStreamer
from extender.services.tracks import TrackService
from extender.services.worker import SubprocessWorker

__all__ = [
    "ExtensionOrchestrator",
    "MediaIngestor",
    "MediaStreamer",
    "StatusReporter",
    "SubprocessWorker",
    "TrackService",
]
