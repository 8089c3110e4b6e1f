"""Service interfaces (Protocols) for Track Extender.

The audio transformation itself runs out of process; this protocol is the
contract the orchestrator and ingestor depend on, which keeps the real
worker swappable and easy to fake in tests.
"""

from pathlib import Path
from typing import Protocol

from extender.models.media import AudioInfo
from extender.models.track import ProcessingSettings


class IWorker(Protocol):
    """Interface for the external audio worker."""

    async def transform(
        self,
        input_path: Path,
        output_path: Path,
        settings: ProcessingSettings,
    ) -> None:
        """Produce an extended version of ``input_path`` at ``output_path``.

        Args:
            input_path: Original audio file
            output_path: Where the extended file must be written
            settings: Processing parameters

        Raises:
            WorkerError: If the transformation fails
        """
        ...

    async def extract_metadata(self, path: Path) -> AudioInfo:
        """Read format, bitrate, duration, tempo and key from a file.

        Args:
            path: Audio file to analyze

        Returns:
            AudioInfo; fields the worker could not determine are None

        Raises:
            WorkerError: If the analysis fails
        """
        ...
