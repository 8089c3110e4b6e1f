"""Worker implementation running external processes."""

from __future__ import annotations

import asyncio
import json
import logging
import subprocess
from pathlib import Path

from extender.errors import WorkerError
from extender.models.media import AudioInfo
from extender.models.track import ProcessingSettings

logger = logging.getLogger(__name__)


class SubprocessWorker:
    """Runs the audio processor and analyzer as child processes.

    The transform command receives
    ``<input> <output> <intro> <outro> <preserve_vocals> <beat_detection>``.
    The analyze command receives ``<path>`` and prints one JSON object with
    ``format``, ``bitrate``, ``duration``, ``bpm`` and ``key``. Without an
    analyze command, ffprobe supplies format, bitrate and duration.
    """

    def __init__(
        self,
        transform_command: list[str],
        analyze_command: list[str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.transform_command = list(transform_command)
        self.analyze_command = list(analyze_command) if analyze_command else None
        self.timeout = timeout

    async def transform(
        self,
        input_path: Path,
        output_path: Path,
        settings: ProcessingSettings,
    ) -> None:
        cmd = [
            *self.transform_command,
            str(input_path),
            str(output_path),
            str(settings.intro_length),
            str(settings.outro_length),
            "true" if settings.preserve_vocals else "false",
            settings.beat_detection,
        ]
        result = await self._run(cmd)
        if result.returncode != 0:
            raise WorkerError(f"audio processor failed: {result.stderr[-1000:]}")
        if not Path(output_path).exists():
            raise WorkerError("audio processor produced no output file")
        logger.info("Transform finished: %s", Path(output_path).name)

    async def extract_metadata(self, path: Path) -> AudioInfo:
        if self.analyze_command:
            return await self._analyze(path)
        return await self._probe(path)

    async def _analyze(self, path: Path) -> AudioInfo:
        result = await self._run([*self.analyze_command, str(path)])
        if result.returncode != 0:
            raise WorkerError(f"audio analyzer failed: {result.stderr[-1000:]}")

        lines = [line for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            raise WorkerError("audio analyzer printed nothing")
        try:
            data = json.loads(lines[0])
        except json.JSONDecodeError as e:
            raise WorkerError(f"audio analyzer output is not JSON: {e}") from e
        return AudioInfo.model_validate(data)

    async def _probe(self, path: Path) -> AudioInfo:
        cmd = [
            "ffprobe",
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            str(path),
        ]
        result = await self._run(cmd)
        if result.returncode != 0:
            raise WorkerError(f"ffprobe failed: {result.stderr}")

        try:
            fmt = json.loads(result.stdout).get("format", {})
        except json.JSONDecodeError as e:
            raise WorkerError(f"ffprobe output is not JSON: {e}") from e

        # format_name may list aliases, e.g. "mov,mp4,m4a"
        format_name = fmt.get("format_name")
        return AudioInfo(
            format=format_name.split(",")[0] if format_name else None,
            bitrate=_to_int(fmt.get("bit_rate")),
            duration=_to_float(fmt.get("duration")),
        )

    async def _run(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        try:
            return await asyncio.to_thread(
                subprocess.run, cmd, capture_output=True, text=True, timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise WorkerError(f"{cmd[0]} timed out after {self.timeout}s") from e
        except OSError as e:
            raise WorkerError(f"{cmd[0]} could not be started: {e}") from e


def _to_int(value: object) -> int | None:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _to_float(value: object) -> float | None:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
