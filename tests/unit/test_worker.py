"""Unit tests for SubprocessWorker."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from extender.errors import WorkerError
from extender.models.track import ProcessingSettings
from extender.services.worker import SubprocessWorker

SETTINGS = ProcessingSettings(intro_length=32, outro_length=8, preserve_vocals=False, beat_detection="madmom")


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestTransform:
    @pytest.mark.asyncio
    async def test_builds_command(self, tmp_path: Path) -> None:
        output = tmp_path / "out.wav"
        output.write_bytes(b"done")
        worker = SubprocessWorker(["python3", "-u", "processor.py"], timeout=60)

        with patch("asyncio.to_thread", new=AsyncMock(return_value=_completed())) as mock_thread:
            await worker.transform(tmp_path / "in.wav", output, SETTINGS)

        args, kwargs = mock_thread.call_args
        assert args[0] is subprocess.run
        assert args[1] == [
            "python3", "-u", "processor.py",
            str(tmp_path / "in.wav"), str(output),
            "32", "8", "false", "madmom",
        ]
        assert kwargs["timeout"] == 60

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, tmp_path: Path) -> None:
        worker = SubprocessWorker(["proc"])
        with patch("asyncio.to_thread", new=AsyncMock(return_value=_completed(1, stderr="boom"))):
            with pytest.raises(WorkerError, match="boom"):
                await worker.transform(tmp_path / "in.wav", tmp_path / "out.wav", SETTINGS)

    @pytest.mark.asyncio
    async def test_missing_output(self, tmp_path: Path) -> None:
        worker = SubprocessWorker(["proc"])
        with patch("asyncio.to_thread", new=AsyncMock(return_value=_completed())):
            with pytest.raises(WorkerError, match="no output"):
                await worker.transform(tmp_path / "in.wav", tmp_path / "out.wav", SETTINGS)

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path: Path) -> None:
        worker = SubprocessWorker(["proc"], timeout=1)
        error = subprocess.TimeoutExpired(cmd="proc", timeout=1)
        with patch("asyncio.to_thread", new=AsyncMock(side_effect=error)):
            with pytest.raises(WorkerError, match="timed out"):
                await worker.transform(tmp_path / "in.wav", tmp_path / "out.wav", SETTINGS)

    @pytest.mark.asyncio
    async def test_command_not_found(self, tmp_path: Path) -> None:
        worker = SubprocessWorker(["no-such-binary"])
        with patch("asyncio.to_thread", new=AsyncMock(side_effect=FileNotFoundError("no-such-binary"))):
            with pytest.raises(WorkerError, match="could not be started"):
                await worker.transform(tmp_path / "in.wav", tmp_path / "out.wav", SETTINGS)


class TestExtractMetadata:
    @pytest.mark.asyncio
    async def test_analyze_command(self, tmp_path: Path) -> None:
        line = json.dumps({"format": "mp3", "bitrate": 320000, "duration": 181.2, "bpm": 124, "key": "F# minor"})
        worker = SubprocessWorker(["proc"], analyze_command=["python3", "utils.py"])

        with patch("asyncio.to_thread", new=AsyncMock(return_value=_completed(stdout=f"\n{line}\nextra"))) as mock_thread:
            info = await worker.extract_metadata(tmp_path / "a.mp3")

        assert mock_thread.call_args.args[1] == ["python3", "utils.py", str(tmp_path / "a.mp3")]
        assert info.format == "mp3"
        assert info.bitrate == 320000
        assert info.duration == 181.2
        assert info.bpm == 124
        assert info.key == "F# minor"

    @pytest.mark.asyncio
    async def test_analyze_bad_output(self, tmp_path: Path) -> None:
        worker = SubprocessWorker(["proc"], analyze_command=["analyze"])
        with patch("asyncio.to_thread", new=AsyncMock(return_value=_completed(stdout="not json"))):
            with pytest.raises(WorkerError):
                await worker.extract_metadata(tmp_path / "a.mp3")

    @pytest.mark.asyncio
    async def test_ffprobe_fallback(self, tmp_path: Path) -> None:
        probe = {"format": {"format_name": "wav", "bit_rate": "1411200", "duration": "3.500000"}}
        worker = SubprocessWorker(["proc"])

        with patch("asyncio.to_thread", new=AsyncMock(return_value=_completed(stdout=json.dumps(probe)))) as mock_thread:
            info = await worker.extract_metadata(tmp_path / "a.wav")

        assert mock_thread.call_args.args[1][0] == "ffprobe"
        assert info.format == "wav"
        assert info.bitrate == 1411200
        assert info.duration == 3.5
        assert info.bpm is None

    @pytest.mark.asyncio
    async def test_ffprobe_missing_fields(self, tmp_path: Path) -> None:
        worker = SubprocessWorker(["proc"])
        with patch("asyncio.to_thread", new=AsyncMock(return_value=_completed(stdout='{"format": {}}'))):
            info = await worker.extract_metadata(tmp_path / "a.wav")
        assert info.format is None
        assert info.duration is None
