"""Testes do FFmpegTranscoder (subprocess mockado)."""

from __future__ import annotations

import asyncio
import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from voxmod.audio.transcoder import (
    CANONICAL_CODEC,
    FILTER_CHAIN,
    FFmpegTranscoder,
    build_ffmpeg_command,
    output_path_for,
)


def _make_mock_process(returncode: int, stderr: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(b"", stderr))
    return process


def _exec_writing_output(returncode: int = 0) -> AsyncMock:
    """create_subprocess_exec falso que grava o arquivo de saida (ultimo argumento)."""

    async def _fake_exec(*args: Any, **kwargs: Any) -> MagicMock:
        Path(args[-1]).write_bytes(b"RIFFconverted")
        return _make_mock_process(returncode)

    return AsyncMock(side_effect=_fake_exec)


class TestBuildCommand:
    def test_canonical_parameters(self, tmp_path: Path) -> None:
        source = tmp_path / "in"
        output = tmp_path / "in.wav"
        command = build_ffmpeg_command("ffmpeg", source, output)

        assert command[0] == "ffmpeg"
        assert command[command.index("-i") + 1] == str(source)
        assert command[command.index("-acodec") + 1] == CANONICAL_CODEC
        assert command[command.index("-ar") + 1] == "48000"
        assert command[command.index("-ac") + 1] == "1"
        assert command[command.index("-af") + 1] == FILTER_CHAIN
        assert command[-1] == str(output)


class TestProbe:
    def test_probe_false_when_binary_missing(self) -> None:
        transcoder = FFmpegTranscoder("ffmpeg-inexistente")
        with patch("voxmod.audio.transcoder.shutil.which", return_value=None):
            assert transcoder.probe() is False
        assert transcoder.available is False

    def test_probe_true_when_version_succeeds(self) -> None:
        transcoder = FFmpegTranscoder()
        completed = subprocess.CompletedProcess(args=["ffmpeg", "-version"], returncode=0)
        with (
            patch("voxmod.audio.transcoder.shutil.which", return_value="/usr/bin/ffmpeg"),
            patch("voxmod.audio.transcoder.subprocess.run", return_value=completed) as run,
        ):
            assert transcoder.probe() is True
        run.assert_called_once()
        assert transcoder.available is True

    def test_probe_false_when_version_fails(self) -> None:
        transcoder = FFmpegTranscoder()
        completed = subprocess.CompletedProcess(args=["ffmpeg", "-version"], returncode=1)
        with (
            patch("voxmod.audio.transcoder.shutil.which", return_value="/usr/bin/ffmpeg"),
            patch("voxmod.audio.transcoder.subprocess.run", return_value=completed),
        ):
            assert transcoder.probe() is False

    def test_probe_false_on_os_error(self) -> None:
        transcoder = FFmpegTranscoder()
        with (
            patch("voxmod.audio.transcoder.shutil.which", return_value="/usr/bin/ffmpeg"),
            patch("voxmod.audio.transcoder.subprocess.run", side_effect=OSError("exec format")),
        ):
            assert transcoder.probe() is False

    def test_explicit_availability_skips_probe(self) -> None:
        transcoder = FFmpegTranscoder(available=False)
        with patch("voxmod.audio.transcoder.shutil.which") as which:
            assert transcoder.available is False
        which.assert_not_called()


class TestConvert:
    async def test_success_returns_wav_path(self, tmp_path: Path) -> None:
        source = tmp_path / "upload-1"
        source.write_bytes(b"webm-data")
        transcoder = FFmpegTranscoder(available=True)

        with patch(
            "voxmod.audio.transcoder.asyncio.create_subprocess_exec",
            _exec_writing_output(0),
        ):
            output = await transcoder.convert(source, "audio/webm")

        assert output == tmp_path / "upload-1.wav"
        assert output.exists()

    async def test_nonzero_exit_returns_none_and_removes_partial(self, tmp_path: Path) -> None:
        source = tmp_path / "upload-1"
        source.write_bytes(b"webm-data")
        transcoder = FFmpegTranscoder(available=True)

        with patch(
            "voxmod.audio.transcoder.asyncio.create_subprocess_exec",
            _exec_writing_output(1),
        ):
            output = await transcoder.convert(source, "audio/webm")

        assert output is None
        assert not (tmp_path / "upload-1.wav").exists()

    async def test_missing_output_returns_none(self, tmp_path: Path) -> None:
        source = tmp_path / "upload-1"
        source.write_bytes(b"webm-data")
        transcoder = FFmpegTranscoder(available=True)

        with patch(
            "voxmod.audio.transcoder.asyncio.create_subprocess_exec",
            AsyncMock(return_value=_make_mock_process(0)),
        ):
            assert await transcoder.convert(source, "audio/webm") is None

    async def test_spawn_error_returns_none(self, tmp_path: Path) -> None:
        source = tmp_path / "upload-1"
        source.write_bytes(b"webm-data")
        transcoder = FFmpegTranscoder(available=True)

        with patch(
            "voxmod.audio.transcoder.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError("ffmpeg")),
        ):
            assert await transcoder.convert(source, "audio/webm") is None

    async def test_unavailable_never_spawns(self, tmp_path: Path) -> None:
        source = tmp_path / "upload-1"
        source.write_bytes(b"webm-data")
        transcoder = FFmpegTranscoder(available=False)

        with patch("voxmod.audio.transcoder.asyncio.create_subprocess_exec") as spawn:
            assert await transcoder.convert(source, "audio/webm") is None
        spawn.assert_not_called()

    async def test_cancellation_kills_ffmpeg_and_removes_output(self, tmp_path: Path) -> None:
        source = tmp_path / "upload-1"
        source.write_bytes(b"webm-data")
        transcoder = FFmpegTranscoder(available=True)
        started = asyncio.Event()

        process = MagicMock()
        process.returncode = None
        process.pid = 4242

        async def _communicate() -> tuple[bytes, bytes]:
            started.set()
            await asyncio.Event().wait()
            return b"", b""

        def _kill() -> None:
            process.returncode = -9

        process.communicate = AsyncMock(side_effect=_communicate)
        process.kill = MagicMock(side_effect=_kill)
        process.wait = AsyncMock(return_value=-9)

        async def _fake_exec(*args: Any, **kwargs: Any) -> MagicMock:
            Path(args[-1]).write_bytes(b"RIFFpartial")
            return process

        with patch(
            "voxmod.audio.transcoder.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=_fake_exec),
        ):
            task = asyncio.create_task(transcoder.convert(source, "audio/webm"))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        process.kill.assert_called_once()
        process.wait.assert_awaited_once()
        assert not (tmp_path / "upload-1.wav").exists()

    async def test_output_path_matches_converted_file(self, tmp_path: Path) -> None:
        source = tmp_path / "upload-1"
        source.write_bytes(b"webm-data")
        transcoder = FFmpegTranscoder(available=True)

        with patch(
            "voxmod.audio.transcoder.asyncio.create_subprocess_exec",
            _exec_writing_output(0),
        ):
            output = await transcoder.convert(source, "audio/webm")

        assert output == output_path_for(source)
